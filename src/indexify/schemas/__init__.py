"""Pydantic models for Indexify data structures."""

from indexify.schemas.index import (
    CreateIndexParams,
    IndexDefinition,
    MetricKind,
    SearchResult,
    Text,
    VectorPayload,
)

__all__ = [
    "MetricKind",
    "CreateIndexParams",
    "IndexDefinition",
    "Text",
    "VectorPayload",
    "SearchResult",
]
