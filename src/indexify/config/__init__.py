"""Configuration management for Indexify."""

from indexify.config.settings import (
    EmbeddingModelConfig,
    IndexStoreKind,
    QdrantConfig,
    ServerConfig,
    VectorIndexConfig,
)

__all__ = [
    "ServerConfig",
    "VectorIndexConfig",
    "QdrantConfig",
    "EmbeddingModelConfig",
    "IndexStoreKind",
]
