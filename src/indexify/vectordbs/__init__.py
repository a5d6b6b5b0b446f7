"""Vector-store backends.

This package provides the VectorStore contract, the built-in backends
and the factory that selects one from configuration.
"""

from indexify.vectordbs.base import VectorStore, compute_record_id
from indexify.vectordbs.factory import create_vectordb, register_vectordb_backend

__all__ = [
    "VectorStore",
    "compute_record_id",
    "create_vectordb",
    "register_vectordb_backend",
]
