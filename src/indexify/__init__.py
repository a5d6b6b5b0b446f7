"""Indexify - named vector indexes over embedded text.

An index binds an embedding model, a text splitter and a vector-store
collection. Definitions live in a relational catalog; records live in
the vector store.
"""

__version__ = "0.1.0"

from indexify.exceptions import (
    CollectionAlreadyExistsError,
    CollectionCreationError,
    CollectionDeletionError,
    CollectionReadError,
    CollectionWriteError,
    ConfigError,
    EmbeddingError,
    IndexAlreadyExistsError,
    IndexifyError,
    IndexNotFoundError,
    PersistenceError,
    SerializationError,
    TextSplitterError,
    UnsupportedBackendError,
    ValidationError,
    VectorStoreError,
)
from indexify.index import Index, IndexManager

__all__ = [
    "__version__",
    "Index",
    "IndexManager",
    "IndexifyError",
    "ConfigError",
    "ValidationError",
    "UnsupportedBackendError",
    "IndexAlreadyExistsError",
    "IndexNotFoundError",
    "PersistenceError",
    "SerializationError",
    "VectorStoreError",
    "CollectionCreationError",
    "CollectionAlreadyExistsError",
    "CollectionWriteError",
    "CollectionReadError",
    "CollectionDeletionError",
    "EmbeddingError",
    "TextSplitterError",
]
