"""Factory for creating vector-store backends.

The backend is chosen once from VectorIndexConfig.index_store. Each
backend persists its name in the catalog, so new backends are added by
registering a class here, without touching the IndexManager.
"""

from indexify.config.settings import VectorIndexConfig
from indexify.exceptions import UnsupportedBackendError
from indexify.logger import get_logger
from indexify.vectordbs.base import VectorStore

logger = get_logger(__name__)

_VECTORDB_REGISTRY: dict[str, type[VectorStore]] = {}


def register_vectordb_backend(name: str, cls: type[VectorStore]) -> None:
    """Register a custom vector-store backend.

    Args:
        name: Backend identifier, matched against index_store.
        cls: VectorStore implementation class.
    """
    _VECTORDB_REGISTRY[name] = cls
    logger.debug("Registered vector store backend: %s", name)


def create_vectordb(config: VectorIndexConfig) -> VectorStore:
    """Create the vector-store backend selected by the configuration.

    Args:
        config: Indexing configuration.

    Returns:
        Configured VectorStore instance.

    Raises:
        UnsupportedBackendError: If the backend is neither built in nor
            registered.
    """
    backend: str = config.index_store
    store_class: type[VectorStore]

    if backend in _VECTORDB_REGISTRY:
        store_class = _VECTORDB_REGISTRY[backend]

    elif backend == "memory":
        from indexify.vectordbs.memory import MemoryVectorStore

        store_class = MemoryVectorStore

    elif backend == "qdrant":
        from indexify.vectordbs.qdrant import QdrantVectorStore

        store_class = QdrantVectorStore

    else:
        raise UnsupportedBackendError(backend)

    logger.info("Vector database backend: %s", backend)
    return store_class.from_config(config)
