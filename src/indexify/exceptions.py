"""Exception hierarchy for Indexify.

Every error raised by the index management core inherits from
IndexifyError, so callers can handle all of them with a single except
clause or pick the specific kinds they care about.
"""


class IndexifyError(Exception):
    """Base exception for all Indexify errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            cause: Optional underlying exception that triggered this error.
        """
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class ConfigError(IndexifyError):
    """Raised when configuration loading or validation fails."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        cause: Exception | None = None,
    ):
        """Initialize the configuration error.

        Args:
            message: Human-readable error description.
            field_path: Optional dotted path to the problematic field
                (e.g., "index_config.qdrant_config").
            cause: Optional underlying exception.
        """
        super().__init__(message, cause)
        self.field_path = field_path

    def __str__(self) -> str:
        """Return string representation including field path."""
        base_msg = super().__str__()
        if self.field_path:
            return f"{base_msg} (field: {self.field_path})"
        return base_msg


class ValidationError(IndexifyError):
    """Raised when a request names an unknown variant or carries bad parameters.

    Validation errors are always detected before any store is touched.
    """

    pass


class UnsupportedBackendError(ValidationError):
    """Raised when attempting to use an unknown or unavailable backend."""

    def __init__(self, backend: str, install_extra: str | None = None):
        """Initialize the unsupported backend error.

        Args:
            backend: Name of the unavailable backend.
            install_extra: Optional pip extra to install (e.g., "embed").
        """
        message = f"Backend '{backend}' is not available"
        if install_extra:
            message += f". Install with: pip install indexify[{install_extra}]"
        super().__init__(message)
        self.backend = backend
        self.install_extra = install_extra


class IndexAlreadyExistsError(IndexifyError):
    """Raised when creating an index whose name is already in the catalog."""

    def __init__(self, name: str, cause: Exception | None = None):
        super().__init__(f"index `{name}` already exists", cause)
        self.name = name


class IndexNotFoundError(IndexifyError):
    """Raised when looking up an index that is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(f"index `{name}` not found")
        self.name = name


class PersistenceError(IndexifyError):
    """Raised when the metadata catalog fails for any other reason."""

    pass


class SerializationError(IndexifyError):
    """Raised when persisted or stored data cannot be decoded.

    This covers a corrupt dedup-field list in the catalog as well as a
    malformed record payload returned by a vector store.
    """

    pass


class VectorStoreError(IndexifyError):
    """Base class for failures reported by a vector-store backend."""

    def __init__(
        self,
        message: str,
        collection: str | None = None,
        cause: Exception | None = None,
    ):
        """Initialize the vector store error.

        Args:
            message: Human-readable error description.
            collection: Optional name of the collection involved.
            cause: Optional underlying backend exception.
        """
        super().__init__(message, cause)
        self.collection = collection


class CollectionCreationError(VectorStoreError):
    """Raised when the backend rejects a collection configuration."""

    pass


class CollectionAlreadyExistsError(CollectionCreationError):
    """Raised when the physical collection already exists in the backend."""

    pass


class CollectionWriteError(VectorStoreError):
    """Raised when the backend rejects an upsert."""

    pass


class CollectionReadError(VectorStoreError):
    """Raised when a search or count fails, including on missing collections."""

    pass


class CollectionDeletionError(VectorStoreError):
    """Raised when dropping a collection fails for a reason other than absence."""

    pass


class EmbeddingError(IndexifyError):
    """Raised when embedding generation fails.

    This includes unknown model names, model loading errors and
    encoding failures.
    """

    pass


class TextSplitterError(IndexifyError):
    """Raised when a text splitter cannot split a document."""

    pass
