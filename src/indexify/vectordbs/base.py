"""Abstract base class for vector-store backends.

This module defines the contract every backend must satisfy identically:
collection lifecycle, upsert of embedded records, nearest-neighbor search
and counting. It also owns the content-addressed id rule so that all
backends derive the same record id from the same content.
"""

import hashlib
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from indexify.exceptions import SerializationError
from indexify.logger import get_logger
from indexify.schemas.index import MetricKind, SearchResult, VectorPayload

if TYPE_CHECKING:
    from indexify.config.settings import VectorIndexConfig

logger = get_logger(__name__)


def compute_record_id(
    text: str, attrs: Mapping[str, str], dedup_fields: Sequence[str]
) -> str:
    """Compute the content-addressed id of a record.

    With no dedup fields the chunk text is hashed. Otherwise the values of
    the dedup fields present in attrs are hashed in dedup_fields order and
    the text is ignored, so every chunk sharing those values gets the same
    id.

    Args:
        text: Chunk content.
        attrs: Batch metadata.
        dedup_fields: Ordered metadata keys defining record identity.

    Returns:
        Hex-encoded MD5 digest.
    """
    hasher = hashlib.md5()
    if not dedup_fields:
        hasher.update(text.encode("utf-8"))
        return hasher.hexdigest()

    present = [field for field in dedup_fields if field in attrs]
    if not present:
        # every such record shares the digest of the empty string
        logger.warning(
            "Metadata carries none of the dedup fields %s; records collapse into one",
            list(dedup_fields),
        )
    for field in present:
        hasher.update(attrs[field].encode("utf-8"))
    return hasher.hexdigest()


def build_payloads(
    texts: Sequence[str], attrs: Mapping[str, str]
) -> list[VectorPayload]:
    """Build one stored payload per chunk.

    Chunks are numbered by their position in texts, i.e. across the whole
    batch rather than per source document.
    """
    return [
        VectorPayload(text=text, chunk=i, metadata=dict(attrs))
        for i, text in enumerate(texts)
    ]


def decode_payload(raw: Any) -> SearchResult:
    """Decode a stored payload back into a search result.

    Args:
        raw: Payload as returned by the backend (dict or JSON string).

    Returns:
        The decoded search result.

    Raises:
        SerializationError: If the payload does not match VectorPayload.
    """
    try:
        if isinstance(raw, (str, bytes)):
            payload = VectorPayload.model_validate_json(raw)
        else:
            payload = VectorPayload.model_validate(raw)
    except PydanticValidationError as e:
        raise SerializationError("malformed payload in vector store", cause=e) from e
    return SearchResult(text=payload.text, metadata=payload.metadata)


class VectorStore(ABC):
    """Abstract base class for vector-store backends.

    A backend stores vectors with flat string attributes and free text in
    named collections. All I/O is async so that calls to one collection
    never block operations on others.
    """

    @classmethod
    @abstractmethod
    def from_config(cls, config: "VectorIndexConfig") -> "VectorStore":
        """Instantiate the backend from the indexing configuration."""
        pass

    @abstractmethod
    async def create_collection(
        self,
        name: str,
        vector_dim: int,
        metric: MetricKind,
        dedup_fields: Sequence[str] = (),
    ) -> None:
        """Provision a collection for vectors of the given dimension.

        Args:
            name: Collection name.
            vector_dim: Dimensionality of stored vectors.
            metric: Distance metric used for search.
            dedup_fields: Metadata keys that define record identity.

        Raises:
            CollectionAlreadyExistsError: If the collection already exists.
            CollectionCreationError: If the backend rejects the configuration.
        """
        pass

    @abstractmethod
    async def upsert(
        self,
        collection: str,
        embeddings: Sequence[Sequence[float]],
        texts: Sequence[str],
        attrs: Mapping[str, str],
        dedup_fields: Sequence[str] = (),
    ) -> None:
        """Insert or replace records keyed by their content-addressed id.

        embeddings and texts are parallel sequences; each pair becomes one
        record whose id is given by compute_record_id. When several records
        in one call share an id, the last one wins.

        Raises:
            CollectionWriteError: If the backend rejects the write.
        """
        pass

    @abstractmethod
    async def search(
        self, collection: str, query_embedding: Sequence[float], k: int
    ) -> list[SearchResult]:
        """Return up to k nearest records, closest first.

        Raises:
            CollectionReadError: If the backend rejects the query.
            SerializationError: If a stored payload cannot be decoded.
        """
        pass

    @abstractmethod
    async def drop_collection(self, collection: str) -> None:
        """Delete a collection. Dropping a missing collection succeeds.

        Raises:
            CollectionDeletionError: If the backend fails for another reason.
        """
        pass

    @abstractmethod
    async def count(self, collection: str) -> int:
        """Return the exact number of records in a collection.

        Raises:
            CollectionReadError: If the collection is missing.
        """
        pass

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Stable backend identifier persisted in the catalog."""
        pass

    async def close(self) -> None:
        """Release client connections held by the backend."""
        return None

    async def __aenter__(self) -> "VectorStore":
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: Any,
    ) -> None:
        await self.close()
