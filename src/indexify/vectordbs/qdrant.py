"""Qdrant vector store backend.

Each index maps to one Qdrant collection. Record ids are the MD5
content hashes from compute_record_id, passed to Qdrant in UUID form
since Qdrant only accepts unsigned integers or UUIDs as point ids.
"""

import uuid
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from qdrant_client import AsyncQdrantClient, models
from qdrant_client.http.exceptions import UnexpectedResponse

from indexify.config.settings import QdrantConfig
from indexify.exceptions import (
    CollectionAlreadyExistsError,
    CollectionCreationError,
    CollectionDeletionError,
    CollectionReadError,
    CollectionWriteError,
    ConfigError,
)
from indexify.logger import get_logger, mask_sensitive
from indexify.schemas.index import MetricKind, SearchResult
from indexify.vectordbs.base import (
    VectorStore,
    build_payloads,
    compute_record_id,
    decode_payload,
)

if TYPE_CHECKING:
    from indexify.config.settings import VectorIndexConfig

logger = get_logger(__name__)

LOCAL_MODE_ADDR = ":memory:"

_DISTANCES: dict[MetricKind, models.Distance] = {
    MetricKind.COSINE: models.Distance.COSINE,
    MetricKind.DOT: models.Distance.DOT,
    MetricKind.EUCLIDEAN: models.Distance.EUCLID,
}

_MISSING_COLLECTION_MARKERS = ("doesn't exist", "not found")


def _is_missing_collection_error(err: Exception) -> bool:
    if isinstance(err, UnexpectedResponse) and err.status_code == 404:
        return True
    message = str(err).lower()
    return any(marker in message for marker in _MISSING_COLLECTION_MARKERS)


def to_point_id(record_id: str) -> str:
    """Convert a hex content hash into the UUID string form Qdrant accepts."""
    return str(uuid.UUID(hex=record_id))


class QdrantVectorStore(VectorStore):
    """Vector store backed by a Qdrant server or Qdrant's embedded mode.

    Attributes:
        config: Connection settings.
    """

    def __init__(self, config: QdrantConfig):
        """Create the async client. No request is sent until first use.

        Args:
            config: Connection settings.
        """
        self.config = config
        if config.addr == LOCAL_MODE_ADDR:
            self._client = AsyncQdrantClient(location=LOCAL_MODE_ADDR)
        else:
            self._client = AsyncQdrantClient(
                url=config.addr,
                api_key=config.api_key,
                prefer_grpc=config.prefer_grpc,
                timeout=config.timeout,
            )
        logger.debug(
            "Qdrant client configured: addr=%s, api_key=%s",
            config.addr,
            mask_sensitive(config.api_key) if config.api_key else None,
        )

    @classmethod
    def from_config(cls, config: "VectorIndexConfig") -> "QdrantVectorStore":
        if config.qdrant_config is None:
            raise ConfigError(
                "qdrant_config is required for the qdrant backend",
                field_path="index_config.qdrant_config",
            )
        return cls(config.qdrant_config)

    @property
    def backend_name(self) -> str:
        return "qdrant"

    @property
    def is_local(self) -> bool:
        return self.config.addr == LOCAL_MODE_ADDR

    async def create_collection(
        self,
        name: str,
        vector_dim: int,
        metric: MetricKind,
        dedup_fields: Sequence[str] = (),
    ) -> None:
        try:
            if await self._client.collection_exists(name):
                raise CollectionAlreadyExistsError(
                    f"collection `{name}` already exists", collection=name
                )
            await self._client.create_collection(
                collection_name=name,
                vectors_config=models.VectorParams(
                    size=vector_dim, distance=_DISTANCES[MetricKind(metric)]
                ),
            )
            # payload indexes are ignored by the embedded mode
            if not self.is_local:
                for field_name in dedup_fields:
                    await self._client.create_payload_index(
                        collection_name=name,
                        field_name=f"metadata.{field_name}",
                        field_schema=models.PayloadSchemaType.KEYWORD,
                    )
        except CollectionAlreadyExistsError:
            raise
        except Exception as e:
            logger.error("Collection creation failed: name=%s", name)
            logger.debug("Qdrant error: %s", e, exc_info=True)
            raise CollectionCreationError(
                f"error creating collection `{name}`: {e}", collection=name, cause=e
            ) from e

        logger.info(
            "Collection created: name=%s, dim=%d, metric=%s",
            name,
            vector_dim,
            MetricKind(metric).value,
        )

    async def upsert(
        self,
        collection: str,
        embeddings: Sequence[Sequence[float]],
        texts: Sequence[str],
        attrs: Mapping[str, str],
        dedup_fields: Sequence[str] = (),
    ) -> None:
        if len(embeddings) != len(texts):
            raise CollectionWriteError(
                f"got {len(embeddings)} embeddings for {len(texts)} texts",
                collection=collection,
            )

        points = [
            models.PointStruct(
                id=to_point_id(compute_record_id(text, attrs, dedup_fields)),
                vector=list(vec),
                payload=payload.model_dump(),
            )
            for text, vec, payload in zip(
                texts, embeddings, build_payloads(texts, attrs), strict=True
            )
        ]
        if not points:
            return

        try:
            await self._client.upsert(
                collection_name=collection, points=points, wait=True
            )
        except Exception as e:
            logger.error("Upsert failed: collection=%s", collection)
            logger.debug("Qdrant error: %s", e, exc_info=True)
            raise CollectionWriteError(
                f"error writing to collection `{collection}`: {e}",
                collection=collection,
                cause=e,
            ) from e

        logger.debug(
            "Records upserted: collection=%s, count=%d", collection, len(points)
        )

    async def search(
        self, collection: str, query_embedding: Sequence[float], k: int
    ) -> list[SearchResult]:
        if k <= 0:
            return []

        try:
            response = await self._client.query_points(
                collection_name=collection,
                query=list(query_embedding),
                limit=k,
                with_payload=True,
            )
        except Exception as e:
            logger.error("Search failed: collection=%s", collection)
            logger.debug("Qdrant error: %s", e, exc_info=True)
            raise CollectionReadError(
                f"error reading from collection `{collection}`: {e}",
                collection=collection,
                cause=e,
            ) from e

        return [decode_payload(point.payload) for point in response.points]

    async def drop_collection(self, collection: str) -> None:
        try:
            deleted = await self._client.delete_collection(collection_name=collection)
        except Exception as e:
            if _is_missing_collection_error(e):
                logger.debug("Drop skipped, collection absent: name=%s", collection)
                return
            logger.error("Collection drop failed: name=%s", collection)
            raise CollectionDeletionError(
                f"collection `{collection}` has not been deleted: {e}",
                collection=collection,
                cause=e,
            ) from e

        if deleted:
            logger.info("Collection dropped: name=%s", collection)
        else:
            logger.debug("Drop skipped, collection absent: name=%s", collection)

    async def count(self, collection: str) -> int:
        try:
            result = await self._client.count(collection_name=collection, exact=True)
        except Exception as e:
            raise CollectionReadError(
                f"error counting collection `{collection}`: {e}",
                collection=collection,
                cause=e,
            ) from e
        return result.count

    async def close(self) -> None:
        await self._client.close()
