"""In-process vector store backed by NumPy arrays.

Brute-force similarity search over per-collection arrays. Suitable for
development, tests and small deployments that do not need a vector
database server.
"""

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

import numpy as np
from numpy.typing import NDArray

from indexify.exceptions import (
    CollectionAlreadyExistsError,
    CollectionCreationError,
    CollectionReadError,
    CollectionWriteError,
)
from indexify.logger import get_logger
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


@dataclass
class _Collection:
    vector_dim: int
    metric: MetricKind
    dedup_fields: list[str]
    vectors: NDArray[np.float32]
    ids: list[str] = field(default_factory=list)
    # payloads are kept as JSON so search decodes them like a remote backend
    payloads: list[str] = field(default_factory=list)
    id_to_idx: dict[str, int] = field(default_factory=dict)


class MemoryVectorStore(VectorStore):
    """In-memory vector store using NumPy for similarity search.

    Records are upserted by id: a record whose id already exists replaces
    the stored vector and payload in place.
    """

    def __init__(self) -> None:
        self._collections: dict[str, _Collection] = {}
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: "VectorIndexConfig") -> "MemoryVectorStore":
        return cls()

    @property
    def backend_name(self) -> str:
        return "memory"

    async def create_collection(
        self,
        name: str,
        vector_dim: int,
        metric: MetricKind,
        dedup_fields: Sequence[str] = (),
    ) -> None:
        if vector_dim <= 0:
            raise CollectionCreationError(
                f"invalid vector dimension {vector_dim}", collection=name
            )

        async with self._lock:
            if name in self._collections:
                raise CollectionAlreadyExistsError(
                    f"collection `{name}` already exists", collection=name
                )
            self._collections[name] = _Collection(
                vector_dim=vector_dim,
                metric=MetricKind(metric),
                dedup_fields=list(dedup_fields),
                vectors=np.zeros((0, vector_dim), dtype=np.float32),
            )

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

        payloads = build_payloads(texts, attrs)

        async with self._lock:
            coll = self._collections.get(collection)
            if coll is None:
                raise CollectionWriteError(
                    f"collection `{collection}` doesn't exist", collection=collection
                )

            for vec in embeddings:
                if len(vec) != coll.vector_dim:
                    logger.error(
                        "Vector dimension mismatch: expected=%d, got=%d",
                        coll.vector_dim,
                        len(vec),
                    )
                    raise CollectionWriteError(
                        f"vector dimension mismatch: expected {coll.vector_dim}, "
                        f"got {len(vec)}",
                        collection=collection,
                    )

            new_rows: list[Sequence[float]] = []
            for text, vec, payload in zip(texts, embeddings, payloads, strict=True):
                record_id = compute_record_id(text, attrs, dedup_fields)
                encoded = payload.model_dump_json()
                idx = coll.id_to_idx.get(record_id)
                if idx is None:
                    coll.id_to_idx[record_id] = len(coll.ids)
                    coll.ids.append(record_id)
                    coll.payloads.append(encoded)
                    new_rows.append(vec)
                elif idx >= len(coll.vectors):
                    # duplicate id within this call, not yet in the array
                    new_rows[idx - len(coll.vectors)] = vec
                    coll.payloads[idx] = encoded
                else:
                    coll.vectors[idx] = np.asarray(vec, dtype=np.float32)
                    coll.payloads[idx] = encoded

            if new_rows:
                coll.vectors = np.vstack(
                    [coll.vectors, np.asarray(new_rows, dtype=np.float32)]
                )
            total = len(coll.ids)

        logger.debug(
            "Records upserted: collection=%s, count=%d, total=%d",
            collection,
            len(texts),
            total,
        )

    async def search(
        self, collection: str, query_embedding: Sequence[float], k: int
    ) -> list[SearchResult]:
        async with self._lock:
            coll = self._collections.get(collection)
            if coll is None:
                raise CollectionReadError(
                    f"collection `{collection}` doesn't exist", collection=collection
                )
            if len(query_embedding) != coll.vector_dim:
                raise CollectionReadError(
                    f"query dimension mismatch: expected {coll.vector_dim}, "
                    f"got {len(query_embedding)}",
                    collection=collection,
                )
            if not coll.ids or k <= 0:
                return []

            vectors_snapshot = coll.vectors.copy()
            payloads_snapshot = list(coll.payloads)
            metric = coll.metric

        query_np = np.asarray(query_embedding, dtype=np.float32)
        loop = asyncio.get_running_loop()
        order = await loop.run_in_executor(
            None, self._rank, query_np, vectors_snapshot, metric, k
        )
        return [decode_payload(payloads_snapshot[i]) for i in order]

    @staticmethod
    def _rank(
        query: NDArray[np.float32],
        vectors: NDArray[np.float32],
        metric: MetricKind,
        k: int,
    ) -> list[int]:
        if metric == MetricKind.COSINE:
            query_norm = np.linalg.norm(query)
            vector_norms = np.linalg.norm(vectors, axis=1)
            scores = np.dot(vectors, query) / (vector_norms * query_norm + 1e-8)
        elif metric == MetricKind.DOT:
            scores = np.dot(vectors, query)
        else:
            scores = -np.linalg.norm(vectors - query, axis=1)

        # stable sort keeps insertion order among equal scores
        order = np.argsort(-scores, kind="stable")[:k]
        return cast(list[int], order.tolist())

    async def drop_collection(self, collection: str) -> None:
        async with self._lock:
            removed = self._collections.pop(collection, None)

        if removed is None:
            logger.debug("Drop skipped, collection absent: name=%s", collection)
            return
        logger.info("Collection dropped: name=%s", collection)

    async def count(self, collection: str) -> int:
        async with self._lock:
            coll = self._collections.get(collection)
            if coll is None:
                raise CollectionReadError(
                    f"collection `{collection}` doesn't exist", collection=collection
                )
            return len(coll.ids)
