"""Metadata catalog of index definitions.

The catalog is the single source of truth for which indexes exist. A
row is only committed once the paired vector-store collection has been
created, so readers never observe an index without its collection.
"""

import asyncio
import contextlib
import json
from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from indexify.exceptions import (
    IndexAlreadyExistsError,
    IndexNotFoundError,
    PersistenceError,
    SerializationError,
    VectorStoreError,
)
from indexify.logger import get_logger
from indexify.persistence.database import Base, create_db_engine
from indexify.persistence.models import IndexEntity
from indexify.schemas.index import CreateIndexParams, IndexDefinition
from indexify.vectordbs.base import VectorStore

logger = get_logger(__name__)

T = TypeVar("T")


def encode_dedup_fields(dedup_fields: list[str]) -> str | None:
    if not dedup_fields:
        return None
    return json.dumps(dedup_fields)


def decode_dedup_fields(raw: str | None) -> list[str]:
    """Decode the persisted dedup-field list.

    Raises:
        SerializationError: If the stored value is not a JSON list of strings.
    """
    if raw is None:
        return []
    try:
        fields = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SerializationError(
            f"unable to deserialize dedup fields `{raw}`", cause=e
        ) from e
    if not isinstance(fields, list) or not all(isinstance(f, str) for f in fields):
        raise SerializationError(f"unable to deserialize dedup fields `{raw}`")
    return fields


class Repository:
    """Transactional repository over index definitions.

    Blocking database calls are dispatched to the default executor so the
    event loop keeps serving other requests while the catalog works.

    Engines on a StaticPool hand the same DBAPI connection to every session,
    so two open transactions would interleave on it. For those engines each
    catalog operation, including the await on the vector store inside
    create_index, holds an asyncio.Lock.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory: sessionmaker[Session] = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )
        self._shared_connection = isinstance(engine.pool, StaticPool)
        self._lock = asyncio.Lock()

    @classmethod
    def from_url(cls, db_url: str) -> "Repository":
        return cls(create_db_engine(db_url))

    def create_tables(self) -> None:
        """Create the catalog schema if it does not exist yet."""
        Base.metadata.create_all(bind=self._engine)

    def dispose(self) -> None:
        self._engine.dispose()

    def _exclusive(self) -> contextlib.AbstractAsyncContextManager[Any]:
        if self._shared_connection:
            return self._lock
        return contextlib.nullcontext()

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    @staticmethod
    def _insert(session: Session, entity: IndexEntity) -> None:
        session.add(entity)
        session.flush()

    async def create_index(
        self,
        embedding_model: str,
        params: CreateIndexParams,
        vectordb: VectorStore,
        text_splitter: str,
    ) -> None:
        """Insert an index row and create its collection atomically.

        The row is inserted inside a transaction, the collection is created,
        and the transaction is committed only if both succeeded.

        Args:
            embedding_model: Embedding model bound to the index.
            params: Index name, vector dimension, metric and dedup fields.
            vectordb: Backend that owns the physical collection.
            text_splitter: Name of the text splitter variant.

        Raises:
            IndexAlreadyExistsError: If an index with this name exists.
            VectorStoreError: If the collection cannot be created.
            PersistenceError: On any other catalog failure.
        """
        entity = IndexEntity(
            name=params.name,
            embedding_model=embedding_model,
            text_splitter=text_splitter,
            vector_db=vectordb.backend_name,
            vector_db_params=json.dumps(
                {"vector_dim": params.vector_dim, "metric": params.metric.value}
            ),
            unique_params=encode_dedup_fields(params.dedup_fields),
        )

        async with self._exclusive():
            session = self._session_factory()
            try:
                try:
                    await self._run(self._insert, session, entity)
                except IntegrityError as e:
                    await self._run(session.rollback)
                    logger.info("Index already exists: name=%s", params.name)
                    raise IndexAlreadyExistsError(params.name, cause=e) from e
                except SQLAlchemyError as e:
                    await self._run(session.rollback)
                    raise PersistenceError(
                        f"unable to insert index `{params.name}`", cause=e
                    ) from e

                try:
                    await vectordb.create_collection(
                        params.name,
                        params.vector_dim,
                        params.metric,
                        params.dedup_fields,
                    )
                except VectorStoreError:
                    await self._run(session.rollback)
                    logger.error(
                        "Collection creation failed, catalog insert rolled back: "
                        "name=%s",
                        params.name,
                    )
                    raise

                try:
                    await self._run(session.commit)
                except SQLAlchemyError as e:
                    # no cross-store transaction: the collection stays behind
                    logger.error(
                        "Catalog commit failed after collection was created; "
                        "collection `%s` on backend %s is orphaned",
                        params.name,
                        vectordb.backend_name,
                    )
                    raise PersistenceError(
                        f"unable to commit index `{params.name}`", cause=e
                    ) from e
            finally:
                await self._run(session.close)

        logger.info(
            "Index created: name=%s, model=%s, splitter=%s, backend=%s",
            params.name,
            embedding_model,
            text_splitter,
            vectordb.backend_name,
        )

    def _fetch(self, name: str) -> IndexEntity | None:
        with self._session_factory() as session:
            return session.scalars(
                select(IndexEntity).where(IndexEntity.name == name)
            ).one_or_none()

    async def get_index(self, name: str) -> IndexDefinition:
        """Look up an index definition by name.

        Raises:
            IndexNotFoundError: If no index has this name.
            SerializationError: If the persisted dedup fields are corrupt.
            PersistenceError: On any other catalog failure.
        """
        try:
            async with self._exclusive():
                entity = await self._run(self._fetch, name)
        except SQLAlchemyError as e:
            raise PersistenceError(f"unable to read index `{name}`", cause=e) from e

        if entity is None:
            raise IndexNotFoundError(name)

        return IndexDefinition(
            name=entity.name,
            embedding_model=entity.embedding_model,
            text_splitter=entity.text_splitter,
            vector_db_backend=entity.vector_db,
            dedup_fields=decode_dedup_fields(entity.unique_params),
        )
