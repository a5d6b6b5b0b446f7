"""Pytest configuration and standardized factories for Indexify."""

import asyncio
from collections.abc import Callable, Iterator, Sequence
from typing import Any

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from indexify.config.settings import QdrantConfig
from indexify.embeddings import EmbeddingGenerator
from indexify.exceptions import CollectionCreationError, EmbeddingError
from indexify.index import IndexManager
from indexify.persistence.database import create_db_engine
from indexify.persistence.models import IndexEntity
from indexify.persistence.repository import Repository
from indexify.schemas.index import MetricKind
from indexify.vectordbs.base import VectorStore
from indexify.vectordbs.memory import MemoryVectorStore
from indexify.vectordbs.qdrant import QdrantVectorStore


class FakeEmbeddingGenerator(EmbeddingGenerator):
    """Deterministic bag-of-words embedder.

    Every distinct lowercase token gets its own dimension in order of first
    appearance, so texts sharing words are close and texts sharing none are
    orthogonal. Calls are recorded in 'calls' instead of using mocks.
    """

    def __init__(self, dimension: int = 384, fail_on: str | None = None):
        self.dimension = dimension
        self.fail_on = fail_on
        self.vocabulary: dict[str, int] = {}
        self.calls: list[tuple[list[str], str]] = []

    def _embed_one(self, text: str) -> list[float]:
        vector = [0.0] * self.dimension
        tokens = text.lower().split()
        if not tokens:
            # keep the vector non-zero for cosine backends
            vector[-1] = 1.0
            return vector
        for token in tokens:
            idx = self.vocabulary.setdefault(
                token, len(self.vocabulary) % (self.dimension - 1)
            )
            vector[idx] += 1.0
        return vector

    async def generate_embeddings(
        self, texts: list[str], model_name: str
    ) -> list[list[float]]:
        self.calls.append((list(texts), model_name))
        if self.fail_on is not None and any(self.fail_on in t for t in texts):
            raise EmbeddingError(f"refusing to embed text containing `{self.fail_on}`")
        return [self._embed_one(text) for text in texts]


class FailingCreateVectorStore(MemoryVectorStore):
    """Memory store whose collection creation always fails."""

    def __init__(self) -> None:
        super().__init__()
        self.create_calls: list[str] = []

    async def create_collection(
        self,
        name: str,
        vector_dim: int,
        metric: MetricKind,
        dedup_fields: Sequence[str] = (),
    ) -> None:
        self.create_calls.append(name)
        raise CollectionCreationError(
            "backend rejected collection configuration", collection=name
        )


class SlowVectorStore(MemoryVectorStore):
    """Memory store whose collection creation yields to the event loop.

    Names listed in fail_names are rejected after the delay, so concurrent
    creations overlap inside the catalog transaction.
    """

    def __init__(self, delay: float = 0.05, fail_names: Sequence[str] = ()):
        super().__init__()
        self.delay = delay
        self.fail_names = set(fail_names)

    async def create_collection(
        self,
        name: str,
        vector_dim: int,
        metric: MetricKind,
        dedup_fields: Sequence[str] = (),
    ) -> None:
        await asyncio.sleep(self.delay)
        if name in self.fail_names:
            raise CollectionCreationError(
                "backend rejected collection configuration", collection=name
            )
        await super().create_collection(name, vector_dim, metric, dedup_fields)


@pytest.fixture
def fake_embedder() -> FakeEmbeddingGenerator:
    """Fixture providing a 384-dimensional fake embedding generator."""
    return FakeEmbeddingGenerator()


@pytest.fixture
def fake_embedder_factory() -> Callable[..., FakeEmbeddingGenerator]:
    """Factory to create configured FakeEmbeddingGenerator instances."""

    def _make_embedder(
        dimension: int = 384, fail_on: str | None = None
    ) -> FakeEmbeddingGenerator:
        return FakeEmbeddingGenerator(dimension=dimension, fail_on=fail_on)

    return _make_embedder


@pytest.fixture
def catalog_engine() -> Iterator[Engine]:
    """In-memory SQLite engine with the catalog schema created."""
    engine = create_db_engine("sqlite://")
    Repository(engine).create_tables()
    yield engine
    engine.dispose()


@pytest.fixture
def repository(catalog_engine: Engine) -> Repository:
    """Repository bound to the in-memory catalog."""
    return Repository(catalog_engine)


@pytest.fixture
def insert_catalog_row(catalog_engine: Engine) -> Callable[..., None]:
    """Write a catalog row directly, bypassing the repository.

    Used to simulate rows written by other versions or corrupted in place.
    """

    def _insert(
        name: str,
        embedding_model: str = "all-minilm-l12-v2",
        text_splitter: str = "noop",
        vector_db: str = "memory",
        unique_params: str | None = None,
    ) -> None:
        with Session(catalog_engine) as session:
            session.add(
                IndexEntity(
                    name=name,
                    embedding_model=embedding_model,
                    text_splitter=text_splitter,
                    vector_db=vector_db,
                    unique_params=unique_params,
                )
            )
            session.commit()

    return _insert


@pytest.fixture
def memory_store() -> MemoryVectorStore:
    """Fixture providing an empty in-memory vector store."""
    return MemoryVectorStore()


@pytest.fixture
def qdrant_store() -> QdrantVectorStore:
    """Fixture providing Qdrant in its embedded in-memory mode."""
    return QdrantVectorStore(QdrantConfig(addr=":memory:"))


@pytest.fixture(params=["memory", "qdrant"])
def vector_store(request: pytest.FixtureRequest) -> VectorStore:
    """Every built-in backend, so one test checks the whole contract."""
    if request.param == "memory":
        return MemoryVectorStore()
    return QdrantVectorStore(QdrantConfig(addr=":memory:"))


@pytest.fixture
def index_manager_factory(
    repository: Repository, fake_embedder: FakeEmbeddingGenerator
) -> Callable[..., IndexManager]:
    """Factory to create IndexManagers sharing the test catalog."""

    def _make_manager(
        vectordb: VectorStore | None = None,
        embedding_generator: EmbeddingGenerator | None = None,
    ) -> IndexManager:
        return IndexManager(
            repository,
            vectordb if vectordb is not None else MemoryVectorStore(),
            embedding_generator if embedding_generator is not None else fake_embedder,
        )

    return _make_manager


@pytest.fixture
def sample_yaml_config() -> str:
    """Provides a sample YAML configuration as a string."""
    return """
listen_addr: 0.0.0.0:8900
available_models:
- model: all-minilm-l12-v2
  device: cpu
index_config:
  index_store: Qdrant
  db_url: sqlite:///indexify.db
  qdrant_config:
    addr: "http://172.20.0.8:6334"
"""


def assert_abstract_class_cannot_be_instantiated(
    cls: type[Any], error_fragment: str = "abstract"
) -> None:
    """Verify that an abstract class raises TypeError when instantiated."""
    with pytest.raises(TypeError) as exc_info:
        cls()

    error_message = str(exc_info.value).lower()
    assert (
        error_fragment in error_message
    ), f"Expected '{error_fragment}' in error message, got: {exc_info.value}"
