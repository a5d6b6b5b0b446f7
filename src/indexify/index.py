"""Index management.

The IndexManager creates indexes (catalog row plus physical collection)
and loads them into Index handles. An Index ingests batches of texts by
splitting, embedding and upserting them, and answers similarity queries.
"""

from indexify.config.settings import VectorIndexConfig
from indexify.embeddings import EmbeddingGenerator
from indexify.exceptions import EmbeddingError, ValidationError
from indexify.logger import get_logger
from indexify.persistence.repository import Repository
from indexify.schemas.index import CreateIndexParams, SearchResult, Text
from indexify.text_splitters import TextSplitter, TextSplitterKind, get_splitter
from indexify.vectordbs.base import VectorStore
from indexify.vectordbs.factory import create_vectordb

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 0


class Index:
    """Runtime handle bound to one index definition.

    The handle borrows the vector store and the embedding generator from
    its manager; it owns neither lifecycle.

    Attributes:
        name: Index name, also the collection name.
        embedding_model: Model used for documents and queries.
        dedup_fields: Ordered metadata keys defining record identity.
    """

    def __init__(
        self,
        name: str,
        vectordb: VectorStore,
        embedding_generator: EmbeddingGenerator,
        embedding_model: str,
        text_splitter: TextSplitter,
        dedup_fields: list[str] | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ):
        self.name = name
        self.embedding_model = embedding_model
        self.dedup_fields = list(dedup_fields or [])
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._vectordb = vectordb
        self._embedding_generator = embedding_generator
        self._text_splitter = text_splitter

    @property
    def text_splitter(self) -> TextSplitter:
        return self._text_splitter

    async def add_texts(self, texts: list[Text]) -> None:
        """Split, embed and upsert each batch.

        Batches are independent: a failure aborts the failing batch and
        everything after it, while earlier batches stay committed.

        Args:
            texts: Batches of documents, each with shared metadata.

        Raises:
            TextSplitterError: If a document cannot be split.
            EmbeddingError: If embedding generation fails.
            VectorStoreError: If the upsert is rejected.
        """
        for batch_no, batch in enumerate(texts):
            chunks: list[str] = []
            for doc in batch.texts:
                chunks.extend(
                    self._text_splitter.split(doc, self.chunk_size, self.chunk_overlap)
                )
            if not chunks:
                logger.debug(
                    "Empty batch skipped: index=%s, batch=%d", self.name, batch_no
                )
                continue

            embeddings = await self._embedding_generator.generate_embeddings(
                chunks, self.embedding_model
            )

            await self._vectordb.upsert(
                self.name, embeddings, chunks, batch.metadata, self.dedup_fields
            )
            logger.debug(
                "Batch ingested: index=%s, batch=%d, chunks=%d",
                self.name,
                batch_no,
                len(chunks),
            )

        logger.info("Texts added: index=%s, batches=%d", self.name, len(texts))

    async def search(self, query: str, k: int) -> list[SearchResult]:
        """Return up to k chunks closest to the query, closest first.

        Raises:
            EmbeddingError: If the query cannot be embedded.
            VectorStoreError: If the backend rejects the query.
        """
        embeddings = await self._embedding_generator.generate_embeddings(
            [query], self.embedding_model
        )
        if not embeddings:
            raise EmbeddingError(f"no embedding returned for query on `{self.name}`")

        return await self._vectordb.search(self.name, embeddings[0], k)

    async def count(self) -> int:
        """Return the number of records in the index's collection."""
        return await self._vectordb.count(self.name)


class IndexManager:
    """Creates and loads indexes.

    The vector-store backend is fixed at construction; every index created
    through this manager lives in that backend.
    """

    def __init__(
        self,
        repository: Repository,
        vectordb: VectorStore,
        embedding_generator: EmbeddingGenerator,
    ):
        self._repository = repository
        self._vectordb = vectordb
        self._embedding_generator = embedding_generator

    @classmethod
    def from_config(
        cls,
        index_config: VectorIndexConfig | None,
        embedding_generator: EmbeddingGenerator,
    ) -> "IndexManager | None":
        """Build a manager from configuration.

        Returns:
            The manager, or None when indexing is not configured.
        """
        if index_config is None:
            logger.info("Indexing feature is not configured")
            return None

        repository = Repository.from_url(index_config.db_url)
        repository.create_tables()
        vectordb = create_vectordb(index_config)
        return cls(repository, vectordb, embedding_generator)

    @property
    def vectordb(self) -> VectorStore:
        return self._vectordb

    async def create_index(
        self,
        params: CreateIndexParams,
        embedding_model: str,
        text_splitter: "str | TextSplitterKind",
    ) -> None:
        """Create an index and its collection.

        The splitter is resolved before any store is touched, so an
        unsupported splitter has no side effects.

        Raises:
            ValidationError: If the splitter is unknown.
            IndexAlreadyExistsError: If the name is taken.
            VectorStoreError: If the collection cannot be created.
            PersistenceError: On any other catalog failure.
        """
        splitter = get_splitter(text_splitter)

        await self._repository.create_index(
            embedding_model,
            params,
            self._vectordb,
            splitter.kind.value,
        )

    async def load(self, name: str) -> Index:
        """Load an index by name.

        Raises:
            IndexNotFoundError: If the index does not exist.
            SerializationError: If the persisted dedup fields are corrupt.
            ValidationError: If the persisted splitter is unknown or the index
                lives in a different backend.
        """
        definition = await self._repository.get_index(name)

        configured = self._vectordb.backend_name
        if definition.vector_db_backend != configured:
            raise ValidationError(
                f"index `{name}` was created on backend "
                f"`{definition.vector_db_backend}`, but `{configured}` is configured"
            )

        splitter = get_splitter(definition.text_splitter)

        logger.info(
            "Index loaded: name=%s, model=%s, splitter=%s",
            name,
            definition.embedding_model,
            splitter.kind.value,
        )
        return Index(
            name=definition.name,
            vectordb=self._vectordb,
            embedding_generator=self._embedding_generator,
            embedding_model=definition.embedding_model,
            text_splitter=splitter,
            dedup_fields=definition.dedup_fields,
        )
