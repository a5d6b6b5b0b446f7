"""Embedding generation.

Indexes name their embedding model; the EmbeddingRouter resolves that
name to a loaded model and turns texts into vectors, one per text and
in the same order.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, cast

from indexify.config.settings import EmbeddingModelConfig, ServerConfig
from indexify.exceptions import EmbeddingError, UnsupportedBackendError
from indexify.logger import get_logger

logger = get_logger(__name__)

# Short model names accepted in configuration and their HuggingFace ids
MODEL_ALIASES: dict[str, str] = {
    "all-minilm-l12-v2": "sentence-transformers/all-MiniLM-L12-v2",
    "all-minilm-l6-v2": "sentence-transformers/all-MiniLM-L6-v2",
    "all-mpnet-base-v2": "sentence-transformers/all-mpnet-base-v2",
}


class EmbeddingGenerator(ABC):
    """Turns texts into dense vectors for a named model."""

    @abstractmethod
    async def generate_embeddings(
        self, texts: list[str], model_name: str
    ) -> list[list[float]]:
        """Compute one embedding per text, preserving order.

        Args:
            texts: Input texts.
            model_name: Embedding model to use.

        Returns:
            Dense embedding vectors.

        Raises:
            EmbeddingError: If the model is unknown or encoding fails.
        """
        pass


class SentenceTransformerEmbedder:
    """Sentence transformer embedder using HuggingFace models.

    Models are lazy-loaded on first use to avoid startup overhead.

    Attributes:
        model_name: HuggingFace model identifier.
        device: Target hardware for inference.
        batch_size: Number of texts to process at once.
    """

    def __init__(self, model_name: str, device: str = "cpu", batch_size: int = 32):
        self.model_name = model_name
        self.device = device
        self.batch_size = batch_size
        self._model: Any | None = None
        self._dim: int | None = None

    @classmethod
    def from_config(cls, config: EmbeddingModelConfig) -> "SentenceTransformerEmbedder":
        return cls(
            model_name=MODEL_ALIASES.get(config.model, config.model),
            device=config.device,
        )

    def _load_model(self) -> None:
        if self._model is not None:
            return

        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            logger.error("sentence-transformers not installed")
            raise UnsupportedBackendError("sentence-transformers", "embed") from e

        try:
            logger.info("Loading embedding model: %s", self.model_name)
            self._model = SentenceTransformer(self.model_name, device=self.device)
            self._dim = self._model.get_sentence_embedding_dimension()
            logger.info(
                "Model loaded: name=%s, dimension=%d", self.model_name, self._dim
            )
        except Exception as e:
            logger.error("Failed to load model: name=%s", self.model_name)
            logger.debug("Model loading error: %s", e, exc_info=True)
            raise EmbeddingError(
                f"Failed to load model '{self.model_name}': {e}"
            ) from e

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Compute dense embeddings for a list of texts.

        Raises:
            EmbeddingError: If embedding computation fails.
        """
        if not texts:
            return []

        self._load_model()

        try:
            embeddings = self._model.encode(  # type: ignore[union-attr]
                texts,
                batch_size=self.batch_size,
                show_progress_bar=False,
                convert_to_numpy=True,
                normalize_embeddings=False,
            )
        except Exception as e:
            logger.error("Embedding computation failed: model=%s", self.model_name)
            logger.debug("Embedding error details: %s", e, exc_info=True)
            raise EmbeddingError(f"Embedding computation failed: {e}") from e

        return cast(list[list[float]], embeddings.tolist())

    async def embed_async(self, texts: list[str]) -> list[list[float]]:
        """Compute embeddings in the default executor (CPU-bound)."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.embed, texts)

    @property
    def embedding_dim(self) -> int:
        if self._dim is None:
            self._load_model()
        return self._dim if self._dim is not None else 0


class EmbeddingRouter(EmbeddingGenerator):
    """Routes embedding requests to the configured models by name."""

    def __init__(self, embedders: dict[str, SentenceTransformerEmbedder]):
        self._embedders = embedders

    @classmethod
    def from_config(cls, config: ServerConfig) -> "EmbeddingRouter":
        embedders = {
            model.model: SentenceTransformerEmbedder.from_config(model)
            for model in config.available_models
        }
        logger.info("Embedding models available: %s", ", ".join(embedders))
        return cls(embedders)

    @property
    def model_names(self) -> list[str]:
        return list(self._embedders)

    def get_embedder(self, model_name: str) -> SentenceTransformerEmbedder:
        try:
            return self._embedders[model_name]
        except KeyError:
            raise EmbeddingError(f"embedding model `{model_name}` not found") from None

    async def generate_embeddings(
        self, texts: list[str], model_name: str
    ) -> list[list[float]]:
        embedder = self.get_embedder(model_name)
        embeddings = await embedder.embed_async(texts)
        if len(embeddings) != len(texts):
            raise EmbeddingError(
                f"model `{model_name}` returned {len(embeddings)} vectors "
                f"for {len(texts)} texts"
            )
        return embeddings
