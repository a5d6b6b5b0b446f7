"""Server and vector index configuration.

The configuration is read once at startup from a YAML file. The index
store selected here decides which vector-store backend the IndexManager
is built with for the lifetime of the process.
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

IndexStoreKind = Literal["qdrant", "memory"]


class QdrantConfig(BaseModel):
    """Connection settings for a Qdrant deployment.

    Attributes:
        addr: Server URL, or ":memory:" for Qdrant's embedded local mode.
        api_key: Optional API key for authenticated clusters.
        prefer_grpc: Use the gRPC interface instead of REST.
        timeout: Request timeout in seconds.
    """

    model_config = ConfigDict(extra="forbid")

    addr: str = Field(
        default="http://localhost:6333",
        description="Qdrant URL or ':memory:' for the embedded local mode",
    )
    api_key: str | None = Field(
        default=None,
        description="API key for authenticated clusters",
    )
    prefer_grpc: bool = Field(
        default=False,
        description="Use gRPC instead of REST",
    )
    timeout: int | None = Field(
        default=None,
        ge=1,
        description="Request timeout in seconds",
    )


class VectorIndexConfig(BaseModel):
    """Configuration for the indexing feature.

    Attributes:
        index_store: Vector-store backend used for every index.
        db_url: SQLAlchemy URL of the metadata catalog.
        qdrant_config: Qdrant connection settings.
    """

    model_config = ConfigDict(extra="forbid")

    index_store: IndexStoreKind = Field(
        default="qdrant",
        description="Vector-store backend",
    )
    db_url: str = Field(
        default="sqlite:///indexify.db",
        description="SQLAlchemy URL of the metadata catalog",
    )
    qdrant_config: QdrantConfig | None = Field(
        default=None,
        description="Qdrant connection settings",
    )

    @field_validator("index_store", mode="before")
    @classmethod
    def normalize_index_store(cls, v: Any) -> Any:
        """Accept backend names case-insensitively (e.g., "Qdrant")."""
        if isinstance(v, str):
            return v.lower()
        return v

    @model_validator(mode="after")
    def qdrant_config_required_for_qdrant(self) -> "VectorIndexConfig":
        """Validate that Qdrant settings are present when Qdrant is selected.

        Raises:
            ValueError: If qdrant_config is missing for the qdrant store.
        """
        if self.index_store == "qdrant" and self.qdrant_config is None:
            raise ValueError("qdrant_config is required when index_store is 'qdrant'")
        return self


class EmbeddingModelConfig(BaseModel):
    """An embedding model the service is allowed to load.

    Attributes:
        model: Model name as used by clients (e.g., "all-minilm-l12-v2").
        device: Device the model runs on (cpu, cuda, mps).
    """

    model_config = ConfigDict(extra="forbid")

    model: str = Field(..., description="Model name exposed to clients")
    device: str = Field(default="cpu", description="Inference device")


class ServerConfig(BaseModel):
    """Root configuration.

    Attributes:
        listen_addr: Address the service listens on.
        available_models: Embedding models that can be bound to an index.
        index_config: Indexing configuration; None disables indexing.
    """

    model_config = ConfigDict(extra="forbid")

    listen_addr: str = Field(
        default="0.0.0.0:8900",
        description="Address the service listens on",
    )
    available_models: list[EmbeddingModelConfig] = Field(
        default_factory=lambda: [EmbeddingModelConfig(model="all-minilm-l12-v2")],
        description="Embedding models available to indexes",
    )
    index_config: VectorIndexConfig | None = Field(
        default=None,
        description="Indexing configuration (None disables indexing)",
    )

    @classmethod
    def from_yaml(cls, path: Path) -> "ServerConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            Validated ServerConfig instance.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigError: If YAML is invalid or validation fails.
        """
        from indexify.exceptions import ConfigError

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return cls.model_validate(data)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {e}") from e
        except Exception as e:
            raise ConfigError(f"Configuration validation failed: {e}") from e

    def to_yaml(self, path: Path) -> None:
        """Export configuration to a YAML file."""
        data = self.model_dump(mode="json")

        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                data,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )
