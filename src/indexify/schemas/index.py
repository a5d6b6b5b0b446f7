"""Index data models.

Defines the parameters used to create an index, the persisted index
definition, ingestion batches, the payload stored next to every vector,
and the results returned by a search.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MetricKind(str, Enum):
    """Distance metric used to compare vectors in a collection."""

    DOT = "dot"
    EUCLIDEAN = "euclidean"
    COSINE = "cosine"


class CreateIndexParams(BaseModel):
    """A request to create a new index and its physical collection.

    Attributes:
        name: Index name, also used as the collection name.
        vector_dim: Dimensionality of the vectors stored in the collection.
        metric: Distance metric of the collection.
        dedup_fields: Ordered metadata keys whose values identify a record.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1, description="Index and collection name")
    vector_dim: int = Field(..., gt=0, description="Vector dimensionality")
    metric: MetricKind = Field(
        default=MetricKind.COSINE, description="Distance metric"
    )
    dedup_fields: list[str] = Field(
        default_factory=list,
        description="Ordered metadata keys used for content-addressed ids",
    )


class IndexDefinition(BaseModel):
    """Immutable view of an index row in the metadata catalog.

    Attributes:
        name: Unique index name.
        embedding_model: Embedding model bound to the index.
        text_splitter: Name of the text splitter variant.
        vector_db_backend: Name of the vector-store backend.
        dedup_fields: Ordered metadata keys used for content hashing.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    embedding_model: str
    text_splitter: str
    vector_db_backend: str
    dedup_fields: list[str] = Field(default_factory=list)


class Text(BaseModel):
    """One ingestion batch: documents sharing a metadata mapping.

    Attributes:
        texts: Source documents.
        metadata: Attributes attached to every chunk of every document.
    """

    model_config = ConfigDict(extra="forbid")

    texts: list[str] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)


class VectorPayload(BaseModel):
    """Payload stored alongside each vector in a collection.

    Attributes:
        text: Chunk content.
        chunk: Position of the chunk among all chunks of its ingestion batch,
            counted across documents. It is not reset per source document.
        metadata: Batch metadata, returned as-is on search.
    """

    model_config = ConfigDict(extra="forbid")

    text: str
    chunk: int = Field(..., ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)


class SearchResult(BaseModel):
    """A single search hit.

    Attributes:
        text: Chunk content.
        metadata: Metadata decoded from the stored payload.
    """

    model_config = ConfigDict(extra="forbid")

    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def none_metadata_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v
