"""Unit tests for index data models."""

import pytest
from pydantic import ValidationError

from indexify.schemas.index import (
    CreateIndexParams,
    MetricKind,
    SearchResult,
    Text,
    VectorPayload,
)


@pytest.mark.unit
class TestCreateIndexParams:
    def test_init_should_default_to_cosine_without_dedup_fields(self) -> None:
        params = CreateIndexParams(name="docs", vector_dim=384)

        assert params.metric is MetricKind.COSINE
        assert params.dedup_fields == []

    def test_init_should_accept_metric_by_value(self) -> None:
        params = CreateIndexParams.model_validate(
            {"name": "docs", "vector_dim": 3, "metric": "euclidean"}
        )

        assert params.metric is MetricKind.EUCLIDEAN

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "", "vector_dim": 4},
            {"name": "docs", "vector_dim": 0},
            {"name": "docs", "vector_dim": 4, "metric": "manhattan"},
        ],
    )
    def test_init_should_reject_invalid_values(self, data: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            CreateIndexParams(**data)  # type: ignore[arg-type]

    def test_instances_should_be_immutable(self) -> None:
        params = CreateIndexParams(name="docs", vector_dim=4)

        with pytest.raises(ValidationError):
            params.name = "other"  # type: ignore[misc]


@pytest.mark.unit
class TestPayloadModels:
    def test_text_should_default_to_empty_batch(self) -> None:
        batch = Text()

        assert batch.texts == []
        assert batch.metadata == {}

    def test_vector_payload_should_reject_negative_chunk(self) -> None:
        with pytest.raises(ValidationError):
            VectorPayload(text="hello", chunk=-1)

    def test_search_result_should_treat_null_metadata_as_empty(self) -> None:
        result = SearchResult.model_validate({"text": "hello", "metadata": None})

        assert result.metadata == {}
