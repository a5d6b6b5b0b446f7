"""Unit tests for exception hierarchy and string formatting."""

import pytest

from indexify.exceptions import (
    CollectionAlreadyExistsError,
    CollectionCreationError,
    CollectionReadError,
    ConfigError,
    EmbeddingError,
    IndexAlreadyExistsError,
    IndexifyError,
    IndexNotFoundError,
    PersistenceError,
    SerializationError,
    TextSplitterError,
    UnsupportedBackendError,
    ValidationError,
    VectorStoreError,
)


@pytest.mark.unit
class TestIndexifyError:
    def test_initialization_should_store_message_and_default_attributes(self) -> None:
        error = IndexifyError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.cause is None

    def test_initialization_with_cause_should_include_cause_in_string(self) -> None:
        """
        Given: An original ValueError.
        When: IndexifyError is instantiated with 'cause'.
        Then: The string contains both messages and the cause is kept.
        """
        original_exc = ValueError("Original error")
        wrapper_exc = IndexifyError("Wrapper error", cause=original_exc)

        assert str(wrapper_exc) == "Wrapper error (caused by: Original error)"
        assert wrapper_exc.cause is original_exc

    def test_raising_error_from_cause_should_preserve_chain(self) -> None:
        original_exc = KeyError("missing")

        with pytest.raises(PersistenceError) as exc_info:
            try:
                raise original_exc
            except KeyError as e:
                raise PersistenceError("catalog failure", cause=e) from e

        assert exc_info.value.__cause__ is original_exc


@pytest.mark.unit
class TestSpecificErrors:
    def test_config_error_should_append_field_path(self) -> None:
        error = ConfigError("Invalid value", field_path="index_config.qdrant_config")

        assert str(error) == "Invalid value (field: index_config.qdrant_config)"

    def test_unsupported_backend_error_should_suggest_install_extra(self) -> None:
        error = UnsupportedBackendError("sentence-transformers", "embed")

        assert error.backend == "sentence-transformers"
        assert "pip install indexify[embed]" in str(error)
        assert isinstance(error, ValidationError)

    def test_unsupported_backend_error_without_extra_should_omit_hint(self) -> None:
        assert str(UnsupportedBackendError("pinecone")) == (
            "Backend 'pinecone' is not available"
        )

    def test_index_errors_should_name_the_index(self) -> None:
        assert str(IndexAlreadyExistsError("docs")) == "index `docs` already exists"
        assert str(IndexNotFoundError("docs")) == "index `docs` not found"

    def test_vector_store_error_should_keep_collection(self) -> None:
        error = CollectionReadError("search failed", collection="docs")

        assert error.collection == "docs"

    @pytest.mark.parametrize(
        "exc_class,parent",
        [
            (ConfigError, IndexifyError),
            (ValidationError, IndexifyError),
            (IndexAlreadyExistsError, IndexifyError),
            (IndexNotFoundError, IndexifyError),
            (PersistenceError, IndexifyError),
            (SerializationError, IndexifyError),
            (VectorStoreError, IndexifyError),
            (CollectionCreationError, VectorStoreError),
            (CollectionAlreadyExistsError, CollectionCreationError),
            (CollectionReadError, VectorStoreError),
            (EmbeddingError, IndexifyError),
            (TextSplitterError, IndexifyError),
        ],
    )
    def test_hierarchy_should_allow_catching_by_parent(
        self, exc_class: type[Exception], parent: type[Exception]
    ) -> None:
        assert issubclass(exc_class, parent)
