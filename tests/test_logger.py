"""Unit tests for logging configuration."""

import io
import json
import logging
import uuid

import pytest

from indexify.logger import configure_logger, mask_sensitive, set_log_level


def _unique_name() -> str:
    return f"indexify.test.{uuid.uuid4().hex}"


@pytest.mark.unit
class TestConfigureLogger:
    def test_configure_logger_should_use_environment_level(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("INDEXIFY_LOG_LEVEL", "warning")

        logger = configure_logger(_unique_name())

        assert logger.level == logging.WARNING
        assert logger.propagate is False

    def test_configure_logger_should_emit_json_when_requested(self) -> None:
        stream = io.StringIO()
        logger = configure_logger(
            _unique_name(),
            level="INFO",
            format_type="json",
            handler=logging.StreamHandler(stream),
        )

        logger.info("Index created: name=%s", "docs")

        record = json.loads(stream.getvalue())
        assert record["level"] == "INFO"
        assert record["message"] == "Index created: name=docs"
        assert record["logger"] == logger.name

    def test_standard_format_should_name_the_emitting_module(self) -> None:
        stream = io.StringIO()
        logger = configure_logger(
            _unique_name(),
            level="INFO",
            format_type="standard",
            handler=logging.StreamHandler(stream),
        )

        logger.info("Collection dropped: name=%s", "docs")

        line = stream.getvalue()
        assert f" - INFO - {logger.name} - Collection dropped: name=docs" in line

    def test_configure_logger_should_not_stack_handlers(self) -> None:
        name = _unique_name()

        configure_logger(name)
        logger = configure_logger(name)

        assert len(logger.handlers) == 1

    def test_set_log_level_should_update_indexify_loggers_only(self) -> None:
        ours = configure_logger(_unique_name(), level="INFO")
        foreign = logging.getLogger(f"other.{uuid.uuid4().hex}")
        foreign.setLevel(logging.INFO)

        set_log_level("DEBUG")

        assert ours.level == logging.DEBUG
        assert ours.handlers[0].level == logging.DEBUG
        assert foreign.level == logging.INFO
        set_log_level("INFO")


@pytest.mark.unit
class TestMaskSensitive:
    def test_mask_sensitive_should_keep_prefix_and_suffix(self) -> None:
        assert mask_sensitive("sk-1234567890abcd") == "sk-1***abcd"

    def test_mask_sensitive_should_fully_mask_short_values(self) -> None:
        assert mask_sensitive("short") == "***"
