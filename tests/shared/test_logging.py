"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from squashlink.shared.errors import ErrorContext, NetworkError
from squashlink.shared.logging import (
    StructuredFormatter,
    log_api_call,
    log_operation_error,
    log_operation_start,
    log_operation_success,
    setup_structured_logger,
)


class TestStructuredFormatter:
    def test_renders_extra_fields_as_json(self) -> None:
        record = logging.LogRecord("squashlink.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        record.operation = "get_projects"
        record.duration_ms = 12.5

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["message"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["operation"] == "get_projects"
        assert entry["duration_ms"] == 12.5
        assert "error_code" not in entry


class TestSetupStructuredLogger:
    def test_rich_console_handler(self) -> None:
        logger = setup_structured_logger("squashlink.test_rich", level="debug")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.propagate is False

    def test_reconfiguring_does_not_stack_handlers(self) -> None:
        setup_structured_logger("squashlink.test_stack", use_rich_console=False)
        logger = setup_structured_logger("squashlink.test_stack", use_rich_console=False)

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    def test_log_file_receives_json_lines(self, tmp_path: Path) -> None:
        log_file = tmp_path / "squashlink.log"
        logger = setup_structured_logger(
            "squashlink.test_file",
            level="INFO",
            log_file=str(log_file),
            use_rich_console=False,
        )

        logger.info("written", extra={"operation": "unit"})
        for handler in logger.handlers:
            handler.flush()
            handler.close()
        logger.handlers.clear()

        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
        assert entry["message"] == "written"
        assert entry["operation"] == "unit"


class TestOperationHelpers:
    def test_log_operation_error_masks_context(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("squashlink.test_ops")
        error = NetworkError("refused", ErrorContext(operation="http_get", endpoint="/projects", user_id="9"))

        with caplog.at_level(logging.ERROR, logger="squashlink"):
            log_operation_error(logger, error)

        record = caplog.records[-1]
        assert record.getMessage() == "refused"
        assert record.error_code == "NETWORK_ERROR"
        assert record.operation == "http_get"
        assert record.context["endpoint"] == "/projects"
        assert "user_id" not in record.context

    def test_log_operation_success_is_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("squashlink.test_ops")

        with caplog.at_level(logging.DEBUG, logger="squashlink"):
            log_operation_success(logger, "get_projects", 3.2, result_info={"count": 2})

        record = caplog.records[-1]
        assert record.levelno == logging.DEBUG
        assert record.result_info == {"count": 2}

    def test_log_operation_start_carries_context(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = logging.getLogger("squashlink.test_ops")

        with caplog.at_level(logging.DEBUG, logger="squashlink"):
            log_operation_start(logger, "expand_node", {"node": "folder-10"})

        record = caplog.records[-1]
        assert record.operation == "expand_node"
        assert record.context == {"node": "folder-10"}

    @pytest.mark.parametrize(("status", "level"), [(200, logging.DEBUG), (503, logging.WARNING)])
    def test_log_api_call_level_follows_status(
        self,
        caplog: pytest.LogCaptureFixture,
        status: int,
        level: int,
    ) -> None:
        logger = logging.getLogger("squashlink.test_api")

        with caplog.at_level(logging.DEBUG, logger="squashlink"):
            log_api_call(logger, "/projects", status_code=status, duration_ms=1.234)

        record = caplog.records[-1]
        assert record.levelno == level
        assert record.context["status_code"] == status
        assert record.context["duration_ms"] == 1.23
