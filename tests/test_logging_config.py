"""Tests for structured lint event logging."""

import json
import logging

from amdguard.logging_config import (
    LINT_EVENTS_LOGGER,
    LintEventFormatter,
    configure_lint_logging,
    get_lint_logger,
)


def _record(**extra):
    record = logging.LogRecord(
        name=LINT_EVENTS_LOGGER,
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="file linted",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLintEventFormatter:
    def test_base_fields(self):
        entry = json.loads(LintEventFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == LINT_EVENTS_LOGGER
        assert entry["message"] == "file linted"
        assert "event" not in entry

    def test_extra_fields(self):
        record = _record(
            event="file_linted",
            file="a.js",
            language="javascript",
            rule="no-module-state",
            severity="warn",
            diagnostics=["x defined in module scope."],
            error="boom",
        )
        entry = json.loads(LintEventFormatter().format(record))
        assert entry["event"] == "file_linted"
        assert entry["file"] == "a.js"
        assert entry["language"] == "javascript"
        assert entry["rule"] == "no-module-state"
        assert entry["severity"] == "warn"
        assert entry["diagnostics"] == ["x defined in module scope."]
        assert entry["error"] == "boom"


class TestConfigureLintLogging:
    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "events.log"
        configure_lint_logging(str(log_file), log_level="DEBUG", enable_console=False)
        logger = get_lint_logger()
        try:
            assert logger.level == logging.DEBUG
            assert logger.propagate is False
            assert len(logger.handlers) == 1
            logger.info("hello", extra={"event": "test"})
            entry = json.loads(log_file.read_text().strip())
            assert entry["event"] == "test"
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()
            logger.propagate = True

    def test_reconfigure_replaces_handlers(self):
        configure_lint_logging(enable_console=True)
        configure_lint_logging(enable_console=True)
        logger = get_lint_logger()
        try:
            assert len(logger.handlers) == 1
        finally:
            logger.handlers.clear()
            logger.propagate = True
