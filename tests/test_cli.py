"""Tests for the amdguard command line."""

import json
import logging

import pytest
from click.testing import CliRunner

from amdguard.cli import EXIT_CONFIG_ERROR, EXIT_LINT_ERRORS, EXIT_OK, main
from amdguard.logging_config import LINT_EVENTS_LOGGER

STATEFUL_MODULE = "define(function () {\n    var cache = {};\n});\n"
CLEAN_MODULE = "define(function () { var LIMIT = 5; });\n"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def stateful(tmp_path):
    path = tmp_path / "stateful.js"
    path.write_text(STATEFUL_MODULE)
    return path


@pytest.fixture(autouse=True)
def reset_event_logger():
    """The CLI reconfigures the lint events logger; undo it after each test."""
    yield
    logger = logging.getLogger(LINT_EVENTS_LOGGER)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True


class TestCli:
    def test_reports_and_fails(self, runner, stateful):
        result = runner.invoke(main, [str(stateful)])
        assert result.exit_code == EXIT_LINT_ERRORS
        assert f"{stateful}:2:8  error  cache defined in module scope.  no-module-state" in result.output
        assert "1 problem (1 errors, 0 warnings) in 1 files" in result.output

    def test_clean_exits_zero(self, runner, tmp_path):
        path = tmp_path / "clean.js"
        path.write_text(CLEAN_MODULE)
        result = runner.invoke(main, [str(path)])
        assert result.exit_code == EXIT_OK
        assert "No problems found in 1 files" in result.output

    def test_warn_override_exits_zero(self, runner, stateful):
        result = runner.invoke(main, [str(stateful), "--rule", "no-module-state=warn"])
        assert result.exit_code == EXIT_OK
        assert "warn  cache defined in module scope." in result.output

    def test_json_output(self, runner, stateful):
        result = runner.invoke(main, [str(stateful), "--format", "json"])
        data = json.loads(result.output)
        assert data["files_analyzed"] == 1
        assert data["summary"] == {"no-module-state": 1}
        finding = data["findings"][0]
        assert finding["identifier_name"] == "cache"
        assert finding["fix"] is None

    def test_config_file(self, runner, stateful, tmp_path):
        config = tmp_path / "eslint-config.json"
        config.write_text(json.dumps({"rules": {"no-module-state": 0}}))
        result = runner.invoke(main, [str(stateful), "--config", str(config)])
        assert result.exit_code == EXIT_OK

    def test_invalid_config(self, runner, stateful, tmp_path):
        config = tmp_path / "eslint-config.json"
        config.write_text(json.dumps({"rules": {"no-such-rule": 2}}))
        result = runner.invoke(main, [str(stateful), "--config", str(config)])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Configuration error" in result.output

    def test_unknown_rule_override(self, runner, stateful):
        result = runner.invoke(main, [str(stateful), "--rule", "no-such-rule=error"])
        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_malformed_rule_override(self, runner, stateful):
        result = runner.invoke(main, [str(stateful), "--rule", "no-module-state"])
        assert result.exit_code == 2
        assert "RULE=SEVERITY" in result.output

    def test_parse_error_fails(self, runner, tmp_path):
        path = tmp_path / "broken.js"
        path.write_text("define(function () { var = ; });")
        result = runner.invoke(main, [str(path)])
        assert result.exit_code == EXIT_LINT_ERRORS
        assert "Syntax error" in result.output

    def test_log_file(self, runner, stateful, tmp_path):
        log_file = tmp_path / "lint.log"
        runner.invoke(main, [str(stateful), "--log-file", str(log_file)])
        events = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert any(e.get("event") == "lint_run" and e["errors"] == 1 for e in events)
