"""Tests for the amdguard MCP server tools."""

import json

import pytest

from amdguard.scanners.javascript.models import AnalysisResult, Diagnostic, FileReport
from amdguard.server import check_module_state, mcp, render_markdown, scan_module_state


class TestServer:
    def test_mcp_instance_exists(self):
        assert mcp is not None
        assert mcp.name == "amdguard-mcp"

    @pytest.mark.asyncio
    async def test_check_module_state_reports(self):
        code = "define(function () {\n  var cache = {};\n});"
        report = await check_module_state.fn(code, "cache.js")
        assert "# Module State Report" in report
        assert "- Module-scope state: 1" in report
        assert "### cache.js" in report
        assert "`cache` - cache defined in module scope." in report

    @pytest.mark.asyncio
    async def test_check_module_state_clean(self):
        report = await check_module_state.fn("define(function () { var A = 1; });", "a.js")
        assert "No module-scope state found!" in report

    @pytest.mark.asyncio
    async def test_check_module_state_syntax_error(self):
        report = await check_module_state.fn("define(function () { var = });", "bad.js")
        assert "Not analysed: Syntax error" in report

    @pytest.mark.asyncio
    async def test_check_module_state_estree(self):
        dump = json.dumps({"type": "Program", "body": []})
        report = await check_module_state.fn(dump, "module.json")
        assert "No module-scope state found!" in report

    @pytest.mark.asyncio
    async def test_check_module_state_bad_estree(self):
        report = await check_module_state.fn("{", "module.json")
        assert report.startswith("Error: invalid ESTree JSON")

    @pytest.mark.asyncio
    async def test_scan_module_state(self, tmp_path):
        (tmp_path / "a.js").write_text("define(function () { var state; });")
        (tmp_path / "b.js").write_text("define(function () { var B = []; });")
        report = await scan_module_state.fn(str(tmp_path))
        assert "- Files analysed: 2" in report
        assert "a.js" in report
        assert "b.js" not in report

    @pytest.mark.asyncio
    async def test_scan_module_state_missing_path(self, tmp_path):
        report = await scan_module_state.fn(str(tmp_path / "missing"))
        assert report.startswith("Error: path not found")


class TestRenderMarkdown:
    def test_groups_by_file(self):
        diagnostic = Diagnostic(
            rule_id="no-module-state",
            message="x defined in module scope.",
            identifier_name="x",
            file_path="m.js",
            line=3,
            column=8,
        )
        result = AnalysisResult(
            project_path="proj",
            files_analyzed=2,
            files=[
                FileReport(file_path="m.js", diagnostics=[diagnostic]),
                FileReport(file_path="ok.js"),
            ],
            findings=[diagnostic],
        )
        text = render_markdown(result)
        assert "Line 3, column 8: `x` - x defined in module scope." in text
        assert "ok.js" not in text
