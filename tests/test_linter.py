"""Tests for the lint runner."""

import json
import logging

import pytest

from amdguard.config import from_mapping
from amdguard.linter import Linter

STATEFUL_MODULE = """\
define(['dep'], function (dep) {
    var cache = {};
    var pending;
    return dep;
});
"""

CLEAN_MODULE = """\
define(function () {
    var MAX = 10;
    var api = {size: MAX};
    return api;
});
"""


@pytest.fixture
def linter():
    return Linter()


@pytest.fixture
def project(tmp_path):
    """A small project tree with stateful, clean, broken and vendored files."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "stateful.js").write_text(STATEFUL_MODULE)
    (tmp_path / "src" / "clean.js").write_text(CLEAN_MODULE)
    (tmp_path / "src" / "broken.js").write_text("define(function () { var = ; });")
    (tmp_path / "src" / "notes.txt").write_text("var state;")
    (tmp_path / "node_modules" / "lib").mkdir(parents=True)
    (tmp_path / "node_modules" / "lib" / "index.js").write_text(STATEFUL_MODULE)
    return tmp_path


class TestLintSource:
    """Linting source text directly."""

    def test_diagnostics_in_order(self, linter):
        report = linter.lint_source(STATEFUL_MODULE, file_path="stateful.js")
        assert report.parse_error is None
        assert [d.identifier_name for d in report.diagnostics] == ["cache", "pending"]
        assert [d.line for d in report.diagnostics] == [2, 3]
        assert all(d.file_path == "stateful.js" for d in report.diagnostics)

    def test_clean_module(self, linter):
        assert linter.lint_source(CLEAN_MODULE).diagnostics == []

    def test_syntax_error_reported(self, linter):
        report = linter.lint_source("define(function () { var = ; });")
        assert report.diagnostics == []
        assert report.parse_error is not None
        assert report.parse_error.startswith("Syntax error")

    def test_rule_disabled(self):
        linter = Linter(from_mapping({"rules": {"no-module-state": "off"}}))
        assert linter.lint_source(STATEFUL_MODULE).diagnostics == []

    def test_rule_severity(self):
        linter = Linter(from_mapping({"rules": {"no-module-state": "warn"}}))
        report = linter.lint_source(STATEFUL_MODULE)
        assert {d.severity for d in report.diagnostics} == {"warn"}

    def test_typescript(self, linter):
        code = "define(['dep'], function (dep: any) { var cache: Record<string, string> = {}; });"
        report = linter.lint_source(code, language="typescript")
        assert [d.identifier_name for d in report.diagnostics] == ["cache"]

    def test_stateless_across_runs(self, linter):
        first = linter.lint_source(STATEFUL_MODULE)
        linter.lint_source(CLEAN_MODULE)
        again = linter.lint_source(STATEFUL_MODULE)
        assert first == again


class TestLintEstree:
    """Linting trees produced by an external parser."""

    def test_estree_document(self, linter):
        data = {
            "type": "Program",
            "body": [
                {
                    "type": "ExpressionStatement",
                    "expression": {
                        "type": "CallExpression",
                        "callee": {"type": "Identifier", "name": "define"},
                        "arguments": [
                            {
                                "type": "FunctionExpression",
                                "params": [],
                                "body": {
                                    "type": "BlockStatement",
                                    "body": [
                                        {
                                            "type": "VariableDeclaration",
                                            "kind": "var",
                                            "declarations": [
                                                {
                                                    "type": "VariableDeclarator",
                                                    "id": {"type": "Identifier", "name": "y"},
                                                    "init": None,
                                                }
                                            ],
                                        }
                                    ],
                                },
                            }
                        ],
                    },
                }
            ],
        }
        report = linter.lint_estree(data, file_path="dump.json")
        assert [d.message for d in report.diagnostics] == ["y defined in module scope."]

    def test_root_must_be_program(self, linter):
        report = linter.lint_estree({"type": "Identifier", "name": "x"})
        assert "must be a Program" in report.parse_error

    def test_malformed_document(self, linter):
        report = linter.lint_estree({"type": "ExpressionStatement"})
        assert report.parse_error.startswith("Malformed ESTree document")


class TestLintFiles:
    """Files, directories and aggregation."""

    def test_iter_files_respects_extensions_and_excludes(self, linter, project):
        files = linter.iter_files([project])
        names = [f.name for f in files]
        assert names == ["broken.js", "clean.js", "stateful.js"]

    def test_explicit_file_always_included(self, linter, project):
        notes = project / "src" / "notes.txt"
        assert linter.iter_files([notes]) == [notes]

    def test_missing_path_skipped(self, linter, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="amdguard.linter"):
            assert linter.iter_files([tmp_path / "missing"]) == []
        assert "Path does not exist" in caplog.text

    def test_lint_paths(self, linter, project):
        result = linter.lint_paths([project])
        assert result.files_analyzed == 3
        assert result.summary == {"no-module-state": 2}
        assert result.error_count == 2
        assert result.warning_count == 0
        assert result.parse_error_count == 1
        assert [d.identifier_name for d in result.findings] == ["cache", "pending"]
        assert result.project_path == str(project)

    def test_lint_paths_deterministic(self, linter, project):
        first = linter.lint_paths([project])
        second = linter.lint_paths([project])
        assert first.findings == second.findings
        assert [f.file_path for f in first.files] == [f.file_path for f in second.files]

    def test_unsupported_file(self, linter, project):
        report = linter.lint_file(project / "src" / "notes.txt")
        assert report.parse_error == "Unsupported file type: notes.txt"

    def test_file_too_large(self, project):
        linter = Linter(from_mapping({"max_file_size": 10}))
        report = linter.lint_file(project / "src" / "stateful.js")
        assert report.parse_error.startswith("File too large")

    def test_estree_file(self, linter, tmp_path):
        path = tmp_path / "module.json"
        path.write_text(json.dumps({"type": "Program", "body": []}))
        report = linter.lint_file(path)
        assert report.parse_error is None
        assert report.diagnostics == []

    def test_invalid_estree_file(self, linter, tmp_path):
        path = tmp_path / "module.json"
        path.write_text("{not json")
        assert linter.lint_file(path).parse_error.startswith("Invalid ESTree JSON")

    def test_non_utf8_file(self, linter, tmp_path):
        path = tmp_path / "latin.js"
        path.write_bytes(b"var caf\xe9;")
        assert "not valid UTF-8" in linter.lint_file(path).parse_error

    def test_file_event_fields(self, linter, project, caplog, monkeypatch):
        monkeypatch.setattr(logging.getLogger("amdguard.lint_events"), "propagate", True)
        with caplog.at_level(logging.INFO, logger="amdguard.lint_events"):
            linter.lint_paths([project])
        linted = [r for r in caplog.records if getattr(r, "event", None) == "file_linted"]
        assert len(linted) == 1
        assert linted[0].file.endswith("stateful.js")
        assert linted[0].language == "javascript"
        assert linted[0].rule == "no-module-state"
        assert linted[0].severity == "error"
        assert linted[0].diagnostics == [
            "cache defined in module scope.",
            "pending defined in module scope.",
        ]
        skipped = [r for r in caplog.records if getattr(r, "event", None) == "file_skipped"]
        assert [r.language for r in skipped] == ["javascript"]

    def test_run_summary_event_logged(self, linter, project, caplog, monkeypatch):
        monkeypatch.setattr(logging.getLogger("amdguard.lint_events"), "propagate", True)
        with caplog.at_level(logging.INFO, logger="amdguard.lint_events"):
            linter.lint_paths([project])
        records = [r for r in caplog.records if getattr(r, "event", None) == "lint_run"]
        assert len(records) == 1
        assert records[0].files_analyzed == 3


class TestUnusualSources:
    """Valid but unusual files are analysed, and one bad file never ends a run."""

    def test_long_concatenation(self, linter, tmp_path):
        terms = " + ".join(f"'p{i}'" for i in range(600))
        (tmp_path / "template.js").write_text(
            f"define(function () {{\n    var TEMPLATE = {terms};\n    var cache = {{}};\n}});\n"
        )
        result = linter.lint_paths([tmp_path])
        assert result.parse_error_count == 0
        assert [d.identifier_name for d in result.findings] == ["cache"]

    def test_deep_nesting_reported_per_file(self, linter, tmp_path):
        depth = 3000
        (tmp_path / "deep.js").write_text(
            "define(function () { var table = " + "[" * depth + "]" * depth + "; });"
        )
        (tmp_path / "ok.js").write_text("define(function () { var state; });")
        result = linter.lint_paths([tmp_path])
        assert result.files_analyzed == 2
        deep, ok = result.files
        assert deep.parse_error.startswith("Syntax tree is nested too deeply")
        assert [d.identifier_name for d in ok.diagnostics] == ["state"]

    def test_out_of_range_code_point(self, linter, tmp_path):
        (tmp_path / "esc.js").write_text("define(function () { var s = '\\u{110000}'; });")
        (tmp_path / "ok.js").write_text("define(function () { var state; });")
        result = linter.lint_paths([tmp_path])
        assert result.files_analyzed == 2
        assert result.parse_error_count == 0
        assert [d.identifier_name for d in result.findings] == ["state"]

    def test_long_estree_chain(self, linter):
        chain = {"type": "Literal", "value": "p0", "raw": "'p0'"}
        for i in range(1, 2000):
            chain = {
                "type": "BinaryExpression",
                "operator": "+",
                "left": chain,
                "right": {"type": "Literal", "value": f"p{i}", "raw": f"'p{i}'"},
            }
        declaration = {
            "type": "VariableDeclaration",
            "kind": "var",
            "declarations": [
                {"type": "VariableDeclarator", "id": {"type": "Identifier", "name": "t"}, "init": chain}
            ],
        }
        data = {
            "type": "Program",
            "body": [
                {
                    "type": "ExpressionStatement",
                    "expression": {
                        "type": "CallExpression",
                        "callee": {"type": "Identifier", "name": "define"},
                        "arguments": [
                            {
                                "type": "FunctionExpression",
                                "params": [],
                                "body": {"type": "BlockStatement", "body": [declaration]},
                            }
                        ],
                    },
                }
            ],
        }
        report = linter.lint_estree(data)
        assert report.parse_error is None
        assert report.diagnostics == []

    def test_syntax_error_after_long_chain(self, linter):
        terms = " + ".join(f"'p{i}'" for i in range(2000))
        report = linter.lint_source(f"define(function () {{ var T = {terms} + ; }});")
        assert report.diagnostics == []
        assert report.parse_error.startswith("Syntax error at line 1")
