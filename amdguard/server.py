import asyncio
import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Annotated

from fastmcp import FastMCP
from pydantic import Field

from .constants import ESTREE_EXTENSION, LANGUAGE_BY_EXTENSION, MCP_DEFAULT_PORT
from .linter import Linter
from .scanners.javascript.models import AnalysisResult, FileReport

# Configure logging to stderr to avoid interfering with JSON-RPC on stdout
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] %(name)s %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger("amdguard")

mcp: FastMCP = FastMCP("amdguard-mcp")

# Rules are stateless, so a single linter can serve every request
_linter: Linter | None = None


def _get_linter() -> Linter:
    global _linter
    if _linter is None:
        _linter = Linter()
    return _linter


def _render_file_report(report: FileReport) -> list[str]:
    lines = [f"### {report.file_path}"]
    if report.parse_error:
        lines.append(f"- Not analysed: {report.parse_error}")
        return lines
    for d in report.diagnostics:
        lines.append(f"- Line {d.line}, column {d.column}: `{d.identifier_name}` - {d.message}")
    return lines


def render_markdown(result: AnalysisResult) -> str:
    """Render an ``AnalysisResult`` as a Markdown report."""
    lines = [
        "# Module State Report",
        f"Path: {result.project_path}",
        "",
        "## Summary",
        f"- Files analysed: {result.files_analyzed}",
        f"- Module-scope state: {len(result.findings)}",
        f"- Files not analysed: {result.parse_error_count}",
        "",
    ]

    affected = [r for r in result.files if r.diagnostics or r.parse_error]
    if not affected:
        lines.append("No module-scope state found!")
        return "\n".join(lines)

    lines.append("## Findings")
    for report in affected:
        lines.extend(_render_file_report(report))
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


@mcp.tool
async def check_module_state(
    file_content: Annotated[
        str,
        Field(description="Source code of a single JavaScript/TypeScript file, or an ESTree JSON dump"),
    ],
    file_name: Annotated[
        str,
        Field(description="Name of the file (e.g., 'cache.js'); its extension selects the parser"),
    ] = "module.js",
) -> str:
    """Check ONE AMD module for state kept in its module scope.

    USE THIS TOOL WHEN:
    - You have the content of a file wrapped in define(...)
    - You want to know which top-level variables leak state between renders

    Returns a Markdown report listing every offending declaration.
    """
    linter = _get_linter()
    suffix = Path(file_name).suffix.lower()

    if suffix == ESTREE_EXTENSION:
        try:
            data = json.loads(file_content)
        except (json.JSONDecodeError, RecursionError) as e:
            return f"Error: invalid ESTree JSON: {e}"
        report = linter.lint_estree(data, file_path=file_name)
    else:
        language = LANGUAGE_BY_EXTENSION.get(suffix, "javascript")
        report = linter.lint_source(file_content, file_path=file_name, language=language)

    result = AnalysisResult(
        project_path=file_name,
        files_analyzed=1,
        files=[report],
        findings=list(report.diagnostics),
        summary=dict(Counter(d.rule_id for d in report.diagnostics)),
    )
    return render_markdown(result)


@mcp.tool
async def scan_module_state(
    path: Annotated[
        str,
        Field(description="File or directory on the server to scan recursively"),
    ],
) -> str:
    """Scan a directory of AMD modules for module-scope state.

    USE THIS TOOL WHEN:
    - You want a project-wide report instead of checking files one by one

    Returns a Markdown report grouped by file.
    """
    target = Path(path)
    if not target.exists():
        return f"Error: path not found: {path}"

    logger.info(f"Scanning {target} for module-scope state")
    result = await asyncio.to_thread(_get_linter().lint_paths, [target])
    return render_markdown(result)


def main() -> None:
    """Run the MCP server with HTTP streaming transport."""
    port = MCP_DEFAULT_PORT

    print("amdguard MCP Server (HTTP Streaming)", file=sys.stderr)
    print("=" * 50, file=sys.stderr)
    print(f"Starting HTTP streaming server on port {port}...", file=sys.stderr)
    print(f"HTTP endpoint will be available at: http://localhost:{port}/mcp", file=sys.stderr)

    try:
        asyncio.run(mcp.run_http_async(transport="streamable-http", host="0.0.0.0", port=port))
    except KeyboardInterrupt:
        print("\nShutting down...", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()
