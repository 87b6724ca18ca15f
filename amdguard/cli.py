"""CLI entry point for amdguard."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from amdguard import __version__
from amdguard.config import discover_config, load_config
from amdguard.core.exceptions import ConfigurationError
from amdguard.linter import Linter
from amdguard.logging_config import LINT_EVENTS_LOGGER, configure_lint_logging
from amdguard.scanners.javascript.models import AnalysisResult

EXIT_OK = 0
EXIT_LINT_ERRORS = 1
EXIT_CONFIG_ERROR = 2


def _parse_rule_overrides(values: tuple[str, ...]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for value in values:
        rule_id, sep, severity = value.partition("=")
        if not sep or not rule_id or not severity:
            raise click.BadParameter(
                f"expected RULE=SEVERITY, got {value!r}", param_hint="--rule"
            )
        overrides[rule_id.strip()] = severity.strip()
    return overrides


@click.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, resolve_path=True))
@click.option(
    "-c", "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    default=None,
    help="Configuration file (JSON, TOML or pyproject.toml). Discovered when omitted.",
)
@click.option(
    "-f", "--format", "fmt",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "-r", "--rule", "rule_overrides",
    multiple=True,
    metavar="RULE=SEVERITY",
    help="Override a rule severity, e.g. no-module-state=warn.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, resolve_path=True),
    default=None,
    help="Write structured lint events to this file.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose logging.")
@click.version_option(version=__version__)
def main(
    paths: tuple[str, ...],
    config_path: str | None,
    fmt: str,
    rule_overrides: tuple[str, ...],
    log_file: str | None,
    verbose: bool,
) -> None:
    """Report state kept in the module scope of AMD (define) modules."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    if log_file:
        configure_lint_logging(log_file, "DEBUG" if verbose else "INFO", enable_console=False)
    else:
        logging.getLogger(LINT_EVENTS_LOGGER).propagate = False

    targets = list(paths) or [str(Path.cwd())]

    try:
        config = load_config(config_path) if config_path else discover_config(targets[0])
        overrides = _parse_rule_overrides(rule_overrides)
        if overrides:
            config = config.with_overrides(overrides)
    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    result = Linter(config).lint_paths(targets)

    if fmt == "json":
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        click.echo(render_text(result))

    if result.error_count or result.parse_error_count:
        sys.exit(EXIT_LINT_ERRORS)
    sys.exit(EXIT_OK)


def render_text(result: AnalysisResult) -> str:
    """Render *result* as ``path:line:col  severity  message  rule`` lines."""
    lines: list[str] = []
    for report in result.files:
        if report.parse_error:
            lines.append(f"{report.file_path}  error  {report.parse_error}")
        for d in report.diagnostics:
            lines.append(
                f"{d.file_path}:{d.line}:{d.column}  {d.severity}  {d.message}  {d.rule_id}"
            )

    problems = len(result.findings) + result.parse_error_count
    if problems:
        lines.append("")
        lines.append(
            f"{problems} problem{'s' if problems != 1 else ''} "
            f"({result.error_count + result.parse_error_count} errors, "
            f"{result.warning_count} warnings) in {result.files_analyzed} files"
        )
    else:
        lines.append(f"No problems found in {result.files_analyzed} files")
    return "\n".join(lines)


if __name__ == "__main__":
    main()
