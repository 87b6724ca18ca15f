"""Lint configuration.

Configuration follows the shape of an ESLint config file: a ``rules``
mapping from rule id to severity.  It can live in

* a JSON file (``.amdguard.json`` or any ``eslint-config.json``-style file),
* a TOML file (``amdguard.toml``), or
* the ``[tool.amdguard]`` table of ``pyproject.toml``.

Example ``amdguard.toml``::

    exclude = ["vendor"]

    [rules]
    no-module-state = "warn"
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import (
    CONFIG_FILE_NAMES,
    DEFAULT_EXCLUDED_DIRS,
    DEFAULT_EXTENSIONS,
    MAX_FILE_SIZE,
    PYPROJECT_TOOL_TABLE,
)
from .core.exceptions import InvalidConfigError, MissingConfigError
from .rules import RULES
from .rules.base import Severity

logger = logging.getLogger(__name__)


def _default_rules() -> dict[str, Severity]:
    return {rule_id: Severity.ERROR for rule_id in RULES}


class LintConfig(BaseModel):
    """Validated lint configuration.

    Attributes:
        rules: Severity per rule id.  Rules not listed keep their default.
        extensions: File extensions picked up when walking directories.
        exclude: Directory names never descended into.
        max_file_size: Files larger than this many bytes are skipped.
    """

    rules: dict[str, Severity] = Field(default_factory=_default_rules)
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDED_DIRS))
    max_file_size: int = Field(default=MAX_FILE_SIZE, gt=0)

    @field_validator("rules", mode="before")
    @classmethod
    def _parse_rules(cls, value: Any) -> dict[str, Severity]:
        if not isinstance(value, dict):
            raise ValueError("'rules' must be a mapping of rule id to severity")

        rules = _default_rules()
        for rule_id, setting in value.items():
            if rule_id not in RULES:
                raise ValueError(f"Unknown rule: {rule_id!r}")
            if isinstance(setting, list):
                if not setting:
                    raise ValueError(f"Empty setting for rule {rule_id!r}")
                schema = RULES[rule_id].meta.schema
                if len(setting) > 1 and not schema:
                    raise ValueError(f"Rule {rule_id!r} does not accept options")
                setting = setting[0]
            rules[rule_id] = Severity.parse(setting)
        return rules

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in value]

    def enabled_rules(self) -> dict[str, Severity]:
        """Rules whose severity is not ``off``, in registry order."""
        return {
            rule_id: severity
            for rule_id, severity in self.rules.items()
            if severity is not Severity.OFF
        }

    def with_overrides(self, overrides: dict[str, str]) -> LintConfig:
        """Return a copy with some rule severities replaced."""
        merged: dict[str, Any] = {k: v.value for k, v in self.rules.items()}
        merged.update(overrides)
        return from_mapping({**self.model_dump(mode="json"), "rules": merged})


def from_mapping(data: dict[str, Any], source: str = "<config>") -> LintConfig:
    """Validate a decoded configuration mapping.

    Raises:
        InvalidConfigError: If the mapping does not validate.
    """
    try:
        return LintConfig.model_validate(data)
    except ValidationError as e:
        raise InvalidConfigError(f"Invalid configuration in {source}: {e}") from e


def load_config(path: str | Path) -> LintConfig:
    """Load configuration from a JSON or TOML file.

    Raises:
        MissingConfigError: If *path* does not exist, or is a
            ``pyproject.toml`` without a ``[tool.amdguard]`` table.
        InvalidConfigError: If the file cannot be decoded or validated.
    """
    path = Path(path)
    if not path.is_file():
        raise MissingConfigError(f"Configuration file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidConfigError(f"Cannot read {path}: {e}") from e

    if path.suffix == ".toml":
        try:
            data = toml.loads(content)
        except toml.TomlDecodeError as e:
            raise InvalidConfigError(f"Invalid TOML in {path}: {e}") from e
        if path.name == "pyproject.toml":
            table = data.get("tool", {}).get(PYPROJECT_TOOL_TABLE)
            if table is None:
                raise MissingConfigError(
                    f"No [tool.{PYPROJECT_TOOL_TABLE}] table in {path}"
                )
            data = table
    else:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise InvalidConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidConfigError(f"Configuration in {path} must be a table/object")

    logger.debug(f"Loaded configuration from {path}")
    return from_mapping(data, source=str(path))


def discover_config(start: str | Path) -> LintConfig:
    """Find the nearest configuration file at or above *start*.

    Falls back to the defaults when nothing is found.
    """
    start = Path(start).resolve()
    directory = start if start.is_dir() else start.parent

    for candidate_dir in (directory, *directory.parents):
        for name in CONFIG_FILE_NAMES:
            candidate = candidate_dir / name
            if not candidate.is_file():
                continue
            try:
                return load_config(candidate)
            except MissingConfigError:
                # pyproject.toml without our table
                continue

    logger.debug(f"No configuration found above {start}, using defaults")
    return LintConfig()
