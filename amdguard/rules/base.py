"""Rule base class and rule metadata."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from ..scanners.javascript.models import Diagnostic
from ..scanners.javascript.nodes import Program


class Severity(str, Enum):
    """Severity a rule is configured at."""

    OFF = "off"
    WARN = "warn"
    ERROR = "error"

    @classmethod
    def parse(cls, value: Any) -> Severity:
        """Accept ``"off"|"warn"|"error"`` or ESLint's ``0|1|2``.

        Raises:
            ValueError: If *value* is neither.
        """
        if isinstance(value, bool):
            raise ValueError(f"Invalid severity: {value!r}")
        if isinstance(value, int):
            numeric = {0: cls.OFF, 1: cls.WARN, 2: cls.ERROR}
            if value in numeric:
                return numeric[value]
            raise ValueError(f"Invalid severity: {value!r}")
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid severity: {value!r}") from None
        raise ValueError(f"Invalid severity: {value!r}")


@dataclass(frozen=True)
class RuleDocs:
    description: str
    category: str
    recommended: bool = False


@dataclass(frozen=True)
class RuleMeta:
    """Static description of a rule.

    Attributes:
        docs: Description, category and whether the rule is recommended.
        schema: Accepted options; an empty list means the rule takes none.
        fixable: Kind of automatic fix offered, ``None`` for no fix.
    """

    docs: RuleDocs
    schema: list[Any] = field(default_factory=list)
    fixable: str | None = None


class Rule(ABC):
    """A lint rule, invoked once per file root.

    Subclasses must not keep per-file state on the instance; everything a
    check needs is derived from the ``program`` it receives.
    """

    rule_id: ClassVar[str]
    meta: ClassVar[RuleMeta]

    @abstractmethod
    def check(
        self,
        program: Program,
        *,
        file_path: str = "",
        severity: Severity = Severity.ERROR,
    ) -> list[Diagnostic]:
        """Return the diagnostics for *program* in source order."""
