"""Core utilities shared by the scanner, rule and host layers."""

from .exceptions import (
    AmdGuardError,
    ConfigurationError,
    FileTooLargeError,
    InvalidConfigError,
    MissingConfigError,
    RuleError,
    ScannerError,
    SourceParseError,
    UnknownRuleError,
    UnsupportedFileTypeError,
)

__all__ = [
    "AmdGuardError",
    "ConfigurationError",
    "FileTooLargeError",
    "InvalidConfigError",
    "MissingConfigError",
    "RuleError",
    "ScannerError",
    "SourceParseError",
    "UnknownRuleError",
    "UnsupportedFileTypeError",
]
