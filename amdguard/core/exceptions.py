"""Custom exception hierarchy for amdguard.

The analysis core never raises; these exceptions belong to the host
layers around it (file loading, configuration, rule lookup).
"""


class AmdGuardError(Exception):
    """Base exception for all amdguard errors.

    All custom exceptions should inherit from this class to allow
    callers to catch all amdguard-specific errors with a single
    except clause when appropriate.
    """
    pass


# =============================================================================
# Scanner Errors
# =============================================================================

class ScannerError(AmdGuardError):
    """Base exception for errors while loading or parsing a source file."""
    pass


class SourceParseError(ScannerError):
    """Source text or an ESTree dump could not be parsed."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.line = line
        self.column = column


class FileTooLargeError(ScannerError):
    """File exceeds maximum allowed size for scanning."""
    pass


class UnsupportedFileTypeError(ScannerError):
    """File type is not supported for scanning."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(AmdGuardError):
    """Base exception for configuration errors."""
    pass


class InvalidConfigError(ConfigurationError):
    """Configuration file is invalid or malformed."""
    pass


class MissingConfigError(ConfigurationError):
    """Required configuration is missing."""
    pass


# =============================================================================
# Rule Errors
# =============================================================================

class RuleError(AmdGuardError):
    """Base exception for rule registry errors."""
    pass


class UnknownRuleError(RuleError):
    """No rule is registered under the requested id."""

    def __init__(self, rule_id: str):
        super().__init__(f"Unknown rule: {rule_id!r}")
        self.rule_id = rule_id


