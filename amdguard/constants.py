"""Constants and configuration values for amdguard.

This module centralizes magic numbers and configuration values
that are used across the codebase for easier maintenance.
"""

import os

# =============================================================================
# File Selection
# =============================================================================

# Source extensions mapped to the parser language used for them.
# ".json" files are ESTree dumps produced by an external parser.
LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

ESTREE_EXTENSION = ".json"

DEFAULT_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs")

# Directories never descended into
DEFAULT_EXCLUDED_DIRS = (
    ".git",
    "node_modules",
    "bower_components",
    "dist",
    "build",
    "coverage",
    ".venv",
    "__pycache__",
)

# Maximum size of a single source file (5MB)
MAX_FILE_SIZE = int(os.environ.get("AMDGUARD_MAX_FILE_SIZE", 5 * 1024 * 1024))


# =============================================================================
# Configuration Files
# =============================================================================

# Searched in this order in every directory from the start dir upwards
CONFIG_FILE_NAMES = (".amdguard.json", "amdguard.toml", "pyproject.toml")

PYPROJECT_TOOL_TABLE = "amdguard"


# =============================================================================
# Server
# =============================================================================

# MCP server port
MCP_DEFAULT_PORT = int(os.environ.get("MCP_PORT", 3000))
