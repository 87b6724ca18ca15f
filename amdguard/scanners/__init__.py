"""Source scanners: parsing hosts and result models."""

from .javascript import ASTEngine, ParsedAST

__all__ = [
    "ASTEngine",
    "ParsedAST",
]
