"""JavaScript / TypeScript parsing and result models.

This package turns JS/TS source into the ESTree-shaped node model that
lint rules analyse.  tree-sitter does the parsing; ``ASTEngine`` lowers
its concrete tree into ``nodes.Program``.

Quick start::

    from amdguard.scanners.javascript import ASTEngine

    engine = ASTEngine()
    program = engine.parse_program("define(function () { var x; });")
    print(program.body[0].kind)
"""

from .ast_engine import ASTEngine, ParsedAST
from .models import AnalysisResult, Diagnostic, FileReport
from .nodes import Program, SourceSpan, from_estree

__all__ = [
    "ASTEngine",
    "AnalysisResult",
    "Diagnostic",
    "FileReport",
    "ParsedAST",
    "Program",
    "SourceSpan",
    "from_estree",
]
