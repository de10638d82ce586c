"""
funclint.syntax - Syntax Model and Frontends

Language-neutral syntax tree used by the rules, plus the frontends that
build it from Python source or from JSON trees emitted by other parsers.
"""

from funclint.syntax.nodes import (
    SyntaxKind,
    SyntaxNode,
    SourceFile,
    TextRange,
    LineMap,
    FUNCTION_LIKE_KINDS,
    number_nodes,
)
from funclint.syntax.python_frontend import parse_python_source, parse_python_file
from funclint.syntax.ast_serde import (
    serialize_source_file,
    deserialize_source_file,
    load_source_file,
)

__all__ = [
    # Nodes
    "SyntaxKind",
    "SyntaxNode",
    "SourceFile",
    "TextRange",
    "LineMap",
    "FUNCTION_LIKE_KINDS",
    "number_nodes",
    # Frontends
    "parse_python_source",
    "parse_python_file",
    "serialize_source_file",
    "deserialize_source_file",
    "load_source_file",
]
