"""
Python Frontend

Lowers Python source into the funclint syntax model using the stdlib
ast module, so the rules can run over .py files.

Mapping:
    def / async def in a class body     -> METHOD_DECLARATION
    __init__ in a class body            -> CONSTRUCTOR
    any other def                       -> FUNCTION_DECLARATION
    lambda                              -> ARROW_FUNCTION
    class                               -> CLASS_DECLARATION
    call                                -> CALL_EXPRESSION
    name / attribute                    -> IDENTIFIER / PROPERTY_ACCESS

A def's body runs from the first statement to the end of the last one,
so a single-statement body spans zero line breaks. Node ranges start at
the def/class keyword; decorators are children but outside the range.
"""

import ast
import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

from funclint.errors import SourceParseError
from funclint.syntax.nodes import SourceFile, SyntaxKind, SyntaxNode, TextRange

logger = logging.getLogger(__name__)

_FunctionDef = (ast.FunctionDef, ast.AsyncFunctionDef)

# Line breaks as the Python tokenizer sees them
_PY_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class _OffsetTable:
    """Converts ast (1-based line, UTF-8 byte column) to character offsets."""

    def __init__(self, text: str):
        self.line_starts = [0] + [m.end() for m in _PY_LINE_BREAK.finditer(text)]
        self.lines = [
            text[start:end]
            for start, end in zip(self.line_starts, self.line_starts[1:] + [len(text)])
        ]
        self.length = len(text)

    def offset(self, lineno: int, col_offset: int) -> int:
        index = lineno - 1
        if index < 0:
            return 0
        if index >= len(self.lines):
            return self.length
        prefix = self.lines[index].encode("utf-8")[:col_offset]
        return self.line_starts[index] + len(prefix.decode("utf-8", errors="ignore"))


def _has_position(node: ast.AST) -> bool:
    return getattr(node, "lineno", None) is not None and getattr(node, "col_offset", None) is not None


class _Lowering:
    """Single-use converter from an ast.Module to a SyntaxNode tree."""

    def __init__(self, text: str):
        self.table = _OffsetTable(text)

    def span(self, node: ast.AST) -> Tuple[int, int]:
        start = self.table.offset(node.lineno, node.col_offset)
        end_lineno = getattr(node, "end_lineno", None)
        end_col = getattr(node, "end_col_offset", None)
        if end_lineno is None or end_col is None:
            return start, start
        return start, self.table.offset(end_lineno, end_col)

    def lower_module(self, module: ast.Module) -> SyntaxNode:
        children = self.lower_children(module, in_class_body=False)
        return SyntaxNode(
            kind=SyntaxKind.SOURCE_FILE,
            start=0,
            end=self.table.length,
            children=children,
        )

    def lower_children(self, node: ast.AST, in_class_body: bool) -> List[SyntaxNode]:
        result = []
        for child in ast.iter_child_nodes(node):
            result.extend(self.lower(child, in_class_body))
        return result

    def lower(self, node: ast.AST, in_class_body: bool = False) -> List[SyntaxNode]:
        """
        Lower one ast node.

        Returns a list because position-less helper nodes (ast.arguments,
        comprehensions, operators) are spliced into their parent.
        """
        if not _has_position(node):
            return self.lower_children(node, in_class_body=False)

        if isinstance(node, _FunctionDef):
            return [self.lower_function(node, in_class_body)]
        if isinstance(node, ast.Lambda):
            return [self.lower_lambda(node)]
        if isinstance(node, ast.ClassDef):
            return [self.lower_class(node)]
        if isinstance(node, ast.Call):
            return [self.lower_call(node)]

        start, end = self.span(node)
        if isinstance(node, ast.Name):
            return [SyntaxNode(kind=SyntaxKind.IDENTIFIER, start=start, end=end, name=node.id)]
        if isinstance(node, ast.Attribute):
            return [SyntaxNode(
                kind=SyntaxKind.PROPERTY_ACCESS,
                start=start,
                end=end,
                name=node.attr,
                children=self.lower(node.value),
            )]

        return [SyntaxNode(
            kind=SyntaxKind.OTHER,
            start=start,
            end=end,
            children=self.lower_children(node, in_class_body=False),
        )]

    def lower_function(self, node: Union[ast.FunctionDef, ast.AsyncFunctionDef],
                       in_class_body: bool) -> SyntaxNode:
        if in_class_body and node.name == "__init__":
            kind = SyntaxKind.CONSTRUCTOR
        elif in_class_body:
            kind = SyntaxKind.METHOD_DECLARATION
        else:
            kind = SyntaxKind.FUNCTION_DECLARATION

        start, end = self.span(node)
        body_start, _ = self.span(node.body[0])
        _, body_end = self.span(node.body[-1])
        return SyntaxNode(
            kind=kind,
            start=start,
            end=end,
            name=node.name,
            body=TextRange(body_start, body_end),
            children=self.lower_children(node, in_class_body=False),
        )

    def lower_lambda(self, node: ast.Lambda) -> SyntaxNode:
        start, end = self.span(node)
        body_start, body_end = self.span(node.body)
        return SyntaxNode(
            kind=SyntaxKind.ARROW_FUNCTION,
            start=start,
            end=end,
            body=TextRange(body_start, body_end),
            children=self.lower_children(node, in_class_body=False),
        )

    def lower_class(self, node: ast.ClassDef) -> SyntaxNode:
        start, end = self.span(node)
        children = []
        for field_name, value in ast.iter_fields(node):
            # Only direct statements of the class body are members
            in_body = field_name == "body"
            items = value if isinstance(value, list) else [value]
            for item in items:
                if isinstance(item, ast.AST):
                    children.extend(self.lower(item, in_class_body=in_body))
        return SyntaxNode(
            kind=SyntaxKind.CLASS_DECLARATION,
            start=start,
            end=end,
            name=node.name,
            children=children,
        )

    def lower_call(self, node: ast.Call) -> SyntaxNode:
        start, end = self.span(node)
        expression = self.lower(node.func)
        argument_sources = list(node.args) + [kw.value for kw in node.keywords]
        argument_sources.sort(key=lambda a: (a.lineno, a.col_offset))
        arguments = []
        for source in argument_sources:
            arguments.extend(self.lower(source))
        return SyntaxNode(
            kind=SyntaxKind.CALL_EXPRESSION,
            start=start,
            end=end,
            children=expression + arguments,
            expression=expression[0] if expression else None,
            arguments=arguments,
        )


def parse_python_source(source: str, filename: str = "<unknown>") -> SourceFile:
    """Parse Python source text into a SourceFile."""
    try:
        module = ast.parse(source, filename=filename)
    except SyntaxError as e:
        raise SourceParseError(e.msg or "invalid syntax", filename, e.lineno) from e
    except ValueError as e:
        # e.g. source containing null bytes
        raise SourceParseError(str(e), filename) from e

    root = _Lowering(source).lower_module(module)
    source_file = SourceFile(filename=filename, text=source, root=root)
    logger.debug("Lowered %s: %d nodes", filename, source_file.node_count)
    return source_file


def read_source_text(filepath: Union[str, Path]) -> str:
    """Read a text file. Handles encoding fallback."""
    # Try UTF-8 with BOM first, then UTF-8, then latin-1 (which always succeeds)
    source: Optional[str] = None
    for encoding in ['utf-8-sig', 'utf-8', 'latin-1']:
        try:
            with open(filepath, 'r', encoding=encoding, newline='') as f:
                source = f.read()
            break
        except UnicodeDecodeError:
            continue
    return source


def parse_python_file(filepath: Union[str, Path]) -> SourceFile:
    """Parse a Python file into a SourceFile."""
    return parse_python_source(read_source_text(filepath), str(filepath))
