"""
Syntax Model

Language-neutral syntax tree consumed by funclint rules.
Frontends (python_frontend, ast_serde) build these; rules only read them.

Positions are character offsets into SourceFile.text. Line numbers come
from the file's LineMap and are 0-indexed.
"""

import re
from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple


class SyntaxKind(Enum):
    """Kinds of syntax nodes."""
    SOURCE_FILE = "source_file"
    FUNCTION_DECLARATION = "function_declaration"
    METHOD_DECLARATION = "method_declaration"
    ARROW_FUNCTION = "arrow_function"
    CONSTRUCTOR = "constructor"
    CLASS_DECLARATION = "class_declaration"
    CALL_EXPRESSION = "call_expression"
    IDENTIFIER = "identifier"
    PROPERTY_ACCESS = "property_access"     # a.b.c (name holds the trailing 'c')
    OTHER = "other"                          # anything the rules don't care about

    @classmethod
    def from_name(cls, value: str) -> "SyntaxKind":
        """Look up a kind by its serialized name, falling back to OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


FUNCTION_LIKE_KINDS = frozenset({
    SyntaxKind.FUNCTION_DECLARATION,
    SyntaxKind.METHOD_DECLARATION,
    SyntaxKind.ARROW_FUNCTION,
    SyntaxKind.CONSTRUCTOR,
})


@dataclass(frozen=True)
class TextRange:
    """Half-open [start, end) span of character offsets."""
    start: int
    end: int


@dataclass
class SyntaxNode:
    """A node in the syntax tree."""
    kind: SyntaxKind = SyntaxKind.OTHER
    start: int = 0
    end: int = 0
    name: Optional[str] = None
    body: Optional[TextRange] = None
    children: List["SyntaxNode"] = field(default_factory=list)

    # Call expressions only; both also appear in children
    expression: Optional["SyntaxNode"] = field(default=None, repr=False)
    arguments: List["SyntaxNode"] = field(default_factory=list, repr=False)

    # Arena numbering, assigned by SourceFile
    index: int = field(default=-1, compare=False)
    last_descendant: int = field(default=-1, compare=False)

    def __repr__(self):
        label = f" {self.name!r}" if self.name else ""
        return f"{self.kind.name}{label}[{self.start}:{self.end}]"

    def is_function_like(self) -> bool:
        return self.kind in FUNCTION_LIKE_KINDS

    def walk(self) -> Iterator["SyntaxNode"]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


_LINE_BREAK = re.compile(r"\r\n|\r|\n|\u2028|\u2029")


class LineMap:
    """
    Decomposes character offsets into 0-indexed (line, character) pairs.

    Usage:
        line_map = LineMap(text)
        line, character = line_map.line_and_character(offset)
    """

    def __init__(self, text: str):
        self.length = len(text)
        self.line_starts = [0] + [m.end() for m in _LINE_BREAK.finditer(text)]

    def line_and_character(self, offset: int) -> Tuple[int, int]:
        offset = max(0, min(offset, self.length))
        line = bisect_right(self.line_starts, offset) - 1
        return line, offset - self.line_starts[line]

    def line_of(self, offset: int) -> int:
        return self.line_and_character(offset)[0]

    @property
    def line_count(self) -> int:
        return len(self.line_starts)


def number_nodes(root: SyntaxNode) -> int:
    """
    Assign pre-order arena indices to every node under root.

    After numbering, a node's subtree is exactly the index range
    [node.index, node.last_descendant]. Returns the node count.
    """
    counter = 0

    def visit(node: SyntaxNode) -> None:
        nonlocal counter
        node.index = counter
        counter += 1
        for child in node.children:
            visit(child)
        node.last_descendant = counter - 1

    visit(root)
    return counter


@dataclass
class SourceFile:
    """A parsed file: its text, its tree and its position map."""
    filename: str
    text: str
    root: SyntaxNode
    node_count: int = field(default=0, init=False, compare=False)
    line_map: LineMap = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self.line_map = LineMap(self.text)
        self.node_count = number_nodes(self.root)

    def get_line_and_character_of_position(self, offset: int) -> Tuple[int, int]:
        return self.line_map.line_and_character(offset)

    def walk(self) -> Iterator[SyntaxNode]:
        return self.root.walk()

    def nodes_of_kind(self, *kinds: SyntaxKind) -> List[SyntaxNode]:
        """All nodes of the given kinds, in source order."""
        wanted = set(kinds)
        return [n for n in self.walk() if n.kind in wanted]
