"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from funclint.syntax.nodes import SourceFile, SyntaxKind, SyntaxNode, TextRange


# =============================================================================
# TREE BUILDING HELPERS
# =============================================================================

def block(line_breaks: int, statement: str = "x();") -> str:
    """A brace block whose closing brace sits `line_breaks` lines below the opening one."""
    if line_breaks == 0:
        return "{ " + statement + " }"
    return "{\n" + f"  {statement}\n" * (line_breaks - 1) + "}"


class TreeText:
    """
    Builds hand-made syntax trees over a piece of source text.

    Nodes are located by searching for a header string; ranges extend to
    the matching closing brace (declarations) or parenthesis (calls).
    """

    def __init__(self, text: str):
        self.text = text

    def find(self, needle: str, occurrence: int = 0) -> int:
        pos = -1
        for _ in range(occurrence + 1):
            pos = self.text.index(needle, pos + 1)
        return pos

    def matching(self, open_pos: int) -> int:
        """Offset just past the bracket matching the one at open_pos."""
        opener = self.text[open_pos]
        closer = {"{": "}", "(": ")"}[opener]
        depth = 0
        for i in range(open_pos, len(self.text)):
            ch = self.text[i]
            if ch == opener:
                depth += 1
            elif ch == closer:
                depth -= 1
                if depth == 0:
                    return i + 1
        raise ValueError(f"unbalanced {opener} at {open_pos}")

    def func(self, kind: SyntaxKind, header: str, name: str = None, children=(),
             occurrence: int = 0, has_body: bool = True) -> SyntaxNode:
        start = self.find(header, occurrence)
        if not has_body:
            end = self.text.index(";", start) + 1
            return SyntaxNode(kind=kind, start=start, end=end, name=name, children=list(children))
        body_start = self.text.index("{", start)
        body_end = self.matching(body_start)
        return SyntaxNode(
            kind=kind,
            start=start,
            end=body_end,
            name=name,
            body=TextRange(body_start, body_end),
            children=list(children),
        )

    def klass(self, header: str, name: str, children=(), occurrence: int = 0) -> SyntaxNode:
        start = self.find(header, occurrence)
        end = self.matching(self.text.index("{", start))
        return SyntaxNode(kind=SyntaxKind.CLASS_DECLARATION, start=start, end=end,
                          name=name, children=list(children))

    def call(self, callee: str, arguments=(), occurrence: int = 0) -> SyntaxNode:
        """Call whose callee text is `callee` (dotted names become property access)."""
        start = self.find(callee + "(", occurrence)
        end = self.matching(start + len(callee))
        if "." in callee:
            expression = SyntaxNode(kind=SyntaxKind.PROPERTY_ACCESS, start=start,
                                    end=start + len(callee), name=callee.rsplit(".", 1)[1])
        else:
            expression = SyntaxNode(kind=SyntaxKind.IDENTIFIER, start=start,
                                    end=start + len(callee), name=callee)
        arguments = list(arguments)
        return SyntaxNode(
            kind=SyntaxKind.CALL_EXPRESSION,
            start=start,
            end=end,
            children=[expression] + arguments,
            expression=expression,
            arguments=arguments,
        )

    def other(self, needle: str, occurrence: int = 0) -> SyntaxNode:
        start = self.find(needle, occurrence)
        return SyntaxNode(kind=SyntaxKind.OTHER, start=start, end=start + len(needle))

    def source_file(self, *children: SyntaxNode, filename: str = "test.ts") -> SourceFile:
        root = SyntaxNode(kind=SyntaxKind.SOURCE_FILE, start=0, end=len(self.text),
                          children=list(children))
        return SourceFile(filename=filename, text=self.text, root=root)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def clean_config_env(monkeypatch, tmp_path):
    """Isolate config discovery from the real environment and home directory."""
    from funclint import config as config_module

    monkeypatch.delenv(config_module.CONFIG_ENV_VAR, raising=False)
    monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [tmp_path / "funclint.yaml"])
    return tmp_path
