"""
Rule base types: the failure record and the rule interface the runner drives.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from funclint.syntax.nodes import SourceFile, SyntaxNode


@dataclass
class RuleFailure:
    """A single violation found by a rule."""
    rule_name: str
    filename: str
    start: int              # character offsets of the flagged range
    end: int
    line: int               # 0-indexed, from the source file's line map
    character: int
    message: str
    length: int = 0         # measured value that triggered the failure
    node: Optional[SyntaxNode] = field(default=None, repr=False, compare=False)

    def __str__(self):
        return f"{self.filename}:{self.line + 1}:{self.character + 1}: [{self.rule_name}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.rule_name,
            "file": self.filename,
            "start": self.start,
            "end": self.end,
            "line": self.line + 1,
            "column": self.character + 1,
            "message": self.message,
            "length": self.length,
        }


class AbstractRule:
    """
    Base class for rules.

    A rule instance is built from the raw options list of one
    configuration entry and applied to one source file at a time.
    """

    RULE_NAME: str = ""
    DESCRIPTION: str = ""

    def __init__(self, options: Sequence[Any] = ()):
        self.options = list(options)

    def apply(self, source_file: SourceFile) -> List[RuleFailure]:
        """Check a source file and return any failures found."""
        raise NotImplementedError


def create_failure(rule_name: str, source_file: SourceFile, node: SyntaxNode,
                   message: str, length: int = 0) -> RuleFailure:
    """Build a failure anchored to the node's full source range."""
    line, character = source_file.get_line_and_character_of_position(node.start)
    return RuleFailure(
        rule_name=rule_name,
        filename=source_file.filename,
        start=node.start,
        end=node.end,
        line=line,
        character=character,
        message=message,
        length=length,
        node=node,
    )
