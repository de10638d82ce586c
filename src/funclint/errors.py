"""
Error types raised by funclint.

Violations found by a rule are not errors; they are returned as
RuleFailure records. The classes here cover the cases where a rule
or a tree frontend cannot do its job at all.
"""

from typing import Optional


class FunclintError(Exception):
    """Base class for all funclint errors."""


class RuleError(FunclintError):
    """Error that aborts a single rule's run on a single file."""
    def __init__(self, message: str, rule_name: Optional[str] = None):
        self.rule_name = rule_name
        self.message = message
        if rule_name:
            super().__init__(f"[{rule_name}] {message}")
        else:
            super().__init__(message)


class ConfigurationError(RuleError):
    """Invalid rule options or configuration file."""


class InternalConsistencyError(RuleError):
    """A rule reached a state its dispatch should make impossible."""


class SourceParseError(FunclintError):
    """A frontend could not build a syntax tree for a file."""
    def __init__(self, message: str, filename: str = "<unknown>", line: int = None):
        self.filename = filename
        self.line = line
        self.message = message
        if line:
            super().__init__(f"Parse error in {filename} at line {line}: {message}")
        else:
            super().__init__(f"Parse error in {filename}: {message}")
