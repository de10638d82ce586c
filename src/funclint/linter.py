"""
funclint Runner

Applies the configured rules to source files and collects failures.

A RuleError raised by one rule is recorded against that rule and file;
the remaining rules still run on the file. Files whose tree cannot be
built are recorded as parse errors.

Usage:
    linter = Linter(load_config())
    result = linter.lint_paths([Path("src")], recursive=True)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from funclint.config import LintConfig, should_exclude_path
from funclint.errors import RuleError, SourceParseError
from funclint.rules import RULES, RuleFailure
from funclint.syntax.ast_serde import is_tree_document, load_source_file
from funclint.syntax.nodes import SourceFile
from funclint.syntax.python_frontend import parse_python_file

logger = logging.getLogger(__name__)

# File suffix -> frontend that builds its SourceFile
FRONTENDS: Dict[str, Callable[[Path], SourceFile]] = {
    ".py": parse_python_file,
    ".json": load_source_file,
}

# File suffix -> check a file found by a directory scan must pass to be linted.
# Files named explicitly are always handed to their frontend.
DISCOVERY_FILTERS: Dict[str, Callable[[Path], bool]] = {
    ".json": is_tree_document,
}


@dataclass
class ErrorReport:
    """A rule that could not run, or a file that could not be parsed."""
    filename: str
    message: str
    error_type: str
    rule_name: Optional[str] = None     # None for parse errors

    def __str__(self):
        owner = f"[{self.rule_name}] " if self.rule_name else ""
        return f"{self.filename}: {owner}{self.error_type}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.filename,
            "rule": self.rule_name,
            "error_type": self.error_type,
            "message": self.message,
        }


@dataclass
class LintResult:
    """Failures and errors collected over one or more files."""
    failures: List[RuleFailure] = field(default_factory=list)
    errors: List[ErrorReport] = field(default_factory=list)
    files_checked: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures and not self.errors

    def merge(self, other: "LintResult") -> None:
        self.failures.extend(other.failures)
        self.errors.extend(other.errors)
        self.files_checked += other.files_checked


class Linter:
    """
    Runs the enabled rules from a LintConfig.
    """

    def __init__(self, config: Optional[LintConfig] = None):
        self.config = config or LintConfig()

    def lint_source_file(self, source_file: SourceFile) -> LintResult:
        """Apply every enabled rule to an already-parsed file."""
        result = LintResult(files_checked=1)
        for rule_name, options in self.config.rules.items():
            rule_cls = RULES.get(rule_name)
            if rule_cls is None:
                logger.warning("Unknown rule '%s' - skipping", rule_name)
                continue
            try:
                rule = rule_cls(options)
                result.failures.extend(rule.apply(source_file))
            except RuleError as e:
                logger.error("Rule '%s' failed on %s: %s", rule_name, source_file.filename, e.message)
                result.errors.append(ErrorReport(
                    filename=source_file.filename,
                    message=e.message,
                    error_type=type(e).__name__,
                    rule_name=rule_name,
                ))
        return result

    def lint_file(self, file_path: Path) -> LintResult:
        """Parse a file with the frontend for its suffix and lint it."""
        frontend = FRONTENDS.get(file_path.suffix)
        if frontend is None:
            logger.warning("No frontend for %s - skipping", file_path)
            return LintResult()
        try:
            source_file = frontend(file_path)
        except (SourceParseError, OSError) as e:
            logger.error("Could not parse %s: %s", file_path, e)
            return LintResult(errors=[ErrorReport(
                filename=str(file_path),
                message=str(e),
                error_type=type(e).__name__,
            )])
        return self.lint_source_file(source_file)

    def iter_files(self, paths: Iterable[Path], recursive: bool = True) -> Iterable[Path]:
        """Expand files and directories into the source files to lint."""
        for path in paths:
            if path.is_file():
                yield path
            elif path.is_dir():
                glob_method = path.rglob if recursive else path.glob
                for file_path in sorted(glob_method("*")):
                    if not file_path.is_file():
                        continue
                    if file_path.suffix not in self.config.source_exts:
                        continue
                    if should_exclude_path(self.config, file_path.relative_to(path)):
                        continue
                    accept = DISCOVERY_FILTERS.get(file_path.suffix)
                    if accept is not None and not accept(file_path):
                        logger.debug("Skipping %s - not a tree document", file_path)
                        continue
                    yield file_path
            else:
                logger.warning("Path not found: %s", path)

    def lint_paths(self, paths: Iterable[Path], recursive: bool = True) -> LintResult:
        """Lint files and directories, returning failures sorted by location."""
        result = LintResult()
        for file_path in self.iter_files(paths, recursive):
            result.merge(self.lint_file(file_path))

        result.failures.sort(key=lambda f: (f.filename, f.start))
        logger.debug("Checked %d file(s): %d failure(s), %d error(s)",
                     result.files_checked, len(result.failures), len(result.errors))
        return result
