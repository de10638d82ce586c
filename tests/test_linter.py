"""
Tests for the runner that applies rules to files.
"""

from pathlib import Path

from funclint.config import LintConfig
from funclint.errors import InternalConsistencyError
from funclint.linter import Linter
from funclint.rules import RULES, AbstractRule
from funclint.syntax.ast_serde import serialize_source_file
from funclint.syntax.python_frontend import parse_python_source

RULE = "max-func-body-length"

LONG_FUNCTION = "def long():\n    a = 1\n    b = 2\n    c = 3\n    return a\n"
SHORT_FUNCTION = "def short():\n    return 1\n"


class ExplodingRule(AbstractRule):
    RULE_NAME = "exploding"

    def apply(self, source_file):
        raise InternalConsistencyError("dispatch reached an impossible state", self.RULE_NAME)


class TestRuleIsolation:
    """A failing rule does not stop the other rules on the same file."""

    def test_rule_error_recorded(self, monkeypatch):
        monkeypatch.setitem(RULES, "exploding", ExplodingRule)
        linter = Linter(LintConfig(rules={"exploding": [], RULE: [2]}))
        result = linter.lint_source_file(parse_python_source(LONG_FUNCTION, "long.py"))

        assert [f.rule_name for f in result.failures] == [RULE]
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.rule_name == "exploding"
        assert error.error_type == "InternalConsistencyError"
        assert error.filename == "long.py"
        assert not result.ok

    def test_configuration_error_recorded(self):
        linter = Linter(LintConfig(rules={RULE: [{"ignore-parameters-to-function-regex": "["}]}))
        result = linter.lint_source_file(parse_python_source(LONG_FUNCTION, "long.py"))
        assert result.failures == []
        assert [e.error_type for e in result.errors] == ["ConfigurationError"]
        assert result.errors[0].rule_name == RULE

    def test_clean_file(self):
        linter = Linter(LintConfig(rules={RULE: [2]}))
        result = linter.lint_source_file(parse_python_source(SHORT_FUNCTION, "short.py"))
        assert result.ok
        assert result.files_checked == 1


class TestFiles:
    """Frontend selection and directory scanning."""

    def make_tree(self, root: Path):
        (root / "pkg").mkdir()
        (root / "node_modules").mkdir()
        (root / "long.py").write_text(LONG_FUNCTION, encoding="utf-8")
        (root / "pkg" / "nested.py").write_text(LONG_FUNCTION, encoding="utf-8")
        (root / "node_modules" / "vendored.py").write_text(LONG_FUNCTION, encoding="utf-8")
        (root / "notes.txt").write_text("not code", encoding="utf-8")
        (root / "broken.py").write_text("def broken(:\n", encoding="utf-8")

    def test_recursive_scan(self, tmp_path):
        self.make_tree(tmp_path)
        result = Linter(LintConfig(rules={RULE: [2]})).lint_paths([tmp_path], recursive=True)

        assert sorted(Path(f.filename).name for f in result.failures) == ["long.py", "nested.py"]
        assert [Path(e.filename).name for e in result.errors] == ["broken.py"]
        assert result.errors[0].rule_name is None
        assert result.files_checked == 2

    def test_non_recursive_scan(self, tmp_path):
        self.make_tree(tmp_path)
        result = Linter(LintConfig(rules={RULE: [2]})).lint_paths([tmp_path], recursive=False)
        assert [Path(f.filename).name for f in result.failures] == ["long.py"]

    def test_json_tree_file(self, tmp_path):
        source_file = parse_python_source(LONG_FUNCTION, "from_parser.py")
        path = tmp_path / "tree.json"
        path.write_bytes(serialize_source_file(source_file))

        result = Linter(LintConfig(rules={RULE: [2]})).lint_file(path)
        assert [f.filename for f in result.failures] == ["from_parser.py"]

    def test_unsupported_file_skipped(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("x", encoding="utf-8")
        result = Linter().lint_file(path)
        assert result.ok
        assert result.files_checked == 0

    def test_failures_sorted_by_location(self, tmp_path):
        (tmp_path / "b.py").write_text(LONG_FUNCTION, encoding="utf-8")
        (tmp_path / "a.py").write_text(LONG_FUNCTION + "\n\n" + LONG_FUNCTION.replace("long", "longer"),
                                       encoding="utf-8")
        result = Linter(LintConfig(rules={RULE: [2]})).lint_paths([tmp_path / "b.py", tmp_path / "a.py"])
        assert [(Path(f.filename).name, f.node.name) for f in result.failures] == [
            ("a.py", "long"),
            ("a.py", "longer"),
            ("b.py", "long"),
        ]

    def test_ordinary_json_skipped_in_directory_scan(self, tmp_path):
        (tmp_path / "package.json").write_text('{"name": "app", "private": true}', encoding="utf-8")
        (tmp_path / "tsconfig.json").write_text("{\n  // comments\n}\n", encoding="utf-8")
        (tmp_path / "short.py").write_text(SHORT_FUNCTION, encoding="utf-8")
        tree = parse_python_source(LONG_FUNCTION, "from_parser.py")
        (tmp_path / "tree.json").write_bytes(serialize_source_file(tree))

        result = Linter(LintConfig(rules={RULE: [2]})).lint_paths([tmp_path])
        assert result.errors == []
        assert result.files_checked == 2
        assert [f.filename for f in result.failures] == ["from_parser.py"]

    def test_explicit_ordinary_json_still_reported(self, tmp_path):
        path = tmp_path / "package.json"
        path.write_text('{"name": "app"}', encoding="utf-8")
        result = Linter(LintConfig(rules={RULE: [2]})).lint_paths([path])
        assert [e.error_type for e in result.errors] == ["SourceParseError"]
        assert not result.ok
