"""
max-func-body-length

Flags functions, methods, constructors and arrow functions whose body
spans more line breaks than the configured maximum.

Options (applied in order, later entries overwrite earlier ones):
    50                                          fallback maximum for every kind
    {"func-body-length": 80,
     "arrow-body-length": 20,
     "method-body-length": 60,
     "ctor-body-length": 40,
     "ignore-parameters-to-function-regex": "^(describe|it)$"}

Arguments passed to a call whose callee name matches the ignore regex
are exempt, including every function nested inside those arguments.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Pattern, Sequence, Tuple

from funclint.errors import ConfigurationError, InternalConsistencyError
from funclint.rules.base import AbstractRule, RuleFailure, create_failure
from funclint.syntax.nodes import FUNCTION_LIKE_KINDS, SourceFile, SyntaxKind, SyntaxNode

logger = logging.getLogger(__name__)

RULE_NAME = "max-func-body-length"

FUNC_BODY_LENGTH = "func-body-length"
ARROW_BODY_LENGTH = "arrow-body-length"
METHOD_BODY_LENGTH = "method-body-length"
CTOR_BODY_LENGTH = "ctor-body-length"
IGNORE_PARAMETERS_TO_FUNCTION = "ignore-parameters-to-function-regex"

KIND_OPTION_KEYS = {
    SyntaxKind.FUNCTION_DECLARATION: FUNC_BODY_LENGTH,
    SyntaxKind.ARROW_FUNCTION: ARROW_BODY_LENGTH,
    SyntaxKind.METHOD_DECLARATION: METHOD_BODY_LENGTH,
    SyntaxKind.CONSTRUCTOR: CTOR_BODY_LENGTH,
}

KIND_LABELS = {
    SyntaxKind.FUNCTION_DECLARATION: "function",
    SyntaxKind.METHOD_DECLARATION: "method",
    SyntaxKind.ARROW_FUNCTION: "arrow function",
    SyntaxKind.CONSTRUCTOR: "constructor",
}

# (first_index, last_index) arena ranges, one per argument of a matching call
SuppressionFrame = Tuple[Tuple[int, int], ...]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class MaxFuncBodyLengthOptions:
    """Resolved thresholds and the ignore pattern."""
    max_body_length: Optional[float] = None
    kind_limits: Dict[SyntaxKind, Optional[float]] = field(default_factory=dict)
    ignore_parameters_to_function_regex: Optional[Pattern] = None

    @classmethod
    def parse(cls, options: Sequence[Any]) -> "MaxFuncBodyLengthOptions":
        """
        Build options from the raw entries of a configuration.

        Numbers set the fallback. Mappings assign all four per-kind
        maxima (a missing key resets that kind) and replace the ignore
        pattern when they carry a non-empty one. Anything else is ignored.

        Raises:
            ConfigurationError: If the ignore pattern does not compile.
        """
        result = cls()
        for opt in options:
            if _is_number(opt):
                result.max_body_length = opt
                continue

            if isinstance(opt, dict):
                for kind, key in KIND_OPTION_KEYS.items():
                    result.kind_limits[kind] = cls._limit_value(opt.get(key), key)
                regex = opt.get(IGNORE_PARAMETERS_TO_FUNCTION)
                if regex:
                    result.ignore_parameters_to_function_regex = cls._compile(regex)

        logger.debug("Parsed %s options: fallback=%s limits=%s ignore=%s",
                     RULE_NAME, result.max_body_length,
                     {k.value: v for k, v in result.kind_limits.items()},
                     result.ignore_parameters_to_function_regex)
        return result

    @staticmethod
    def _limit_value(value: Any, key: str) -> Optional[float]:
        if value is None or _is_number(value):
            return value
        logger.warning("Ignoring non-numeric value for '%s': %r", key, value)
        return None

    @staticmethod
    def _compile(regex: Any) -> Pattern:
        try:
            return re.compile(str(regex))
        except re.error as e:
            raise ConfigurationError(
                f"Invalid {IGNORE_PARAMETERS_TO_FUNCTION} pattern {regex!r}: {e}",
                RULE_NAME,
            ) from e

    def max_length_for(self, kind: SyntaxKind) -> Optional[float]:
        """Per-kind maximum if set and non-zero, else the fallback (may be None)."""
        if kind not in KIND_OPTION_KEYS:
            raise InternalConsistencyError(f"Unsupported node kind: {kind.name}", RULE_NAME)
        return self.kind_limits.get(kind) or self.max_body_length

    def is_function_too_long(self, kind: SyntaxKind, length: int) -> bool:
        max_length = self.max_length_for(kind)
        if max_length is None:
            return False
        return length > max_length


@dataclass
class TraversalContext:
    """State owned by one traversal of one file."""
    source_file: SourceFile
    options: MaxFuncBodyLengthOptions
    suppression: List[SuppressionFrame] = field(default_factory=list)
    class_names: List[str] = field(default_factory=list)
    failures: List[RuleFailure] = field(default_factory=list)

    def is_suppressed(self, node: SyntaxNode) -> bool:
        return any(
            first <= node.index <= last
            for frame in self.suppression
            for first, last in frame
        )

    @property
    def current_class_name(self) -> str:
        return self.class_names[-1] if self.class_names else ""


def get_function_name(call: SyntaxNode) -> str:
    """Callee name of a call: the identifier, or the trailing name of a.b.c."""
    callee = call.expression
    if callee is None:
        return ""
    if callee.kind in (SyntaxKind.IDENTIFIER, SyntaxKind.PROPERTY_ACCESS):
        return callee.name or ""
    return ""


def calc_body_length(node: SyntaxNode, source_file: SourceFile) -> int:
    """Line breaks spanned by the node's body; 0 when it has none."""
    if node.body is None:
        return 0
    start_line = source_file.line_map.line_of(node.body.start)
    end_line = source_file.line_map.line_of(node.body.end)
    return max(0, end_line - start_line)


def get_func_type_text(kind: SyntaxKind) -> str:
    try:
        return KIND_LABELS[kind]
    except KeyError:
        raise InternalConsistencyError(f"Unsupported node kind: {kind.name}", RULE_NAME) from None


def format_place_text(node: SyntaxNode, class_name: str) -> str:
    if node.kind in (SyntaxKind.METHOD_DECLARATION, SyntaxKind.FUNCTION_DECLARATION):
        return f" in {get_func_type_text(node.kind)} {node.name or ''}()"
    if node.kind is SyntaxKind.CONSTRUCTOR:
        return f" in class {class_name}"
    return ""


def format_limit(value: Optional[float]) -> str:
    """Whole-number floats print as integers (3.0 from YAML shows as 3)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_failure_text(node: SyntaxNode, length: int, max_length: Optional[float],
                        class_name: str = "") -> str:
    func_type_text = get_func_type_text(node.kind)
    place_text = format_place_text(node, class_name)
    return f"Max {func_type_text} body length exceeded{place_text} - max: {format_limit(max_length)}, actual: {length}"


def _visit(node: SyntaxNode, ctx: TraversalContext) -> None:
    hook = _HOOKS.get(node.kind)
    if hook is None:
        _visit_children(node, ctx)
    else:
        hook(node, ctx)


def _visit_children(node: SyntaxNode, ctx: TraversalContext) -> None:
    for child in node.children:
        _visit(child, ctx)


def _visit_call_expression(node: SyntaxNode, ctx: TraversalContext) -> None:
    pattern = ctx.options.ignore_parameters_to_function_regex
    function_name = get_function_name(node)
    if pattern is None or not pattern.search(function_name) or not node.arguments:
        _visit_children(node, ctx)
        return

    frame: SuppressionFrame = tuple((arg.index, arg.last_descendant) for arg in node.arguments)
    logger.debug("Suppressing %d argument(s) of %s() at offset %d",
                 len(frame), function_name, node.start)
    ctx.suppression.append(frame)
    _visit_children(node, ctx)
    ctx.suppression.pop()


def _visit_class_declaration(node: SyntaxNode, ctx: TraversalContext) -> None:
    ctx.class_names.append(node.name or "")
    _visit_children(node, ctx)
    ctx.class_names.pop()


def _visit_function_like(node: SyntaxNode, ctx: TraversalContext) -> None:
    _validate(node, ctx)
    _visit_children(node, ctx)


def _validate(node: SyntaxNode, ctx: TraversalContext) -> None:
    if ctx.is_suppressed(node):
        return
    body_length = calc_body_length(node, ctx.source_file)
    if ctx.options.is_function_too_long(node.kind, body_length):
        _add_func_body_too_long_failure(node, body_length, ctx)


def _add_func_body_too_long_failure(node: SyntaxNode, length: int, ctx: TraversalContext) -> None:
    max_length = ctx.options.max_length_for(node.kind)
    message = format_failure_text(node, length, max_length, ctx.current_class_name)
    ctx.failures.append(create_failure(RULE_NAME, ctx.source_file, node, message, length))


_HOOKS: Dict[SyntaxKind, Callable[[SyntaxNode, TraversalContext], None]] = {
    SyntaxKind.CALL_EXPRESSION: _visit_call_expression,
    SyntaxKind.CLASS_DECLARATION: _visit_class_declaration,
}
_HOOKS.update({kind: _visit_function_like for kind in FUNCTION_LIKE_KINDS})


def check_source_file(source_file: SourceFile,
                      options: MaxFuncBodyLengthOptions) -> List[RuleFailure]:
    """Walk one file and return its failures in traversal order."""
    ctx = TraversalContext(source_file=source_file, options=options)
    _visit(source_file.root, ctx)
    return ctx.failures


class MaxFuncBodyLengthRule(AbstractRule):
    """Rule wrapper: parses options once per file, then walks the tree."""

    RULE_NAME = RULE_NAME
    DESCRIPTION = "Limits the number of lines in function, method, constructor and arrow function bodies."

    def apply(self, source_file: SourceFile) -> List[RuleFailure]:
        options = MaxFuncBodyLengthOptions.parse(self.options)
        return check_source_file(source_file, options)
