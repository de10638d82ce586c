"""
funclint.rules - Rule registry

Maps configuration names to rule classes.
"""

from typing import Dict, Type

from funclint.rules.base import AbstractRule, RuleFailure, create_failure
from funclint.rules.max_func_body_length import MaxFuncBodyLengthRule

RULES: Dict[str, Type[AbstractRule]] = {
    MaxFuncBodyLengthRule.RULE_NAME: MaxFuncBodyLengthRule,
}

__all__ = [
    "AbstractRule",
    "RuleFailure",
    "create_failure",
    "MaxFuncBodyLengthRule",
    "RULES",
]
