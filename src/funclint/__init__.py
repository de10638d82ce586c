"""
funclint - Function Body Length Linter

Checks that functions, methods, constructors and arrow functions stay
under a configurable number of body lines.
"""

__version__ = "0.1.0"
__author__ = "funclint contributors"

from funclint.syntax import parse_python_source, parse_python_file, load_source_file
from funclint.rules import MaxFuncBodyLengthRule, RuleFailure
