"""
durlint compiler-side components: the host tree model, the constant
evaluator and the lint rules that run over them.
"""

from durlint.compiler.const_evaluator import ConstEvaluator, evaluate_constant
from durlint.compiler.duration_subsec import check_duration_subsec, emit
from durlint.compiler.host_types import DurationTypeOracle, TypeOracle
from durlint.compiler.linter import (
    ALL_RULES,
    DURATION_SUBSEC,
    LintConfiguration,
    LintLevel,
    Linter,
    lint_program,
)
from durlint.compiler.pattern_matcher import match_division
from durlint.compiler.rewrite_table import SUBSEC_TABLE, RewriteTable, lookup

__all__ = [
    "ConstEvaluator",
    "evaluate_constant",
    "check_duration_subsec",
    "emit",
    "DurationTypeOracle",
    "TypeOracle",
    "ALL_RULES",
    "DURATION_SUBSEC",
    "LintConfiguration",
    "LintLevel",
    "Linter",
    "lint_program",
    "match_division",
    "SUBSEC_TABLE",
    "RewriteTable",
    "lookup",
]
