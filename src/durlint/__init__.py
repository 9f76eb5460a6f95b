"""
durlint - fix-it lints over typed expression trees.

durlint runs inside a host front end that has already parsed and typed a
program. Its first rule, duration-subsec, spots sub-second quantities
recomputed by hand (`d.subsec_nanos() / 1_000`) and suggests the accessor
that returns them directly (`d.subsec_micros()`).
"""

from durlint.compiler.linter import LintConfiguration, LintLevel, Linter, lint_program
from durlint.utils.diagnostics import Diagnostic, DiagnosticEmitter, Suggestion
from durlint.utils.source_map import SourceMap

__version__ = "0.1.0"
__all__ = [
    "Linter",
    "LintConfiguration",
    "LintLevel",
    "lint_program",
    "Diagnostic",
    "DiagnosticEmitter",
    "Suggestion",
    "SourceMap",
]
