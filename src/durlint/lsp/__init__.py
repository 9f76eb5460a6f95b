"""
Language Server Protocol integration for durlint.
"""

from durlint.lsp.diagnostics import (
    DiagnosticProvider,
    get_diagnostics_for_program,
    to_code_actions,
    to_lsp_diagnostic,
)

__all__ = [
    "DiagnosticProvider",
    "get_diagnostics_for_program",
    "to_code_actions",
    "to_lsp_diagnostic",
]
