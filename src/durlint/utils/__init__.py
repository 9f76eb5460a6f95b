"""
durlint Utilities Package.

Common utilities for error handling, source text and diagnostics.
"""

from durlint.utils.diagnostics import (
    ERROR_DESCRIPTIONS,
    Applicability,
    Diagnostic,
    # Builder and emitter
    DiagnosticBuilder,
    DiagnosticEmitter,
    DiagnosticLabel,
    # Core diagnostic types
    DiagnosticLevel,
    DiagnosticSink,
    # Error codes
    ErrorCode,
    SourceSpan,
    Suggestion,
)
from durlint.utils.errors import (
    DurlintError,
    RewriteTableError,
    SourceLocation,
    SourceMapError,
)
from durlint.utils.source_map import SourceMap

__all__ = [
    # Errors
    "DurlintError",
    "RewriteTableError",
    "SourceMapError",
    "SourceLocation",
    # Diagnostics
    "Applicability",
    "Diagnostic",
    "DiagnosticBuilder",
    "DiagnosticEmitter",
    "DiagnosticLabel",
    "DiagnosticLevel",
    "DiagnosticSink",
    "ErrorCode",
    "ERROR_DESCRIPTIONS",
    "SourceSpan",
    "Suggestion",
    # Source text
    "SourceMap",
]
