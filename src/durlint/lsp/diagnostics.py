"""
Diagnostic generation for editors speaking the Language Server Protocol.

This module converts durlint diagnostics into LSP diagnostics, and their
suggestions into quick-fix code actions an editor can apply with one click.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from lsprotocol import types

from durlint.compiler.ast_nodes import Program
from durlint.compiler.linter import LintConfiguration, lint_program
from durlint.utils.diagnostics import Diagnostic, DiagnosticLevel, SourceSpan
from durlint.utils.errors import SourceMapError
from durlint.utils.source_map import SourceMap

logger = logging.getLogger(__name__)

SOURCE_NAME = "durlint"

_SEVERITY_MAP = {
    DiagnosticLevel.ERROR: types.DiagnosticSeverity.Error,
    DiagnosticLevel.WARNING: types.DiagnosticSeverity.Warning,
    DiagnosticLevel.NOTE: types.DiagnosticSeverity.Information,
    DiagnosticLevel.HELP: types.DiagnosticSeverity.Hint,
}


def to_lsp_range(span: SourceSpan, source_map: Optional[SourceMap] = None) -> types.Range:
    """
    Convert a 1-indexed, end-exclusive span into a 0-indexed LSP range.

    LSP positions count UTF-16 code units by default. With a source map the
    columns are converted accordingly; without one they are taken as
    character columns, which agree for text inside the Basic Multilingual
    Plane.
    """
    if source_map is not None:
        try:
            start_char = source_map.utf16_column(span.start_line, span.start_col)
            end_char = source_map.utf16_column(span.end_line, span.end_col)
        except SourceMapError:
            logger.debug("Span %s is outside %s", span, source_map.filename)
        else:
            return types.Range(
                start=types.Position(line=span.start_line - 1, character=start_char),
                end=types.Position(line=span.end_line - 1, character=end_char),
            )
    return types.Range(
        start=types.Position(line=max(0, span.start_line - 1), character=max(0, span.start_col - 1)),
        end=types.Position(line=max(0, span.end_line - 1), character=max(0, span.end_col - 1)),
    )


def to_lsp_diagnostic(
    diag: Diagnostic,
    source_map: Optional[SourceMap] = None,
) -> types.Diagnostic:
    """
    Convert a durlint diagnostic into an LSP diagnostic.

    Args:
        diag: The diagnostic to convert
        source_map: The document text, for UTF-16 column conversion

    Returns:
        The LSP diagnostic, placed at the primary span
    """
    span = diag.primary_span
    if span is not None:
        lsp_range = to_lsp_range(span, source_map)
    else:
        lsp_range = types.Range(
            start=types.Position(line=0, character=0),
            end=types.Position(line=0, character=1),
        )

    # Build message with notes and helps
    message_parts = [diag.message]
    for note in diag.notes:
        message_parts.append(f"note: {note}")
    for help_msg in diag.helps:
        message_parts.append(f"help: {help_msg}")

    return types.Diagnostic(
        range=lsp_range,
        message="\n".join(message_parts),
        severity=_SEVERITY_MAP.get(diag.level, types.DiagnosticSeverity.Error),
        source=SOURCE_NAME,
        code=diag.code or None,
    )


def to_code_actions(
    diagnostics: Iterable[Diagnostic],
    uri: str,
    source_map: Optional[SourceMap] = None,
) -> list[types.CodeAction]:
    """
    Build one quick-fix code action per suggestion.

    Machine-applicable suggestions are marked preferred, so editors may
    apply them with "fix all".

    Args:
        diagnostics: Diagnostics whose suggestions become actions
        uri: The document the edits apply to
        source_map: The document text, for UTF-16 column conversion

    Returns:
        List of LSP code actions
    """
    actions: list[types.CodeAction] = []
    for diag in diagnostics:
        lsp_diagnostic = to_lsp_diagnostic(diag, source_map)
        for suggestion in diag.suggestions:
            edit = types.TextEdit(
                range=to_lsp_range(suggestion.span, source_map),
                new_text=suggestion.replacement,
            )
            actions.append(
                types.CodeAction(
                    title=f"{suggestion.message}: `{suggestion.replacement}`",
                    kind=types.CodeActionKind.QuickFix,
                    diagnostics=[lsp_diagnostic],
                    edit=types.WorkspaceEdit(changes={uri: [edit]}),
                    is_preferred=suggestion.is_machine_applicable,
                )
            )
    logger.debug("Built %d code action(s) for %s", len(actions), uri)
    return actions


class DiagnosticProvider:
    """
    Generates LSP diagnostics and quick fixes for one document.

    The host front end supplies the typed program; the provider lints it
    once and serves both diagnostics and code actions from that run.
    """

    def __init__(
        self,
        source: str,
        uri: str,
        config: Optional[LintConfiguration] = None,
    ) -> None:
        """
        Initialize the diagnostic provider.

        Args:
            source: The source text the program was built from
            uri: The document URI for location information
            config: Optional lint configuration
        """
        self.source_map = SourceMap(source, uri)
        self.uri = uri
        self.config = config
        self._diagnostics: list[Diagnostic] = []

    def lint(self, program: Program) -> list[Diagnostic]:
        """Lint the program and keep the findings for later queries."""
        self._diagnostics = lint_program(program, self.source_map, self.config)
        logger.debug("Document linted: %s (%d findings)", self.uri, len(self._diagnostics))
        return self._diagnostics

    def get_diagnostics(self) -> list[types.Diagnostic]:
        """Get all diagnostics from the last lint run as LSP objects."""
        return [to_lsp_diagnostic(diag, self.source_map) for diag in self._diagnostics]

    def get_code_actions(
        self,
        lsp_range: Optional[types.Range] = None,
    ) -> list[types.CodeAction]:
        """
        Get quick fixes, optionally only those touching a range.

        Args:
            lsp_range: The editor's selection, or None for every fix

        Returns:
            List of LSP code actions
        """
        diagnostics = self._diagnostics
        if lsp_range is not None:
            diagnostics = [
                diag
                for diag in diagnostics
                if diag.primary_span is not None
                and _overlaps(to_lsp_range(diag.primary_span, self.source_map), lsp_range)
            ]
        return to_code_actions(diagnostics, self.uri, self.source_map)


def _overlaps(a: types.Range, b: types.Range) -> bool:
    def key(pos: types.Position) -> tuple[int, int]:
        return (pos.line, pos.character)

    return key(a.start) <= key(b.end) and key(b.start) <= key(a.end)


def get_diagnostics_for_program(
    program: Program,
    source: str,
    uri: str,
    config: Optional[LintConfiguration] = None,
) -> list[types.Diagnostic]:
    """
    Convenience function to get diagnostics for a document.

    Args:
        program: The typed AST of the document
        source: The document's source text
        uri: The document URI
        config: Optional lint configuration

    Returns:
        List of LSP diagnostics
    """
    provider = DiagnosticProvider(source, uri, config)
    provider.lint(program)
    return provider.get_diagnostics()


__all__ = [
    "SOURCE_NAME",
    "to_lsp_range",
    "to_lsp_diagnostic",
    "to_code_actions",
    "DiagnosticProvider",
    "get_diagnostics_for_program",
]
