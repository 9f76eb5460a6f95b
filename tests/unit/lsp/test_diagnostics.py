"""Tests for converting durlint diagnostics into LSP objects."""

from lsprotocol import types

from durlint.compiler.host_types import DURATION
from durlint.compiler.linter import LintConfiguration
from durlint.lsp.diagnostics import (
    SOURCE_NAME,
    DiagnosticProvider,
    get_diagnostics_for_program,
    to_code_actions,
    to_lsp_diagnostic,
    to_lsp_range,
)
from durlint.utils.diagnostics import (
    Applicability,
    DiagnosticEmitter,
    DiagnosticLevel,
    SourceSpan,
    Suggestion,
)
from durlint.utils.source_map import SourceMap

URI = "file:///work/src/main.rs"
SOURCE = "fn main() {\n    let us = d.subsec_nanos() / 1_000;\n}\n"


def build_program(tree_factory):
    builder = tree_factory(SOURCE, URI)
    expr = builder.subsec_division(builder.ident("d", DURATION), "subsec_nanos", "1_000")
    return builder.program(builder.let("us", expr))


class TestRanges:
    """Tests for span to range conversion."""

    def test_zero_indexed(self):
        span = SourceSpan(2, 14, 2, 38)
        assert to_lsp_range(span) == types.Range(
            start=types.Position(line=1, character=13),
            end=types.Position(line=1, character=37),
        )

    def test_multiline(self):
        lsp_range = to_lsp_range(SourceSpan(1, 5, 3, 2))
        assert (lsp_range.start.line, lsp_range.end.line) == (0, 2)

    def test_columns_count_utf16_units(self):
        source_map = SourceMap('let s = "🦀"; let us = d.subsec_nanos() / 1_000;\n')
        span = source_map.find("d.subsec_nanos() / 1_000")

        lsp_range = to_lsp_range(span, source_map)

        assert (lsp_range.start.character, lsp_range.end.character) == (23, 47)
        assert to_lsp_range(span).start.character == 22

    def test_span_outside_source_falls_back_to_columns(self):
        source_map = SourceMap("d\n")
        lsp_range = to_lsp_range(SourceSpan(9, 1, 9, 2), source_map)
        assert lsp_range.start == types.Position(line=8, character=0)


class TestDiagnosticConversion:
    """Tests for to_lsp_diagnostic."""

    def _diagnostic(self, level=DiagnosticLevel.WARNING):
        emitter = DiagnosticEmitter(SOURCE, URI)
        span = SourceSpan(2, 14, 2, 38, URI)
        suggestion = Suggestion(span, "d.subsec_nanos() / 1_000", "d.subsec_micros()")
        return emitter.report(
            span,
            "calling `subsec_micros()` is more concise than this calculation",
            suggestion,
            code="W0201",
            level=level,
        )

    def test_warning(self):
        lsp_diagnostic = to_lsp_diagnostic(self._diagnostic())

        assert lsp_diagnostic.severity == types.DiagnosticSeverity.Warning
        assert lsp_diagnostic.source == SOURCE_NAME
        assert lsp_diagnostic.code == "W0201"
        assert lsp_diagnostic.message.splitlines() == [
            "calling `subsec_micros()` is more concise than this calculation",
            "help: try",
        ]
        assert lsp_diagnostic.range.start == types.Position(line=1, character=13)

    def test_error(self):
        lsp_diagnostic = to_lsp_diagnostic(self._diagnostic(DiagnosticLevel.ERROR))
        assert lsp_diagnostic.severity == types.DiagnosticSeverity.Error

    def test_quick_fix(self):
        [action] = to_code_actions([self._diagnostic()], URI)

        assert action.kind == types.CodeActionKind.QuickFix
        assert action.is_preferred is True
        assert action.title == "try: `d.subsec_micros()`"
        [edit] = action.edit.changes[URI]
        assert edit.new_text == "d.subsec_micros()"
        assert edit.range == to_lsp_range(SourceSpan(2, 14, 2, 38))
        assert action.diagnostics[0].code == "W0201"

    def test_needs_review_is_not_preferred(self):
        emitter = DiagnosticEmitter(SOURCE, URI)
        span = SourceSpan(2, 14, 2, 38, URI)
        suggestion = Suggestion(
            span, "d.subsec_nanos() / 1_000", "x", applicability=Applicability.NEEDS_REVIEW
        )
        diagnostic = emitter.report(span, "msg", suggestion)
        [action] = to_code_actions([diagnostic], URI)
        assert action.is_preferred is False

    def test_no_diagnostics_no_actions(self):
        assert to_code_actions([], URI) == []


class TestDiagnosticProvider:
    """Tests for the per-document provider."""

    def test_lint_and_convert(self, tree_factory):
        provider = DiagnosticProvider(SOURCE, URI)
        provider.lint(build_program(tree_factory))

        [lsp_diagnostic] = provider.get_diagnostics()
        assert lsp_diagnostic.code == "W0201"
        assert lsp_diagnostic.range == types.Range(
            start=types.Position(line=1, character=13),
            end=types.Position(line=1, character=37),
        )

    def test_code_actions_filtered_by_range(self, tree_factory):
        provider = DiagnosticProvider(SOURCE, URI)
        provider.lint(build_program(tree_factory))

        on_line = types.Range(
            start=types.Position(line=1, character=20),
            end=types.Position(line=1, character=20),
        )
        elsewhere = types.Range(
            start=types.Position(line=0, character=0),
            end=types.Position(line=0, character=2),
        )

        assert len(provider.get_code_actions(on_line)) == 1
        assert provider.get_code_actions(elsewhere) == []
        assert len(provider.get_code_actions()) == 1

    def test_config_is_respected(self, tree_factory):
        config = LintConfiguration()
        config.allow("duration-subsec")
        diagnostics = get_diagnostics_for_program(build_program(tree_factory), SOURCE, URI, config)
        assert diagnostics == []

    def test_convenience_function(self, tree_factory):
        diagnostics = get_diagnostics_for_program(build_program(tree_factory), SOURCE, URI)
        assert [d.severity for d in diagnostics] == [types.DiagnosticSeverity.Warning]

    def test_astral_text_before_the_finding(self, tree_factory):
        source = 'fn main() {\n    let s = "🦀"; let us = d.subsec_nanos() / 1_000;\n}\n'
        builder = tree_factory(source, URI)
        expr = builder.subsec_division(builder.ident("d", DURATION), "subsec_nanos", "1_000")
        provider = DiagnosticProvider(source, URI)
        provider.lint(builder.program(builder.let("us", expr)))

        expected = types.Range(
            start=types.Position(line=1, character=27),
            end=types.Position(line=1, character=51),
        )
        [lsp_diagnostic] = provider.get_diagnostics()
        [action] = provider.get_code_actions()
        assert lsp_diagnostic.range == expected
        assert action.edit.changes[URI][0].range == expected
