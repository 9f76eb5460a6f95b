"""
Unit tests for the diagnostics module.

Tests cover:
- Span helpers
- The fluent builder and the emitter acting as a DiagnosticSink
- Rust-style rendering with help and suggestion lines
"""

from durlint.utils.diagnostics import (
    ERROR_DESCRIPTIONS,
    Applicability,
    DiagnosticEmitter,
    DiagnosticLevel,
    ErrorCode,
    SourceSpan,
    Suggestion,
)

SOURCE = "fn f(d: Duration) -> u32 {\n    d.subsec_nanos() / 1_000\n}\n"
SPAN = SourceSpan.single_line(2, 5, 29, "main.rs")
MESSAGE = "calling `subsec_micros()` is more concise than this calculation"


def make_suggestion():
    return Suggestion(
        span=SPAN,
        original="d.subsec_nanos() / 1_000",
        replacement="d.subsec_micros()",
    )


class TestSourceSpan:
    """Tests for SourceSpan helpers."""

    def test_str(self):
        assert str(SPAN) == "main.rs:2:5"

    def test_length(self):
        assert SPAN.length == 24
        assert not SPAN.is_multiline

    def test_from_location(self):
        span = SourceSpan.from_location(3, 7, length=4)
        assert (span.start_col, span.end_col) == (7, 11)

    def test_contains(self):
        inner = SourceSpan.single_line(2, 5, 21, "main.rs")
        assert SPAN.contains(inner)
        assert not inner.contains(SPAN)


class TestSuggestion:
    """Tests for Suggestion defaults."""

    def test_defaults(self):
        suggestion = make_suggestion()
        assert suggestion.message == "try"
        assert suggestion.applicability is Applicability.MACHINE_APPLICABLE
        assert suggestion.is_machine_applicable

    def test_needs_review(self):
        suggestion = Suggestion(
            span=SPAN, original="x", replacement="y", applicability=Applicability.NEEDS_REVIEW
        )
        assert not suggestion.is_machine_applicable


class TestDiagnosticEmitter:
    """Tests for collecting diagnostics."""

    def test_report(self):
        emitter = DiagnosticEmitter(SOURCE, "main.rs")
        suggestion = make_suggestion()

        diagnostic = emitter.report(SPAN, MESSAGE, suggestion, code=ErrorCode.W0201)

        assert emitter.diagnostics == [diagnostic]
        assert diagnostic.level == DiagnosticLevel.WARNING
        assert diagnostic.primary_span == SPAN
        assert diagnostic.helps == ["try"]
        assert diagnostic.suggestions == [suggestion]
        assert emitter.suggestions == [suggestion]
        assert emitter.warning_count() == 1
        assert not emitter.has_errors()

    def test_report_at_error_level(self):
        emitter = DiagnosticEmitter(SOURCE)
        emitter.report(SPAN, MESSAGE, make_suggestion(), level=DiagnosticLevel.ERROR)
        assert emitter.has_errors()
        assert emitter.warning_count() == 0

    def test_builder(self):
        emitter = DiagnosticEmitter(SOURCE)
        diagnostic = (
            emitter.error("E0000", "something", SPAN)
            .label(SourceSpan.single_line(1, 6, 7), "declared here")
            .note("a note")
            .emit()
        )
        assert len(diagnostic.labels) == 2
        assert diagnostic.primary_span == SPAN
        assert diagnostic.notes == ["a note"]

    def test_clear(self):
        emitter = DiagnosticEmitter(SOURCE)
        emitter.report(SPAN, MESSAGE, make_suggestion())
        emitter.clear()
        assert emitter.diagnostics == []


class TestRendering:
    """Tests for Rust-style rendering."""

    def test_render_without_color(self):
        emitter = DiagnosticEmitter(SOURCE, "main.rs")
        emitter.report(SPAN, MESSAGE, make_suggestion(), code=ErrorCode.W0201)

        rendered = emitter.render_all(use_color=False)

        assert rendered.splitlines() == [
            f"warning[W0201]: {MESSAGE}",
            "  --> main.rs:2:5",
            "   |",
            "  2 |     d.subsec_nanos() / 1_000",
            "   |     ^^^^^^^^^^^^^^^^^^^^^^^^",
            "   |",
            "   = help: try",
            "   = suggestion: try",
            "   |   d.subsec_micros()",
        ]

    def test_unknown_code_has_no_brackets(self):
        emitter = DiagnosticEmitter(SOURCE)
        diagnostic = emitter.warning("X9999", "odd", SPAN).emit()
        assert diagnostic.render(SOURCE, use_color=False).startswith("warning: odd")

    def test_render_with_color(self):
        emitter = DiagnosticEmitter(SOURCE)
        emitter.report(SPAN, MESSAGE, make_suggestion(), code=ErrorCode.W0201)
        assert "\033[93m" in emitter.render_all(use_color=True)

    def test_simple_message(self):
        emitter = DiagnosticEmitter(SOURCE)
        diagnostic = emitter.report(SPAN, MESSAGE, make_suggestion(), code=ErrorCode.W0201)
        assert diagnostic.to_simple_message() == f"[W0201] {MESSAGE}"

    def test_code_catalog(self):
        assert ErrorCode.W0201 in ERROR_DESCRIPTIONS
