"""
Rust-like Rich Diagnostics for durlint.

This module provides the diagnostic system used to report lint findings.
A diagnostic carries source context, help messages and code suggestions,
and renders in the familiar rustc layout.

Example output:
    warning[W0201]: calling `subsec_micros()` is more concise than this calculation
      --> main.rs:3:14
       |
     3 |     let us = d.subsec_nanos() / 1_000;
       |              ^^^^^^^^^^^^^^^^^^^^^^^^
       |
       = help: try
       = suggestion: try
       |   d.subsec_micros()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol


# =============================================================================
# Lint Codes Catalog
# =============================================================================


class ErrorCode:
    """
    Centralized catalog of diagnostic codes.

    Codes are organized by category:
    - W02xx: Complexity lints (an expression has a simpler equivalent)
    """

    W0201 = "W0201"  # duration subsec calculation


ERROR_DESCRIPTIONS: dict[str, str] = {
    ErrorCode.W0201: "duration subsec calculation",
}


# =============================================================================
# Diagnostic Types
# =============================================================================


class DiagnosticLevel(Enum):
    """Severity level of a diagnostic message."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    HELP = "help"

    def color_code(self) -> str:
        """Get ANSI color code for this level."""
        colors = {
            DiagnosticLevel.ERROR: "\033[91m",  # Red
            DiagnosticLevel.WARNING: "\033[93m",  # Yellow
            DiagnosticLevel.NOTE: "\033[96m",  # Cyan
            DiagnosticLevel.HELP: "\033[92m",  # Green
        }
        return colors.get(self, "")


class Applicability(Enum):
    """
    How confidently a suggestion can be applied without a human looking at it.

    MACHINE_APPLICABLE: The rewrite is exact and may be applied automatically
    NEEDS_REVIEW: The rewrite is probably right but must be confirmed
    """

    MACHINE_APPLICABLE = "machine-applicable"
    NEEDS_REVIEW = "needs-review"


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """
    A span of source code, representing a range of characters.

    Attributes:
        start_line: 1-indexed starting line number
        start_col: 1-indexed starting column number
        end_line: 1-indexed ending line number
        end_col: 1-indexed ending column number (exclusive)
        filename: Optional filename for display
    """

    start_line: int
    start_col: int
    end_line: int
    end_col: int
    filename: str = "<input>"

    @classmethod
    def from_location(
        cls, line: int, col: int, length: int = 1, filename: str = "<input>"
    ) -> "SourceSpan":
        """Create a span from a single location with a given length."""
        return cls(
            start_line=line,
            start_col=col,
            end_line=line,
            end_col=col + length,
            filename=filename,
        )

    @classmethod
    def single_line(
        cls, line: int, start_col: int, end_col: int, filename: str = "<input>"
    ) -> "SourceSpan":
        """Create a span on a single line."""
        return cls(
            start_line=line,
            start_col=start_col,
            end_line=line,
            end_col=end_col,
            filename=filename,
        )

    def __str__(self) -> str:
        return f"{self.filename}:{self.start_line}:{self.start_col}"

    @property
    def is_multiline(self) -> bool:
        """Check if this span covers multiple lines."""
        return self.start_line != self.end_line

    @property
    def length(self) -> int:
        """Get the length of the span on a single line."""
        if self.is_multiline:
            return 1  # Simplified for multiline
        return max(1, self.end_col - self.start_col)

    def contains(self, other: "SourceSpan") -> bool:
        """Check whether another span lies entirely inside this one."""
        return (self.start_line, self.start_col) <= (other.start_line, other.start_col) and (
            other.end_line,
            other.end_col,
        ) <= (self.end_line, self.end_col)


@dataclass(slots=True)
class DiagnosticLabel:
    """
    A label pointing to a specific span of source code.

    Attributes:
        span: The source span this label points to
        message: Optional message to display with the label
        is_primary: Whether this is the primary label (shown with ^^^)
    """

    span: SourceSpan
    message: str = ""
    is_primary: bool = True


@dataclass(frozen=True, slots=True)
class Suggestion:
    """
    A code suggestion that can be applied to fix a diagnostic.

    Attributes:
        span: The span of code to replace
        original: The source text currently covered by the span
        replacement: The suggested replacement text
        message: Description of the suggestion
        applicability: Whether the suggestion is safe to apply automatically
    """

    span: SourceSpan
    original: str
    replacement: str
    message: str = "try"
    applicability: Applicability = Applicability.MACHINE_APPLICABLE

    @property
    def is_machine_applicable(self) -> bool:
        return self.applicability is Applicability.MACHINE_APPLICABLE


@dataclass
class Diagnostic:
    """
    A rich diagnostic message with source context and suggestions.

    Attributes:
        code: Diagnostic code (e.g., "W0201")
        level: Severity level (ERROR, WARNING, NOTE, HELP)
        message: The main diagnostic message
        labels: List of source code labels
        notes: Additional notes to display
        helps: Help messages
        suggestions: Code suggestions for fixes
    """

    code: str
    level: DiagnosticLevel
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    helps: list[str] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)

    @property
    def primary_span(self) -> Optional[SourceSpan]:
        """The span of the primary label, if any."""
        if not self.labels:
            return None
        return next((l for l in self.labels if l.is_primary), self.labels[0]).span

    def render(self, source_code: str, use_color: bool = True) -> str:
        """
        Render this diagnostic as a formatted string.

        Args:
            source_code: The original source code for context
            use_color: Whether to use ANSI color codes

        Returns:
            A formatted multi-line string representation
        """
        lines: list[str] = []
        source_lines = source_code.splitlines()

        reset = "\033[0m" if use_color else ""
        bold = "\033[1m" if use_color else ""
        level_color = self.level.color_code() if use_color else ""
        blue = "\033[94m" if use_color else ""
        green = "\033[92m" if use_color else ""

        # Header line: warning[W0201]: calling `subsec_micros()` is ...
        level_str = self.level.value
        if self.code in ERROR_DESCRIPTIONS:
            header = (
                f"{level_color}{bold}{level_str}[{self.code}]{reset}: {bold}{self.message}{reset}"
            )
        else:
            header = f"{level_color}{bold}{level_str}{reset}: {bold}{self.message}{reset}"
        lines.append(header)

        primary = self.primary_span
        if primary is not None:
            lines.append(f"  {blue}-->{reset} {primary}")

        if self.labels and source_lines:
            lines.append(f"   {blue}|{reset}")

            labels_by_line: dict[int, list[DiagnosticLabel]] = {}
            for label in self.labels:
                labels_by_line.setdefault(label.span.start_line, []).append(label)

            for line_num in sorted(labels_by_line.keys()):
                if 1 <= line_num <= len(source_lines):
                    source_line = source_lines[line_num - 1]
                    lines.append(f"{blue}{line_num:3} |{reset} {source_line}")

                    for label in labels_by_line[line_num]:
                        underline_char = "^" if label.is_primary else "-"
                        underline_color = level_color if label.is_primary else blue

                        padding = " " * (label.span.start_col - 1)
                        underline = underline_char * label.span.length

                        underline_line = (
                            f"   {blue}|{reset} {padding}{underline_color}{underline}{reset}"
                        )
                        if label.message:
                            underline_line += f" {underline_color}{label.message}{reset}"
                        lines.append(underline_line)

            lines.append(f"   {blue}|{reset}")

        for note in self.notes:
            lines.append(f"   {blue}={reset} {bold}note:{reset} {note}")

        for help_msg in self.helps:
            lines.append(f"   {blue}={reset} {green}help:{reset} {help_msg}")

        for suggestion in self.suggestions:
            lines.append(f"   {blue}={reset} {green}suggestion:{reset} {suggestion.message}")
            if suggestion.replacement:
                lines.append(f"   {blue}|{reset}   {suggestion.replacement}")

        return "\n".join(lines)

    def to_simple_message(self) -> str:
        """Get a simple one-line message."""
        return f"[{self.code}] {self.message}"


# =============================================================================
# Diagnostic Sink
# =============================================================================


class DiagnosticSink(Protocol):
    """
    Anything that accepts reported findings.

    Lint rules only ever talk to a sink; rendering, collecting or
    auto-applying the suggestion is the sink's business.
    """

    def report(
        self,
        span: SourceSpan,
        message: str,
        suggestion: Suggestion,
        *,
        code: str = "",
        level: DiagnosticLevel = DiagnosticLevel.WARNING,
    ) -> Diagnostic: ...


# =============================================================================
# Diagnostic Builder (Fluent API)
# =============================================================================


class DiagnosticBuilder:
    """
    Fluent builder for constructing Diagnostic objects.

        emitter.warning("W0201", "calling `subsec_micros()` is ...", span)
            .help("try")
            .suggestion(suggestion)
            .emit()
    """

    def __init__(
        self,
        emitter: "DiagnosticEmitter",
        code: str,
        level: DiagnosticLevel,
        message: str,
        primary_span: Optional[SourceSpan] = None,
    ) -> None:
        self._emitter = emitter
        self._code = code
        self._level = level
        self._message = message
        self._labels: list[DiagnosticLabel] = []
        self._notes: list[str] = []
        self._helps: list[str] = []
        self._suggestions: list[Suggestion] = []

        if primary_span:
            self._labels.append(DiagnosticLabel(primary_span, "", True))

    def label(
        self, span: SourceSpan, message: str = "", is_primary: bool = False
    ) -> "DiagnosticBuilder":
        """Add a source code label."""
        self._labels.append(DiagnosticLabel(span, message, is_primary))
        return self

    def note(self, message: str) -> "DiagnosticBuilder":
        """Add a note."""
        self._notes.append(message)
        return self

    def help(self, message: str) -> "DiagnosticBuilder":
        """Add a help message."""
        self._helps.append(message)
        return self

    def suggestion(self, suggestion: Suggestion) -> "DiagnosticBuilder":
        """Attach a code suggestion."""
        self._suggestions.append(suggestion)
        return self

    def build(self) -> Diagnostic:
        """Build the diagnostic without emitting."""
        return Diagnostic(
            code=self._code,
            level=self._level,
            message=self._message,
            labels=self._labels,
            notes=self._notes,
            helps=self._helps,
            suggestions=self._suggestions,
        )

    def emit(self) -> Diagnostic:
        """Build and emit the diagnostic to the emitter."""
        diagnostic = self.build()
        self._emitter.add_diagnostic(diagnostic)
        return diagnostic


# =============================================================================
# Diagnostic Emitter
# =============================================================================


class DiagnosticEmitter:
    """
    Collects and renders diagnostics for a source file.

    The emitter is the in-tree DiagnosticSink: lint rules report into it,
    and callers read `diagnostics` or render them afterwards.

    Usage:
        emitter = DiagnosticEmitter(source, "main.rs")
        Linter(source_map).lint(program, emitter)
        print(emitter.render_all())
    """

    def __init__(self, source: str = "", filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.diagnostics: list[Diagnostic] = []

    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic to the collection."""
        self.diagnostics.append(diagnostic)

    def error(
        self, code: str, message: str, span: Optional[SourceSpan] = None
    ) -> DiagnosticBuilder:
        """Create an error diagnostic builder."""
        return DiagnosticBuilder(self, code, DiagnosticLevel.ERROR, message, span)

    def warning(
        self, code: str, message: str, span: Optional[SourceSpan] = None
    ) -> DiagnosticBuilder:
        """Create a warning diagnostic builder."""
        return DiagnosticBuilder(self, code, DiagnosticLevel.WARNING, message, span)

    def report(
        self,
        span: SourceSpan,
        message: str,
        suggestion: Suggestion,
        *,
        code: str = "",
        level: DiagnosticLevel = DiagnosticLevel.WARNING,
    ) -> Diagnostic:
        """Record a finding with its fix-it suggestion."""
        return (
            DiagnosticBuilder(self, code, level, message, span)
            .help(suggestion.message)
            .suggestion(suggestion)
            .emit()
        )

    @property
    def suggestions(self) -> list[Suggestion]:
        """All suggestions attached to collected diagnostics, in report order."""
        return [s for d in self.diagnostics for s in d.suggestions]

    def has_errors(self) -> bool:
        """Check if any error diagnostics have been emitted."""
        return any(d.level == DiagnosticLevel.ERROR for d in self.diagnostics)

    def warning_count(self) -> int:
        """Count the number of warning diagnostics."""
        return sum(1 for d in self.diagnostics if d.level == DiagnosticLevel.WARNING)

    def render_all(self, use_color: bool = True) -> str:
        """Render all diagnostics as a single string."""
        return "\n\n".join(d.render(self.source, use_color) for d in self.diagnostics)

    def clear(self) -> None:
        """Clear all diagnostics."""
        self.diagnostics.clear()


__all__ = [
    "ErrorCode",
    "ERROR_DESCRIPTIONS",
    "DiagnosticLevel",
    "Applicability",
    "SourceSpan",
    "DiagnosticLabel",
    "Suggestion",
    "Diagnostic",
    "DiagnosticSink",
    "DiagnosticBuilder",
    "DiagnosticEmitter",
]
