"""
Source text access for durlint.

A SourceMap owns the text of one source file and answers the two questions
lint rules ask of it: "what did the user write here" (`text_of`) and
"what does the file look like with these fixes applied"
(`apply_suggestions`). Spans are line/column based; the map converts them to
character offsets.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import Iterable, Optional

from durlint.utils.diagnostics import SourceSpan, Suggestion
from durlint.utils.errors import SourceLocation, SourceMapError


class SourceMap:
    """
    Text of a single source file with span <-> offset conversion.

    Usage:
        source_map = SourceMap("let x = d.subsec_nanos() / 1000;", "main.rs")
        span = source_map.find("d.subsec_nanos()")
        source_map.text_of(span)  # "d.subsec_nanos()"
    """

    def __init__(self, source: str, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self._line_starts = [0]
        for index, char in enumerate(source):
            if char == "\n":
                self._line_starts.append(index + 1)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def location(self, offset: int) -> SourceLocation:
        """Convert a character offset into a 1-indexed line/column location."""
        if not 0 <= offset <= len(self.source):
            raise SourceMapError(f"offset {offset} is outside the source")
        line_index = bisect_right(self._line_starts, offset) - 1
        return SourceLocation(
            line=line_index + 1,
            column=offset - self._line_starts[line_index] + 1,
            offset=offset,
            filename=self.filename,
        )

    def offset(self, line: int, column: int) -> int:
        """Convert a 1-indexed line/column pair into a character offset."""
        if not 1 <= line <= self.line_count:
            raise SourceMapError(f"line {line} is outside the source")
        line_start = self._line_starts[line - 1]
        if line < self.line_count:
            line_end = self._line_starts[line] - 1  # position of the newline
        else:
            line_end = len(self.source)
        result = line_start + column - 1
        if column < 1 or result > line_end:
            raise SourceMapError(f"column {column} is outside line {line}")
        return result

    def utf16_column(self, line: int, column: int) -> int:
        """
        Convert a 1-indexed character column into a 0-indexed count of
        UTF-16 code units from the start of the line.

        Characters outside the Basic Multilingual Plane take two units.
        """
        line_start = self.offset(line, 1)
        prefix = self.source[line_start:self.offset(line, column)]
        return len(prefix.encode("utf-16-le")) // 2

    def span(self, start: int, end: int) -> SourceSpan:
        """Build a span covering offsets [start, end)."""
        if start > end:
            raise SourceMapError(f"span start {start} is after its end {end}")
        first = self.location(start)
        last = self.location(end)
        return SourceSpan(
            start_line=first.line,
            start_col=first.column,
            end_line=last.line,
            end_col=last.column,
            filename=self.filename,
        )

    def offsets(self, span: SourceSpan) -> tuple[int, int]:
        """Convert a span into its [start, end) offsets."""
        start = self.offset(span.start_line, span.start_col)
        end = self.offset(span.end_line, span.end_col)
        if start > end:
            raise SourceMapError(f"span {span} ends before it starts")
        return start, end

    def text_of(self, span: SourceSpan) -> str:
        """
        Return the exact source text covered by a span.

        Raises:
            SourceMapError: If the span does not address text in this file
        """
        start, end = self.offsets(span)
        return self.source[start:end]

    def find(self, text: str, start: int = 0, occurrence: int = 0) -> SourceSpan:
        """
        Span of the n-th occurrence of `text`, searching from `start`.

        Raises:
            SourceMapError: If the text does not occur often enough
        """
        position = start - 1
        for _ in range(occurrence + 1):
            position = self.source.find(text, position + 1)
            if position < 0:
                raise SourceMapError(f"{text!r} not found in {self.filename}")
        return self.span(position, position + len(text))

    def apply_suggestions(self, suggestions: Iterable[Suggestion]) -> str:
        """
        Return the source text with every suggestion applied.

        Suggestions are applied back to front so earlier offsets stay valid.

        Raises:
            SourceMapError: If two suggestions overlap, or a suggestion's
                original text no longer matches the source
        """
        edits: list[tuple[int, int, Suggestion]] = []
        for suggestion in suggestions:
            start, end = self.offsets(suggestion.span)
            if self.source[start:end] != suggestion.original:
                raise SourceMapError(
                    f"suggestion at {suggestion.span} does not match the source text",
                    self.location(start),
                )
            edits.append((start, end, suggestion))

        edits.sort(key=lambda edit: (edit[0], edit[1]))
        previous_end: Optional[int] = None
        for start, end, suggestion in edits:
            if previous_end is not None and start < previous_end:
                raise SourceMapError(
                    f"suggestion at {suggestion.span} overlaps a previous suggestion",
                    self.location(start),
                )
            previous_end = end

        result = self.source
        for start, end, suggestion in reversed(edits):
            result = result[:start] + suggestion.replacement + result[end:]
        return result


__all__ = ["SourceMap"]
