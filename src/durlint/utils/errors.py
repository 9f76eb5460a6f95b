"""
Error types and source location tracking for durlint.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Attributes:
        line: 1-indexed line number
        column: 1-indexed column number
        offset: 0-indexed character offset from start of source
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class DurlintError(Exception):
    """Base exception for all durlint errors."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"[{self.location}] {self.message}"
        return self.message


class RewriteTableError(DurlintError):
    """
    Raised when a rewrite table is built from an invalid rule set.

    This error is raised when:
    - Two rules share the same (accessor, divisor) key with different targets
    - A rule is not numerically exact for its accessors
    """

    def __init__(
        self,
        message: str,
        conflicting: Optional[list[str]] = None,
    ) -> None:
        self.conflicting = conflicting or []
        super().__init__(message)

    def _format_message(self) -> str:
        parts = [self.message]
        for rule in self.conflicting:
            parts.append(f"\n  - {rule}")
        return "".join(parts)


class SourceMapError(DurlintError):
    """Raised when a span does not address valid text in a source map."""

    pass
