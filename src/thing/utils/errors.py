"""
Error types and source location tracking for Thing.

Parsing itself never raises; grammar errors live in the parse tree. These
exceptions are for the application edges: reading input and loading
configuration.
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

    @classmethod
    def from_offset(
        cls, source: str, offset: int, filename: Optional[str] = None
    ) -> "SourceLocation":
        """Derive line and column by counting newlines before ``offset``."""
        offset = max(0, min(offset, len(source)))
        line_start = source.rfind("\n", 0, offset) + 1
        return cls(
            line=source.count("\n", 0, offset) + 1,
            column=offset - line_start + 1,
            offset=offset,
            filename=filename,
        )

    def line_text(self, source: str) -> str:
        """Extract the source line containing this location."""
        line_start = self.offset - (self.column - 1)
        line_end = source.find("\n", line_start)
        if line_end == -1:
            line_end = len(source)
        return source[line_start:line_end]

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class ThingError(Exception):
    """Base exception for all Thing errors."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        self.message = message
        self.location = location
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"[{self.location}]")

        parts.append(self.message)

        if self.source_line and self.location:
            parts.append(f"\n    {self.source_line}")
            # Add caret pointing to the error column
            padding = " " * (4 + self.location.column - 1)
            parts.append(f"\n{padding}^")

        return " ".join(parts) if not self.source_line else parts[0] + " " + "".join(parts[1:])


class SourceReadError(ThingError):
    """Raised when an input file cannot be read."""

    pass


class ConfigError(ThingError):
    """Raised when a configuration file is malformed or has invalid values."""

    pass
