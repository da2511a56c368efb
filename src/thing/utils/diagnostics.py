"""
Rust-like diagnostics for Thing parse trees.

The parser embeds grammar errors in the parse tree instead of raising. This
module walks a tree, finds every error node, maps its token back to a line
and column in the original source, and renders a message with the offending
line and a caret under the column.

Example output:
    error[E0203]: `;` expected
      --> example.thing:2:7
       |
     2 | y + 1 }
       |       ^
       |
       = note: found `}`
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from thing.compiler.parse_tree import ErrorKind, ParseNode
from thing.compiler.parser import MAX_NESTING_DEPTH
from thing.compiler.tokens import TokenType
from thing.utils.errors import SourceLocation


# =============================================================================
# Error Codes Catalog
# =============================================================================


class ErrorCode:
    """
    Error codes for parse diagnostics.

    All grammar errors are syntax errors and share the E02xx range.
    """

    E0201 = "E0201"  # unexpected prefix token
    E0202 = "E0202"  # unexpected infix token
    E0203 = "E0203"  # missing token
    E0208 = "E0208"  # unrecognized input
    E0209 = "E0209"  # nesting limit exceeded


_KIND_CODES: dict[ErrorKind, str] = {
    ErrorKind.UNEXPECTED_PREFIX_TOKEN: ErrorCode.E0201,
    ErrorKind.UNEXPECTED_INFIX_TOKEN: ErrorCode.E0202,
    ErrorKind.WRONG_TOKEN_TYPE: ErrorCode.E0203,
    ErrorKind.NESTING_TOO_DEEP: ErrorCode.E0209,
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


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """
    A span of source code on a single line.

    Attributes:
        line: 1-indexed line number
        start_col: 1-indexed starting column
        end_col: 1-indexed ending column (exclusive)
        filename: Filename for display
    """

    line: int
    start_col: int
    end_col: int
    filename: str = "<input>"

    @classmethod
    def from_location(cls, loc: SourceLocation, length: int = 1) -> SourceSpan:
        """Create a span starting at ``loc`` with the given length."""
        return cls(
            line=loc.line,
            start_col=loc.column,
            end_col=loc.column + max(1, length),
            filename=loc.filename or "<input>",
        )

    @property
    def length(self) -> int:
        return max(1, self.end_col - self.start_col)

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.start_col}"


@dataclass(slots=True)
class DiagnosticLabel:
    """
    A label pointing to a span of the source line.

    Attributes:
        span: The source span this label points to
        message: Optional message shown after the underline
        is_primary: Primary labels are underlined with ^, secondary with -
    """

    span: SourceSpan
    message: str = ""
    is_primary: bool = True


@dataclass
class Diagnostic:
    """
    A diagnostic message with source context.

    Attributes:
        code: Error code (e.g., "E0203")
        level: Severity level
        message: The main diagnostic message
        location: Where the offending token starts
        line_text: The full source line containing ``location``
        labels: Source code labels
        notes: Additional notes to display
    """

    code: str
    level: DiagnosticLevel
    message: str
    location: SourceLocation
    line_text: str = ""
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def add_note(self, note: str) -> Diagnostic:
        """Add a note and return self for chaining."""
        self.notes.append(note)
        return self

    def render(self, use_color: bool = True) -> str:
        """
        Render this diagnostic as a formatted string.

        Args:
            use_color: Whether to use ANSI color codes

        Returns:
            A formatted multi-line string representation
        """
        lines: list[str] = []

        reset = "\033[0m" if use_color else ""
        bold = "\033[1m" if use_color else ""
        blue = "\033[94m" if use_color else ""
        level_color = self.level.color_code() if use_color else ""

        lines.append(
            f"{level_color}{bold}{self.level.value}[{self.code}]{reset}: {bold}{self.message}{reset}"
        )
        lines.append(f"  {blue}-->{reset} {self.location}")

        gutter = " " * len(str(self.location.line))
        lines.append(f" {gutter} {blue}|{reset}")
        lines.append(f" {blue}{self.location.line} |{reset} {self.line_text}")
        for label in self.labels:
            underline_char = "^" if label.is_primary else "-"
            underline_color = level_color if label.is_primary else blue
            padding = " " * (label.span.start_col - 1)
            underline = underline_char * label.span.length
            underline_line = f" {gutter} {blue}|{reset} {padding}{underline_color}{underline}{reset}"
            if label.message:
                underline_line += f" {underline_color}{label.message}{reset}"
            lines.append(underline_line)
        lines.append(f" {gutter} {blue}|{reset}")

        for note in self.notes:
            lines.append(f" {gutter} {blue}={reset} {bold}note:{reset} {note}")

        return "\n".join(lines)

    def to_simple_message(self) -> str:
        """Get a one-line message: ``location: [code] message``."""
        return f"{self.location}: [{self.code}] {self.message}"


# =============================================================================
# Parse Tree Errors
# =============================================================================


def _token_excerpt(text: str, limit: int = 20) -> str:
    """First line of a token's text, shortened for messages."""
    first_line = text.split("\n", 1)[0]
    if len(first_line) > limit:
        return first_line[:limit] + "..."
    return first_line


def _describe(node: ParseNode) -> str:
    """Quoted text of the node's token, or its category when the text is empty."""
    if not node.match:
        return node.type.display
    return _token_excerpt(node.match)


def error_message(node: ParseNode) -> str:
    """Message text for an error node, selected by its error kind."""
    if node.error == ErrorKind.WRONG_TOKEN_TYPE:
        expected = node.expected.display if node.expected is not None else "<unknown>"
        return f"`{expected}` expected"
    if node.error == ErrorKind.UNEXPECTED_INFIX_TOKEN:
        return f"unexpected infix operation: `{_describe(node)}`"
    if node.error == ErrorKind.UNEXPECTED_PREFIX_TOKEN:
        return f"unexpected prefix operation: `{_describe(node)}`"
    if node.error == ErrorKind.NESTING_TOO_DEEP:
        return f"nesting too deep at `{_describe(node)}`"
    return ""


def locate(node: ParseNode, source: str, filename: Optional[str] = None) -> SourceLocation:
    """Map a node's token back to its location in ``source``."""
    return SourceLocation.from_offset(source, node.token.offset(source), filename)


class DiagnosticEmitter:
    """
    Collects and renders diagnostics for one source text.

    Usage:
        emitter = DiagnosticEmitter(source, "example.thing")
        emitter.emit_tree(parse_program(source))
        print(emitter.render_all())
    """

    def __init__(self, source: str, filename: str = "<input>") -> None:
        """
        Initialize the diagnostic emitter.

        Args:
            source: The source text that was parsed
            filename: The filename for error reporting
        """
        self.source = source
        self.filename = filename
        self.diagnostics: list[Diagnostic] = []

    def emit_node(self, node: ParseNode) -> Diagnostic:
        """Create and collect the diagnostic for one error node."""
        location = locate(node, self.source, self.filename)
        code = _KIND_CODES.get(node.error, ErrorCode.E0201)
        if node.type == TokenType.UNKNOWN and node.error in (
            ErrorKind.UNEXPECTED_PREFIX_TOKEN,
            ErrorKind.UNEXPECTED_INFIX_TOKEN,
        ):
            code = ErrorCode.E0208

        token_width = len(node.match.split("\n", 1)[0])
        diagnostic = Diagnostic(
            code=code,
            level=DiagnosticLevel.ERROR,
            message=error_message(node),
            location=location,
            line_text=location.line_text(self.source),
            labels=[DiagnosticLabel(SourceSpan.from_location(location, token_width))],
        )

        if node.error == ErrorKind.WRONG_TOKEN_TYPE:
            if node.type == TokenType.END_OF_FILE:
                diagnostic.add_note("reached the end of the input")
            else:
                diagnostic.add_note(f"found `{_describe(node)}`")
        elif code == ErrorCode.E0208:
            diagnostic.add_note("this text could not be read as a token")
        elif code == ErrorCode.E0209:
            diagnostic.add_note(
                f"blocks and expressions nest at most {MAX_NESTING_DEPTH} levels deep"
            )

        self.diagnostics.append(diagnostic)
        return diagnostic

    def emit_tree(self, tree: ParseNode, max_errors: int = 0) -> list[Diagnostic]:
        """
        Collect a diagnostic for every error node reachable from ``tree``.

        Args:
            tree: Root of the parse tree
            max_errors: Stop after this many diagnostics (0 means no limit)

        Returns:
            The diagnostics created for this tree, in source order.
        """
        emitted: list[Diagnostic] = []
        for node in tree.errors():
            if max_errors and len(emitted) >= max_errors:
                break
            emitted.append(self.emit_node(node))
        return emitted

    def has_errors(self) -> bool:
        """Check if any error diagnostics have been emitted."""
        return any(d.level == DiagnosticLevel.ERROR for d in self.diagnostics)

    def error_count(self) -> int:
        """Count the number of error diagnostics."""
        return sum(1 for d in self.diagnostics if d.level == DiagnosticLevel.ERROR)

    def render_all(self, use_color: bool = True) -> str:
        """Render all diagnostics as a single string."""
        return "\n\n".join(d.render(use_color) for d in self.diagnostics)

    def clear(self) -> None:
        """Clear all diagnostics."""
        self.diagnostics.clear()


def diagnose(
    tree: ParseNode,
    source: str,
    filename: str = "<input>",
    max_errors: int = 0,
) -> list[Diagnostic]:
    """Return one diagnostic per error node in ``tree``."""
    return DiagnosticEmitter(source, filename).emit_tree(tree, max_errors)


def format_errors(
    tree: ParseNode,
    source: str,
    filename: str = "<input>",
    use_color: bool = False,
    max_errors: int = 0,
) -> str:
    """Render every error in ``tree`` as text. Empty when the tree is clean."""
    emitter = DiagnosticEmitter(source, filename)
    emitter.emit_tree(tree, max_errors)
    return emitter.render_all(use_color)


__all__ = [
    "ErrorCode",
    "DiagnosticLevel",
    "SourceSpan",
    "DiagnosticLabel",
    "Diagnostic",
    "DiagnosticEmitter",
    "error_message",
    "locate",
    "diagnose",
    "format_errors",
]
