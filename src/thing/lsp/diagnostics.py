"""
Diagnostic generation for the Thing LSP.

This module converts the error nodes of a Thing parse tree into
LSP-compatible diagnostic messages for display in editors.
"""

from typing import Optional

from lsprotocol import types

from thing.compiler import parse_source
from thing.lsp.positions import utf16_length
from thing.utils.diagnostics import Diagnostic as ParserDiagnostic
from thing.utils.diagnostics import DiagnosticLevel

DIAGNOSTIC_SOURCE = "thing"


class DiagnosticProvider:
    """
    Generates LSP diagnostics from Thing source code.

    The document is parsed as a statement sequence. Each error node in the
    resulting tree becomes one diagnostic.
    """

    def __init__(self, source: str, uri: str, max_errors: int = 0) -> None:
        """
        Initialize the diagnostic provider.

        Args:
            source: The Thing source code to analyze
            uri: The document URI, used as the filename
            max_errors: Limit on reported diagnostics (0 means no limit)
        """
        self.source = source
        self.uri = uri
        self.max_errors = max_errors
        self._diagnostics: list[types.Diagnostic] = []

    def get_diagnostics(self) -> list[types.Diagnostic]:
        """
        Get all diagnostics for the document.

        Returns:
            List of LSP diagnostic objects, in source order
        """
        self._diagnostics = []
        result = parse_source(self.source, self.uri, max_errors=self.max_errors)
        for diag in result.diagnostics:
            self._add_parser_diagnostic(diag)
        return self._diagnostics

    def _add_parser_diagnostic(self, diag: ParserDiagnostic) -> None:
        """
        Add a parser diagnostic as an LSP diagnostic.

        Args:
            diag: The parser diagnostic
        """
        severity_map = {
            DiagnosticLevel.ERROR: types.DiagnosticSeverity.Error,
            DiagnosticLevel.WARNING: types.DiagnosticSeverity.Warning,
            DiagnosticLevel.NOTE: types.DiagnosticSeverity.Information,
            DiagnosticLevel.HELP: types.DiagnosticSeverity.Hint,
        }
        severity = severity_map.get(diag.level, types.DiagnosticSeverity.Error)

        # Parser locations are 1-indexed code points, LSP positions 0-indexed
        # UTF-16 code units
        line = max(0, diag.location.line - 1)
        column = max(0, diag.location.column - 1)
        length = 1
        if diag.labels:
            primary_label = next(
                (label for label in diag.labels if label.is_primary), diag.labels[0]
            )
            length = primary_label.span.length
        character = utf16_length(diag.line_text[:column])
        end_character = character + max(
            1, utf16_length(diag.line_text[column : column + length])
        )

        message_parts = [diag.message]
        for note in diag.notes:
            message_parts.append(f"note: {note}")

        diagnostic = types.Diagnostic(
            range=types.Range(
                start=types.Position(line=line, character=character),
                end=types.Position(line=line, character=end_character),
            ),
            message="\n".join(message_parts),
            severity=severity,
            source=DIAGNOSTIC_SOURCE,
            code=diag.code,
        )

        self._diagnostics.append(diagnostic)


def get_diagnostics_for_document(
    source: str, uri: str, max_errors: Optional[int] = None
) -> list[types.Diagnostic]:
    """
    Convenience function to get diagnostics for a document.

    Args:
        source: The Thing source code
        uri: The document URI
        max_errors: Limit on reported diagnostics (None or 0 means no limit)

    Returns:
        List of LSP diagnostics
    """
    provider = DiagnosticProvider(source, uri, max_errors or 0)
    return provider.get_diagnostics()
