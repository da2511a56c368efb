"""
Thing Utilities Package.

Error types, source locations, and parse-tree diagnostics.
"""

from thing.utils.diagnostics import (
    Diagnostic,
    DiagnosticEmitter,
    DiagnosticLabel,
    DiagnosticLevel,
    ErrorCode,
    SourceSpan,
    diagnose,
    error_message,
    format_errors,
    locate,
)
from thing.utils.errors import (
    ConfigError,
    SourceLocation,
    SourceReadError,
    ThingError,
)

__all__ = [
    # Errors
    "ThingError",
    "ConfigError",
    "SourceReadError",
    "SourceLocation",
    # Diagnostics
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
