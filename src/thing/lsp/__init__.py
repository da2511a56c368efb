"""
Thing Language Server Protocol (LSP) implementation.

Publishes the syntax errors found by the parser as editor diagnostics and
shows the token category on hover.

Usage:
    # Start the LSP server (stdio mode)
    thing-lsp

    # Or run as a module
    python -m thing.lsp
"""

from thing.lsp.server import ThingLanguageServer, create_server, main

__all__ = [
    "ThingLanguageServer",
    "create_server",
    "main",
]
