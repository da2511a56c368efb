"""
Thing Language Server Protocol (LSP) Server.

This module implements an LSP server for the Thing language using pygls.
It provides:

- Document synchronization (open, change, save, close)
- Diagnostics for every syntax error in the parse tree
- Hover information showing the token category under the cursor

Usage:
    # Start the server in stdio mode (for IDE integration)
    thing-lsp

    # Start in TCP mode (for debugging)
    thing-lsp --tcp --port 2087
"""

import argparse
import logging
from typing import Optional

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from thing import __version__
from thing.lsp.diagnostics import get_diagnostics_for_document
from thing.lsp.hover import get_hover

logger = logging.getLogger("thing-lsp")


class ThingLanguageServer(LanguageServer):
    """
    Language Server Protocol implementation for Thing.

    Documents are re-parsed in full on every change; the parser is fast
    and keeps no state between runs.
    """

    def __init__(self, max_errors: int = 0) -> None:
        """
        Initialize the Thing language server.

        Args:
            max_errors: Limit on diagnostics per document (0 means no limit)
        """
        super().__init__(
            name="thing-lsp",
            version=f"v{__version__}",
        )
        self.max_errors = max_errors
        self._register_handlers()

    def _register_handlers(self) -> None:
        """
        Register all LSP request and notification handlers.

        pygls tags each handler with its method name, which a bound method
        does not allow, so plain functions are registered and the server is
        passed in as ``ls``.
        """

        # Document synchronization
        @self.feature(types.TEXT_DOCUMENT_DID_OPEN)
        def did_open(ls: ThingLanguageServer, params: types.DidOpenTextDocumentParams) -> None:
            ls._on_did_open(params)

        @self.feature(types.TEXT_DOCUMENT_DID_CHANGE)
        def did_change(
            ls: ThingLanguageServer, params: types.DidChangeTextDocumentParams
        ) -> None:
            ls._on_did_change(params)

        @self.feature(types.TEXT_DOCUMENT_DID_SAVE)
        def did_save(ls: ThingLanguageServer, params: types.DidSaveTextDocumentParams) -> None:
            ls._on_did_save(params)

        @self.feature(types.TEXT_DOCUMENT_DID_CLOSE)
        def did_close(
            ls: ThingLanguageServer, params: types.DidCloseTextDocumentParams
        ) -> None:
            ls._on_did_close(params)

        # Hover
        @self.feature(types.TEXT_DOCUMENT_HOVER)
        def hover(ls: ThingLanguageServer, params: types.HoverParams) -> Optional[types.Hover]:
            return ls._on_hover(params)

    def _publish_diagnostics(self, uri: str, diagnostics: list[types.Diagnostic]) -> None:
        """Publish diagnostics to the client."""
        self.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
        )

    def _validate(self, uri: str, source: str) -> None:
        diagnostics = get_diagnostics_for_document(source, uri, self.max_errors)
        logger.debug(f"{uri}: {len(diagnostics)} diagnostic(s)")
        self._publish_diagnostics(uri, diagnostics)

    # =========================================================================
    # Document Synchronization
    # =========================================================================

    def _on_did_open(self, params: types.DidOpenTextDocumentParams) -> None:
        """Handle document open notification."""
        document = params.text_document
        logger.info(f"Document opened: {document.uri}")
        self._validate(document.uri, document.text)

    def _on_did_change(self, params: types.DidChangeTextDocumentParams) -> None:
        """Handle document change notification."""
        uri = params.text_document.uri

        doc = self.workspace.get_text_document(uri)
        if doc is None:
            return

        logger.debug(f"Document changed: {uri}")
        self._validate(uri, doc.source)

    def _on_did_save(self, params: types.DidSaveTextDocumentParams) -> None:
        """Handle document save notification."""
        uri = params.text_document.uri
        logger.info(f"Document saved: {uri}")

        doc = self.workspace.get_text_document(uri)
        if doc:
            self._validate(uri, doc.source)

    def _on_did_close(self, params: types.DidCloseTextDocumentParams) -> None:
        """Handle document close notification."""
        uri = params.text_document.uri
        logger.info(f"Document closed: {uri}")
        self._publish_diagnostics(uri, [])

    # =========================================================================
    # Hover
    # =========================================================================

    def _on_hover(self, params: types.HoverParams) -> Optional[types.Hover]:
        """Handle hover request."""
        doc = self.workspace.get_text_document(params.text_document.uri)
        if doc is None:
            return None
        return get_hover(doc.source, params.position.line, params.position.character)


# =============================================================================
# Server Creation and Main Entry Point
# =============================================================================


def create_server(max_errors: int = 0) -> ThingLanguageServer:
    """Create and configure a Thing language server instance."""
    server = ThingLanguageServer(max_errors)

    @server.feature(types.INITIALIZED)
    def on_initialized(
        params: types.InitializedParams,  # noqa: ARG001
    ) -> None:
        """Handle initialized notification."""
        logger.info("Thing Language Server initialized successfully")

    @server.feature(types.SHUTDOWN)
    def on_shutdown(
        params: None,  # noqa: ARG001
    ) -> None:
        """Handle shutdown request."""
        logger.info("Shutting down Thing Language Server")

    return server


def create_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Thing Language Server",
        prog="thing-lsp",
    )
    parser.add_argument(
        "--tcp",
        action="store_true",
        help="Start server in TCP mode instead of stdio",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to in TCP mode (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=2087,
        help="Port to listen on in TCP mode (default: 2087)",
    )
    parser.add_argument(
        "--max-errors",
        type=int,
        default=0,
        help="Report at most this many errors per document (default: no limit)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Logging level (default: info)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """
    Main entry point for the Thing language server.

    Starts the server in stdio mode for IDE integration.
    """
    args = create_arg_parser().parse_args(argv)

    # Logs go to stderr; stdout carries the protocol in stdio mode
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    server = create_server(args.max_errors)

    if args.tcp:
        logger.info(f"Starting Thing LSP in TCP mode on {args.host}:{args.port}")
        server.start_tcp(args.host, args.port)
    else:
        logger.info("Starting Thing LSP in stdio mode")
        server.start_io()


if __name__ == "__main__":
    main()
