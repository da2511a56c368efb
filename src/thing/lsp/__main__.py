"""
Entry point for running the Thing LSP server as a module.

Usage:
    python -m thing.lsp
    python -m thing.lsp --tcp --port 2087
"""

from thing.lsp.server import main

if __name__ == "__main__":
    main()
