"""
Thing Compiler Package.

This package contains the parsing front end:
- tokens: Token categories and the token record
- lexer: Recognizes one token at the head of a text slice
- parse_tree: The uniform parse node with embedded errors
- parser: Pratt parser assembling the parse tree
"""

from __future__ import annotations

from dataclasses import dataclass, field

from thing.compiler.lexer import Lexer, iter_tokens, next_token
from thing.compiler.parse_tree import ErrorKind, ParseNode
from thing.compiler.parser import Parser, Precedence, lbp, parse, parse_program
from thing.compiler.tokens import KEYWORDS, Token, TokenType
from thing.utils.diagnostics import Diagnostic, diagnose


@dataclass
class ParseResult:
    """
    Result of parsing one source text.

    Attributes:
        source: The parsed text
        filename: Name used in diagnostics
        tree: Root of the parse tree
        diagnostics: One diagnostic per error node in ``tree``
    """

    source: str
    filename: str
    tree: ParseNode
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def parse_source(
    source: str,
    filename: str = "<input>",
    program: bool = True,
    max_errors: int = 0,
) -> ParseResult:
    """
    Parse source text and collect its diagnostics.

    Args:
        source: Source text
        filename: Name used in diagnostics
        program: Parse a statement sequence (True) or a single expression
        max_errors: Limit on collected diagnostics (0 means no limit)

    Returns:
        The tree together with its diagnostics.
    """
    tree = parse_program(source) if program else parse(source)
    return ParseResult(
        source=source,
        filename=filename,
        tree=tree,
        diagnostics=diagnose(tree, source, filename, max_errors),
    )


__all__ = [
    "ErrorKind",
    "KEYWORDS",
    "Lexer",
    "ParseNode",
    "ParseResult",
    "Parser",
    "Precedence",
    "Token",
    "TokenType",
    "iter_tokens",
    "lbp",
    "next_token",
    "parse",
    "parse_program",
    "parse_source",
]
