"""Hover information: the token under the cursor and its category."""

from typing import Optional

from lsprotocol import types

from thing.compiler.lexer import iter_tokens
from thing.compiler.tokens import Token, TokenType
from thing.lsp.positions import offset_to_position, position_to_offset


def token_at(source: str, offset: int) -> Optional[Token]:
    """Find the non-whitespace token covering ``offset``, if any."""
    for token in iter_tokens(source):
        start = token.offset(source)
        if start > offset or token.type == TokenType.END_OF_FILE:
            return None
        if offset < start + len(token.match):
            if token.type == TokenType.WHITESPACE:
                return None
            return token
    return None


def get_hover(source: str, line: int, character: int) -> Optional[types.Hover]:
    """
    Build hover content for the token at a position.

    Returns:
        Markdown naming the token category and its text, or None over
        whitespace and past the end of the document.
    """
    token = token_at(source, position_to_offset(source, line, character))
    if token is None:
        return None

    start = token.offset(source)
    text = token.match.split("\n", 1)[0]
    value = f"**{token.type.display}** `{text}`"

    return types.Hover(
        contents=types.MarkupContent(kind=types.MarkupKind.Markdown, value=value),
        range=types.Range(
            start=offset_to_position(source, start),
            end=offset_to_position(source, start + len(text)),
        ),
    )
