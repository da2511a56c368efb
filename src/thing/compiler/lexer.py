"""
Thing Lexer (Tokenizer).

Recognizes a single token at the head of a text slice. The lexer is a pure
function: it holds no state, never raises, and every token it returns
carries the unconsumed remainder so the caller can continue from there.

Recognition order (first match wins, anchored at position 0):

    1. empty input           -> END_OF_FILE
    2. whitespace run        -> WHITESPACE
    3. operator table        -> longest operator first, literal prefix match
    4. identifier            -> KEYWORD or IDENTIFIER
    5. quoted string         -> STRING
    6. floating numeral      -> NUMBER
    7. integer numeral       -> NUMBER

Text that matches none of these comes back as a single UNKNOWN token that
spans the entire rest of the input.
"""

import logging
import re
from typing import Iterator, Optional

from thing.compiler.tokens import KEYWORDS, OPERATOR_TOKENS, Token, TokenType

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_IDENTIFIER = re.compile(r"[_a-zA-Z][_0-9a-zA-Z]*")
_QUOTED_STRING = re.compile(r'"(?:[^"\\]|\\.)*"', re.DOTALL)
_FLOAT_NUMBER = re.compile(r"[0-9]+\.[0-9]*(?:[eEpP][0-9]+)?[lLfF]?")
_INTEGER_NUMBER = re.compile(
    r"0[xX][0-9A-Fa-f]+"
    r"|0[bB][01]+"
    r"|0[oO][0-7]+"
    r"|[0-9]+"
)


def _split(text: str, token_type: TokenType, length: int) -> Token:
    return Token(token_type, text[:length], text[length:])


def next_token(text: str) -> Token:
    """
    Recognize the next token at the head of ``text``.

    Args:
        text: The remaining source text

    Returns:
        The recognized token. Never fails: unrecognizable input yields an
        UNKNOWN token covering all of ``text``.
    """
    if not text:
        return Token(TokenType.END_OF_FILE, "", "")

    match = _WHITESPACE.match(text)
    if match:
        return _split(text, TokenType.WHITESPACE, match.end())

    for operator, token_type in OPERATOR_TOKENS:
        if text.startswith(operator):
            return _split(text, token_type, len(operator))

    match = _IDENTIFIER.match(text)
    if match:
        token_type = TokenType.KEYWORD if match.group() in KEYWORDS else TokenType.IDENTIFIER
        return _split(text, token_type, match.end())

    for pattern, token_type in (
        (_QUOTED_STRING, TokenType.STRING),
        (_FLOAT_NUMBER, TokenType.NUMBER),
        (_INTEGER_NUMBER, TokenType.NUMBER),
    ):
        match = pattern.match(text)
        if match:
            return _split(text, token_type, match.end())

    logger.debug("no token recognized at %r", text[:20])
    return Token(TokenType.UNKNOWN, text, "")


def iter_tokens(text: str) -> Iterator[Token]:
    """
    Yield every token of ``text``, whitespace included, ending with END_OF_FILE.

    Concatenating the matched text of the yielded tokens reproduces ``text``.
    """
    while True:
        token = next_token(text)
        yield token
        if token.type == TokenType.END_OF_FILE:
            return
        text = token.remainder


def skip_whitespace(text: str) -> Token:
    """Return the next token of ``text`` that is not whitespace."""
    token = next_token(text)
    while token.type == TokenType.WHITESPACE:
        token = next_token(token.remainder)
    return token


class Lexer:
    """
    Tokenizer for Thing source code.

    Wraps ``next_token`` for tooling that wants a token list rather than a
    parse tree (syntax highlighters, the ``thing tokens`` command). Whitespace
    tokens are dropped.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
        # or iterate: for token in lexer: ...
    """

    def __init__(self, source: str, filename: Optional[str] = None) -> None:
        """
        Initialize the lexer with source code.

        Args:
            source: The source code to tokenize
            filename: Optional filename, kept for reporting
        """
        self.source = source
        self.filename = filename

    def __iter__(self) -> Iterator[Token]:
        for token in iter_tokens(self.source):
            if token.type != TokenType.WHITESPACE:
                yield token

    def tokenize(self) -> list[Token]:
        """
        Tokenize the whole source.

        Returns:
            The non-whitespace tokens, the last one always END_OF_FILE.
        """
        return list(self)
