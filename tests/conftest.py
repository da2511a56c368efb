"""
Pytest configuration and shared fixtures for Thing tests.
"""

import pytest

from thing.compiler.lexer import Lexer
from thing.compiler.parse_tree import ParseNode
from thing.compiler.parser import Parser
from thing.compiler.tokens import Token


@pytest.fixture
def lexer_factory():
    """Factory fixture for creating lexers."""

    def _create_lexer(source: str, filename: str = "test.thing") -> Lexer:
        return Lexer(source, filename)

    return _create_lexer


@pytest.fixture
def parser_factory():
    """Factory fixture for creating parsers from source."""

    def _create_parser(source: str) -> Parser:
        return Parser(source)

    return _create_parser


@pytest.fixture
def tokenize(lexer_factory):
    """Fixture to tokenize source code, whitespace dropped."""

    def _tokenize(source: str) -> list[Token]:
        return lexer_factory(source).tokenize()

    return _tokenize


@pytest.fixture
def parse(parser_factory):
    """Fixture to parse source code as a single expression."""

    def _parse(source: str) -> ParseNode:
        return parser_factory(source).parse()

    return _parse


@pytest.fixture
def parse_program(parser_factory):
    """Fixture to parse source code as a statement sequence."""

    def _parse_program(source: str) -> ParseNode:
        return parser_factory(source).parse_program()

    return _parse_program


@pytest.fixture
def shape():
    """Fixture reducing a parse tree to nested ``(match, [children])`` tuples."""

    def _shape(node: ParseNode):
        if not node.children:
            return node.match
        return (node.match, [_shape(child) for child in node.children])

    return _shape
