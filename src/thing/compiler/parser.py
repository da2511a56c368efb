"""
Thing Parser.

A top-down operator precedence (Pratt) parser that drives the lexer with
one token of lookahead and assembles a concrete parse tree.

Grammar failures never raise. Every mismatch becomes an error node in the
tree at the point of failure, so the parser always returns a tree and the
diagnostics layer can report all failures at once.

References:
    http://journal.stuffwithstuff.com/2011/03/19/pratt-parsers-expression-parsing-made-easy/
    https://matklad.github.io/2020/04/13/simple-but-powerful-pratt-parsing.html
"""

from __future__ import annotations

import logging

from thing.compiler.lexer import skip_whitespace
from thing.compiler.parse_tree import ErrorKind, ParseNode
from thing.compiler.tokens import CONTROL_KEYWORDS, Token, TokenType

logger = logging.getLogger(__name__)


# Operator precedence levels (higher = tighter binding)
class Precedence:
    """Left binding power levels."""

    NONE = 0
    LOGICAL_OR = 1      # ||
    LOGICAL_AND = 2     # &&
    EQUALITY = 3        # == !=
    RELATIONAL = 4      # < > <= >=
    SUM = 5             # + -
    PRODUCT = 6         # * /
    EXPONENT = 7        # ^
    PREFIX = 8          # unary + -, prefix keywords
    POSTFIX = 9         # !
    CALL = 10           # ( {
    KEYWORD = 11


# Anything missing here (notably ')' and end of file) has NONE and
# terminates an expression without being consumed.
PRECEDENCE_MAP: dict[TokenType, int] = {
    TokenType.LOGICAL_OR: Precedence.LOGICAL_OR,
    TokenType.LOGICAL_AND: Precedence.LOGICAL_AND,
    TokenType.EQUALS: Precedence.EQUALITY,
    TokenType.NOT_EQUALS: Precedence.EQUALITY,
    TokenType.LESS_THAN: Precedence.RELATIONAL,
    TokenType.LESS_THAN_OR_EQUAL: Precedence.RELATIONAL,
    TokenType.GREATER_THAN: Precedence.RELATIONAL,
    TokenType.GREATER_THAN_OR_EQUAL: Precedence.RELATIONAL,
    TokenType.PLUS: Precedence.SUM,
    TokenType.MINUS: Precedence.SUM,
    TokenType.ASTERISK: Precedence.PRODUCT,
    TokenType.SLASH: Precedence.PRODUCT,
    TokenType.CARET: Precedence.EXPONENT,
    TokenType.BANG: Precedence.POSTFIX,
    TokenType.LEFT_PAREN: Precedence.CALL,
    TokenType.LEFT_BRACE: Precedence.CALL,
    TokenType.KEYWORD: Precedence.KEYWORD,
}

# Deeper nesting is cut off with an error node so parsing never exhausts
# the interpreter stack.
MAX_NESTING_DEPTH = 100

OPENERS = (TokenType.LEFT_PAREN, TokenType.LEFT_BRACE)
CLOSERS = (TokenType.RIGHT_PAREN, TokenType.RIGHT_BRACE)
STOPPERS = CLOSERS + (TokenType.SEMICOLON, TokenType.COMMA)

BINARY_OPERATORS: frozenset[TokenType] = frozenset({
    TokenType.PLUS,
    TokenType.MINUS,
    TokenType.ASTERISK,
    TokenType.SLASH,
    TokenType.LESS_THAN,
    TokenType.LESS_THAN_OR_EQUAL,
    TokenType.GREATER_THAN,
    TokenType.GREATER_THAN_OR_EQUAL,
    TokenType.LOGICAL_AND,
    TokenType.LOGICAL_OR,
    TokenType.EQUALS,
    TokenType.NOT_EQUALS,
})


def lbp(token_type: TokenType) -> int:
    """Left binding power of a token category."""
    return PRECEDENCE_MAP.get(token_type, Precedence.NONE)


def _ends_with_block(node: ParseNode) -> bool:
    """Check whether a statement ends in a brace body and needs no ';'."""
    if node.type == TokenType.LEFT_BRACE:
        return True
    if not node.children:
        return False
    last = node.children[-1]
    if last.type == TokenType.LEFT_BRACE:
        return True
    if last.token.is_type(TokenType.KEYWORD, "else") and last.children:
        return _ends_with_block(last.children[-1])
    return False


class Parser:
    """
    Pratt parser over a single source text.

    The parser keeps exactly one token of lookahead in ``token``. Advancing
    re-invokes the lexer on the current token's remainder, skipping
    whitespace, so whitespace is never seen by the grammar rules.

    Usage:
        tree = Parser(source).parse()
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.token: Token = skip_whitespace(source)
        self.depth = 0

    # -------------------------------------------------------------------------
    # Token stream
    # -------------------------------------------------------------------------

    def peek(self, token_type: TokenType, value: str = "") -> bool:
        """Check the lookahead token without consuming it."""
        return self.token.is_type(token_type, value)

    def advance(self) -> Token:
        """Consume and return the lookahead token."""
        token = self.token
        self.token = skip_whitespace(token.remainder)
        return token

    def consume_match(self, token_type: TokenType) -> ParseNode:
        """
        Consume the lookahead token, requiring it to be ``token_type``.

        The token is consumed either way. On a mismatch the returned node is
        a WRONG_TOKEN_TYPE error carrying the expected category.
        """
        if self.token.type != token_type:
            return ParseNode.error_node(
                self.advance(), ErrorKind.WRONG_TOKEN_TYPE, token_type
            )
        return ParseNode(self.advance())

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def parse(self) -> ParseNode:
        """Parse the source as a single expression."""
        logger.debug("parsing expression (%d chars)", len(self.source))
        return self.expression()

    def parse_program(self) -> ParseNode:
        """
        Parse the source as a sequence of statements.

        Returns:
            A synthetic root node (category UNKNOWN, empty match) whose
            children are the top-level statements.
        """
        logger.debug("parsing program (%d chars)", len(self.source))
        root = ParseNode(Token(TokenType.UNKNOWN, "", self.source))
        while not self.peek(TokenType.END_OF_FILE) and not self.peek(TokenType.UNKNOWN):
            root.append(self.statement())
        if self.peek(TokenType.UNKNOWN):
            root.append(
                ParseNode.error_node(self.advance(), ErrorKind.UNEXPECTED_PREFIX_TOKEN)
            )
        return root

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    def statement(self) -> ParseNode:
        """
        Parse a statement: a compound block, or an expression followed by ';'.

        The ';' is not required when the statement ends in a brace body. A
        control block at the head of a statement is parsed on its own, so a
        keyword after its body starts the next statement instead of being
        taken as an infix operator.
        """
        if self.depth >= MAX_NESTING_DEPTH:
            error = self.nesting_error()
            if self.peek(TokenType.SEMICOLON):
                self.advance()
            return error

        self.depth += 1
        if self.peek(TokenType.LEFT_BRACE):
            result = self.compound_statement()
        elif self.token.type == TokenType.KEYWORD and self.token.match in CONTROL_KEYWORDS:
            result = self.control_block(self.advance())
        else:
            result = self.expression()
        self.depth -= 1

        if not _ends_with_block(result):
            semicolon = self.consume_match(TokenType.SEMICOLON)
            if semicolon.is_error:
                return semicolon
        return result

    def compound_statement(self) -> ParseNode:
        """Parse '{' statement* '}'."""
        result = self.consume_match(TokenType.LEFT_BRACE)
        if result.is_error:
            return result

        # Stop on end of file or unlexable input, otherwise a missing '}'
        # would loop forever.
        while not (
            self.peek(TokenType.RIGHT_BRACE)
            or self.peek(TokenType.END_OF_FILE)
            or self.peek(TokenType.UNKNOWN)
        ):
            result.append(self.statement())

        closing = self.consume_match(TokenType.RIGHT_BRACE)
        if closing.is_error:
            result.append(closing)
        return result

    def control_block(self, token: Token) -> ParseNode:
        """Parse ``if``/``for``/``while`` '(' header ')' statement ['else' statement]."""
        result = ParseNode(
            token,
            [
                self.delimited_list(
                    True, TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.SEMICOLON
                ),
                self.statement(),
            ],
        )
        if self.peek(TokenType.KEYWORD, "else"):
            else_token = self.advance()
            result.append(ParseNode(else_token, [self.statement()]))
        return result

    def delimited_list(
        self,
        consume_opener: bool,
        opener: TokenType,
        closer: TokenType,
        delimiter: TokenType,
    ) -> ParseNode:
        """
        Parse a delimited list of expressions.

        Args:
            consume_opener: Whether the opener still has to be consumed
            opener: Opening token category
            closer: Closing token category
            delimiter: Separator token category

        Returns:
            A node for the opener (or an empty placeholder when the opener was
            already consumed) whose children are the list elements. A missing
            closer is appended as a trailing error child.
        """
        if consume_opener:
            result = self.consume_match(opener)
        else:
            result = ParseNode(Token(TokenType.UNKNOWN, "", ""))

        while not self.peek(closer):
            result.append(self.expression())
            if not self.peek(delimiter):
                break
            self.advance()

        closing = self.consume_match(closer)
        if closing.is_error:
            result.append(closing)
        return result

    # -------------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------------

    def expression(self, rbp: int = Precedence.NONE) -> ParseNode:
        """
        Parse an expression with right binding power ``rbp``.

        This is the core of the Pratt parser: one prefix rule, then infix
        rules for as long as the lookahead binds tighter than ``rbp``.
        """
        if self.depth >= MAX_NESTING_DEPTH:
            return self.nesting_error()

        self.depth += 1
        prefix = self.advance()
        left = self.null_denotation(prefix)

        while rbp < lbp(self.token.type):
            infix = self.advance()
            left = self.left_denotation(infix, left)
        self.depth -= 1

        return left

    def nesting_error(self) -> ParseNode:
        """
        Skip an over-deep subexpression and report it as one error.

        Tokens are consumed up to the next unbalanced closer, ';' or ','
        (or end of file), so the enclosing rules resume where the skipped
        region ends. The error node carries the region's first token.
        """
        token = self.advance()
        logger.debug("nesting limit reached at offset %d", token.offset(self.source))
        balance = 1 if token.type in OPENERS else 0
        while not (self.peek(TokenType.END_OF_FILE) or self.peek(TokenType.UNKNOWN)):
            if balance == 0 and self.token.type in STOPPERS:
                break
            skipped = self.advance()
            if skipped.type in OPENERS:
                balance += 1
            elif skipped.type in CLOSERS:
                balance -= 1
        return ParseNode.error_node(token, ErrorKind.NESTING_TOO_DEEP)

    def null_denotation(self, token: Token) -> ParseNode:
        """Prefix rules, keyed on the category of the just-consumed token."""
        if token.type in (TokenType.IDENTIFIER, TokenType.NUMBER, TokenType.STRING):
            return ParseNode(token)

        if token.type == TokenType.KEYWORD and token.match in CONTROL_KEYWORDS:
            return self.control_block(token)

        if token.type in (TokenType.KEYWORD, TokenType.PLUS, TokenType.MINUS):
            return ParseNode(token, [self.expression(Precedence.PREFIX)])

        if token.type == TokenType.LEFT_PAREN:
            # Parentheses only group; they are not kept in the tree.
            result = self.expression()
            closing = self.consume_match(TokenType.RIGHT_PAREN)
            if closing.is_error:
                return closing
            return result

        return ParseNode.error_node(token, ErrorKind.UNEXPECTED_PREFIX_TOKEN)

    def left_denotation(self, token: Token, left: ParseNode) -> ParseNode:
        """Infix and postfix rules, given the already-parsed left operand."""
        if token.type in BINARY_OPERATORS:
            return ParseNode(token, [left, self.expression(lbp(token.type))])

        # Right-associative: one notch less binding power on the right.
        if token.type == TokenType.CARET:
            return ParseNode(token, [left, self.expression(lbp(token.type) - 1)])

        if token.type == TokenType.BANG:
            return ParseNode(token, [left])

        # Call: the argument list becomes a '(' child of the callee.
        if token.type == TokenType.LEFT_PAREN:
            arguments = self.delimited_list(
                False, TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.COMMA
            )
            return left.append(ParseNode(token, arguments.children))

        # Brace initializer: name{expression}
        if token.type == TokenType.LEFT_BRACE:
            left.append(ParseNode(token, [self.expression()]))
            closing = self.consume_match(TokenType.RIGHT_BRACE)
            if closing.is_error:
                return closing
            return left

        return ParseNode.error_node(token, ErrorKind.UNEXPECTED_INFIX_TOKEN)


def parse(source: str) -> ParseNode:
    """
    Parse ``source`` as a single expression.

    Always returns a tree; grammar errors are embedded as error nodes.
    """
    return Parser(source).parse()


def parse_program(source: str) -> ParseNode:
    """Parse ``source`` as a sequence of statements under a synthetic root."""
    return Parser(source).parse_program()
