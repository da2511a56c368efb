"""
Token definitions for the Thing lexer.

This module defines the closed catalogue of token categories recognized by
the lexer, their display strings for diagnostics, and the immutable token
record produced by ``next_token``.
"""

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Enumeration of all token categories."""

    UNKNOWN = auto()
    END_OF_FILE = auto()
    WHITESPACE = auto()

    # Literals and names
    IDENTIFIER = auto()
    NUMBER = auto()
    STRING = auto()
    KEYWORD = auto()

    # Delimiters
    LEFT_PAREN = auto()     # (
    RIGHT_PAREN = auto()    # )
    LEFT_BRACE = auto()     # {
    RIGHT_BRACE = auto()    # }
    LEFT_BRACKET = auto()   # [
    RIGHT_BRACKET = auto()  # ]

    # Punctuation
    COMMA = auto()          # ,
    SEMICOLON = auto()      # ;
    COLON = auto()          # :
    ASSIGN = auto()         # =

    # Arithmetic operators
    PLUS = auto()           # +
    MINUS = auto()          # -
    ASTERISK = auto()       # *
    SLASH = auto()          # /
    PERCENT = auto()        # %
    CARET = auto()          # ^ (exponentiation)
    INCREMENT = auto()      # ++
    DECREMENT = auto()      # --
    TILDE = auto()          # ~
    BANG = auto()           # !
    QUESTION = auto()       # ?

    # Comparison operators
    EQUALS = auto()                 # ==
    NOT_EQUALS = auto()             # !=
    LESS_THAN = auto()              # <
    GREATER_THAN = auto()           # >
    LESS_THAN_OR_EQUAL = auto()     # <=
    GREATER_THAN_OR_EQUAL = auto()  # >=

    # Logical operators
    LOGICAL_AND = auto()    # &&
    LOGICAL_OR = auto()     # ||

    @property
    def display(self) -> str:
        """Canonical display string, used in diagnostics only."""
        return TOKEN_DISPLAY[self]

    def __str__(self) -> str:
        return self.display


TOKEN_DISPLAY: dict[TokenType, str] = {
    TokenType.UNKNOWN: "<unknown>",
    TokenType.END_OF_FILE: "<end-of-file>",
    TokenType.WHITESPACE: "<whitespace>",
    TokenType.IDENTIFIER: "<identifier>",
    TokenType.NUMBER: "<number literal>",
    TokenType.STRING: "<string-literal>",
    TokenType.KEYWORD: "<keyword>",
    TokenType.LEFT_PAREN: "(",
    TokenType.RIGHT_PAREN: ")",
    TokenType.LEFT_BRACE: "{",
    TokenType.RIGHT_BRACE: "}",
    TokenType.LEFT_BRACKET: "[",
    TokenType.RIGHT_BRACKET: "]",
    TokenType.COMMA: ",",
    TokenType.SEMICOLON: ";",
    TokenType.COLON: ":",
    TokenType.ASSIGN: "=",
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.ASTERISK: "*",
    TokenType.SLASH: "/",
    TokenType.PERCENT: "%",
    TokenType.CARET: "^",
    TokenType.INCREMENT: "++",
    TokenType.DECREMENT: "--",
    TokenType.TILDE: "~",
    TokenType.BANG: "!",
    TokenType.QUESTION: "?",
    TokenType.EQUALS: "==",
    TokenType.NOT_EQUALS: "!=",
    TokenType.LESS_THAN: "<",
    TokenType.GREATER_THAN: ">",
    TokenType.LESS_THAN_OR_EQUAL: "<=",
    TokenType.GREATER_THAN_OR_EQUAL: ">=",
    TokenType.LOGICAL_AND: "&&",
    TokenType.LOGICAL_OR: "||",
}


# Operator table, tried in order with a literal prefix comparison.
# Two-character operators must come before their one-character prefixes.
OPERATOR_TOKENS: tuple[tuple[str, TokenType], ...] = (
    ("++", TokenType.INCREMENT),
    ("--", TokenType.DECREMENT),
    (">=", TokenType.GREATER_THAN_OR_EQUAL),
    ("<=", TokenType.LESS_THAN_OR_EQUAL),
    ("!=", TokenType.NOT_EQUALS),
    ("==", TokenType.EQUALS),
    ("||", TokenType.LOGICAL_OR),
    ("&&", TokenType.LOGICAL_AND),
    ("<", TokenType.LESS_THAN),
    (">", TokenType.GREATER_THAN),
    (":", TokenType.COLON),
    (",", TokenType.COMMA),
    ("=", TokenType.ASSIGN),
    ("+", TokenType.PLUS),
    ("-", TokenType.MINUS),
    ("*", TokenType.ASTERISK),
    ("/", TokenType.SLASH),
    ("^", TokenType.CARET),
    ("~", TokenType.TILDE),
    ("%", TokenType.PERCENT),
    ("!", TokenType.BANG),
    ("?", TokenType.QUESTION),
    ("(", TokenType.LEFT_PAREN),
    (")", TokenType.RIGHT_PAREN),
    ("{", TokenType.LEFT_BRACE),
    ("}", TokenType.RIGHT_BRACE),
    ("[", TokenType.LEFT_BRACKET),
    ("]", TokenType.RIGHT_BRACKET),
    (";", TokenType.SEMICOLON),
)

KEYWORDS: frozenset[str] = frozenset({"auto", "for", "if", "else", "while"})

# Keywords that open a control block: keyword (header) statement [else statement]
CONTROL_KEYWORDS: frozenset[str] = frozenset({"if", "for", "while"})


@dataclass(frozen=True, slots=True)
class Token:
    """
    A lexical token.

    Attributes:
        type: The token category
        match: The text matched at the head of the lexed slice
        remainder: The unconsumed text following the match

    ``match + remainder`` is always exactly the text that was lexed.
    """

    type: TokenType
    match: str
    remainder: str

    def is_type(self, token_type: TokenType, value: str = "") -> bool:
        """Check the category and, when given, the matched text."""
        return self.type == token_type and (not value or self.match == value)

    def offset(self, source: str) -> int:
        """Return the 0-based offset of this token inside ``source``."""
        return len(source) - len(self.remainder) - len(self.match)

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.match!r})"

    def __str__(self) -> str:
        return f"{self.type.name.lower()} {self.match!r}"
