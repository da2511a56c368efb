"""
Thing - a Pratt parser front end for a small C-like expression language.

Turns source text into a concrete parse tree with grammar errors embedded
as nodes, so partially valid input still yields a usable tree.
"""

from thing.compiler import ParseResult, parse_source
from thing.compiler.lexer import Lexer, next_token
from thing.compiler.parser import Parser, parse, parse_program

__version__ = "0.1.0"
__all__ = [
    "parse",
    "parse_program",
    "parse_source",
    "next_token",
    "Lexer",
    "Parser",
    "ParseResult",
]
