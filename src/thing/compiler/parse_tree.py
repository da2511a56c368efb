"""
Parse tree node definitions.

The parser produces a concrete tree of uniform ``ParseNode`` objects: a
token, an ordered list of owned children, and an optional embedded error.
Grammar failures are not raised; they are stored in the tree as error nodes
so that every failure point can be reported and the valid structure around
it is kept.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from thing.compiler.tokens import Token, TokenType


class ErrorKind(Enum):
    """Kinds of grammar error a parse node can carry."""

    NONE = "none"
    WRONG_TOKEN_TYPE = "wrong_token_type"
    UNEXPECTED_PREFIX_TOKEN = "unexpected_prefix_token"
    UNEXPECTED_INFIX_TOKEN = "unexpected_infix_token"
    NESTING_TOO_DEEP = "nesting_too_deep"


@dataclass(slots=True)
class ParseNode:
    """
    A node of the parse tree.

    Attributes:
        token: The token this node was built from
        children: Owned child nodes, in source order
        error: The error carried by this node, NONE for valid syntax
        expected: For WRONG_TOKEN_TYPE, the category that was required
    """

    token: Token
    children: list[ParseNode] = field(default_factory=list)
    error: ErrorKind = ErrorKind.NONE
    expected: Optional[TokenType] = None

    @classmethod
    def error_node(
        cls,
        token: Token,
        error: ErrorKind,
        expected: Optional[TokenType] = None,
    ) -> ParseNode:
        """Create a leaf node carrying a grammar error."""
        return cls(token, [], error, expected)

    @property
    def is_error(self) -> bool:
        return self.error != ErrorKind.NONE

    @property
    def match(self) -> str:
        return self.token.match

    @property
    def type(self) -> TokenType:
        return self.token.type

    def append(self, child: ParseNode) -> ParseNode:
        """Append a child and return self for chaining."""
        self.children.append(child)
        return self

    def walk(self) -> Iterator[ParseNode]:
        """Iterate over this node and all descendants, depth-first, pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def errors(self) -> list[ParseNode]:
        """Return every error node in the tree, in source order."""
        return [node for node in self.walk() if node.is_error]

    @property
    def has_errors(self) -> bool:
        return any(node.is_error for node in self.walk())

    def dump(self, indent: int = 0) -> str:
        """
        Render the tree as indented text, one node per line.

        Each line shows the node's matched text in quotes. Error nodes are
        followed by the error kind in brackets.
        """
        lines: list[str] = []
        stack: list[tuple[ParseNode, int]] = [(self, indent)]
        while stack:
            node, depth = stack.pop()
            line = f"{' ' * depth}'{node.match}'"
            if node.is_error:
                line += f"  [{node.error.value}"
                if node.expected is not None:
                    line += f": expected {node.expected.display}"
                line += "]"
            lines.append(line)
            stack.extend((child, depth + 2) for child in reversed(node.children))
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert the node (and all descendants) into nested dictionaries."""
        root = self._shallow_dict()
        stack = [(self, root)]
        while stack:
            node, converted = stack.pop()
            for child in node.children:
                child_dict = child._shallow_dict()
                converted["children"].append(child_dict)
                stack.append((child, child_dict))
        return root

    def _shallow_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.token.type.name.lower(),
            "match": self.token.match,
            "children": [],
        }
        if self.is_error:
            result["error"] = self.error.value
            if self.expected is not None:
                result["expected"] = self.expected.name.lower()
        return result

    def __repr__(self) -> str:
        return self._repr(nested=True)

    def _repr(self, nested: bool) -> str:
        # Grandchildren are elided as "..."
        parts = [repr(self.token.match)]
        if self.is_error:
            parts.append(f"error={self.error.value}")
        if self.children:
            if nested:
                preview = ", ".join(c._repr(nested=False) for c in self.children[:3])
                if len(self.children) > 3:
                    preview += ", ..."
            else:
                preview = "..."
            parts.append(f"children=[{preview}]")
        return f"ParseNode({', '.join(parts)})"
