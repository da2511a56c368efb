"""
Conversion between string offsets and LSP positions.

LSP positions count characters in UTF-16 code units, so a character
outside the Basic Multilingual Plane occupies two columns.
"""

from lsprotocol import types


def utf16_length(text: str) -> int:
    """Length of ``text`` in UTF-16 code units."""
    return len(text.encode("utf-16-le")) // 2


def utf16_to_index(line_text: str, units: int) -> int:
    """Index into ``line_text`` of the character starting at ``units`` code units."""
    count = 0
    for index, char in enumerate(line_text):
        if count >= units:
            return index
        count += 2 if ord(char) > 0xFFFF else 1
    return len(line_text)


def position_to_offset(source: str, line: int, character: int) -> int:
    """Convert a 0-based LSP line/character position to a string offset."""
    offset = 0
    for _ in range(line):
        newline = source.find("\n", offset)
        if newline == -1:
            return len(source)
        offset = newline + 1
    line_end = source.find("\n", offset)
    if line_end == -1:
        line_end = len(source)
    return offset + utf16_to_index(source[offset:line_end], character)


def offset_to_position(source: str, offset: int) -> types.Position:
    """Convert a string offset to a 0-based LSP position."""
    offset = max(0, min(offset, len(source)))
    line_start = source.rfind("\n", 0, offset) + 1
    return types.Position(
        line=source.count("\n", 0, offset),
        character=utf16_length(source[line_start:offset]),
    )
