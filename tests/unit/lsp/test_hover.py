"""Tests for hover information."""

from lsprotocol.types import MarkupKind

from thing.lsp.hover import get_hover, token_at
from thing.lsp.positions import offset_to_position, position_to_offset, utf16_length

GRINNING_FACE = "\U0001F600"


class TestPositions:
    def test_position_to_offset(self) -> None:
        source = "a;\n  b;"
        assert position_to_offset(source, 0, 0) == 0
        assert position_to_offset(source, 1, 2) == 5

    def test_position_past_line_end_is_clamped(self) -> None:
        assert position_to_offset("ab\ncd", 0, 10) == 2

    def test_position_past_last_line(self) -> None:
        assert position_to_offset("ab", 4, 0) == 2

    def test_offset_to_position(self) -> None:
        position = offset_to_position("a;\n  b;", 5)
        assert (position.line, position.character) == (1, 2)

    def test_utf16_length_counts_surrogate_pairs(self) -> None:
        assert utf16_length("abc") == 3
        assert utf16_length(f"a{GRINNING_FACE}b") == 4

    def test_positions_count_utf16_units(self) -> None:
        source = f'"{GRINNING_FACE}" + abc'
        assert position_to_offset(source, 0, 7) == 6
        assert offset_to_position(source, 6).character == 7


class TestHover:
    def test_token_at(self) -> None:
        token = token_at("abc + 1", 4)
        assert token is not None
        assert token.match == "+"

    def test_token_at_whitespace(self) -> None:
        assert token_at("abc + 1", 5) is None

    def test_hover_identifier(self) -> None:
        hover = get_hover("abc + 1", 0, 1)

        assert hover is not None
        assert hover.contents.kind == MarkupKind.Markdown
        assert hover.contents.value == "**<identifier>** `abc`"
        assert hover.range.start.character == 0
        assert hover.range.end.character == 3

    def test_hover_keyword_on_second_line(self) -> None:
        hover = get_hover("x;\nwhile (x) { }", 1, 2)

        assert hover is not None
        assert hover.contents.value == "**<keyword>** `while`"
        assert hover.range.start.line == 1

    def test_hover_operator(self) -> None:
        hover = get_hover("a <= b", 0, 3)
        assert hover is not None
        assert hover.contents.value == "**<=** `<=`"

    def test_hover_after_astral_character(self) -> None:
        hover = get_hover(f'"{GRINNING_FACE}" + abc', 0, 7)

        assert hover is not None
        assert hover.contents.value == "**<identifier>** `abc`"
        assert hover.range.start.character == 7
        assert hover.range.end.character == 10

    def test_no_hover_over_whitespace(self) -> None:
        assert get_hover("a   b", 0, 2) is None

    def test_no_hover_past_end(self) -> None:
        assert get_hover("a", 3, 0) is None
