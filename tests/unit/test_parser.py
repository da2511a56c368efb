"""
Unit tests for the Thing Parser.
"""

import pytest
from hypothesis import given, settings, strategies as st

from thing.compiler.parse_tree import ErrorKind
from thing.compiler.parser import MAX_NESTING_DEPTH, Parser, Precedence, lbp, parse, parse_program
from thing.compiler.tokens import TokenType
from thing.utils.diagnostics import locate


class TestParserBasics:
    """Basic parser functionality tests."""

    def test_single_number(self, parse):
        tree = parse("42")
        assert tree.type == TokenType.NUMBER
        assert tree.match == "42"
        assert tree.children == []

    def test_identifier_and_string(self, parse):
        assert parse("name").type == TokenType.IDENTIFIER
        assert parse('"text"').type == TokenType.STRING

    def test_expression_stops_at_first_unusable_token(self, parse):
        """A single expression ends where no infix rule applies."""
        tree = parse("1 2")
        assert tree.match == "1"
        assert not tree.has_errors

    def test_module_level_entry_points(self):
        assert parse("a + b").match == "+"
        assert parse_program("a;").children[0].match == "a"

    def test_lookahead_skips_whitespace(self, parser_factory):
        parser = parser_factory("   \n x")
        assert parser.token.type == TokenType.IDENTIFIER
        assert parser.peek(TokenType.IDENTIFIER)
        assert parser.advance().match == "x"
        assert parser.peek(TokenType.END_OF_FILE)

    def test_advance_at_end_of_file_stays_there(self, parser_factory):
        parser = parser_factory("")
        parser.advance()
        assert parser.peek(TokenType.END_OF_FILE)


class TestPrecedence:
    """Binding power and associativity."""

    def test_multiplication_binds_tighter_than_addition(self, parse, shape):
        assert shape(parse("5 * 2 + 4 / 3")) == (
            "+",
            [("*", ["5", "2"]), ("/", ["4", "3"])],
        )

    def test_left_associative_subtraction(self, parse, shape):
        assert shape(parse("1 - 2 - 3")) == ("-", [("-", ["1", "2"]), "3"])

    def test_right_associative_exponent(self, parse, shape):
        assert shape(parse("2 ^ 3 ^ 4")) == ("^", ["2", ("^", ["3", "4"])])

    def test_exponent_binds_tighter_than_product(self, parse, shape):
        assert shape(parse("2 * 3 ^ 2")) == ("*", ["2", ("^", ["3", "2"])])

    def test_mixed_sum_and_product(self, parse, shape):
        assert shape(parse("a + b * c - d")) == (
            "-",
            [("+", ["a", ("*", ["b", "c"])]), "d"],
        )

    def test_logical_and_binds_tighter_than_or(self, parse, shape):
        assert shape(parse("a || b && c")) == ("||", ["a", ("&&", ["b", "c"])])

    def test_relational_binds_tighter_than_equality(self, parse, shape):
        assert shape(parse("a == b < c")) == ("==", ["a", ("<", ["b", "c"])])

    def test_sum_binds_tighter_than_comparison(self, parse, shape):
        assert shape(parse("a + b >= c")) == (">=", [("+", ["a", "b"]), "c"])

    def test_parentheses_group(self, parse, shape):
        assert shape(parse("(1 + 2) * 3")) == ("*", [("+", ["1", "2"]), "3"])

    def test_parentheses_are_not_kept(self, parse):
        tree = parse("((x))")
        assert tree.match == "x"

    def test_binding_power_table(self):
        assert lbp(TokenType.LOGICAL_OR) < lbp(TokenType.LOGICAL_AND)
        assert lbp(TokenType.LOGICAL_AND) < lbp(TokenType.EQUALS)
        assert lbp(TokenType.EQUALS) < lbp(TokenType.LESS_THAN)
        assert lbp(TokenType.LESS_THAN) < lbp(TokenType.PLUS)
        assert lbp(TokenType.PLUS) < lbp(TokenType.ASTERISK)
        assert lbp(TokenType.ASTERISK) < lbp(TokenType.CARET)
        assert lbp(TokenType.CARET) < lbp(TokenType.BANG)
        assert lbp(TokenType.BANG) < lbp(TokenType.LEFT_PAREN)

    @pytest.mark.parametrize(
        "token_type",
        [
            TokenType.RIGHT_PAREN,
            TokenType.SEMICOLON,
            TokenType.COMMA,
            TokenType.END_OF_FILE,
            TokenType.ASSIGN,
            TokenType.PERCENT,
        ],
    )
    def test_terminators_have_no_binding_power(self, token_type):
        assert lbp(token_type) == Precedence.NONE


class TestPrefixAndPostfix:
    """Unary prefix rules and postfix operators."""

    def test_unary_minus(self, parse, shape):
        assert shape(parse("-x")) == ("-", ["x"])

    def test_unary_plus(self, parse, shape):
        assert shape(parse("+x")) == ("+", ["x"])

    def test_unary_minus_binds_tighter_than_product(self, parse, shape):
        assert shape(parse("-x * y")) == ("*", [("-", ["x"]), "y"])

    def test_keyword_prefix(self, parse, shape):
        assert shape(parse("auto x")) == ("auto", ["x"])

    def test_postfix_bang(self, parse, shape):
        assert shape(parse("n!")) == ("!", ["n"])

    def test_postfix_bang_in_expression(self, parse, shape):
        assert shape(parse("2 * n! + 1")) == ("+", [("*", ["2", ("!", ["n"])]), "1"])

    def test_prefix_bang_is_an_error(self, parse):
        tree = parse("!x")
        assert tree.error == ErrorKind.UNEXPECTED_PREFIX_TOKEN
        assert tree.match == "!"


class TestCallsAndInitializers:
    """Call syntax and brace initializers."""

    def test_call_with_arguments(self, parse, shape):
        assert shape(parse("f(1, 2)")) == ("f", [("(", ["1", "2"])])

    def test_call_without_arguments(self, parse, shape):
        tree = parse("f()")
        assert shape(tree) == ("f", ["("])
        assert tree.children[0].type == TokenType.LEFT_PAREN

    def test_call_with_expression_arguments(self, parse, shape):
        assert shape(parse("max(a + 1, b * 2)")) == (
            "max",
            [("(", [("+", ["a", "1"]), ("*", ["b", "2"])])],
        )

    def test_chained_calls(self, parse, shape):
        assert shape(parse("f(a)(b)")) == ("f", [("(", ["a"]), ("(", ["b"])])

    def test_call_in_binary_expression(self, parse, shape):
        assert shape(parse("f(x) + 1")) == ("+", [("f", [("(", ["x"])]), "1"])

    def test_brace_initializer(self, parse, shape):
        assert shape(parse("x{1 + 2}")) == ("x", [("{", [("+", ["1", "2"])])])


class TestControlBlocks:
    """if / for / while blocks."""

    def test_if_else(self, parse, shape):
        tree = parse("if (x) { y; } else { z; }")
        assert tree.match == "if"
        assert len(tree.children) == 3
        assert shape(tree) == (
            "if",
            [("(", ["x"]), ("{", ["y"]), ("else", [("{", ["z"])])],
        )
        assert not tree.has_errors

    def test_if_without_else(self, parse, shape):
        assert shape(parse("if (a < b) { a; }")) == (
            "if",
            [("(", [("<", ["a", "b"])]), ("{", ["a"])],
        )

    def test_for_header_has_three_clauses(self, parse, shape):
        tree = parse("for (i; i < 10; i + 1) { f(i); }")
        assert shape(tree) == (
            "for",
            [
                ("(", ["i", ("<", ["i", "10"]), ("+", ["i", "1"])]),
                ("{", [("f", [("(", ["i"])])]),
            ],
        )

    def test_while(self, parse, shape):
        assert shape(parse("while (n > 0) { n; }")) == (
            "while",
            [("(", [(">", ["n", "0"])]), ("{", ["n"])],
        )

    def test_body_can_be_expression_statement(self, parse, shape):
        tree = parse("while (x) f(x);")
        assert shape(tree) == ("while", [("(", ["x"]), ("f", [("(", ["x"])])])
        assert not tree.has_errors


class TestStatements:
    """Statement sequences and semicolons."""

    def test_empty_program(self, parse_program):
        root = parse_program("")
        assert root.type == TokenType.UNKNOWN
        assert root.match == ""
        assert root.children == []
        assert not root.has_errors

    def test_statement_sequence(self, parse_program, shape):
        root = parse_program("a; b + 1;\nf(c);")
        assert [shape(child) for child in root.children] == [
            "a",
            ("+", ["b", "1"]),
            ("f", [("(", ["c"])]),
        ]
        assert not root.has_errors

    def test_compound_statement(self, parse_program, shape):
        root = parse_program("{ a; b; }")
        assert [shape(child) for child in root.children] == [("{", ["a", "b"])]
        assert not root.has_errors

    def test_empty_compound_statement(self, parse_program):
        root = parse_program("{ }")
        assert root.children[0].type == TokenType.LEFT_BRACE
        assert root.children[0].children == []

    def test_nested_compound_statements(self, parse_program, shape):
        root = parse_program("{ { a; } b; }")
        assert shape(root.children[0]) == ("{", [("{", ["a"]), "b"])

    def test_block_needs_no_semicolon(self, parse_program):
        root = parse_program("if (x) { y; } z;")
        assert [child.match for child in root.children] == ["if", "z"]
        assert not root.has_errors

    def test_else_if_chain_needs_no_semicolon(self, parse_program):
        root = parse_program("if (a) { x; } else if (b) { y; } else { z; } w;")
        assert [child.match for child in root.children] == ["if", "w"]
        assert not root.has_errors

    def test_control_blocks_in_sequence(self, parse_program):
        root = parse_program("if (a) { b; } while (c) { d; }")
        assert [child.match for child in root.children] == ["if", "while"]
        assert not root.has_errors

    def test_statement_after_for_block(self, parse_program):
        root = parse_program("for (i; i < 3; i + 1) { f(i); } auto x;")
        assert [child.match for child in root.children] == ["for", "auto"]
        assert not root.has_errors

    def test_expression_body_takes_its_own_semicolon(self, parse_program, shape):
        root = parse_program("while (x) f(x);;")
        assert [shape(child) for child in root.children] == [
            ("while", [("(", ["x"]), ("f", [("(", ["x"])])])
        ]
        assert not root.has_errors

    def test_expression_body_then_missing_semicolon(self, parse_program):
        # The body consumes one ';', the statement needs another
        root = parse_program("while (x) f(x);")
        error = root.children[0]
        assert error.error == ErrorKind.WRONG_TOKEN_TYPE
        assert error.expected == TokenType.SEMICOLON
        assert error.type == TokenType.END_OF_FILE

    def test_missing_semicolon(self, parse_program):
        root = parse_program("a")
        error = root.children[0]
        assert error.error == ErrorKind.WRONG_TOKEN_TYPE
        assert error.expected == TokenType.SEMICOLON
        assert error.type == TokenType.END_OF_FILE

    def test_program_stops_at_unknown_token(self, parse_program):
        root = parse_program("a; @ b;")
        assert root.children[0].match == "a"
        error = root.children[1]
        assert error.error == ErrorKind.UNEXPECTED_PREFIX_TOKEN
        assert error.type == TokenType.UNKNOWN
        assert error.match == "@ b;"
        assert len(root.children) == 2


class TestErrorRecovery:
    """Grammar errors are embedded in the tree, never raised."""

    def test_missing_closing_paren(self, parse):
        tree = parse("(1 + 2")
        assert tree.error == ErrorKind.WRONG_TOKEN_TYPE
        assert tree.expected == TokenType.RIGHT_PAREN
        assert tree.type == TokenType.END_OF_FILE

    def test_missing_operand(self, parse):
        tree = parse("1 +")
        assert tree.match == "+"
        left, right = tree.children
        assert left.match == "1"
        assert right.error == ErrorKind.UNEXPECTED_PREFIX_TOKEN
        assert right.type == TokenType.END_OF_FILE

    def test_unexpected_prefix(self, parse):
        tree = parse(")")
        assert tree.error == ErrorKind.UNEXPECTED_PREFIX_TOKEN
        assert tree.match == ")"

    def test_unexpected_infix_replaces_left_operand(self, parse):
        tree = parse("x if")
        assert tree.error == ErrorKind.UNEXPECTED_INFIX_TOKEN
        assert tree.match == "if"

    def test_missing_closer_is_appended_to_list(self, parse):
        tree = parse("f(1, 2")
        arguments = tree.children[0]
        assert [child.match for child in arguments.children[:2]] == ["1", "2"]
        closing = arguments.children[2]
        assert closing.error == ErrorKind.WRONG_TOKEN_TYPE
        assert closing.expected == TokenType.RIGHT_PAREN

    def test_missing_delimiter_in_list(self, parse):
        tree = parse("f(1 2)")
        arguments = tree.children[0]
        assert arguments.children[0].match == "1"
        assert arguments.children[1].error == ErrorKind.WRONG_TOKEN_TYPE
        assert arguments.children[1].match == "2"

    def test_missing_closing_brace_in_initializer(self, parse):
        tree = parse("x{1")
        assert tree.error == ErrorKind.WRONG_TOKEN_TYPE
        assert tree.expected == TokenType.RIGHT_BRACE

    def test_missing_closing_brace_in_block(self, parse_program):
        root = parse_program("{ a;")
        block = root.children[0]
        assert block.children[0].match == "a"
        closing = block.children[-1]
        assert closing.error == ErrorKind.WRONG_TOKEN_TYPE
        assert closing.expected == TokenType.RIGHT_BRACE

    def test_block_stops_at_unknown_token(self, parse_program):
        root = parse_program("{ a; @")
        block = root.children[0]
        assert block.children[-1].error == ErrorKind.WRONG_TOKEN_TYPE
        assert block.children[-1].type == TokenType.UNKNOWN

    def test_truncated_if_block(self, parse):
        source = "if (x) { y(); "
        tree = parse(source)
        errors = tree.errors()
        assert len(errors) == 1
        assert errors[0].expected == TokenType.RIGHT_BRACE

        location = locate(errors[0], source)
        assert (location.line, location.column) == (1, len(source) + 1)

    def test_later_list_elements_still_parsed(self, parse):
        tree = parse("f(;, 2)")
        first, second = tree.children[0].children
        assert first.error == ErrorKind.UNEXPECTED_PREFIX_TOKEN
        assert second.match == "2"
        assert not second.is_error


class TestNestingLimit:
    """Nesting past MAX_NESTING_DEPTH is skipped as one error node."""

    def test_deep_parentheses(self, parse):
        tree = parse("(" * 1000 + "1" + ")" * 1000)
        assert tree.error == ErrorKind.NESTING_TOO_DEEP
        assert tree.match == "("
        assert tree.errors() == [tree]

    def test_limit_is_exact(self, parse):
        depth = MAX_NESTING_DEPTH - 1
        assert not parse("(" * depth + "1" + ")" * depth).has_errors
        depth = MAX_NESTING_DEPTH
        assert parse("(" * depth + "1" + ")" * depth).has_errors

    def test_deep_unclosed_calls(self, parse):
        errors = parse("f(" * 400).errors()
        assert errors[0].error == ErrorKind.NESTING_TOO_DEEP
        assert len(errors) == MAX_NESTING_DEPTH + 1

    def test_deep_blocks(self, parse_program):
        root = parse_program("{" * 1000)
        errors = root.errors()
        assert errors[0].error == ErrorKind.NESTING_TOO_DEEP
        assert all(node.expected == TokenType.RIGHT_BRACE for node in errors[1:])
        assert len(errors) == MAX_NESTING_DEPTH + 1

    def test_parsing_resumes_after_skipped_region(self, parse_program):
        deep = "(" * 150 + "x" + ")" * 150
        root = parse_program("a; f(" + deep + ", 2); b;")
        assert [child.match for child in root.children] == ["a", "f", "b"]
        arguments = root.children[1].children[0]
        assert arguments.children[0].error == ErrorKind.NESTING_TOO_DEEP
        assert arguments.children[1].match == "2"

    def test_long_operator_chain_is_not_nesting(self, parse):
        tree = parse("+".join(["1"] * 3000))
        assert not tree.has_errors


class TestParserProperties:
    """Parsing terminates and never raises, whatever the input."""

    grammar_text = st.text(
        alphabet="(){};,+-*/^!<>=&|ifelsewhoaut xyz019\"@ \n",
        max_size=60,
    )

    @given(grammar_text)
    @settings(max_examples=300)
    def test_parse_never_raises(self, source):
        tree = Parser(source).parse()
        for node in tree.errors():
            assert 0 <= node.token.offset(source) <= len(source)

    @given(grammar_text)
    @settings(max_examples=300)
    def test_parse_program_never_raises(self, source):
        root = Parser(source).parse_program()
        assert root.type == TokenType.UNKNOWN
        for node in root.errors():
            location = locate(node, source)
            assert location.line >= 1
            assert location.column >= 1

    @given(st.text(max_size=40))
    def test_arbitrary_text(self, source):
        parse(source)
        parse_program(source)
