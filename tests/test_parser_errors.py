# =============================================================================
# test_parser_errors.py - Syntax Error Tests
# =============================================================================
# Tests for error detection and reporting.
#
# Test coverage includes:
#   - Each LuaSyntaxError subclass raised at its commitment point
#   - Locations (line, column, offset) and the "near '...'" excerpt
#   - Hints pointing back at unclosed openers
#   - The nesting guard (TooDeepError)
# =============================================================================

import sys

import pytest
from glua import parse, LuaParser, ParserOptions
from glua.errors import (
    GluaError,
    LuaSyntaxError,
    ExpectedTokenError,
    InvalidAssignmentError,
    UnterminatedStringError,
    UnterminatedLongBracketError,
    InvalidEscapeError,
    MalformedNumberError,
    TrailingInputError,
    TooDeepError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def parse_error(source: str, error_type=LuaSyntaxError, **kwargs) -> LuaSyntaxError:
    """Parse source, assert it raises error_type, and return the exception."""
    with pytest.raises(error_type) as exc_info:
        parse(source, **kwargs)
    return exc_info.value


# =============================================================================
# Hierarchy Tests
# =============================================================================

class TestHierarchy:
    """All syntax errors share one base class."""

    @pytest.mark.parametrize("error_type", [
        ExpectedTokenError,
        InvalidAssignmentError,
        UnterminatedStringError,
        UnterminatedLongBracketError,
        InvalidEscapeError,
        MalformedNumberError,
        TrailingInputError,
        TooDeepError,
    ])
    def test_subclass_of_syntax_error(self, error_type):
        assert issubclass(error_type, LuaSyntaxError)
        assert issubclass(error_type, GluaError)


# =============================================================================
# Assignment Errors
# =============================================================================

class TestAssignmentErrors:
    """Test the expression statement rules."""

    def test_call_is_not_assignable(self):
        error = parse_error("f(x) = 1", InvalidAssignmentError)
        assert (error.location.line, error.location.column) == (1, 1)

    def test_parenthesized_name_is_not_assignable(self):
        parse_error("(a) = 1", InvalidAssignmentError)

    def test_later_target_checked(self):
        error = parse_error("a, f() = 1", InvalidAssignmentError)
        assert error.offset == 3

    def test_bare_name_is_not_a_statement(self):
        error = parse_error("x", ExpectedTokenError)
        assert error.expected == "'='"
        assert error.found == "<eof>"
        assert "expected '=' near '<eof>'" in str(error)

    def test_field_access_is_not_a_statement(self):
        parse_error("a.b\n", ExpectedTokenError)

    def test_equality_is_not_a_statement(self):
        error = parse_error("a == b", ExpectedTokenError)
        assert error.found == "=="

    def test_missing_values(self):
        error = parse_error("x = ", ExpectedTokenError, filename="main.lua")
        assert str(error).startswith("main.lua:1:5: error: expected expression")

    def test_missing_target_after_comma(self):
        error = parse_error("a, = 1", ExpectedTokenError)
        assert error.expected == "variable"


# =============================================================================
# Missing Token Errors
# =============================================================================

class TestExpectedToken:
    """Test errors after a commitment point."""

    def test_missing_end(self):
        error = parse_error("if x then", ExpectedTokenError)
        assert error.expected == "'end'"
        assert error.found == "<eof>"

    def test_hint_points_to_opener_on_earlier_line(self):
        error = parse_error("function f()\n  x = 1\n", ExpectedTokenError)
        assert error.location.line == 3
        assert error.hint == "to close 'function' at line 1"

    def test_no_hint_on_same_line(self):
        error = parse_error("do x = 1", ExpectedTokenError)
        assert error.hint is None

    def test_missing_then(self):
        error = parse_error("if x f() end", ExpectedTokenError)
        assert error.expected == "'then'"
        assert error.found == "f"

    def test_missing_do(self):
        assert parse_error("while x end").expected == "'do'"

    def test_missing_until(self):
        assert parse_error("repeat x = 1").expected == "'until'"

    def test_unclosed_call(self):
        error = parse_error("f(1, 2", ExpectedTokenError)
        assert error.expected == "')'"

    def test_unclosed_parenthesis(self):
        assert parse_error("x = (1 + 2").expected == "')'"

    def test_unclosed_table(self):
        assert parse_error("t = {1, 2").expected == "'}'"

    def test_unclosed_index(self):
        assert parse_error("x = t[1").expected == "']'"

    def test_empty_table_field(self):
        error = parse_error("t = {1,,2}", ExpectedTokenError)
        assert error.found == ","

    def test_for_needs_assign_or_in(self):
        error = parse_error("for i do end", ExpectedTokenError)
        assert error.expected == "'=' or 'in'"
        assert error.found == "do"

    def test_numeric_for_needs_limit(self):
        assert parse_error("for i = 1 do end").expected == "','"

    def test_local_needs_name(self):
        assert parse_error("local 1").expected == "variable name"

    def test_local_function_needs_name(self):
        assert parse_error("local function (").expected == "function name"

    def test_function_needs_parameters(self):
        assert parse_error("function f end").expected == "'('"

    def test_parameter_after_comma(self):
        error = parse_error("x = function(a,) end", ExpectedTokenError)
        assert error.expected == "parameter name"
        assert error.found == ")"

    def test_field_name(self):
        assert parse_error("x = a.").expected == "field name"

    def test_method_needs_arguments(self):
        assert parse_error("a:b").expected == "function arguments"

    def test_goto_needs_label(self):
        assert parse_error("goto 1").expected == "label name"

    def test_unclosed_label(self):
        assert parse_error("::a").expected == "'::'"

    def test_missing_operand(self):
        assert parse_error("x = 1 +").expected == "expression"

    def test_unary_without_operand(self):
        assert parse_error("x = -").expected == "expression"

    def test_keyword_used_as_name(self):
        assert parse_error("local end = 1").found == "end"


# =============================================================================
# Trailing Input Errors
# =============================================================================

class TestTrailingInput:
    """Input left after the chunk."""

    def test_stray_end(self):
        error = parse_error("x = 1 end", TrailingInputError)
        assert error.found == "end"
        assert error.offset == 6

    def test_statement_after_return(self):
        error = parse_error("return 1 x = 2", TrailingInputError)
        assert error.found == "x"

    def test_expression_is_not_a_statement(self):
        parse_error("1 + 2", TrailingInputError)

    def test_keyword_glued_to_non_ascii(self):
        error = parse_error("foré = 1", TrailingInputError)
        assert error.offset == 0


# =============================================================================
# Lexical Errors Through the Parser
# =============================================================================

class TestLexicalErrors:
    """Fatal acceptor errors surface unchanged."""

    def test_unterminated_string(self):
        error = parse_error('x = "abc', UnterminatedStringError)
        assert error.offset == 4
        assert error.source_line == 'x = "abc'
        assert str(error).splitlines()[2] == "        ^"

    def test_unterminated_long_string(self):
        parse_error("return [==[abc]=]", UnterminatedLongBracketError)

    def test_unterminated_long_comment(self):
        parse_error("x = 1 --[[ oops", UnterminatedLongBracketError)

    def test_malformed_number(self):
        error = parse_error("x = 3x", MalformedNumberError)
        assert "malformed number near '3x'" in str(error)

    def test_invalid_escape(self):
        parse_error(r'x = "\q"', InvalidEscapeError)

    def test_invalid_long_string_delimiter(self):
        error = parse_error("x = [=", LuaSyntaxError)
        assert "invalid long string delimiter" in str(error)

    def test_location_on_later_line(self):
        error = parse_error("a = 1\nb = 2\nc = 0x", MalformedNumberError, filename="t.lua")
        assert str(error.location) == "t.lua:3:5"


# =============================================================================
# Nesting Guard Tests
# =============================================================================

class TestNestingGuard:
    """Test the max_depth limit."""

    def test_deep_parentheses(self):
        error = parse_error("return " + "(" * 300 + "1" + ")" * 300, TooDeepError)
        assert error.limit == 200

    def test_deep_blocks_with_custom_limit(self):
        source = "do " * 20 + "end " * 20
        error = parse_error(source, TooDeepError, options=ParserOptions(max_depth=10))
        assert error.limit == 10

    def test_within_custom_limit(self):
        source = "do " * 20 + "end " * 20
        parse(source, options=ParserOptions(max_depth=50))

    def test_deep_unary_chain(self):
        parse_error("x = " + "- " * 300 + "1", TooDeepError)

    def test_deep_tables(self):
        parse_error("x = " + "{" * 300 + "}" * 300, TooDeepError)

    def test_depth_restored_after_error(self):
        parser = LuaParser("return " + "(" * 300 + "1" + ")" * 300)
        with pytest.raises(TooDeepError):
            parser.parse()
        assert parser._depth == 0

    def test_recursion_error_reported_as_too_deep(self, monkeypatch):
        def overflow(self, cursor):
            raise RecursionError("maximum recursion depth exceeded")

        monkeypatch.setattr(LuaParser, "_block", overflow)
        with pytest.raises(TooDeepError):
            parse("x = 1")

    def test_nested_calls_within_limit(self):
        """Call arguments use several Python frames per level."""
        parse("x = " + "f(" * 190 + "1" + ")" * 190)

    def test_nested_tables_within_limit(self):
        parse("x = " + "{" * 190 + "}" * 190)

    def test_nested_calls_past_limit_located(self):
        error = parse_error("x = " + "f(" * 250 + "1" + ")" * 250, TooDeepError)
        assert error.limit == 200
        assert error.location is not None

    def test_recursion_limit_restored(self):
        limit = sys.getrecursionlimit()
        parse("x = " + "f(" * 100 + "1" + ")" * 100)
        parse_error("return " + "(" * 300 + "1" + ")" * 300, TooDeepError)
        assert sys.getrecursionlimit() == limit

    def test_recursion_error_located_at_innermost_level(self, monkeypatch):
        def overflow(self, cursor):
            raise RecursionError("maximum recursion depth exceeded")

        monkeypatch.setattr(LuaParser, "_accept_table", overflow)
        error = parse_error("x = {}", TooDeepError)
        assert (error.location.line, error.location.column) == (1, 5)

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            LuaParser("", options=ParserOptions(max_depth=0))
