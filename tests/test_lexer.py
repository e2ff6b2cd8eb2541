# =============================================================================
# test_lexer.py - Lexical Acceptor Unit Tests
# =============================================================================
# Tests for the terminal acceptors used by the scannerless parser.
#
# Test coverage includes:
#   - Trivia: whitespace, short and long comments
#   - Symbols under maximal munch
#   - Keyword boundary checks and reserved-word rejection for names
#   - Numerals: decimal, hexadecimal, exponents, malformed forms
#   - Quoted strings with every escape form, long bracket strings
#   - Purity: failed acceptors hand back the cursor they were given
# =============================================================================

import pytest
from glua.cursor import Cursor
from glua.lexer import (
    TokenType,
    KEYWORDS,
    skip_trivia,
    peek_symbol,
    peek_word,
    accept_literal,
    accept_symbol,
    accept_keyword,
    accept_name,
    accept_numeral,
    accept_literal_string,
    long_bracket_level,
)
from glua.errors import (
    LuaSyntaxError,
    UnterminatedStringError,
    UnterminatedLongBracketError,
    InvalidEscapeError,
    MalformedNumberError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def numeral(source: bytes) -> str:
    """Accept a numeral from source and return its text."""
    _, token = accept_numeral(Cursor(source))
    assert token is not None
    return token.text


def string_value(source: bytes) -> bytes:
    """Accept a string literal from source and return its decoded value."""
    _, token = accept_literal_string(Cursor(source))
    assert token is not None
    return token.value


# =============================================================================
# Trivia Tests
# =============================================================================

class TestTrivia:
    """Test skipping of whitespace and comments."""

    def test_whitespace(self):
        assert skip_trivia(Cursor(b" \t\r\n\v\fx")).offset == 6

    def test_short_comment(self):
        source = b"-- comment\n  x"
        assert skip_trivia(Cursor(source)).offset == source.index(b"x")

    def test_short_comment_at_end_of_input(self):
        assert skip_trivia(Cursor(b"-- no newline")).at_end()

    def test_long_comment(self):
        source = b"--[==[ a ]] still ]=] comment ]==]x"
        assert skip_trivia(Cursor(source)).offset == source.index(b"x")

    def test_bracket_without_long_opener_is_short_comment(self):
        source = b"--[ not long\nx"
        assert skip_trivia(Cursor(source)).offset == source.index(b"x")

    def test_unterminated_long_comment(self):
        with pytest.raises(UnterminatedLongBracketError) as exc_info:
            skip_trivia(Cursor(b"--[[ never closed"))
        assert "long comment" in str(exc_info.value)

    def test_minus_is_not_trivia(self):
        assert skip_trivia(Cursor(b"-x")).offset == 0


# =============================================================================
# Symbol Tests
# =============================================================================

class TestSymbols:
    """Test punctuation under maximal munch."""

    @pytest.mark.parametrize("source,expected", [
        (b"...", "..."),
        (b"..", ".."),
        (b".x", "."),
        (b"==", "=="),
        (b"= =", "="),
        (b"~=", "~="),
        (b"~x", "~"),
        (b"//", "//"),
        (b"<<", "<<"),
        (b"<=", "<="),
        (b"::", "::"),
        (b":m", ":"),
    ])
    def test_longest_symbol(self, source, expected):
        assert peek_symbol(Cursor(source)) == expected

    def test_dot_does_not_match_concat(self):
        cursor = Cursor(b"..")
        assert accept_symbol(cursor, ".") == (cursor, None)

    def test_assign_does_not_match_equality(self):
        cursor = Cursor(b"==")
        assert accept_symbol(cursor, "=")[1] is None

    def test_bracket_does_not_match_long_string(self):
        assert accept_symbol(Cursor(b"[[x]]"), "[")[1] is None
        assert accept_symbol(Cursor(b"[=[x]=]"), "[")[1] is None
        assert accept_symbol(Cursor(b"[1]"), "[")[1] is not None

    def test_symbol_skips_leading_trivia(self):
        after, token = accept_symbol(Cursor(b"  -- c\n  ("), "(")
        assert token.type == TokenType.SYMBOL
        assert token.offset == 9
        assert after.at_end()

    def test_literal_has_no_boundary_check(self):
        after, token = accept_literal(Cursor(b"forward"), "for")
        assert token.text == "for"
        assert after.offset == 3


# =============================================================================
# Keyword and Name Tests
# =============================================================================

class TestKeywordsAndNames:
    """Test reserved words, identifiers and their boundary."""

    def test_twenty_two_keywords(self):
        assert len(KEYWORDS) == 22

    def test_keyword_followed_by_space(self):
        after, token = accept_keyword(Cursor(b"for i"), "for")
        assert token.type == TokenType.KEYWORD
        assert after.offset == 3

    def test_keyword_followed_by_punctuation(self):
        assert accept_keyword(Cursor(b"end)"), "end")[1] is not None

    def test_keyword_at_end_of_input(self):
        assert accept_keyword(Cursor(b"end"), "end")[1] is not None

    def test_keyword_prefix_of_name_rejected(self):
        """'forward' is a name, never 'for' followed by 'ward'."""
        cursor = Cursor(b"forward")
        assert accept_keyword(cursor, "for") == (cursor, None)

    def test_keyword_followed_by_non_ascii_rejected(self):
        cursor = Cursor("foré".encode("utf-8"))
        assert accept_keyword(cursor, "for") == (cursor, None)

    def test_name(self):
        after, token = accept_name(Cursor(b"  forward = 1"))
        assert token.type == TokenType.NAME
        assert token.text == "forward"
        assert after.offset == 9

    def test_name_with_digits_and_underscores(self):
        assert accept_name(Cursor(b"_a1_b2"))[1].text == "_a1_b2"

    @pytest.mark.parametrize("word", sorted(KEYWORDS))
    def test_reserved_word_is_not_a_name(self, word):
        cursor = Cursor(word.encode("ascii"))
        assert accept_name(cursor) == (cursor, None)

    def test_name_cannot_start_with_digit(self):
        assert accept_name(Cursor(b"1abc"))[1] is None

    def test_peek_word(self):
        cursor = Cursor(b"  local x")
        assert peek_word(cursor) == "local"
        assert peek_word(Cursor(b"(x)")) is None


# =============================================================================
# Numeral Tests
# =============================================================================

class TestNumerals:
    """Test decimal and hexadecimal numerals."""

    @pytest.mark.parametrize("source", [
        b"3", b"345", b"3.0", b"3.1416", b"314.16e-2", b"0.31416E1",
        b"34e1", b"3.", b".5", b"0xff", b"0XBEBADA", b"0x0.1E",
        b"0xA23p-4", b"0X1.921FB54442D18P+1", b"1e+10",
    ])
    def test_valid_numeral(self, source):
        assert numeral(source) == source.decode("ascii")

    def test_numeral_stops_before_concat(self):
        """'1..2' is 1 .. 2, not a malformed 1. followed by .2"""
        after, token = accept_numeral(Cursor(b"1..2"))
        assert token.text == "1"
        assert after.offset == 1

    def test_numeral_stops_at_operator(self):
        assert numeral(b"1+2") == "1"

    def test_not_a_numeral(self):
        cursor = Cursor(b"x1")
        assert accept_numeral(cursor) == (cursor, None)
        assert accept_numeral(Cursor(b".x"))[1] is None

    @pytest.mark.parametrize("source,text", [
        (b"1e", "1e"),
        (b"1e+", "1e"),
        (b"0x", "0x"),
        (b"3x", "3x"),
        (b"1.2.3", "1.2.3"),
        (b"0xfg", "0xfg"),
    ])
    def test_malformed_numeral(self, source, text):
        with pytest.raises(MalformedNumberError) as exc_info:
            accept_numeral(Cursor(source))
        assert exc_info.value.text.startswith(text)


# =============================================================================
# Quoted String Tests
# =============================================================================

class TestQuotedStrings:
    """Test quoted literals and escape decoding."""

    def test_double_quoted(self):
        after, token = accept_literal_string(Cursor(b'"abc" x'))
        assert token.type == TokenType.STRING
        assert token.value == b"abc"
        assert token.text == '"abc"'
        assert after.offset == 5

    def test_single_quoted_with_other_quote(self):
        assert string_value(b"'say \"hi\"'") == b'say "hi"'

    def test_simple_escapes(self):
        assert string_value(rb'"\a\b\f\n\r\t\v\\\"\'"') == b"\a\b\f\n\r\t\v\\\"'"

    def test_decimal_escapes(self):
        assert string_value(rb'"\65\066\0489"') == b"AB09"

    def test_hex_escape(self):
        assert string_value(rb'"\x41\x7a"') == b"Az"

    def test_unicode_escape(self):
        assert string_value(rb'"\u{48}\u{E9}\u{20AC}"') == "Hé€".encode("utf-8")

    def test_unicode_escape_beyond_unicode_range(self):
        """Values up to 2^31 are encoded with the six-byte UTF-8 scheme."""
        assert string_value(rb'"\u{7FFFFFFF}"') == b"\xfd\xbf\xbf\xbf\xbf\xbf"

    def test_z_escape_skips_whitespace(self):
        assert string_value(b'"a\\z  \n   b"') == b"ab"

    def test_escaped_newline(self):
        assert string_value(b'"a\\\nb"') == b"a\nb"
        assert string_value(b'"a\\\r\nb"') == b"a\nb"

    def test_raw_bytes_kept(self):
        assert string_value('"é"'.encode("utf-8")) == "é".encode("utf-8")

    def test_unterminated_at_end_of_input(self):
        with pytest.raises(UnterminatedStringError):
            accept_literal_string(Cursor(b'"abc'))

    def test_unterminated_at_newline(self):
        with pytest.raises(UnterminatedStringError) as exc_info:
            accept_literal_string(Cursor(b'"abc\nrest"'))
        assert exc_info.value.quote == '"'

    @pytest.mark.parametrize("source,escape", [
        (rb'"\q"', "\\q"),
        (rb'"\256"', "\\256"),
        (rb'"\x4"', '\\x4"'),
        (rb'"\u48"', "\\u4"),
        (rb'"\u{}"', "\\u{}"),
    ])
    def test_invalid_escape(self, source, escape):
        with pytest.raises(InvalidEscapeError) as exc_info:
            accept_literal_string(Cursor(source))
        assert exc_info.value.escape == escape


# =============================================================================
# Long String Tests
# =============================================================================

class TestLongStrings:
    """Test long bracket strings."""

    def test_level_zero(self):
        after, token = accept_literal_string(Cursor(b"[[abc]] x"))
        assert token.value == b"abc"
        assert token.text == "[[abc]]"
        assert after.offset == 7

    def test_matching_level(self):
        assert string_value(b"[==[abc]==]") == b"abc"

    def test_inner_closers_of_other_levels(self):
        assert string_value(b"[==[a]]b]=]c]==]") == b"a]]b]=]c"

    def test_mismatched_level_is_unterminated(self):
        with pytest.raises(UnterminatedLongBracketError) as exc_info:
            accept_literal_string(Cursor(b"[==[abc]=]"))
        assert exc_info.value.level == 2

    def test_first_newline_dropped(self):
        assert string_value(b"[[\nline]]") == b"line"
        assert string_value(b"[[\r\nline]]") == b"line"
        assert string_value(b"[[\n\nline]]") == b"\nline"

    def test_line_breaks_normalized(self):
        assert string_value(b"[[a\r\nb\rc\n\rd]]") == b"a\nb\nc\nd"

    def test_escapes_not_decoded(self):
        assert string_value(rb"[[a\nb]]") == rb"a\nb"

    def test_invalid_delimiter(self):
        with pytest.raises(LuaSyntaxError, match="invalid long string delimiter"):
            accept_literal_string(Cursor(b"[=x"))

    def test_plain_bracket_is_not_a_string(self):
        cursor = Cursor(b"[1]")
        assert accept_literal_string(cursor) == (cursor, None)

    def test_long_bracket_level(self):
        assert long_bracket_level(b"[[", 0) == 0
        assert long_bracket_level(b"[===[", 0) == 3
        assert long_bracket_level(b"[=", 0) is None
        assert long_bracket_level(b"x[[", 1) == 0


# =============================================================================
# Purity Tests
# =============================================================================

class TestPurity:
    """Acceptors never change their input cursor."""

    @pytest.mark.parametrize("acceptor", [
        accept_name,
        accept_numeral,
        accept_literal_string,
        lambda cursor: accept_symbol(cursor, "("),
        lambda cursor: accept_keyword(cursor, "while"),
    ])
    def test_failure_returns_original_cursor(self, acceptor):
        cursor = Cursor(b"  ;")
        after, token = acceptor(cursor)
        assert token is None
        assert after is cursor

    def test_repeatable(self):
        cursor = Cursor(b"  name rest")
        assert accept_name(cursor) == accept_name(cursor)
        assert cursor.offset == 0
