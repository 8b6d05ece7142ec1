"""Tests for the command argument tokenizer."""

import pytest

from logkv_shell.tokenizer import ParseError, Tokenizer, parse_token


def tokens(text):
    tokenizer = Tokenizer(text)
    result = []
    while True:
        token = tokenizer.next_token()
        if token is None:
            return result
        result.append(token)


class TestParseToken:
    """Test single token extraction."""

    def test_quoted_and_bare_tokens(self):
        """Test that quotes group whitespace into one token."""
        assert tokens("'a b' c") == ["a b", "c"]

    def test_absent_at_end(self):
        """Test that only whitespace left means no token."""
        assert parse_token("   ", 0) == (None, 3)
        assert parse_token("", 0) == (None, 0)

    def test_empty_quoted_token_is_not_absent(self):
        """Test that an empty quoted string is an empty token."""
        assert parse_token('""', 0) == ("", 2)
        assert tokens("k ''") == ["k", ""]

    def test_bare_token_stops_before_whitespace(self):
        """Test that the separator after a bare token is left unconsumed."""
        assert parse_token(" abc def", 0) == ("abc", 4)
        assert parse_token("abc\tdef", 0) == ("abc", 3)

    def test_quoted_token_consumes_closing_quote(self):
        """Test that the cursor moves past the closing quote."""
        assert parse_token('"a b" c', 0) == ("a b", 5)

    def test_other_quote_is_literal(self):
        """Test that the non-terminating quote is copied verbatim."""
        assert tokens("\"it's\" 'say \"hi\"'") == ["it's", 'say "hi"']
        assert tokens('ab"c') == ['ab"c']

    def test_escapes(self):
        """Test every supported escape sequence."""
        text = r'"\' \" \\ \/ \b \f \n \r \t"'
        assert tokens(text) == ["' \" \\ / \b \f \n \r \t"]

    def test_newline_escape(self):
        """Test that \\n inside quotes becomes a literal newline."""
        assert tokens(r'"line1\nline2"') == ["line1\nline2"]

    def test_escaped_space_in_bare_token(self):
        """Test that escapes also work outside quotes."""
        assert tokens(r"a\tb c") == ["a\tb", "c"]


class TestParseErrors:
    """Test malformed arguments."""

    def test_unterminated_quote(self):
        """Test that a missing closing quote fails at the end of the text."""
        text = '"unterminated'
        with pytest.raises(ParseError) as excinfo:
            parse_token(text, 0)
        assert excinfo.value.position == len(text)

    def test_unrecognized_escape(self):
        """Test that an unknown escape fails at the offending character."""
        text = r'"bad\qescape"'
        with pytest.raises(ParseError) as excinfo:
            parse_token(text, 0)
        assert excinfo.value.position == text.index("q")

    def test_trailing_backslash(self):
        """Test that a backslash at the end of the text is an error."""
        with pytest.raises(ParseError) as excinfo:
            parse_token("abc\\", 0)
        assert excinfo.value.position == 4


class TestTokenizer:
    """Test the stateful tokenizer wrapper."""

    def test_cursor_advances_on_error(self):
        """Test that the cursor moves to the error position."""
        tokenizer = Tokenizer('  "open')
        with pytest.raises(ParseError):
            tokenizer.next_token()
        assert tokenizer.pos == 7
        assert tokenizer.next_token() is None

    def test_next_argument_collapses_errors(self):
        """Test that a malformed argument reads as missing."""
        tokenizer = Tokenizer(r'"bad\qx" next')
        assert tokenizer.next_argument() is None
        assert tokenizer.pos == 5

    def test_next_argument_reads_in_order(self):
        """Test that arguments come back left to right."""
        tokenizer = Tokenizer(" key 'some value'")
        assert tokenizer.next_argument() == "key"
        assert tokenizer.next_argument() == "some value"
        assert tokenizer.next_argument() is None
