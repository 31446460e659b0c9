"""Tests for the line tokenizer."""

from cmdpp.shell.parser import Token, TokenType, argument_values, split_command, tokenize


def texts(line):
    return [token.text for token in tokenize(line)]


class TestTokenize:
    """Test splitting lines into tokens."""

    def test_whitespace_separated_words(self):
        """Test words separated by runs of spaces and tabs."""
        assert texts("copy  a.txt\tb.txt") == ["copy", "a.txt", "b.txt"]

    def test_quoted_token_keeps_spaces(self):
        """Test that a quoted span is one token without the quotes."""
        assert texts('echo "hello world" x') == ["echo", "hello world", "x"]

    def test_unterminated_quote_runs_to_end(self):
        """Test that an unclosed quote takes the rest of the line."""
        assert texts('echo "a b') == ["echo", "a b"]

    def test_empty_quotes(self):
        """Test that an empty quoted span yields an empty token."""
        assert texts('echo ""') == ["echo", ""]

    def test_blank_line(self):
        """Test that blank lines produce no tokens."""
        assert tokenize("") == []
        assert tokenize("   \t ") == []

    def test_classification(self):
        """Test pipe and redirection tokens are classified."""
        tokens = tokenize("a | b > c")
        assert [t.kind for t in tokens] == [
            TokenType.ARGUMENT,
            TokenType.PIPE,
            TokenType.ARGUMENT,
            TokenType.REDIRECTION,
            TokenType.ARGUMENT,
        ]

    def test_attached_operators_are_plain_words(self):
        """Test that operators only count as standalone tokens."""
        assert [t.kind for t in tokenize("a|b")] == [TokenType.ARGUMENT]


class TestSplitCommand:
    """Test separating the command from its arguments."""

    def test_split(self):
        """Test the first token is the command."""
        name, arguments = split_command('cd "my dir"')
        assert name == "cd"
        assert arguments == [Token(TokenType.ARGUMENT, "my dir")]

    def test_blank(self):
        """Test blank lines give no command."""
        assert split_command("   ") == (None, [])

    def test_argument_values(self):
        """Test extracting argument text."""
        _, arguments = split_command("echo a b")
        assert argument_values(arguments) == ["a", "b"]
