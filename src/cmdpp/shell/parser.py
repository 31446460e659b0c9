"""Tokenizer for interpreter command lines.

Splits lines like:  copy "my file.txt" backup/  into classified tokens.
Double quotes group whitespace into a single argument; ``|`` and ``>`` are
recognized as pipe and redirection tokens but carry no meaning here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

QUOTE = '"'


class TokenType(Enum):
    """Lexical role of a token."""
    COMMAND = "command"
    ARGUMENT = "argument"
    PIPE = "pipe"
    REDIRECTION = "redirection"


@dataclass(frozen=True)
class Token:
    """A classified lexical unit of one input line."""

    kind: TokenType
    text: str

    def __repr__(self) -> str:
        """String representation."""
        return f"Token({self.kind.name}, {self.text!r})"


def _classify(text: str) -> TokenType:
    if text == "|":
        return TokenType.PIPE
    if text == ">":
        return TokenType.REDIRECTION
    return TokenType.ARGUMENT


def tokenize(line: str) -> List[Token]:
    """Split a raw line into tokens, left to right.

    A token starting with a double quote runs up to the next double quote
    and keeps its inner whitespace; an unterminated quote runs to the end
    of the line. Any other token is a single whitespace-delimited word.

    Args:
        line: Raw command line

    Returns:
        Tokens in line order

    Example:
        >>> [t.text for t in tokenize('echo "a b" c')]
        ['echo', 'a b', 'c']
    """
    tokens: List[Token] = []
    pos = 0
    length = len(line)

    while True:
        while pos < length and line[pos].isspace():
            pos += 1
        if pos >= length:
            break

        if line[pos] == QUOTE:
            end = line.find(QUOTE, pos + 1)
            if end == -1:
                text = line[pos + 1:]
                pos = length
            else:
                text = line[pos + 1:end]
                pos = end + 1
        else:
            start = pos
            while pos < length and not line[pos].isspace():
                pos += 1
            text = line[start:pos]

        tokens.append(Token(_classify(text), text))

    return tokens


def split_command(line: str) -> Tuple[Optional[str], List[Token]]:
    """Tokenize a line and separate the command name from its arguments.

    The first token is always the command, whatever its shape.

    Args:
        line: Raw command line

    Returns:
        Tuple of (command name, argument tokens); (None, []) for blank lines
    """
    tokens = tokenize(line)
    if not tokens:
        return None, []
    head, *rest = tokens
    logger.debug(f"Parsed command {head.text!r} with {len(rest)} argument(s)")
    return head.text, rest


def argument_values(arguments: Sequence[Token]) -> List[str]:
    """Get the text of every token."""
    return [token.text for token in arguments]
