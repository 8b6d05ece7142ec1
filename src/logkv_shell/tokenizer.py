"""Argument tokenizer for shell command lines.

Arguments are separated by whitespace and may be wrapped in single or double
quotes to include whitespace. Inside or outside quotes, a backslash starts a
JSON-style escape: ``\\' \\" \\\\ \\/ \\b \\f \\n \\r \\t``.
"""

import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

QUOTES = ("'", '"')

ESCAPES = {
    "'": "'",
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


class ParseError(ValueError):
    """A malformed argument.

    ``position`` is where the tokenizer stopped: the end of the text for an
    unterminated quote, or the offending character of a bad escape.
    """

    def __init__(self, message: str, position: int):
        super().__init__(message)
        self.message = message
        self.position = position


def parse_token(text: str, pos: int = 0) -> Tuple[Optional[str], int]:
    """Parse one argument from ``text`` starting at ``pos``.

    Returns:
    -------
        ``(token, new_pos)``. ``token`` is None when only whitespace remains;
        an empty quoted string yields ``""``. A quoted token's closing quote
        is consumed, the whitespace after an unquoted token is not.

    Raises:
    ------
        ParseError: on an unterminated quote or an unknown escape.

    """
    length = len(text)
    while pos < length and text[pos].isspace():
        pos += 1

    if pos == length:
        return None, pos

    terminator = None
    if text[pos] in QUOTES:
        terminator = text[pos]
        pos += 1

    output = []
    while True:
        if pos == length:
            if terminator is not None:
                raise ParseError(f"unterminated {terminator} quoted string", pos)
            break

        char = text[pos]
        if terminator is None and char.isspace():
            break
        if char == terminator:
            pos += 1
            break

        if char == "\\":
            pos += 1
            escaped = ESCAPES.get(text[pos]) if pos < length else None
            if escaped is None:
                raise ParseError("unrecognized escape sequence", pos)
            output.append(escaped)
        else:
            output.append(char)
        pos += 1

    return "".join(output), pos


class Tokenizer:
    """Cursor over a command's argument text."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def next_token(self) -> Optional[str]:
        """Return the next argument, or None when there are no more.

        The cursor advances even when ParseError is raised, so the caller can
        report the position or keep scanning.
        """
        try:
            token, self.pos = parse_token(self.text, self.pos)
        except ParseError as e:
            self.pos = e.position
            raise
        return token

    def next_argument(self) -> Optional[str]:
        """Like next_token, but a malformed argument is reported as missing."""
        try:
            return self.next_token()
        except ParseError as e:
            logger.debug("Discarding argument: %s at %d", e.message, e.position)
            return None
