"""Line cursor and separator-aware tokenizer."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import (
    SeparatorExpectedError,
    TrailingLineCharactersError,
    UnexpectedEndOfInputError,
    UnexpectedEndOfLineError,
)
from .string_utils import count_separators, is_blank_field, token_at
from .types import Separator


class LineCursor:
    """
    Cursor over a pull source of text lines.

    The first line is loaded on construction, so ``line_number`` starts at 1.
    Only the current line is ever held; nothing is read ahead.
    """

    def __init__(self, lines: Iterable[str]):
        self._lines = iter(lines)
        self.line = ""
        self.pos = 0
        self.line_number = 0
        self.at_eof = False
        self._pull()

    @property
    def remainder(self) -> str:
        """Unconsumed part of the current line."""
        return self.line[self.pos :]

    def at_line_end(self) -> bool:
        """Whether the current line is fully consumed."""
        return self.pos >= len(self.line)

    def take_remainder(self) -> str:
        """Consume and return the rest of the current line."""
        rest = self.remainder
        self.pos = len(self.line)
        return rest

    def advance(self) -> bool:
        """
        Move to the next line.

        Returns:
            True if a line was loaded, False if the source is exhausted.

        Raises:
            TrailingLineCharactersError: If the current line is not consumed.
        """
        if not self.at_line_end():
            raise TrailingLineCharactersError(self.remainder)
        return self._pull()

    def require_next_line(self) -> None:
        """Move to the next line, which must exist."""
        if not self.advance():
            raise UnexpectedEndOfInputError()

    def _pull(self) -> bool:
        if self.at_eof:
            return False
        self.line_number += 1
        try:
            raw = next(self._lines)
        except StopIteration:
            self.line_number = max(self.line_number - 1, 1)
            self.at_eof = True
            return False
        self.line = raw.rstrip("\r\n")
        self.pos = 0
        return True


class Tokenizer:
    """Splits the cursor's current line on the file's separator."""

    def __init__(self, cursor: LineCursor, separator: Separator):
        self.cursor = cursor
        self.separator = separator

    def at_line_end(self) -> bool:
        return self.cursor.at_line_end()

    def next_token(self) -> str:
        """
        Consume the text up to the next separator.

        The separator itself is left in place.

        Raises:
            UnexpectedEndOfLineError: If the line is already exhausted.
        """
        cursor = self.cursor
        if cursor.at_line_end():
            raise UnexpectedEndOfLineError()
        token = token_at(cursor.line, cursor.pos, self.separator.char)
        cursor.pos += len(token)
        return token

    def consume_separators(self, count: int) -> None:
        """
        Consume exactly ``count`` consecutive separators.

        Raises:
            SeparatorExpectedError: If text stands where a separator belongs.
            UnexpectedEndOfLineError: If the line ends first.
        """
        cursor = self.cursor
        char = self.separator.char
        found = count_separators(cursor.line, cursor.pos, char, count)
        if found == count:
            cursor.pos += count
            return
        stop = cursor.pos + found
        if stop >= len(cursor.line):
            raise UnexpectedEndOfLineError()
        raise SeparatorExpectedError(token_at(cursor.line, stop, char), self.separator)

    def at_blank_field(self, after_separator: bool) -> bool:
        """
        Check whether the next field is blank.

        Args:
            after_separator: The field starts after one more separator.
        """
        cursor = self.cursor
        start = cursor.pos + 1 if after_separator else cursor.pos
        return is_blank_field(cursor.line, start, self.separator.char)
