"""Type definitions for the LVM decoder."""

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidSeparatorError


class Separator(Enum):
    """Field separator declared by the first line of a file."""

    COMMA = "Comma"
    TAB = "Tab"

    @property
    def char(self) -> str:
        """The literal separator character."""
        return _SEPARATOR_CHARS[self]

    @classmethod
    def from_char(cls, char: str) -> "Separator":
        """Look up a separator by its literal character."""
        for separator, separator_char in _SEPARATOR_CHARS.items():
            if separator_char == char:
                return separator
        raise InvalidSeparatorError(char)


_SEPARATOR_CHARS = {
    Separator.COMMA: ",",
    Separator.TAB: "\t",
}


class SequenceStyle(Enum):
    """Placement of delimiters between the elements of a one-line list."""

    LEADING = "leading"
    """Delimiter before every element but the first; a trailing one is tolerated."""

    TRAILING_EXCEPT_LAST = "trailing_except_last"
    """Delimiter between elements, none after the last."""

    ALWAYS_LEADING = "always_leading"
    """Delimiter before every element, the first included."""


@dataclass
class DecodeOptions:
    """Options for LVM decoding."""

    strict: bool = False
    """Enable strict validation (declared separator, per-channel field counts)."""

    encoding: str = "utf-8"
    """Text encoding used for byte streams and files."""
