"""Structured decoder: maps tokens to scalar and composite values."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

from .cursor import LineCursor, Tokenizer
from .errors import DeserializeError, NumberParseError, UnexpectedTokenError
from .sequences import elements
from .types import SequenceStyle

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

# Reads one value at the decoder's position
Reader = Callable[["Decoder"], T]
# Reads one struct field value; receives the struct's sequence style
FieldReader = Callable[["Decoder", SequenceStyle], Any]

END_OF_HEADER = "***End_of_Header***"
BOOL_YES = "Yes"
BOOL_NO = "No"
BOOL_OPTIONS = (BOOL_NO, BOOL_YES)


class Decoder:
    """
    Decodes values of a requested shape from the current line.

    Every composite operation that may contain a list takes its
    ``SequenceStyle`` as an argument; the decoder keeps no style of its own.
    """

    def __init__(self, tokens: Tokenizer, decimal_separator: str = "."):
        self.tokens = tokens
        self.decimal_separator = decimal_separator

    @property
    def cursor(self) -> LineCursor:
        return self.tokens.cursor

    # Scalars

    def decode_bool(self) -> bool:
        """Decode ``Yes`` or ``No``."""
        token = self.tokens.next_token()
        if token == BOOL_YES:
            return True
        if token == BOOL_NO:
            return False
        raise UnexpectedTokenError(token, BOOL_OPTIONS)

    def decode_int(self) -> int:
        token = self.tokens.next_token()
        if not _is_plain_number(token):
            raise NumberParseError(f"invalid digit found in {token!r}")
        try:
            return int(token, 10)
        except ValueError as e:
            raise NumberParseError(str(e)) from e

    def decode_float(self) -> float:
        """Decode a float, honouring the file's decimal separator."""
        token = self.tokens.next_token()
        if not _is_plain_number(token):
            raise NumberParseError(f"invalid float literal {token!r}")
        if self.decimal_separator != ".":
            token = token.replace(self.decimal_separator, ".")
        try:
            return float(token)
        except ValueError as e:
            raise NumberParseError(str(e)) from e

    def decode_char(self) -> str:
        token = self.tokens.next_token()
        if len(token) != 1:
            raise DeserializeError(f"invalid length {len(token)}, expected a single character")
        return token

    def decode_str(self) -> str:
        return self.tokens.next_token()

    def decode_enum(self, enum_cls: type[E]) -> E:
        """
        Decode an enum member by its wire name.

        The token is compared case-sensitively with each member's value.
        """
        token = self.tokens.next_token()
        for member in enum_cls:
            if member.value == token:
                return member
        names = ", ".join(f"`{member.value}`" for member in enum_cls)
        raise DeserializeError(f"unknown variant `{token}`, expected one of {names}")

    def decode_value(self, parse: Callable[[str], T]) -> T:
        """
        Decode a leaf value with its own parser.

        Args:
            parse: Parser such as ``Date.parse``; raises ``ValueError`` on bad text.
        """
        token = self.tokens.next_token()
        try:
            return parse(token)
        except ValueError as e:
            raise DeserializeError(str(e)) from e

    # Composites

    def decode_optional(self, read: Reader[T]) -> T | None:
        """Decode a value, or ``None`` if the line is exhausted."""
        if self.tokens.at_line_end():
            return None
        return read(self)

    def decode_tuple(self, *reads: Reader[Any]) -> tuple:
        """
        Decode a fixed number of values, one per reader.

        A separator is consumed before each value after the first, unless
        the line has already ended.
        """
        values = []
        for index, read in enumerate(reads):
            if index and not self.tokens.at_line_end():
                self.tokens.consume_separators(1)
            values.append(read(self))
        return tuple(values)

    def decode_sequence(
        self, read: Reader[T], style: SequenceStyle, stop_at_blank: bool = False
    ) -> list[T]:
        """
        Decode values until the end of the line.

        Args:
            read: Reader for a single element.
            style: Delimiter placement for this list.
            stop_at_blank: Also end the list at a blank field.

        Returns:
            The decoded elements.
        """
        return [read(self) for _ in elements(self.tokens, style, stop_at_blank)]

    def decode_struct(
        self, lookup: Callable[[str], FieldReader], style: SequenceStyle
    ) -> list[tuple[str, Any]]:
        """
        Decode a key-value block, one field per line.

        Fields are read until the ``***End_of_Header***`` key. The separator
        after it is consumed but the line is not advanced.

        Args:
            lookup: Returns the reader for a key; rejects unknown keys.
            style: Sequence style for list-valued fields.

        Returns:
            ``(key, value)`` pairs in file order.
        """
        fields = []
        while True:
            key = self.tokens.next_token()
            if key == END_OF_HEADER:
                break
            read = lookup(key)
            self.tokens.consume_separators(1)
            fields.append((key, read(self, style)))
            self.cursor.require_next_line()
        self.tokens.consume_separators(1)
        return fields


def _is_plain_number(token: str) -> bool:
    # int() and float() also accept padding and digit-group underscores
    return "_" not in token and not any(c.isspace() for c in token)
