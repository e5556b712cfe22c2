"""Exceptions raised by the LVM decoder.

Every failure detected while decoding is one of the error kinds below. The
decoder re-raises it once as a :class:`ParseLineError` carrying the 1-based
line number, with the kind as its ``__cause__``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import Separator


class LvmError(ValueError):
    """Base class for all LVM decoding errors."""


class InvalidSeparatorError(LvmError):
    """The first line ends in a character that is not a known separator."""

    def __init__(self, char: str):
        self.char = char
        super().__init__(f'An invalid separator "{char}" was used by the file')


class UnexpectedTokenError(LvmError):
    """A literal-matched token was not one of the accepted values."""

    def __init__(self, found: str, expected: tuple[str, ...]):
        self.found = found
        self.expected = expected
        options = " or ".join(f'"{e}"' for e in expected)
        super().__init__(f'"{found}" was found instead of {options}')


class SeparatorExpectedError(LvmError):
    """Text was found where a bare separator was required."""

    def __init__(self, found: str, separator: Separator):
        self.found = found
        self.separator = separator
        super().__init__(
            f'Unexpected text "{found}" was found when attempting to parse '
            f"a {separator.value} separator"
        )


class TrailingLineCharactersError(LvmError):
    """A line still held unconsumed characters when its end was expected."""

    def __init__(self, remainder: str):
        self.remainder = remainder
        super().__init__(
            f'Trailing characters "{remainder}" were found instead of the end of a line'
        )


class UnexpectedEndOfInputError(LvmError):
    """Input ended before decoding was finished."""

    def __init__(self):
        super().__init__("The end of the file was encountered before parsing was finished")


class UnexpectedEndOfLineError(LvmError):
    """A line ended where a token or separator was required."""

    def __init__(self):
        super().__init__("The end of the line was encountered before parsing was finished")


class NumberParseError(LvmError):
    """A numeric token could not be parsed."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f'parse number error: "{message}"')


class DeserializeError(LvmError):
    """A value or record could not be built from well-formed tokens."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f'deserialization error: "{message}"')


class UnsupportedLayoutError(LvmError):
    """The file declares a recognized column layout that cannot be decoded."""

    def __init__(self, layout: str):
        self.layout = layout
        super().__init__(f'The column layout "{layout}" is not supported')


class ParseLineError(LvmError):
    """Line context wrapped around the error kind that caused it."""

    def __init__(self, line_number: int):
        self.line_number = line_number
        super().__init__(f"Error parsing line {line_number}")

    @property
    def frames(self) -> list[BaseException]:
        """The cause chain, innermost first, ending with this error."""
        chain: list[BaseException] = []
        error: BaseException | None = self
        while error is not None:
            chain.append(error)
            error = error.__cause__
        chain.reverse()
        return chain

    @property
    def root_cause(self) -> BaseException:
        """The innermost error of the cause chain."""
        return self.frames[0]

    def __str__(self) -> str:
        if self.__cause__ is None:
            return super().__str__()
        return f"{super().__str__()}: {self.__cause__}"
