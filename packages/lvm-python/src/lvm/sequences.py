"""Iteration protocols for lists written on a single line.

The same list concept is delimited three different ways in different parts
of an LVM file. Each protocol answers "is there another element?" and, when
there is, consumes the delimiter that precedes it. Every list ends where the
line ends; none carries an element count.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from .cursor import Tokenizer
from .types import SequenceStyle


def _leading(tokens: Tokenizer, first: bool, stop_at_blank: bool) -> bool:
    if tokens.at_line_end():
        return False
    if first:
        return not (stop_at_blank and tokens.at_blank_field(after_separator=False))
    if stop_at_blank and tokens.at_blank_field(after_separator=True):
        return False
    tokens.consume_separators(1)
    # A separator closing the line ends the list
    return not tokens.at_line_end()


def _trailing_except_last(tokens: Tokenizer, first: bool, stop_at_blank: bool) -> bool:
    if tokens.at_line_end():
        return False
    if stop_at_blank and tokens.at_blank_field(after_separator=not first):
        return False
    if not first:
        tokens.consume_separators(1)
    return True


def _always_leading(tokens: Tokenizer, first: bool, stop_at_blank: bool) -> bool:
    if tokens.at_line_end():
        return False
    if stop_at_blank and tokens.at_blank_field(after_separator=True):
        return False
    tokens.consume_separators(1)
    return True


_PROTOCOLS: dict[SequenceStyle, Callable[[Tokenizer, bool, bool], bool]] = {
    SequenceStyle.LEADING: _leading,
    SequenceStyle.TRAILING_EXCEPT_LAST: _trailing_except_last,
    SequenceStyle.ALWAYS_LEADING: _always_leading,
}


def elements(
    tokens: Tokenizer, style: SequenceStyle, stop_at_blank: bool = False
) -> Iterator[int]:
    """
    Yield the index of each element once its delimiter has been consumed.

    The caller decodes the element itself before asking for the next one.

    Args:
        tokens: Tokenizer positioned at the start of the list.
        style: Delimiter placement for this list.
        stop_at_blank: Also end the list at a blank field.

    Yields:
        0, 1, 2, ... for as many elements as the line holds.
    """
    has_next = _PROTOCOLS[style]
    index = 0
    while has_next(tokens, index == 0, stop_at_blank):
        yield index
        index += 1
