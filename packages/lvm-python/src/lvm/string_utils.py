"""String utilities for LVM tokenizing."""


def token_at(line: str, start: int, separator: str) -> str:
    """
    Return the text from ``start`` up to the next separator or line end.

    Args:
        line: The full line.
        start: Offset of the first unconsumed character.
        separator: The separator character.

    Returns:
        The token (empty if ``start`` sits on a separator).
    """
    end = line.find(separator, start)
    if end == -1:
        return line[start:]
    return line[start:end]


def count_separators(line: str, start: int, separator: str, limit: int) -> int:
    """Count consecutive separators at ``start``, stopping at ``limit``."""
    count = 0
    pos = start
    while count < limit and pos < len(line) and line[pos] == separator:
        count += 1
        pos += 1
    return count


def is_blank_field(line: str, start: int, separator: str) -> bool:
    """
    Check whether the field starting at ``start`` holds no text.

    A field is blank if it is cut short by another separator or by the
    end of the line.
    """
    return start >= len(line) or line[start] == separator
