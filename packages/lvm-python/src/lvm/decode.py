"""LVM decoder implementation."""

from __future__ import annotations

import io
import logging
import os
from collections.abc import Iterable, Iterator
from typing import IO

from .cursor import LineCursor, Tokenizer
from .deserializer import Decoder
from .errors import (
    LvmError,
    NumberParseError,
    ParseLineError,
    UnexpectedEndOfInputError,
    UnexpectedEndOfLineError,
    UnexpectedTokenError,
    UnsupportedLayoutError,
)
from .schema import (
    DataRow,
    LvmFile,
    Segment,
    XColumns,
    decode_file_header,
    decode_segment_header,
)
from .types import DecodeOptions, Separator, SequenceStyle

logger = logging.getLogger(__name__)

# First line of every file, followed by the separator character
HEADER = "LabVIEW Measurement"
HEADER_OPTIONS = (HEADER,)

# Failures of the line source, reported at the line being read
READ_ERRORS = (OSError, UnicodeDecodeError)

ROW_STYLES = {
    XColumns.NO: SequenceStyle.ALWAYS_LEADING,
    XColumns.ONE: SequenceStyle.TRAILING_EXCEPT_LAST,
}


def decode(text: str, options: DecodeOptions | None = None) -> LvmFile:
    """
    Decode LVM text.

    Args:
        text: The full contents of an LVM file.
        options: Decoding options.

    Returns:
        The decoded file.

    Raises:
        ParseLineError: For malformed input; the error kind is its ``__cause__``.
    """
    return decode_stream(io.StringIO(text), options)


def decode_stream(stream: IO[str] | IO[bytes], options: DecodeOptions | None = None) -> LvmFile:
    """
    Decode LVM from an open text or binary stream.

    Binary streams are split on ``\\n`` and each line is decoded with
    ``options.encoding``, which must be ASCII-compatible. Lines are read one
    at a time; the stream is not closed.

    Args:
        stream: Readable stream positioned at the start of the file.
        options: Decoding options.

    Returns:
        The decoded file.
    """
    opts = options or DecodeOptions()
    if isinstance(stream.read(0), bytes):
        return decode_lines(_text_lines(stream, opts.encoding), opts)
    return decode_lines(stream, opts)


def decode_lines(lines: Iterable[str], options: DecodeOptions | None = None) -> LvmFile:
    """
    Decode LVM from an iterable of lines.

    Line terminators, if present, are stripped.

    Args:
        lines: Iterable of line strings.
        options: Decoding options.

    Returns:
        The decoded file.

    Raises:
        ParseLineError: For malformed input or a line that cannot be read,
            carrying the 1-based line number.
    """
    opts = options or DecodeOptions()
    try:
        cursor = LineCursor(lines)
    except READ_ERRORS as e:
        raise ParseLineError(1) from e
    try:
        return _decode_file(cursor, opts)
    except (LvmError, *READ_ERRORS) as e:
        raise ParseLineError(cursor.line_number) from e


def load(path: str | os.PathLike, options: DecodeOptions | None = None) -> LvmFile:
    """
    Decode an LVM file from disk.

    Args:
        path: Path to the ``.lvm`` file.
        options: Decoding options.

    Returns:
        The decoded file.
    """
    with open(path, "rb") as f:
        return decode_stream(f, options)


def _text_lines(stream: IO[bytes], encoding: str) -> Iterator[str]:
    for raw in stream:
        yield raw.decode(encoding)


def _decode_file(cursor: LineCursor, options: DecodeOptions) -> LvmFile:
    """Decode a whole file, starting at its first line."""
    separator = _parse_magic_line(cursor)
    decoder = Decoder(Tokenizer(cursor, separator))

    cursor.require_next_line()
    header = decode_file_header(decoder, options)
    decoder.decimal_separator = header.decimal_separator.value
    row_style = _row_style(header.x_columns)
    logger.debug(
        "Decoded file header: separator=%s, x_columns=%s, writer_version=%s",
        separator.value,
        header.x_columns.value,
        header.writer_version,
    )

    segments: list[Segment] = []
    if cursor.advance():
        # Blank line between the file header and the first segment
        decoder.tokens.consume_separators(1)
        while cursor.advance():
            segments.append(_decode_segment(decoder, row_style, options))
            logger.debug(
                "Decoded segment %d with %d rows", len(segments), len(segments[-1].rows)
            )

    return LvmFile(header=header, segments=segments)


def _parse_magic_line(cursor: LineCursor) -> Separator:
    """Check the first line and return the separator it declares."""
    if cursor.at_eof:
        raise UnexpectedEndOfInputError()
    line = cursor.take_remainder()
    if not line:
        raise UnexpectedEndOfLineError()
    separator = Separator.from_char(line[-1])
    if line[:-1] != HEADER:
        raise UnexpectedTokenError(line[:-1], HEADER_OPTIONS)
    return separator


def _row_style(x_columns: XColumns) -> SequenceStyle:
    """Sequence style of the data rows for a column layout."""
    style = ROW_STYLES.get(x_columns)
    if style is None:
        raise UnsupportedLayoutError(f"X_Columns {x_columns.value}")
    return style


def _decode_segment(
    decoder: Decoder, row_style: SequenceStyle, options: DecodeOptions
) -> Segment:
    """Decode one segment, from its header to the end of its rows."""
    cursor = decoder.cursor
    header = decode_segment_header(decoder, options)
    decoder.tokens.consume_separators(header.channel_count)
    cursor.require_next_line()

    headings = decoder.decode_sequence(Decoder.decode_str, SequenceStyle.TRAILING_EXCEPT_LAST)
    cursor.require_next_line()

    rows = []
    while not cursor.at_line_end():
        rows.append(_decode_row(decoder, row_style))
        if not cursor.advance():
            break

    return Segment(header=header, headings=headings, rows=rows)


def _decode_row(decoder: Decoder, style: SequenceStyle) -> DataRow:
    """
    Decode a data row: numeric values, then an optional comment.

    The comment, if any, is set off from the values by a blank column.
    Blank cells among the values are not supported.
    """
    values, annotation = decoder.decode_tuple(
        lambda d: d.decode_sequence(Decoder.decode_float, style, stop_at_blank=True),
        lambda d: d.decode_optional(_read_annotation),
    )
    if not values and annotation is None:
        raise NumberParseError("cannot parse float from empty string")
    return DataRow(values, annotation)


def _read_annotation(decoder: Decoder) -> str | None:
    decoder.tokens.consume_separators(1)
    return decoder.decode_optional(Decoder.decode_str)
