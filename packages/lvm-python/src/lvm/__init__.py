"""
LVM (LabVIEW Measurement) - Python Decoder

Reads the tab or comma delimited measurement logs written by LabVIEW into
typed records: a file header plus a list of segments, each with its own
header, column headings and numeric data rows.

Usage:
    import lvm

    # Decode a file from disk
    measurement = lvm.load("data.lvm")
    for segment in measurement.segments:
        print(segment.header.channel_count, len(segment.rows))

    # Decode text or an open stream
    measurement = lvm.decode(text)
    measurement = lvm.decode_stream(stream)

    # With options
    from lvm import DecodeOptions

    measurement = lvm.load("data.lvm", DecodeOptions(strict=True, encoding="cp1252"))
"""

__version__ = "0.2.0"

from .decode import decode, decode_lines, decode_stream, load
from .errors import (
    DeserializeError,
    InvalidSeparatorError,
    LvmError,
    NumberParseError,
    ParseLineError,
    SeparatorExpectedError,
    TrailingLineCharactersError,
    UnexpectedEndOfInputError,
    UnexpectedEndOfLineError,
    UnexpectedTokenError,
    UnsupportedLayoutError,
)
from .primitives import Date, Time, Version
from .schema import (
    DataRow,
    DecimalSeparator,
    FileHeader,
    LvmFile,
    Segment,
    SegmentHeader,
    TimePref,
    UnitType,
    XColumns,
)
from .types import DecodeOptions, Separator, SequenceStyle

__all__ = [
    # Version
    "__version__",
    # Main API
    "decode",
    "decode_lines",
    "decode_stream",
    "load",
    # Options
    "DecodeOptions",
    # Records
    "LvmFile",
    "FileHeader",
    "Segment",
    "SegmentHeader",
    "DataRow",
    # Values
    "Date",
    "Time",
    "Version",
    "DecimalSeparator",
    "Separator",
    "SequenceStyle",
    "TimePref",
    "UnitType",
    "XColumns",
    # Errors
    "LvmError",
    "ParseLineError",
    "InvalidSeparatorError",
    "UnexpectedTokenError",
    "SeparatorExpectedError",
    "TrailingLineCharactersError",
    "UnexpectedEndOfInputError",
    "UnexpectedEndOfLineError",
    "NumberParseError",
    "DeserializeError",
    "UnsupportedLayoutError",
]
