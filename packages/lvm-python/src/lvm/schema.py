"""LVM record schema and per-record decode functions.

Each header block is decoded by an explicit table of field readers. The
table is handed to :meth:`Decoder.decode_struct` as a lookup that rejects
unknown and repeated keys, and the collected values are checked for missing
required fields before the record is built.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

from .deserializer import Decoder, FieldReader
from .errors import DeserializeError
from .primitives import Date, Time, Version
from .types import DecodeOptions, Separator, SequenceStyle

logger = logging.getLogger(__name__)

# Newest Reader_Version this decoder understands
SUPPORTED_READER_VERSION = Version(2)


class DecimalSeparator(Enum):
    """Symbol separating the integral part of a number from its fraction."""

    DOT = "."
    COMMA = ","


class XColumns(Enum):
    """Which x-values are saved in the data rows."""

    NO = "No"
    """No x-values; the first data column is blank."""

    ONE = "One"
    """One column of x-values, for the longest data column."""

    MULTI = "Multi"
    """One x column for every y column."""


class TimePref(Enum):
    """Format of x-axis time values."""

    ABSOLUTE = "Absolute"
    """Seconds since midnight, January 1, 1904 GMT."""

    RELATIVE = "Relative"
    """Seconds since the segment's date and time stamps."""


class UnitType(Enum):
    """Physical dimension of an axis."""

    TIME = "Time"
    ELECTRIC_POTENTIAL = "Electric_Potential"
    ELECTRIC_CURRENT = "Electric_Current"
    FREQUENCY = "Frequency"
    LENGTH = "Length"
    TEMPERATURE = "Temperature"
    PRESSURE = "Pressure"


@dataclass
class FileHeader:
    """Header block at the top of a file."""

    date: Date
    decimal_separator: DecimalSeparator
    reader_version: Version
    time: Time
    time_pref: TimePref
    writer_version: Version
    description: str | None = None
    multi_headings: bool = False
    operator: str | None = None
    project: str | None = None
    separator: Separator = Separator.TAB
    x_columns: XColumns = XColumns.ONE


@dataclass
class SegmentHeader:
    """Header block opening a segment of measurements."""

    channels: tuple[int, list[str]]
    """Channel count and any channel names following it."""

    date: list[Date]
    delta_x: list[float]
    samples: list[int]
    time: list[Time]
    x0: list[float]
    y_unit_label: list[str]
    notes: str | None = None
    test_name: str | None = None
    test_number: str | None = None
    test_series: str | None = None
    uut_mn: str | None = None
    uut_name: str | None = None
    uut_sn: str | None = None
    x_dimension: list[UnitType] | None = None
    x_unit_label: list[str] | None = None
    y_dimension: list[UnitType] = field(default_factory=list)

    @property
    def channel_count(self) -> int:
        return self.channels[0]

    @property
    def channel_names(self) -> list[str]:
        return self.channels[1]


class DataRow(NamedTuple):
    """One data line: its numeric values and optional comment."""

    values: list[float]
    annotation: str | None = None


@dataclass
class Segment:
    """A segment header, its column headings and its data rows."""

    header: SegmentHeader
    headings: list[str]
    rows: list[DataRow]


@dataclass
class LvmFile:
    """A decoded LVM file."""

    header: FileHeader
    segments: list[Segment]


class _Field(NamedTuple):
    attr: str
    read: FieldReader
    required: bool = False


def _optional_text(decoder: Decoder, style: SequenceStyle) -> str | None:
    return decoder.decode_optional(Decoder.decode_str)


def _bool(decoder: Decoder, style: SequenceStyle) -> bool:
    return decoder.decode_bool()


def _enum(enum_cls: type[Enum]) -> FieldReader:
    return lambda decoder, style: decoder.decode_enum(enum_cls)


def _value(parse: Callable[[str], Any]) -> FieldReader:
    return lambda decoder, style: decoder.decode_value(parse)


def _list(read: Callable[[Decoder], Any]) -> FieldReader:
    return lambda decoder, style: decoder.decode_sequence(read, style)


def _optional_list(read: Callable[[Decoder], Any]) -> FieldReader:
    return lambda decoder, style: decoder.decode_optional(
        lambda d: d.decode_sequence(read, style)
    )


def _channels(decoder: Decoder, style: SequenceStyle) -> tuple[int, list[str]]:
    count, names = decoder.decode_tuple(
        Decoder.decode_int,
        lambda d: d.decode_sequence(Decoder.decode_str, style),
    )
    if count < 0:
        raise DeserializeError(f"invalid value: integer `{count}`, expected a channel count")
    return count, names


def _enum_reader(enum_cls: type[Enum]) -> Callable[[Decoder], Any]:
    return lambda d: d.decode_enum(enum_cls)


def _value_reader(parse: Callable[[str], Any]) -> Callable[[Decoder], Any]:
    return lambda d: d.decode_value(parse)


FILE_HEADER_FIELDS: dict[str, _Field] = {
    "Date": _Field("date", _value(Date.parse), required=True),
    "Description": _Field("description", _optional_text),
    "Decimal_Separator": _Field("decimal_separator", _enum(DecimalSeparator), required=True),
    "Multi_Headings": _Field("multi_headings", _bool),
    "Operator": _Field("operator", _optional_text),
    "Project": _Field("project", _optional_text),
    "Reader_Version": _Field("reader_version", _value(Version.parse), required=True),
    "Separator": _Field("separator", _enum(Separator)),
    "Time": _Field("time", _value(Time.parse), required=True),
    "Time_Pref": _Field("time_pref", _enum(TimePref), required=True),
    "Writer_Version": _Field("writer_version", _value(Version.parse), required=True),
    "X_Columns": _Field("x_columns", _enum(XColumns)),
}

SEGMENT_HEADER_FIELDS: dict[str, _Field] = {
    "Channels": _Field("channels", _channels, required=True),
    "Date": _Field("date", _list(_value_reader(Date.parse)), required=True),
    "Delta_X": _Field("delta_x", _list(Decoder.decode_float), required=True),
    "Notes": _Field("notes", _optional_text),
    "Samples": _Field("samples", _list(Decoder.decode_int), required=True),
    "Test_Name": _Field("test_name", _optional_text),
    "Test_Number": _Field("test_number", _optional_text),
    "Test_Series": _Field("test_series", _optional_text),
    "Time": _Field("time", _list(_value_reader(Time.parse)), required=True),
    "UUT_M/N": _Field("uut_mn", _optional_text),
    "UUT_Name": _Field("uut_name", _optional_text),
    "UUT_S/N": _Field("uut_sn", _optional_text),
    "X0": _Field("x0", _list(Decoder.decode_float), required=True),
    "X_Dimension": _Field("x_dimension", _optional_list(_enum_reader(UnitType))),
    "X_Unit_Label": _Field("x_unit_label", _optional_list(Decoder.decode_str)),
    "Y_Dimension": _Field("y_dimension", _list(_enum_reader(UnitType))),
    "Y_Unit_Label": _Field("y_unit_label", _list(Decoder.decode_str), required=True),
}

# Segment header fields holding one value per channel
PER_CHANNEL_FIELDS = frozenset(
    {
        "Date",
        "Delta_X",
        "Samples",
        "Time",
        "X0",
        "X_Dimension",
        "X_Unit_Label",
        "Y_Dimension",
        "Y_Unit_Label",
    }
)


class _FieldLookup:
    """Resolves header keys to readers, rejecting unknown and repeated keys."""

    def __init__(self, fields: dict[str, _Field], options: DecodeOptions):
        self.fields = fields
        self.options = options
        self.seen: set[str] = set()

    def __call__(self, key: str) -> FieldReader:
        entry = self.fields.get(key)
        if entry is None:
            names = ", ".join(f"`{name}`" for name in self.fields)
            raise DeserializeError(f"unknown field `{key}`, expected one of {names}")
        if key in self.seen:
            raise DeserializeError(f"duplicate field `{key}`")
        self.seen.add(key)
        return self.wrap(key, entry.read)

    def wrap(self, key: str, read: FieldReader) -> FieldReader:
        return read

    def build(self, record_cls: type, pairs: list[tuple[str, Any]]) -> Any:
        """Build a record from decoded pairs, checking required fields."""
        for key, entry in self.fields.items():
            if entry.required and key not in self.seen:
                raise DeserializeError(f"missing field `{key}`")
        return record_cls(**{self.fields[key].attr: value for key, value in pairs})


class _FileHeaderLookup(_FieldLookup):
    def wrap(self, key: str, read: FieldReader) -> FieldReader:
        if key == "Separator":
            return self._check_separator(read)
        if key == "Reader_Version":
            return self._check_reader_version(read)
        return read

    def _check_separator(self, read: FieldReader) -> FieldReader:
        def read_separator(decoder: Decoder, style: SequenceStyle) -> Separator:
            declared = read(decoder, style)
            actual = decoder.tokens.separator
            if declared != actual:
                if self.options.strict:
                    raise DeserializeError(
                        f"declared separator `{declared.value}` does not match "
                        f"the file separator `{actual.value}`"
                    )
                logger.warning(
                    "Line %d: declared separator %s does not match the file separator %s",
                    decoder.cursor.line_number,
                    declared.value,
                    actual.value,
                )
            return declared

        return read_separator

    def _check_reader_version(self, read: FieldReader) -> FieldReader:
        def read_version(decoder: Decoder, style: SequenceStyle) -> Version:
            version = read(decoder, style)
            if version > SUPPORTED_READER_VERSION:
                logger.warning(
                    "Reader_Version %s is newer than the supported version %s",
                    version,
                    SUPPORTED_READER_VERSION,
                )
            return version

        return read_version


class _SegmentHeaderLookup(_FieldLookup):
    """Field lookup that, in strict mode, checks per-channel value counts."""

    def __init__(self, fields: dict[str, _Field], options: DecodeOptions):
        super().__init__(fields, options)
        self.channel_count: int | None = None

    def wrap(self, key: str, read: FieldReader) -> FieldReader:
        if key == "Channels":
            return self._remember_channels(read)
        if self.options.strict and key in PER_CHANNEL_FIELDS:
            return self._check_channel_count(key, read)
        return read

    def _remember_channels(self, read: FieldReader) -> FieldReader:
        def read_channels(decoder: Decoder, style: SequenceStyle) -> tuple[int, list[str]]:
            channels = read(decoder, style)
            self.channel_count = channels[0]
            return channels

        return read_channels

    def _check_channel_count(self, key: str, read: FieldReader) -> FieldReader:
        if self.channel_count is None:
            raise DeserializeError(f"field `{key}` must follow `Channels`")
        expected = self.channel_count

        def read_per_channel(decoder: Decoder, style: SequenceStyle) -> Any:
            values = read(decoder, style)
            if values is not None and len(values) != expected:
                raise DeserializeError(
                    f"field `{key}` has {len(values)} values, expected {expected} (one per channel)"
                )
            return values

        return read_per_channel


def decode_file_header(decoder: Decoder, options: DecodeOptions) -> FileHeader:
    """
    Decode the file header block.

    Args:
        decoder: Decoder positioned at the first header field.
        options: Decoding options.

    Returns:
        The file header. The separator after the end-of-header key has
        been consumed; the line has not been advanced.
    """
    lookup = _FileHeaderLookup(FILE_HEADER_FIELDS, options)
    pairs = decoder.decode_struct(lookup, SequenceStyle.LEADING)
    return lookup.build(FileHeader, pairs)


def decode_segment_header(decoder: Decoder, options: DecodeOptions) -> SegmentHeader:
    """Decode a segment header block; see :func:`decode_file_header`."""
    lookup = _SegmentHeaderLookup(SEGMENT_HEADER_FIELDS, options)
    pairs = decoder.decode_struct(lookup, SequenceStyle.LEADING)
    return lookup.build(SegmentHeader, pairs)
