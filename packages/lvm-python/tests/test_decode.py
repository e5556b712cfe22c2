"""Tests for the LVM decoder."""

import io
import logging
import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lvm import (
    DataRow,
    DecimalSeparator,
    DecodeOptions,
    DeserializeError,
    InvalidSeparatorError,
    NumberParseError,
    ParseLineError,
    Separator,
    SeparatorExpectedError,
    TimePref,
    TrailingLineCharactersError,
    UnexpectedEndOfInputError,
    UnexpectedEndOfLineError,
    UnexpectedTokenError,
    UnitType,
    UnsupportedLayoutError,
    Version,
    XColumns,
    decode,
    decode_lines,
    decode_stream,
    load,
)

FILE_HEADER = [
    "LabVIEW Measurement\t",
    "Writer_Version\t2",
    "Reader_Version\t2",
    "Separator\tTab",
    "Decimal_Separator\t.",
    "Multi_Headings\tNo",
    "X_Columns\tOne",
    "Time_Pref\tRelative",
    "Operator\tJane",
    "Date\t2018/03/14",
    "Time\t09:26:53.5897932",
    "***End_of_Header***\t",
    "\t",
]

SEGMENT_HEADER = [
    "Channels\t1\tVoltage",
    "Samples\t2\t",
    "Date\t2018/03/14\t",
    "Time\t09:26:53.5897932\t",
    "Y_Unit_Label\tVolts\t",
    "X_Dimension\tTime\t",
    "X0\t0.0000000000000000E+0\t",
    "Delta_X\t0.001000\t",
    "***End_of_Header***\t\t",
]

HEADINGS = ["X_Value\tVoltage\tComment"]


def lvm_text(*lines: str) -> str:
    return "\n".join(lines) + "\n"


def replace(lines: list[str], old: str, new: str) -> list[str]:
    assert old in lines
    return [new if line == old else line for line in lines]


def decode_error(text: str, options: DecodeOptions | None = None) -> ParseLineError:
    with pytest.raises(ParseLineError) as excinfo:
        decode(text, options)
    return excinfo.value


class TestMinimalFile:
    """Test decoding of a small well-formed file."""

    def test_single_segment(self):
        result = decode(lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1.0\t\tnote"))
        assert len(result.segments) == 1
        assert result.segments[0].rows == [DataRow([1.0], "note")]

    def test_file_header(self):
        header = decode(lvm_text(*FILE_HEADER)).header
        assert header.writer_version == Version(2)
        assert header.reader_version == Version(2, 0, 0)
        assert header.separator is Separator.TAB
        assert header.decimal_separator is DecimalSeparator.DOT
        assert header.multi_headings is False
        assert header.x_columns is XColumns.ONE
        assert header.time_pref is TimePref.RELATIVE
        assert header.operator == "Jane"
        assert header.project is None
        assert header.date.format() == "2018/03/14"
        assert header.time.nanosecond == 589793200

    def test_segment_header(self):
        result = decode(lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1.0\t2.0"))
        header = result.segments[0].header
        assert header.channel_count == 1
        assert header.channel_names == ["Voltage"]
        assert header.samples == [2]
        assert header.y_unit_label == ["Volts"]
        assert header.x_dimension == [UnitType.TIME]
        assert header.x0 == [0.0]
        assert header.delta_x == [0.001]
        assert header.notes is None

    def test_headings_and_rows(self):
        result = decode(
            lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "0.000\t1.5", "0.001\t1.75")
        )
        segment = result.segments[0]
        assert segment.headings == ["X_Value", "Voltage", "Comment"]
        assert segment.rows == [DataRow([0.0, 1.5]), DataRow([0.001, 1.75])]

    def test_rows_without_trailing_newline(self):
        text = "\n".join([*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1.0\t2.0"])
        assert decode(text).segments[0].rows == [DataRow([1.0, 2.0])]

    def test_idempotent(self):
        text = lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1.0\t2.0", "2.0\t3.0")
        assert decode(text) == decode(text)


class TestBoundaries:
    """Test boundary cases of the file grammar."""

    def test_zero_segments(self):
        result = decode(lvm_text(*FILE_HEADER))
        assert result.segments == []

    def test_end_of_input_after_header(self):
        result = decode(lvm_text(*FILE_HEADER[:-1]))
        assert result.segments == []

    def test_zero_channels(self):
        segment = [
            "Channels\t0\t",
            "Samples\t",
            "Date\t",
            "Time\t",
            "Y_Unit_Label\t",
            "X0\t",
            "Delta_X\t",
            "***End_of_Header***\t",
        ]
        result = decode(lvm_text(*FILE_HEADER, *segment, "X_Value\tComment", "0.5"))
        header = result.segments[0].header
        assert header.channel_count == 0
        assert header.samples == []
        assert result.segments[0].rows == [DataRow([0.5])]

    def test_segment_without_rows(self):
        result = decode(lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, ""))
        assert result.segments[0].rows == []

    def test_multiple_segments(self):
        text = lvm_text(
            *FILE_HEADER,
            *SEGMENT_HEADER, *HEADINGS, "1.0\t2.0", "",
            *SEGMENT_HEADER, *HEADINGS, "3.0\t4.0", "4.0\t5.0",
        )
        result = decode(text)
        assert [len(s.rows) for s in result.segments] == [1, 2]
        assert result.segments[1].rows[1] == DataRow([4.0, 5.0])


class TestOptionalFields:
    """Test the present/absent rule for optional header fields."""

    def test_empty_value_is_absent(self):
        lines = [*FILE_HEADER[:9], "Description\t", *FILE_HEADER[9:]]
        assert decode(lvm_text(*lines)).header.description is None

    def test_value_is_present(self):
        lines = [*FILE_HEADER[:9], "Description\tRun 4", *FILE_HEADER[9:]]
        assert decode(lvm_text(*lines)).header.description == "Run 4"

    def test_optional_sequence(self):
        segment = [*SEGMENT_HEADER[:-1], "X_Unit_Label\tSeconds\t", SEGMENT_HEADER[-1]]
        result = decode(lvm_text(*FILE_HEADER, *segment, *HEADINGS, "1\t2"))
        assert result.segments[0].header.x_unit_label == ["Seconds"]


class TestLayouts:
    """Test the column layouts and separators."""

    def test_no_x_columns(self):
        header = replace(FILE_HEADER, "X_Columns\tOne", "X_Columns\tNo")
        result = decode(lvm_text(*header, *SEGMENT_HEADER, *HEADINGS, "\t1.5", "\t2.5\t\tspike"))
        assert result.segments[0].rows == [DataRow([1.5]), DataRow([2.5], "spike")]

    def test_multi_x_columns_unsupported(self):
        header = replace(FILE_HEADER, "X_Columns\tOne", "X_Columns\tMulti")
        error = decode_error(lvm_text(*header, *SEGMENT_HEADER, *HEADINGS, "1\t2\t3\t4"))
        assert isinstance(error.__cause__, UnsupportedLayoutError)
        assert error.line_number == 12

    def test_comma_separator(self):
        lines = [line.replace("\t", ",") for line in [*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS]]
        lines = replace(lines, "Separator,Tab", "Separator,Comma")
        result = decode(lvm_text(*lines, "1.0,2.0", "2.0,,late"))
        assert result.header.separator is Separator.COMMA
        assert result.segments[0].rows == [DataRow([1.0, 2.0]), DataRow([2.0], "late")]

    def test_decimal_comma(self):
        header = replace(FILE_HEADER, "Decimal_Separator\t.", "Decimal_Separator\t,")
        segment = replace(SEGMENT_HEADER, "Delta_X\t0.001000\t", "Delta_X\t0,001000\t")
        result = decode(lvm_text(*header, *segment, *HEADINGS, "1,5\t2,25"))
        assert result.segments[0].header.delta_x == [0.001]
        assert result.segments[0].rows == [DataRow([1.5, 2.25])]

    def test_trailing_separator_leaves_no_annotation(self):
        result = decode(lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1.0\t2.0\t"))
        assert result.segments[0].rows == [DataRow([1.0, 2.0])]


class TestErrors:
    """Test error kinds and line numbers."""

    def test_invalid_magic(self):
        error = decode_error(lvm_text("LabVEiw Measurement\t", *FILE_HEADER[1:]))
        assert error.line_number == 1
        assert isinstance(error.__cause__, UnexpectedTokenError)
        assert error.__cause__.found == "LabVEiw Measurement"
        assert error.__cause__.expected == ("LabVIEW Measurement",)

    def test_invalid_separator(self):
        error = decode_error(lvm_text("LabVIEW Measurement;", *FILE_HEADER[1:]))
        assert error.line_number == 1
        assert isinstance(error.__cause__, InvalidSeparatorError)
        assert error.__cause__.char == ";"

    def test_empty_first_line(self):
        error = decode_error(lvm_text("", *FILE_HEADER[1:]))
        assert error.line_number == 1
        assert isinstance(error.__cause__, UnexpectedEndOfLineError)

    def test_empty_input(self):
        error = decode_error("")
        assert error.line_number == 1
        assert isinstance(error.__cause__, UnexpectedEndOfInputError)

    def test_bad_boolean(self):
        header = replace(FILE_HEADER, "Multi_Headings\tNo", "Multi_Headings\tMaybe")
        error = decode_error(lvm_text(*header))
        assert error.line_number == 6
        assert isinstance(error.__cause__, UnexpectedTokenError)
        assert error.__cause__.found == "Maybe"
        assert error.__cause__.expected == ("No", "Yes")

    def test_truncated_header(self):
        error = decode_error(lvm_text(*FILE_HEADER[:11]))
        assert isinstance(error.__cause__, UnexpectedEndOfInputError)
        assert error.line_number == 11

    def test_trailing_characters(self):
        header = replace(FILE_HEADER, "Writer_Version\t2", "Writer_Version\t2\textra")
        error = decode_error(lvm_text(*header))
        assert error.line_number == 2
        assert isinstance(error.__cause__, TrailingLineCharactersError)
        assert error.__cause__.remainder == "\textra"

    def test_bad_number(self):
        error = decode_error(lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1.0\t2.0", "1.0\tabc"))
        assert error.line_number == 25
        assert isinstance(error.__cause__, NumberParseError)

    def test_separator_expected(self):
        segment = replace(SEGMENT_HEADER, "***End_of_Header***\t\t", "***End_of_Header***\tx")
        error = decode_error(lvm_text(*FILE_HEADER, *segment, *HEADINGS))
        assert error.line_number == 22
        assert isinstance(error.__cause__, SeparatorExpectedError)
        assert error.__cause__.found == "x"
        assert error.__cause__.separator is Separator.TAB

    def test_blank_line_needs_separator(self):
        error = decode_error(lvm_text(*FILE_HEADER[:-1], "", *SEGMENT_HEADER))
        assert error.line_number == 13
        assert isinstance(error.__cause__, UnexpectedEndOfLineError)

    def test_unknown_field(self):
        lines = [*FILE_HEADER[:2], "Colour\tRed", *FILE_HEADER[2:]]
        error = decode_error(lvm_text(*lines))
        assert error.line_number == 3
        assert isinstance(error.__cause__, DeserializeError)
        assert "unknown field `Colour`" in str(error.__cause__)

    def test_duplicate_field(self):
        lines = [*FILE_HEADER[:3], "Writer_Version\t2", *FILE_HEADER[3:]]
        error = decode_error(lvm_text(*lines))
        assert error.line_number == 4
        assert "duplicate field `Writer_Version`" in str(error.__cause__)

    def test_missing_field(self):
        lines = [line for line in FILE_HEADER if not line.startswith("Date")]
        error = decode_error(lvm_text(*lines))
        assert error.line_number == 11
        assert "missing field `Date`" in str(error.__cause__)

    def test_bad_enum(self):
        header = replace(FILE_HEADER, "Time_Pref\tRelative", "Time_Pref\trelative")
        error = decode_error(lvm_text(*header))
        assert error.line_number == 8
        assert "unknown variant `relative`" in str(error.__cause__)

    def test_bad_date(self):
        header = replace(FILE_HEADER, "Date\t2018/03/14", "Date\t2018-03-14")
        error = decode_error(lvm_text(*header))
        assert error.line_number == 10
        assert isinstance(error.__cause__, DeserializeError)

    def test_error_chain(self):
        header = replace(FILE_HEADER, "Multi_Headings\tNo", "Multi_Headings\tMaybe")
        error = decode_error(lvm_text(*header))
        assert isinstance(error.root_cause, UnexpectedTokenError)
        assert error.frames == [error.__cause__, error]
        assert str(error).startswith("Error parsing line 6: ")

    def test_row_of_separators(self):
        rows = ["1.0\t2.0", "\t", "3.0\t4.0"]
        error = decode_error(lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, *rows))
        assert error.line_number == 25
        assert isinstance(error.__cause__, NumberParseError)

    def test_blank_cell_starts_annotation(self):
        result = decode(lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1.0\t\t2.0"))
        assert result.segments[0].rows == [DataRow([1.0], "2.0")]

    def test_negative_channel_count(self):
        segment = replace(SEGMENT_HEADER, "Channels\t1\tVoltage", "Channels\t-1\tVoltage")
        error = decode_error(lvm_text(*FILE_HEADER, *segment, *HEADINGS))
        assert error.line_number == 14
        assert isinstance(error.__cause__, DeserializeError)
        assert "integer `-1`" in str(error.__cause__)

    def test_number_with_underscore(self):
        error = decode_error(lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1_0\t2.0"))
        assert error.line_number == 24
        assert isinstance(error.__cause__, NumberParseError)


class TestOptions:
    """Test strict mode and logging."""

    def test_separator_mismatch_warns(self, caplog):
        header = replace(FILE_HEADER, "Separator\tTab", "Separator\tComma")
        with caplog.at_level(logging.WARNING, logger="lvm"):
            result = decode(lvm_text(*header))
        assert result.header.separator is Separator.COMMA
        assert "does not match the file separator" in caplog.text

    def test_separator_mismatch_strict(self):
        header = replace(FILE_HEADER, "Separator\tTab", "Separator\tComma")
        error = decode_error(lvm_text(*header), DecodeOptions(strict=True))
        assert error.line_number == 4
        assert isinstance(error.__cause__, DeserializeError)

    def test_newer_reader_version_warns(self, caplog):
        header = replace(FILE_HEADER, "Reader_Version\t2", "Reader_Version\t3")
        with caplog.at_level(logging.WARNING, logger="lvm"):
            decode(lvm_text(*header))
        assert "Reader_Version 3.0" in caplog.text

    def test_strict_accepts_consistent_file(self):
        text = lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1.0\t2.0")
        assert decode(text, DecodeOptions(strict=True)) == decode(text)

    def test_strict_channel_count_mismatch(self):
        segment = replace(SEGMENT_HEADER, "Samples\t2\t", "Samples\t2\t2\t")
        text = lvm_text(*FILE_HEADER, *segment, *HEADINGS, "1.0\t2.0")
        assert decode(text).segments[0].header.samples == [2, 2]
        error = decode_error(text, DecodeOptions(strict=True))
        assert error.line_number == 15
        assert "expected 1 (one per channel)" in str(error.__cause__)

    def test_strict_channels_first(self):
        segment = [SEGMENT_HEADER[1], SEGMENT_HEADER[0], *SEGMENT_HEADER[2:]]
        error = decode_error(lvm_text(*FILE_HEADER, *segment, *HEADINGS), DecodeOptions(strict=True))
        assert error.line_number == 14
        assert "must follow `Channels`" in str(error.__cause__)


class TestSources:
    """Test the input entry points."""

    def test_decode_lines(self):
        result = decode_lines([*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1.0\t2.0"])
        assert result.segments[0].rows == [DataRow([1.0, 2.0])]

    def test_binary_stream(self):
        stream = io.BytesIO(lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1\t2").encode())
        result = decode_stream(stream)
        assert result.segments[0].rows == [DataRow([1.0, 2.0])]
        assert not stream.closed

    def test_binary_stream_encoding(self):
        header = replace(FILE_HEADER, "Operator\tJane", "Operator\tJosé")
        stream = io.BytesIO(lvm_text(*header).encode("cp1252"))
        result = decode_stream(stream, DecodeOptions(encoding="cp1252"))
        assert result.header.operator == "José"

    def test_binary_stream_invalid_utf8(self):
        text = lvm_text(*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1\t2").encode()
        stream = io.BytesIO(text.replace(b"Operator\tJane", b"Operator\t\xff\xfe"))
        with pytest.raises(ParseLineError) as excinfo:
            decode_stream(stream)
        assert excinfo.value.line_number == 9
        assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)

    def test_read_error(self):
        def lines():
            yield from FILE_HEADER[:2]
            raise OSError("device not ready")

        with pytest.raises(ParseLineError) as excinfo:
            decode_lines(lines())
        assert excinfo.value.line_number == 3
        assert isinstance(excinfo.value.root_cause, OSError)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load(tmp_path / "missing.lvm")

    def test_load_crlf(self, tmp_path):
        path = tmp_path / "data.lvm"
        path.write_bytes("\r\n".join([*FILE_HEADER, *SEGMENT_HEADER, *HEADINGS, "1\t2", ""]).encode())
        result = load(path)
        assert result.segments[0].rows == [DataRow([1.0, 2.0])]
