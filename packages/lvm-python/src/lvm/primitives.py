"""Leaf value types found in LVM headers."""

import datetime
import re
from dataclasses import dataclass

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})(?:\.(\d{1,9})\d*)?$")
VERSION_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?$")


@dataclass(frozen=True)
class Date:
    """Calendar date written as ``YYYY/MM/DD``."""

    value: datetime.date

    @classmethod
    def parse(cls, text: str) -> "Date":
        """
        Parse a date string.

        Args:
            text: Text in ``YYYY/MM/DD`` form.

        Returns:
            The parsed date.

        Raises:
            ValueError: If the text is not a valid date.
        """
        return cls(datetime.datetime.strptime(text, "%Y/%m/%d").date())

    def format(self) -> str:
        return self.value.strftime("%Y/%m/%d")

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class Time:
    """
    Time of day written as ``HH:MM:SS[.fraction]``.

    LabVIEW writes up to seven fraction digits, more than ``datetime.time``
    can hold, so the fraction is kept in nanoseconds.
    """

    hour: int
    minute: int
    second: int
    nanosecond: int = 0

    @classmethod
    def parse(cls, text: str) -> "Time":
        """
        Parse a time-of-day string.

        Digits past nanosecond precision are dropped.

        Raises:
            ValueError: If the text is not a valid time of day.
        """
        match = TIME_PATTERN.match(text)
        if not match:
            raise ValueError(f"invalid time {text!r}, expected HH:MM:SS[.fraction]")
        hour, minute, second = (int(match.group(i)) for i in (1, 2, 3))
        fraction = match.group(4) or ""
        nanosecond = int(fraction.ljust(9, "0")) if fraction else 0
        if hour > 23 or minute > 59 or second > 60:
            raise ValueError(f"time out of range: {text!r}")
        return cls(hour, minute, second, nanosecond)

    def format(self) -> str:
        text = f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"
        if not self.nanosecond:
            return text
        # Shortest of 3, 6 or 9 fraction digits that is exact
        fraction = f"{self.nanosecond:09d}"
        for width in (3, 6):
            if fraction[width:] == "0" * (9 - width):
                return f"{text}.{fraction[:width]}"
        return f"{text}.{fraction}"

    def to_time(self) -> datetime.time:
        """Convert to ``datetime.time``, truncating to microseconds."""
        # Leap second 60 is clamped, datetime.time rejects it
        return datetime.time(
            self.hour, self.minute, min(self.second, 59), self.nanosecond // 1000
        )

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True, order=True)
class Version:
    """File format version, ``major[.minor[.patch]]``."""

    major: int
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a version string.

        A bare integer such as ``2`` is version 2.0.0.

        Raises:
            ValueError: If the text is not a version.
        """
        match = VERSION_PATTERN.match(text)
        if not match:
            raise ValueError(f"invalid version {text!r}")
        return cls(*(int(part) for part in match.groups() if part is not None))

    def format(self) -> str:
        if self.patch:
            return f"{self.major}.{self.minor}.{self.patch}"
        return f"{self.major}.{self.minor}"

    def __str__(self) -> str:
        return self.format()
