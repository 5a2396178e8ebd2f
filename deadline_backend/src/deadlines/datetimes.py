"""
Calendar moments and signed durations used for due dates and urgency.

Ordering and differences use a simplified projection to "total minutes" in
which every month has 30 days and every year has 365 days. Moments in the
same or adjacent months compare correctly for scheduling purposes, but day
counts across real calendar boundaries drift from true calendar arithmetic
(2025-03-01 minus 2025-02-28 is three days here, not one).
"""
from __future__ import annotations

import datetime as _dt
import re
from dataclasses import dataclass
from functools import total_ordering

DUE_TEXT_FORMAT = "YYYY-MM-DD HH:MM"

_DUE_TEXT_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2}) (\d{2}):(\d{2})$")

_DAYS_IN_MONTH = 30
_DAYS_IN_YEAR = 365
_MINUTES_PER_DAY = 24 * 60


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TimeDiff:
    """
    Signed duration between two Datetimes.

    Fields are always normalized: days is a non-negative magnitude, hours is
    0..23 and minutes is 0..59. The sign is carried by is_negative.
    """

    days: int
    hours: int
    minutes: int
    is_negative: bool = False

    def _sign(self) -> int:
        return -1 if self.is_negative else 1

    def to_hours(self) -> float:
        return self._sign() * (self.days * 24 + self.hours + self.minutes / 60.0)

    def to_minutes(self) -> int:
        return self._sign() * (self.days * _MINUTES_PER_DAY + self.hours * 60 + self.minutes)

    def to_days(self) -> float:
        return self._sign() * (self.days + self.hours / 24.0 + self.minutes / 1440.0)

    def to_string(self) -> str:
        sign = "-" if self.is_negative else ""
        return f"{sign}{self.days}d {self.hours}h {self.minutes}m"

    def __str__(self) -> str:
        return self.to_string()


# PUBLIC_INTERFACE
@total_ordering
@dataclass(frozen=True, eq=False)
class Datetime:
    """
    A calendar moment with minute precision.

    Instances are immutable; construct a new one (e.g. via now()) instead of
    mutating. Comparison goes through to_total_minutes(). Equality does too, so
    2025-01-31 12:00 and 2025-02-01 12:00 are the same moment in the 30-day
    model.
    """

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0

    def __post_init__(self) -> None:
        _check_range("year", self.year, 0, 65535)
        _check_range("month", self.month, 1, 12)
        _check_range("day", self.day, 1, 31)
        _check_range("hour", self.hour, 0, 23)
        _check_range("minute", self.minute, 0, 59)

    @classmethod
    def now(cls) -> "Datetime":
        """Return the current local wall-clock time."""
        return cls.from_datetime(_dt.datetime.now())

    @classmethod
    def from_datetime(cls, value: _dt.datetime) -> "Datetime":
        return cls(value.year, value.month, value.day, value.hour, value.minute)

    @classmethod
    def parse(cls, text: str) -> "Datetime":
        """
        Parse a due-date string of the form "YYYY-MM-DD HH:MM".

        Surrounding whitespace is ignored. Raises ValueError when the text does
        not match the format or a field is out of range.
        """
        if not isinstance(text, str):
            raise ValueError(f"due date must be a string in the form {DUE_TEXT_FORMAT}")
        match = _DUE_TEXT_RE.match(text.strip())
        if match is None:
            raise ValueError(f"invalid due date {text!r}; expected {DUE_TEXT_FORMAT}")
        year, month, day, hour, minute = (int(part) for part in match.groups())
        return cls(year, month, day, hour, minute)

    def to_string(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d} {self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return self.to_string()

    def to_total_minutes(self) -> int:
        total_days = self.year * _DAYS_IN_YEAR + (self.month - 1) * _DAYS_IN_MONTH + self.day
        return total_days * _MINUTES_PER_DAY + self.hour * 60 + self.minute

    def time_diff(self, other: "Datetime") -> TimeDiff:
        """Return self - other as a normalized, signed TimeDiff."""
        diff = self.to_total_minutes() - other.to_total_minutes()
        magnitude = abs(diff)
        return TimeDiff(
            days=magnitude // _MINUTES_PER_DAY,
            hours=(magnitude % _MINUTES_PER_DAY) // 60,
            minutes=magnitude % 60,
            is_negative=diff < 0,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Datetime):
            return NotImplemented
        return self.to_total_minutes() == other.to_total_minutes()

    def __hash__(self) -> int:
        return hash(self.to_total_minutes())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Datetime):
            return NotImplemented
        return self.to_total_minutes() < other.to_total_minutes()


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    if not (low <= value <= high):
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


# PUBLIC_INTERFACE
def normalize_due_text(text: str) -> str:
    """Validate a due-date string and return its canonical form."""
    return Datetime.parse(text).to_string()
