"""
Local Time Codec

Converts between the canonical appointment timestamp text
("YYYY-MM-DDTHH:MM:SS.mmm") and literal calendar/clock fields.

Digits are read as written: no timezone offset is ever applied, so an
appointment entered for 2 PM compares as 2 PM on any host.
"""

import re
from datetime import datetime
from typing import NamedTuple, Optional, Union

from ...config import DEFAULT_TIME_OF_DAY

_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{1,2})(?::(\d{1,2})(?:\.(\d{1,3}))?)?$")


class LocalFields(NamedTuple):
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    millisecond: int = 0


class _InvalidTimestamp:
    """Sentinel returned by decode() for text that is not a usable timestamp"""

    def __bool__(self):
        return False

    def __repr__(self):
        return "INVALID"


INVALID = _InvalidTimestamp()

Decoded = Union[LocalFields, _InvalidTimestamp]


def decode(text: Optional[str]) -> Decoded:
    """
    Read calendar fields from a canonical timestamp.

    Accepts "YYYY-MM-DD" optionally followed by "T" or a space and
    "HH:MM[:SS[.mmm]]". A missing time part means midnight.

    Returns:
        LocalFields, or INVALID when the date part is missing, non-numeric
        or out of range.
    """
    if not text or not isinstance(text, str):
        return INVALID

    text = text.strip()
    separated = "T" in text or " " in text
    if "T" in text:
        date_part, _, time_part = text.partition("T")
    elif " " in text:
        date_part, _, time_part = text.partition(" ")
    else:
        date_part, time_part = text, ""

    if separated and not time_part.strip():
        return INVALID

    date_match = _DATE_RE.match(date_part)
    if not date_match:
        return INVALID
    year, month, day = (int(g) for g in date_match.groups())

    hour = minute = second = millisecond = 0
    if time_part:
        time_match = _TIME_RE.match(time_part.strip())
        if not time_match:
            return INVALID
        hh, mm, ss, frac = time_match.groups()
        hour, minute = int(hh), int(mm)
        second = int(ss) if ss else 0
        # ".5" means 500 ms, not 5 ms
        millisecond = int(frac.ljust(3, "0")) if frac else 0

    fields = LocalFields(year, month, day, hour, minute, second, millisecond)
    try:
        to_datetime(fields)
    except ValueError:
        return INVALID
    return fields


def encode(fields: LocalFields) -> str:
    """Write fields as "YYYY-MM-DDTHH:MM:SS.mmm" """
    return (
        f"{fields.year:04d}-{fields.month:02d}-{fields.day:02d}"
        f"T{fields.hour:02d}:{fields.minute:02d}:{fields.second:02d}.{fields.millisecond:03d}"
    )


def to_datetime(fields: LocalFields) -> datetime:
    return datetime(
        fields.year,
        fields.month,
        fields.day,
        fields.hour,
        fields.minute,
        fields.second,
        fields.millisecond * 1000,
    )


def from_datetime(value: datetime) -> LocalFields:
    """Take the wall-clock digits of a datetime, ignoring any tzinfo"""
    return LocalFields(
        value.year,
        value.month,
        value.day,
        value.hour,
        value.minute,
        value.second,
        value.microsecond // 1000,
    )


def parse_local(text: Optional[str]) -> Optional[datetime]:
    """Decode straight to a naive datetime; None means "no timestamp" """
    fields = decode(text)
    if not fields:
        return None
    return to_datetime(fields)


def format_local(value: datetime) -> str:
    return encode(from_datetime(value))


def compose(date_text: Optional[str], time_text: Optional[str] = None) -> Decoded:
    """
    Build a timestamp from separate date and time inputs.

    A date without a time is placed at the configured default time of day.
    """
    if not date_text:
        return INVALID
    time_text = (time_text or "").strip() or DEFAULT_TIME_OF_DAY
    return decode(f"{date_text.strip()}T{time_text}")
