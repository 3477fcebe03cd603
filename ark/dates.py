"""
Calendar utilities and snapshot date keys.

A snapshot is identified by the calendar day it captures, encoded as an
8-digit ``YYYYMMDD`` key inside the file name ``export<YYYYMMDD>.zip``.
All helpers operate on naive ``datetime.date`` values; there is no
time-of-day component anywhere in the retention logic.

Usage:
    from ark.dates import format_key, parse_snapshot_name

    format_key(date(2024, 3, 15))               # "20240315"
    parse_snapshot_name("export20240315.zip")   # date(2024, 3, 15)
    parse_snapshot_name("notes.txt")            # None
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta

ARCHIVE_PREFIX = "export"
ARCHIVE_SUFFIX = ".zip"
KEY_FORMAT = "%Y%m%d"

_KEY_RE = re.compile(r"[0-9]{8}")
_NAME_RE = re.compile(
    rf"^{re.escape(ARCHIVE_PREFIX)}(?P<key>[0-9]{{8}}){re.escape(ARCHIVE_SUFFIX)}$"
)

SUNDAY = 6  # date.weekday() value


class ParseError(ValueError):
    """Raised when a string is not a valid ``YYYYMMDD`` date key."""

    def __init__(self, text: str, reason: str):
        super().__init__(f"Invalid date key {text!r}: {reason}")
        self.text = text
        self.reason = reason


class SystemClock:
    """Clock returning the local calendar date."""

    def today(self) -> date:
        return today()


@dataclass(frozen=True)
class FixedClock:
    """Clock pinned to a single date, for tests and replays."""

    current: date

    def today(self) -> date:
        return self.current


def today() -> date:
    """Return the current local calendar date."""
    return date.today()


def format_key(d: date) -> str:
    """Encode a date as its canonical ``YYYYMMDD`` key."""
    return f"{d.year:04d}{d.month:02d}{d.day:02d}"


def parse_key(text: str) -> date:
    """
    Decode a ``YYYYMMDD`` key.

    Args:
        text: Exactly eight ASCII digits

    Returns:
        The encoded calendar date

    Raises:
        ParseError: If the text is malformed or names an impossible date
    """
    if not isinstance(text, str) or not _KEY_RE.fullmatch(text):
        raise ParseError(str(text), "expected 8 digits")

    try:
        return date(int(text[:4]), int(text[4:6]), int(text[6:8]))
    except ValueError as e:
        raise ParseError(text, str(e)) from e


def snapshot_name(d: date) -> str:
    """File name of the snapshot for a date."""
    return f"{ARCHIVE_PREFIX}{format_key(d)}{ARCHIVE_SUFFIX}"


def parse_snapshot_name(name: str) -> date | None:
    """
    Return the date encoded in a snapshot file name.

    Names that do not follow the convention, or whose digits are not a real
    date (``export20240230.zip``), yield None so callers can treat them as
    unmanaged files.
    """
    match = _NAME_RE.match(name)
    if not match:
        return None

    try:
        return parse_key(match.group("key"))
    except ParseError:
        return None


def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    last_day = calendar.monthrange(d.year, d.month)[1]
    return d.replace(day=last_day)


def end_of_year(year: int) -> date:
    return date(year, 12, 31)


def next_or_same_sunday(d: date) -> date:
    """Return ``d`` if it is a Sunday, otherwise the following Sunday."""
    return d + timedelta(days=(SUNDAY - d.weekday()) % 7)


def same_month(d1: date, d2: date) -> bool:
    return d1.year == d2.year and d1.month == d2.month


def same_year(d1: date, d2: date) -> bool:
    return d1.year == d2.year
