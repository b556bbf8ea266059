"""Due-date extraction from free-text task titles.

Conservative by intent: "Call Nick at 6:00PM" becomes ("Call Nick", today 18:00
or tomorrow if that has passed), while anything that does not resolve to a
future moment leaves the title exactly as typed (trimmed) with no due date.

Recognised, first match wins:

1. relative days: ``today``, ``tomorrow``, ``tmr``
2. weekdays, full or three-letter (always the next occurrence, never today)
3. ``M/D``, ``M-D``, ``M/D/YY``, ``M/D/YYYY``
4. month names: ``jan 26``, ``february 1, 2026``, ``feb 1st``, ``feb, 1``
5. a bare time (``2pm``, ``2:30pm``, ``14:00``) when no date matched

A time next to a date sets the time of day; otherwise dates default to 09:00.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from app.core.config import settings

_RELATIVE_RE = re.compile(r"\b(today|tomorrow|tmr)\b", re.IGNORECASE)

_WEEKDAYS = [name.lower() for name in calendar.day_name]  # monday first
_WEEKDAY_RE = re.compile(
    r"\b(" + "|".join(f"{d}|{d[:3]}" for d in _WEEKDAYS) + r")\b",
    re.IGNORECASE,
)

# A number directly followed by ":" or am/pm is a time, never a day or year
_NOT_TIME = r"(?!\d|\s*:|\s*[ap]m\b)"

_SLASH_DATE_RE = re.compile(
    r"\b(\d{1,2})[/-](\d{1,2})(?:[/-](\d{4}|\d{2}))?\b" + _NOT_TIME,
    re.IGNORECASE,
)

_MONTHS = [name.lower() for name in calendar.month_name[1:]]
_MONTH_DATE_RE = re.compile(
    r"\b(" + "|".join(f"{m}|{m[:3]}" for m in _MONTHS) + r")"
    r"\s*,?\s*(\d{1,2})" + _NOT_TIME + r"(?:\s*(?:st|nd|rd|th)\b)?"
    r"(?:\s*,?\s*(\d{4}|\d{2})\b" + _NOT_TIME + r")?",
    re.IGNORECASE,
)

_TIME_12H_RE = re.compile(
    r"\b(?:(?:at|by)\s+)?(1[0-2]|0?[1-9])(?::([0-5]\d))?\s*(am|pm)\b",
    re.IGNORECASE,
)
_TIME_24H_RE = re.compile(
    r"\b(?:(?:at|by)\s+)?([01]?\d|2[0-3]):([0-5]\d)\b(?!\s*[ap]m\b)",
    re.IGNORECASE,
)

_EDGE_PUNCTUATION_RE = re.compile(r"^[\s,\-–—]+|[\s,\-–—]+$")


@dataclass(frozen=True)
class ParsedTitle:
    cleaned_title: str
    due_at: datetime | None = None

    @property
    def due_at_iso(self) -> str | None:
        """UTC ISO-8601 with millisecond precision, e.g. ``2026-01-26T14:00:00.000Z``."""
        if self.due_at is None:
            return None
        moment = self.due_at.astimezone(timezone.utc)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class _DateMatch:
    day: date
    span: tuple[int, int]
    explicit: bool = False
    today: bool = False


class _InvalidDate(Exception):
    """A date-shaped phrase that is not on the calendar (2/30)."""


def _full_year(raw: str | None, default: int) -> int:
    if not raw:
        return default
    year = int(raw)
    if year < 100:
        year += 2000 if year < 50 else 1900
    return year


def _calendar_date(year: int, month: int, day: int) -> date:
    try:
        return date(year, month, day)
    except ValueError:
        raise _InvalidDate(f"{month}/{day}/{year}") from None


def _match_date(text: str, now: datetime) -> _DateMatch | None:
    today = now.date()

    match = _RELATIVE_RE.search(text)
    if match:
        word = match.group(1).lower()
        offset = 0 if word == "today" else 1
        return _DateMatch(today + timedelta(days=offset), match.span(), today=offset == 0)

    match = _WEEKDAY_RE.search(text)
    if match:
        target = _WEEKDAYS.index(
            next(d for d in _WEEKDAYS if d.startswith(match.group(1).lower()[:3]))
        )
        ahead = (target - today.weekday()) % 7 or 7
        return _DateMatch(today + timedelta(days=ahead), match.span())

    match = _SLASH_DATE_RE.search(text)
    if match:
        month, day = int(match.group(1)), int(match.group(2))
        year = _full_year(match.group(3), today.year)
        return _DateMatch(_calendar_date(year, month, day), match.span(), explicit=True)

    match = _MONTH_DATE_RE.search(text)
    if match:
        month = _MONTHS.index(
            next(m for m in _MONTHS if m.startswith(match.group(1).lower()[:3]))
        ) + 1
        day = int(match.group(2))
        year = _full_year(match.group(3), today.year)
        return _DateMatch(_calendar_date(year, month, day), match.span(), explicit=True)

    return None


def _overlaps(span: tuple[int, int], other: tuple[int, int] | None) -> bool:
    return other is not None and span[0] < other[1] and other[0] < span[1]


def _match_time(
    text: str, exclude: tuple[int, int] | None = None
) -> tuple[time, tuple[int, int]] | None:
    for match in _TIME_12H_RE.finditer(text):
        if _overlaps(match.span(), exclude):
            continue
        hour = int(match.group(1)) % 12
        if match.group(3).lower() == "pm":
            hour += 12
        return time(hour, int(match.group(2) or 0)), match.span()

    for match in _TIME_24H_RE.finditer(text):
        if _overlaps(match.span(), exclude):
            continue
        return time(int(match.group(1)), int(match.group(2))), match.span()

    return None


def _next_year(moment: datetime) -> datetime | None:
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:  # Feb 29
        return None


def _clean(text: str, spans: list[tuple[int, int]]) -> str:
    for start, end in sorted(spans, reverse=True):
        text = text[:start] + " " + text[end:]
    text = re.sub(r"\s+", " ", text)
    return _EDGE_PUNCTUATION_RE.sub("", text).strip()


def parse_due_date(raw_title: str, now: datetime | None = None) -> ParsedTitle:
    """Split ``raw_title`` into a cleaned title and an optional future due date.

    ``now`` is an aware datetime in the user's timezone; times in the title are
    read in that timezone. Never raises for odd input.
    """
    trimmed = (raw_title or "").strip()
    if not trimmed:
        return ParsedTitle(trimmed)

    if now is None:
        now = datetime.now().astimezone()
    elif now.tzinfo is None:
        now = now.astimezone()
    tz = now.tzinfo

    try:
        date_match = _match_date(trimmed, now)
    except _InvalidDate:
        return ParsedTitle(trimmed)

    time_match = _match_time(trimmed, exclude=date_match.span if date_match else None)
    if date_match is None and time_match is None:
        return ParsedTitle(trimmed)

    spans: list[tuple[int, int]] = []
    due: datetime | None
    if date_match is None:
        at, time_span = time_match
        spans.append(time_span)
        due = datetime.combine(now.date(), at, tzinfo=tz)
        if due < now:
            due += timedelta(days=1)
    else:
        spans.append(date_match.span)
        at = time(settings.TASK_DEFAULT_DUE_HOUR, 0)
        if time_match is not None:
            at, time_span = time_match
            spans.append(time_span)
        due = datetime.combine(date_match.day, at, tzinfo=tz)

        if due < now and date_match.explicit:
            due = _next_year(due)
        elif due < now and date_match.today:
            due = (now + timedelta(hours=1)).replace(second=0, microsecond=0)

    if due is None or due < now:
        return ParsedTitle(trimmed)

    return ParsedTitle(_clean(trimmed, spans) or trimmed, due)
