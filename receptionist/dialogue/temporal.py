"""Natural-language date/time parsing for spoken scheduling requests.

Turns phrases such as "tomorrow at 3pm", "next Tuesday morning" or
"October 21st at 10:30 a.m." into a timezone-aware ``datetime`` in the
caller's calendar timezone. Relative words are resolved against "now" in
that timezone, never the server's local zone.

``parse`` returns ``None`` when the utterance holds no date or time at all,
or names a date it cannot resolve. It does not judge whether the result is
in the future or within business hours; the scheduling engine owns that
policy.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from dateutil import parser as dtparser
from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

log = logging.getLogger("receptionist.temporal")

DEFAULT_TIME = time(12, 0)

PART_OF_DAY = {
    "morning": time(9, 0),
    "afternoon": time(14, 0),
    "evening": time(18, 0),
    "tonight": time(19, 0),
    "night": time(19, 0),
}

HOUR_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
    "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12,
}

NUMBER_WORDS = {**HOUR_WORDS, "a": 1, "an": 1, "couple": 2, "few": 3}

WEEKDAYS = {
    "monday": MO, "mon": MO,
    "tuesday": TU, "tue": TU, "tues": TU,
    "wednesday": WE, "wed": WE,
    "thursday": TH, "thu": TH, "thur": TH, "thurs": TH,
    "friday": FR, "fri": FR,
    "saturday": SA, "sat": SA,
    "sunday": SU, "sun": SU,
}

_MONTHS = (
    "january|february|march|april|may|june|july|august|september|october|"
    "november|december|jan|feb|mar|apr|jun|jul|aug|sept|sep|oct|nov|dec"
)
_ORDINAL = r"(?:st|nd|rd|th)?"
_QUANTITY = r"\d+|" + "|".join(NUMBER_WORDS)

_RE_DAY_AFTER_TOMORROW = re.compile(r"\bday after tomorrow\b")
_RE_TOMORROW = re.compile(r"\btomorrow\b")
_RE_TODAY = re.compile(r"\b(?:today|tonight|this (?:morning|afternoon|evening))\b")
_RE_IN_DAYS = re.compile(rf"\bin (?:a |the )?({_QUANTITY}) (?:of )?(day|days|week|weeks)\b")
_RE_NEXT_WEEK = re.compile(r"\bnext week\b")
_RE_WEEKDAY = re.compile(
    r"\b(?:(next|this|coming)\s+)?(" + "|".join(sorted(WEEKDAYS, key=len, reverse=True)) + r")\b"
)
_RE_MONTH_DAY = re.compile(
    rf"\b(?:{_MONTHS})\.?\s+\d{{1,2}}{_ORDINAL}(?:,?\s+\d{{4}})?\b"
)
_RE_DAY_OF_MONTH = re.compile(rf"\b\d{{1,2}}{_ORDINAL}\s+of\s+(?:{_MONTHS})\b")
_RE_NUMERIC_DATE = re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b")
_RE_ORDINAL_DAY = re.compile(r"\b(?:the|on)\s+(\d{1,2})(?:st|nd|rd|th)\b")
_RE_ORDINAL_WORD = re.compile(r"\b\d{1,2}(?:st|nd|rd|th)\b")
_DATE_PATTERNS = (_RE_MONTH_DAY, _RE_DAY_OF_MONTH, _RE_NUMERIC_DATE)

_RE_HOUR_WORD = re.compile(
    r"\b(" + "|".join(HOUR_WORDS) + r")\b(?=\s*(?:[ap]\.?\s?m\b|o'?\s?clock\b))"
)
_RE_MERIDIEM = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*([ap])\.?\s?m\b\.?")
_RE_OCLOCK = re.compile(r"\b(\d{1,2})\s*o'?\s?clock\b")
_RE_24H = re.compile(r"\b([01]?\d|2[0-3]):([0-5]\d)\b")
_RE_AT_HOUR = re.compile(r"\bat (\d{1,2})\b(?!\s*[:/])")
_RE_NOON = re.compile(r"\b(?:noon|midday)\b")
_RE_MIDNIGHT = re.compile(r"\bmidnight\b")
_RE_PART_OF_DAY = re.compile(r"\b(" + "|".join(PART_OF_DAY) + r")\b")


def _quantity(token: str) -> int:
    return int(token) if token.isdigit() else NUMBER_WORDS[token]


def _bare_hour(hour: int, part: str | None = None) -> int:
    """Interpret an hour said without am/pm.

    A spoken part of day decides: "7 in the morning" is 07:00 and "evening
    at 8" is 20:00. Without one, 1 through 7 mean afternoon.
    """
    if not 1 <= hour <= 12:
        return hour
    if part == "morning" or hour == 12:
        return hour
    if part is not None:
        return hour + 12
    if hour <= 7:
        return hour + 12
    return hour


def _relative_date(text: str, today: date) -> date | None:
    if _RE_DAY_AFTER_TOMORROW.search(text):
        return today + timedelta(days=2)
    if _RE_TOMORROW.search(text):
        return today + timedelta(days=1)
    if _RE_TODAY.search(text):
        return today

    m = _RE_IN_DAYS.search(text)
    if m:
        qty = _quantity(m.group(1))
        if m.group(2).startswith("week"):
            return today + relativedelta(weeks=qty)
        return today + relativedelta(days=qty)

    m = _RE_WEEKDAY.search(text)
    if m:
        modifier, name = m.groups()
        weekday = WEEKDAYS[name]
        if modifier == "next":
            return today + relativedelta(days=1, weekday=weekday(+1))
        return today + relativedelta(weekday=weekday(+1))

    if _RE_NEXT_WEEK.search(text):
        return today + relativedelta(days=1, weekday=MO(+1))
    return None


def _day_of_month(day: int, today: date) -> date | None:
    """The first date on or after ``today`` that falls on ``day``."""
    if not 1 <= day <= 31:
        return None
    first = today.replace(day=1)
    for ahead in range(12):
        try:
            candidate = (first + relativedelta(months=ahead)).replace(day=day)
        except ValueError:
            continue  # short month
        if candidate >= today:
            return candidate
    return None


def _plausible(fragment: str) -> bool:
    # dateutil would read "october 45" as a year; only day/month numbers here
    numbers = [int(n) for n in re.findall(r"\d+", fragment) if len(n) <= 2][:2]
    if any(not 1 <= n <= 31 for n in numbers):
        return False
    return "/" not in fragment or numbers[0] <= 12


def _absolute_date(text: str, today: date) -> date | None:
    for pattern in _DATE_PATTERNS:
        m = pattern.search(text)
        if not m:
            continue
        fragment = m.group(0)
        if not _plausible(fragment):
            log.debug("Date fragment %r out of range", fragment)
            continue
        try:
            parsed = dtparser.parse(
                fragment, default=datetime.combine(today, time()), fuzzy=True
            ).date()
        except (ValueError, OverflowError):
            log.debug("Date fragment %r did not parse", fragment)
            continue
        # "October 3rd" said in December means next year's
        explicit_year = re.search(r"\d{4}", fragment) or fragment.count("/") == 2
        if parsed < today and not explicit_year:
            parsed += relativedelta(years=1)
        return parsed

    m = _RE_ORDINAL_DAY.search(text)
    if m:
        return _day_of_month(int(m.group(1)), today)
    return None


def _mentions_date(text: str) -> bool:
    return any(p.search(text) for p in (*_DATE_PATTERNS, _RE_ORDINAL_WORD))


def _time_of_day(text: str) -> time | None:
    m = _RE_PART_OF_DAY.search(text)
    part = m.group(1) if m else None

    m = _RE_MERIDIEM.search(text)
    if m:
        hour, minute, meridiem = int(m.group(1)), int(m.group(2) or 0), m.group(3)
        if 1 <= hour <= 12 and minute < 60:
            parsed = dtparser.parse(f"{hour}:{minute:02d} {meridiem}m")
            return parsed.time()

    m = _RE_OCLOCK.search(text)
    if m and 1 <= int(m.group(1)) <= 12:
        return time(_bare_hour(int(m.group(1)), part), 0)

    m = _RE_24H.search(text)
    if m:
        return time(_bare_hour(int(m.group(1)), part), int(m.group(2)))

    if _RE_NOON.search(text):
        return time(12, 0)
    if _RE_MIDNIGHT.search(text):
        return time(0, 0)

    m = _RE_AT_HOUR.search(text)
    if m and 1 <= int(m.group(1)) <= 23:
        return time(_bare_hour(int(m.group(1)), part), 0)

    if part:
        return PART_OF_DAY[part]
    return None


def _normalize(text: str) -> str:
    norm = " ".join(text.casefold().split())
    norm = re.sub(r"\b(today|tomorrow)'s\b", r"\1", norm)
    return _RE_HOUR_WORD.sub(lambda m: str(HOUR_WORDS[m.group(1)]), norm)


def parse(text: str, timezone: str, now: datetime | None = None) -> datetime | None:
    """Find a date/time in ``text``, interpreted in ``timezone``.

    Args:
        text: Caller utterance, any case.
        timezone: IANA timezone name of the business calendar.
        now: Reference instant for relative phrases. Defaults to the
            current time.

    Returns:
        An aware ``datetime`` in ``timezone``, or ``None`` if nothing
        date- or time-like was said. A date without a time lands at noon.
        A bare time that has already passed today moves to tomorrow.
    """
    tz = ZoneInfo(timezone)
    now = now.astimezone(tz) if now else datetime.now(tz)
    norm = _normalize(text or "")

    day = _relative_date(norm, now.date()) or _absolute_date(norm, now.date())
    if day is None and _mentions_date(norm):
        log.debug("Unresolvable date in %r", norm)
        return None
    clock = _time_of_day(norm)

    if day is None and clock is None:
        return None

    if day is None:
        result = datetime.combine(now.date(), clock, tzinfo=tz)
        if result <= now:
            result = datetime.combine(now.date() + timedelta(days=1), clock, tzinfo=tz)
        return result

    return datetime.combine(day, clock or DEFAULT_TIME, tzinfo=tz)
