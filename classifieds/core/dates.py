from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable

# Moscow offset irr.ru timestamps are rendered in.
SITE_TIMEZONE = timezone(timedelta(hours=4))

MONTHS: dict[str, int] = {
    "января": 1,
    "февраля": 2,
    "марта": 3,
    "апреля": 4,
    "мая": 5,
    "июня": 6,
    "июля": 7,
    "августа": 8,
    "сентября": 9,
    "октября": 10,
    "ноября": 11,
    "декабря": 12,
}

_TODAY_PATTERN = re.compile(
    r"^\s*сегодня,\s+(?P<hour>[01][0-9]|2[0-3]):(?P<minute>[0-5][0-9])\s*$",
    re.IGNORECASE,
)
_DATE_PATTERN = re.compile(
    r"^\s*(?P<day>0?[1-9]|[12][0-9]|3[01])\s+(?P<month>[^\W\d_]+)(?:\s+(?P<year>\d\d(?:\d\d)?))?\s*$",
)


class DateNormalizationError(ValueError):
    pass


class UnknownMonthError(DateNormalizationError):
    pass


@dataclass(frozen=True, slots=True)
class TodayCapture:
    hour: int
    minute: int


@dataclass(frozen=True, slots=True)
class DateCapture:
    day: int
    month_token: str
    year: str | None


def match_today(phrase: str) -> TodayCapture | None:
    match = _TODAY_PATTERN.match(phrase)
    if match is None:
        return None
    return TodayCapture(hour=int(match.group("hour")), minute=int(match.group("minute")))


def match_date(phrase: str) -> DateCapture | None:
    match = _DATE_PATTERN.match(phrase)
    if match is None:
        return None
    return DateCapture(day=int(match.group("day")), month_token=match.group("month"), year=match.group("year"))


def normalize_date(phrase: str, now: datetime) -> datetime:
    """
    Convert an irr.ru date phrase into an aware datetime in SITE_TIMEZONE.

    Recognized forms are "сегодня, HH:MM" and "D <month> [YY|YYYY]".
    `now` supplies today's date and the default year.
    """
    today = _site_now(now).date()
    for resolver in _RESOLVERS:
        resolved = resolver(phrase, today)
        if resolved is not None:
            return resolved
    raise DateNormalizationError(f"cannot normalize date string: {phrase}")


def _resolve_today(phrase: str, today: date) -> datetime | None:
    capture = match_today(phrase)
    if capture is None:
        return None
    return datetime.combine(today, time(capture.hour, capture.minute), tzinfo=SITE_TIMEZONE)


def _resolve_date(phrase: str, today: date) -> datetime | None:
    capture = match_date(phrase)
    if capture is None:
        return None
    month = MONTHS.get(capture.month_token.lower())
    if month is None:
        raise UnknownMonthError(f"unknown month: {capture.month_token}")
    year = _resolve_year(capture.year, default=today.year)
    try:
        return datetime(year, month, capture.day, tzinfo=SITE_TIMEZONE)
    except ValueError as exc:
        raise DateNormalizationError(f"cannot normalize date string: {phrase}") from exc


def _resolve_year(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    if len(raw) == 2:
        return datetime.strptime(raw, "%y").year
    return int(raw)


def _site_now(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now
    return now.astimezone(SITE_TIMEZONE)


_RESOLVERS: tuple[Callable[[str, date], datetime | None], ...] = (_resolve_today, _resolve_date)
