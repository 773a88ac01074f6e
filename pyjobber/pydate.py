"""Date, time and duration utilities for the job ledger."""

# pylint: disable=line-too-long,missing-function-docstring

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional

import click

DISPLAY_FORMAT = "%a %b %d %Y, %H:%M"

WEEKDAY_ALIASES = {
    "mon": 0,
    "monday": 0,
    "tue": 1,
    "tuesday": 1,
    "wed": 2,
    "wednesday": 2,
    "thu": 3,
    "thursday": 3,
    "fri": 4,
    "friday": 4,
    "sat": 5,
    "saturday": 5,
    "sun": 6,
    "sunday": 6,
}

UNIT_ALIASES = {
    "hour": "hours",
    "hours": "hours",
    "hr": "hours",
    "hrs": "hours",
    "h": "hours",
    "minute": "minutes",
    "minutes": "minutes",
    "min": "minutes",
    "mins": "minutes",
    "m": "minutes",
}

TOKEN_RE = re.compile(
    r"(?P<time>\d+:\d{2})|"
    r"(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>[A-Za-z]+)",
)

GERMAN_DATE_RE = re.compile(r"^(?P<day>\d{1,2})\.(?P<month>\d{1,2})\.(?P<year>\d{4})?$")
ENGLISH_DATE_RE = re.compile(r"^(?P<month>\d{1,2})/(?P<day>\d{1,2})(?:/(?P<year>\d{4})?)?$")
ISO_DATE_RE = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})$")
SEPARATOR_RE = re.compile(r"[,\s]+|(?<=\d)T(?=\d)")
TIME_RE = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")
RELATIVE_RE = re.compile(
    r"^(?:(?P<hours>\d{1,2}):(?P<minutes>\d{2})|(?P<value>\d+)(?P<unit>[hm]))(?P<sign>[+-])$"
)


def localize(naive: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Attach a zone to a wall clock time; ``None`` means the system zone.

    The offset is looked up for that very date, so summer and winter times
    of the same zone get different offsets.
    """
    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def shift_days(instant: datetime, days: int, tz: Optional[tzinfo] = None) -> datetime:
    """Move by whole calendar days keeping the local wall clock time."""
    local = instant.astimezone(tz).replace(tzinfo=None)
    return localize(local + timedelta(days=days), tz)


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    month_days = [0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
    if is_leap_year(year):
        month_days[2] = 29
    return month_days[month]


def validate_date(year: int, month: int, day: int) -> None:
    if month < 1 or month > 12:
        raise click.ClickException("Month must be between 1 and 12.")
    if day < 1 or day > days_in_month(year, month):
        raise click.ClickException(f"Day out of range for {year}-{month}.")


def validate_time(hour: int, minute: int) -> None:
    if hour < 0 or hour > 23:
        raise click.ClickException("Hour must be between 0 and 23.")
    if minute < 0 or minute > 59:
        raise click.ClickException("Minute must be between 0 and 59.")


def format_datetime(dt: datetime, tz: Optional[tzinfo] = None) -> str:
    """Render an instant in local (or the given) time for humans."""
    return dt.astimezone(tz).strftime(DISPLAY_FORMAT)


def format_total_value(value: float) -> str:
    value = round(value, 6)
    if value.is_integer():
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")


def format_pay(value: float) -> str:
    return f"{value:,.2f}"


@dataclass(frozen=True)
class Duration:
    """A signed span of whole minutes, kept as hours and minutes.

    Construct through ``from_minutes`` (or the other class methods) so that
    ``minutes`` stays below 60; only ``__add__`` composes larger values.
    """

    hours: int = 0
    minutes: int = 0

    @classmethod
    def zero(cls) -> Duration:
        return cls(0, 0)

    @classmethod
    def from_minutes(cls, total: int) -> Duration:
        sign = -1 if total < 0 else 1
        hours, minutes = divmod(abs(int(total)), 60)
        return cls(sign * hours, sign * minutes)

    @classmethod
    def days(cls, count: int) -> Duration:
        return cls.from_minutes(count * 24 * 60)

    @classmethod
    def between(cls, start: datetime, end: datetime) -> Duration:
        """Whole minutes from ``start`` to ``end``, negative if ``end`` is earlier."""
        # same-zone subtraction ignores DST changes, UTC does not
        seconds = (end.astimezone(timezone.utc) - start.astimezone(timezone.utc)).total_seconds()
        return cls.from_minutes(int(seconds / 60))

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes

    def is_zero(self) -> bool:
        return self.total_minutes == 0

    def to_timedelta(self) -> timedelta:
        return timedelta(hours=self.hours, minutes=self.minutes)

    def in_hours(self) -> float:
        return self.total_minutes / 60

    def __add__(self, other: object):
        if isinstance(other, Duration):
            return Duration(self.hours + other.hours, self.minutes + other.minutes)
        if isinstance(other, datetime):
            return other + self.to_timedelta()
        return NotImplemented

    __radd__ = __add__

    def __rsub__(self, other: object):
        if isinstance(other, datetime):
            return other - self.to_timedelta()
        return NotImplemented

    def __neg__(self) -> Duration:
        return Duration(-self.hours, -self.minutes)

    def __str__(self) -> str:
        sign = "-" if self.total_minutes < 0 else ""
        return f"{sign}{abs(self.hours)}:{abs(self.minutes):02d}"


def parse_duration(value: str) -> Duration:
    """Parse a work duration such as ``1:30``, ``2h 15m``, ``90 min`` or ``1.5``."""
    raw = value.strip()
    if not raw:
        raise click.ClickException("Duration cannot be empty.")

    try:
        hours = float(raw)
    except ValueError:
        pass
    else:
        if hours < 0:
            raise click.ClickException("Duration cannot be negative.")
        return Duration.from_minutes(round(hours * 60))

    minutes = 0.0
    pos = 0
    matched = False
    for match in TOKEN_RE.finditer(raw):
        if raw[pos:match.start()].strip(" ,"):
            raise click.ClickException(f"Invalid duration segment: {raw[pos:match.start()].strip()}")
        pos = match.end()
        matched = True

        if match.group("time"):
            h, m = match.group("time").split(":")
            minutes += int(h) * 60 + int(m)
            continue

        unit_key = UNIT_ALIASES.get(match.group("unit").lower())
        if unit_key is None:
            raise click.ClickException(f"Unknown duration unit: {match.group('unit')}")
        numeric = float(match.group("value"))
        minutes += numeric * 60 if unit_key == "hours" else numeric

    if raw[pos:].strip(" ,"):
        raise click.ClickException(f"Invalid duration segment: {raw[pos:].strip()}")
    if not matched:
        raise click.ClickException(f"Duration format not recognized: {value}")

    return Duration.from_minutes(round(minutes))


@dataclass(frozen=True)
class DateParts:
    year: Optional[int]
    month: int
    day: int


@dataclass(frozen=True)
class TimeParts:
    hour: int = 0
    minute: int = 0


@dataclass(frozen=True)
class PartialDateTime:
    """A time spec whose omitted fields are taken from a base instant.

    Exactly one way of naming the day is set (``date``, ``days_back`` or
    ``weekday``), or none of them; ``offset`` excludes all other fields.
    """

    date: Optional[DateParts] = None
    days_back: Optional[int] = None
    weekday: Optional[int] = None
    time: Optional[TimeParts] = None
    offset: Optional[Duration] = None

    def is_empty(self) -> bool:
        """True for the bare "current time" marker."""
        return (
            self.date is None
            and self.days_back is None
            and self.weekday is None
            and self.time is None
            and self.offset is None
        )

    def has_date(self) -> bool:
        return self.date is not None or self.days_back is not None or self.weekday is not None

    def resolve(self, base: datetime, tz: Optional[tzinfo] = None) -> datetime:
        """Fill every omitted field from ``base`` seen as wall clock time in ``tz``.

        ``tz`` of ``None`` is the system zone. The result carries the offset
        in force on the resolved date, not the one of ``base``.
        """
        if self.offset is not None:
            return base + self.offset.to_timedelta()
        if self.is_empty():
            return base

        base = base.astimezone(tz)
        day = _resolve_day(self, base.date())
        if self.time is not None:
            hour, minute = self.time.hour, self.time.minute
        elif self.has_date():
            hour, minute = 0, 0
        else:
            hour, minute = base.hour, base.minute
        return localize(datetime(day.year, day.month, day.day, hour, minute), tz)


def _resolve_day(spec: PartialDateTime, base_day: date) -> date:
    if spec.date is not None:
        year = spec.date.year if spec.date.year is not None else base_day.year
        validate_date(year, spec.date.month, spec.date.day)
        return date(year, spec.date.month, spec.date.day)
    if spec.days_back is not None:
        return base_day - timedelta(days=spec.days_back)
    if spec.weekday is not None:
        return base_day - timedelta(days=(base_day.weekday() - spec.weekday) % 7)
    return base_day


def _parse_date_token(token: str) -> Optional[dict]:
    key = token.lower()
    if key == "today":
        return {"days_back": 0}
    if key == "yesterday":
        return {"days_back": 1}
    if key in WEEKDAY_ALIASES:
        return {"weekday": WEEKDAY_ALIASES[key]}
    for pattern in (GERMAN_DATE_RE, ENGLISH_DATE_RE, ISO_DATE_RE):
        match = pattern.match(token)
        if match:
            year = match.group("year")
            parts = DateParts(
                int(year) if year else None,
                int(match.group("month")),
                int(match.group("day")),
            )
            if parts.year is not None:
                validate_date(parts.year, parts.month, parts.day)
            elif parts.month < 1 or parts.month > 12:
                raise click.ClickException(f"Month out of range: {token}")
            return {"date": parts}
    return None


def _parse_time_token(token: str) -> Optional[TimeParts]:
    match = TIME_RE.match(token)
    if not match:
        return None
    hour, minute = int(match.group("hour")), int(match.group("minute"))
    validate_time(hour, minute)
    return TimeParts(hour, minute)


def parse_partial(value: Optional[str]) -> PartialDateTime:
    """Parse a time spec without resolving it against any instant."""
    raw = (value or "").strip()
    if not raw or raw.lower() == "now":
        return PartialDateTime()

    relative = RELATIVE_RE.match(raw)
    if relative:
        if relative.group("unit") == "h":
            minutes = int(relative.group("value")) * 60
        elif relative.group("unit") == "m":
            minutes = int(relative.group("value"))
        else:
            minutes = int(relative.group("hours")) * 60 + int(relative.group("minutes"))
        sign = -1 if relative.group("sign") == "-" else 1
        return PartialDateTime(offset=Duration.from_minutes(sign * minutes))

    tokens = [token for token in SEPARATOR_RE.split(raw) if token]
    if len(tokens) > 2:
        raise click.ClickException(f"Invalid time: {value}")

    fields: dict = {}
    for token in tokens:
        time_parts = _parse_time_token(token)
        if time_parts is not None and "time" not in fields:
            fields["time"] = time_parts
            continue
        date_fields = _parse_date_token(token)
        if date_fields is not None and not ({"date", "days_back", "weekday"} & fields.keys()):
            fields.update(date_fields)
            continue
        raise click.ClickException(f"Invalid time: {value}")

    return PartialDateTime(**fields)
