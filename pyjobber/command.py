"""Turn the loosely coupled command line fields into exactly one command."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime, tzinfo
from typing import Optional, Union

from pyjobber.errors import InvalidInvocation
from pyjobber.pydate import Duration, PartialDateTime, parse_duration, parse_partial, shift_days
from pyjobber.tags import TagModification, TagSet, parse_modification

RANGE_RE = re.compile(r"^(?P<start>.*?)\.\.(?P<end>(?!\.).*)$")


@dataclass(frozen=True)
class RawArgs:
    """Command line fields as given; ``""`` marks an option given without value."""

    start: Optional[str] = None
    back: Optional[str] = None
    end: Optional[str] = None
    duration: Optional[str] = None
    message: Optional[str] = None
    tags: Optional[str] = None
    list: Optional[str] = None
    report: Optional[str] = None
    export: Optional[str] = None
    csv: Optional[str] = None
    list_tags: Optional[str] = None
    configuration: bool = False
    resolution: Optional[float] = None
    pay: Optional[float] = None
    max_hours: Optional[int] = None
    legacy_import: Optional[str] = None


@dataclass(frozen=True)
class Range:
    """Selects jobs by start time (``start`` inclusive, ``end`` exclusive) or count."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    count: Optional[int] = None

    def contains(self, instant: datetime) -> bool:
        if self.start is not None and instant < self.start:
            return False
        if self.end is not None and instant >= self.end:
            return False
        return True


def _range_bound(text: str, now: datetime, upper: bool, tz: Optional[tzinfo]) -> Optional[datetime]:
    if not text.strip():
        return None
    spec = parse_partial(text)
    bound = spec.resolve(now, tz)
    if upper and spec.has_date() and spec.time is None:
        bound = shift_days(bound, 1, tz)
    return bound


def parse_range(text: Optional[str], now: datetime, tz: Optional[tzinfo] = None) -> Range:
    """Parse ``""`` (all), ``N`` (last N jobs), ``A..B`` (between) or ``A`` (since)."""
    raw = (text or "").strip()
    if not raw:
        return Range()
    if raw.isdigit():
        return Range(count=int(raw))
    match = RANGE_RE.match(raw)
    if match:
        return Range(
            start=_range_bound(match.group("start"), now, False, tz),
            end=_range_bound(match.group("end"), now, True, tz),
        )
    return Range(start=_range_bound(raw, now, False, tz))


@dataclass(frozen=True)
class Start:
    start: datetime
    message: Optional[str] = None
    tags: Optional[TagModification] = None


@dataclass(frozen=True)
class Add:
    start: datetime
    end: datetime
    message: Optional[str] = None
    tags: Optional[TagModification] = None


@dataclass(frozen=True)
class Back:
    """Like ``Start`` but reusing message and tags of the previous job."""

    start: datetime
    message: Optional[str] = None
    tags: Optional[TagModification] = None


@dataclass(frozen=True)
class BackAdd:
    """Like ``Add`` but reusing message and tags of the previous job."""

    start: datetime
    end: datetime
    message: Optional[str] = None
    tags: Optional[TagModification] = None


@dataclass(frozen=True)
class End:
    end: datetime
    message: Optional[str] = None
    tags: Optional[TagModification] = None


@dataclass(frozen=True)
class MessageTags:
    message: Optional[str] = None
    tags: Optional[TagModification] = None


@dataclass(frozen=True)
class List:
    range: Range
    tags: Optional[TagSet] = None


@dataclass(frozen=True)
class Report:
    range: Range
    tags: Optional[TagSet] = None


@dataclass(frozen=True)
class ExportCSV:
    range: Range
    tags: Optional[TagSet] = None
    columns: Optional[str] = None


@dataclass(frozen=True)
class ShowConfiguration:
    pass


@dataclass(frozen=True)
class SetConfiguration:
    resolution: Optional[float] = None
    pay: Optional[float] = None
    tags: Optional[TagSet] = None
    max_hours: Optional[int] = None


@dataclass(frozen=True)
class LegacyImport:
    filename: str
    tags: Optional[TagSet] = None


@dataclass(frozen=True)
class ListTags:
    range: Range
    tags: Optional[TagSet] = None


Command = Union[
    Start,
    Add,
    Back,
    BackAdd,
    End,
    MessageTags,
    List,
    Report,
    ExportCSV,
    ShowConfiguration,
    SetConfiguration,
    LegacyImport,
    ListTags,
]

MESSAGE_COMMANDS = (Start, Add, Back, BackAdd, End)


def set_message(command: Command, message: str) -> Command:
    """Return ``command`` with its message replaced.

    Only Start, Add, Back, BackAdd and End carry a message; anything else
    is a caller error.
    """
    if not isinstance(command, MESSAGE_COMMANDS):
        raise TypeError(f"{type(command).__name__} has no message to set")
    return replace(command, message=message)


def needs_message(command: Command) -> bool:
    """True if the message option was given without text."""
    return isinstance(command, MESSAGE_COMMANDS + (MessageTags,)) and command.message == ""


def _resolve_interval(
    start_spec: PartialDateTime,
    end_spec: Optional[PartialDateTime],
    duration: Optional[Duration],
    now: datetime,
    tz: Optional[tzinfo],
) -> tuple[datetime, Optional[datetime]]:
    start = start_spec.resolve(now, tz)
    if end_spec is not None:
        if end_spec.is_empty():
            end = end_spec.resolve(now, tz)
            if end < start:
                start = shift_days(start, -1, tz)
        else:
            end = end_spec.resolve(start, tz)
            if end < start:
                end = shift_days(end, 1, tz)
        return start, end
    if duration is not None:
        return start, start + duration
    return start, None


def _resolve_end(
    end_spec: PartialDateTime, open_start: Optional[datetime], now: datetime, tz: Optional[tzinfo]
) -> datetime:
    # an end before the open start is left for the ledger to reject
    if end_spec.is_empty() or open_start is None:
        return end_spec.resolve(now, tz)
    return end_spec.resolve(open_start, tz)


def infer(raw: RawArgs, open_start: Optional[datetime], now: datetime, tz: Optional[tzinfo] = None) -> Command:
    """Pick the one command the given fields describe.

    ``open_start`` is the start of the open job, if there is one. Times are
    wall clock times in ``tz``, the system zone when it is ``None``. Branches
    are tried in a fixed order and the first match wins.
    """
    start = parse_partial(raw.start) if raw.start is not None else None
    back = parse_partial(raw.back) if raw.back is not None else None
    end = parse_partial(raw.end) if raw.end is not None else None
    duration = parse_duration(raw.duration) if raw.duration is not None else None
    message = raw.message
    tag_list = TagSet.from_csv(raw.tags).to_list() if raw.tags is not None else None
    modification = parse_modification(tag_list) if tag_list is not None else None
    tags = TagSet(tag_list) if tag_list is not None else None

    set_configuration = raw.resolution is not None or raw.pay is not None or raw.max_hours is not None
    if set_configuration and (start is not None or back is not None or end is not None):
        raise InvalidInvocation("Configuration options cannot be combined with starting or ending a job.")
    if duration is not None and start is None and back is None:
        raise InvalidInvocation("A duration needs a start time (-s or -b).")

    if start is not None:
        begin, finish = _resolve_interval(start, end, duration, now, tz)
        if finish is None:
            return Start(begin, message, modification)
        return Add(begin, finish, message, modification)
    if back is not None:
        begin, finish = _resolve_interval(back, end, duration, now, tz)
        if finish is None:
            return Back(begin, message, modification)
        return BackAdd(begin, finish, message, modification)
    if end is not None:
        return End(_resolve_end(end, open_start, now, tz), message, modification)
    if raw.list is not None:
        return List(parse_range(raw.list, now, tz), tags)
    if raw.export is not None:
        return ExportCSV(parse_range(raw.export, now, tz), tags, raw.csv)
    if raw.report is not None:
        return Report(parse_range(raw.report, now, tz), tags)
    if raw.list_tags is not None:
        return ListTags(parse_range(raw.list_tags, now, tz), tags)
    if raw.configuration:
        return ShowConfiguration()
    if set_configuration:
        return SetConfiguration(raw.resolution, raw.pay, tags, raw.max_hours)
    if raw.legacy_import is not None:
        return LegacyImport(raw.legacy_import, tags)
    if message is not None or modification is not None:
        return MessageTags(message, modification)
    raise InvalidInvocation("Nothing to do. Use --help to see the available options.")


def describe(command: Command) -> str:
    """Short one-line summary for debug logging."""
    fields = ", ".join(f"{key}={value!r}" for key, value in vars(command).items())
    return f"{type(command).__name__}({fields})"


