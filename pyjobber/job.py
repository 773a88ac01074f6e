"""A single recorded (or still running) job."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, time, timedelta, tzinfo
from typing import Optional

from pyjobber.config import Properties
from pyjobber.context import Context
from pyjobber.pydate import Duration, format_datetime, format_pay, format_total_value, localize
from pyjobber.tags import TagSet, format_tags

MESSAGE_INDENT = 9


def round_hours(hours: float, resolution: float) -> float:
    """Round half away from zero to a multiple of ``resolution``."""
    if resolution <= 0:
        return round(hours, 6)
    steps = math.floor(abs(hours) / resolution + 0.5)
    return math.copysign(round(steps * resolution, 6), hours)


def hours_bar(hours: float) -> str:
    if not 0 < hours < 24:
        return ""
    fraction = hours - int(hours)
    tail = "+" if fraction > 0.5 else "-" if fraction > 0.25 else ""
    return "+" * int(hours) + tail


@dataclass(frozen=True)
class Job:
    start: datetime
    end: Optional[datetime] = None
    message: Optional[str] = None
    tags: TagSet = field(default_factory=TagSet)

    def is_open(self) -> bool:
        return self.end is None

    def duration(self, now: datetime) -> Duration:
        return Duration.between(self.start, self.end if self.end is not None else now)

    def hours(self, properties: Properties, now: datetime) -> float:
        return round_hours(self.duration(now).in_hours(), properties.resolution)

    def pay(self, properties: Properties, now: datetime) -> Optional[float]:
        if properties.rate is None:
            return None
        return properties.rate * self.hours(properties, now)

    def split(self, tz: Optional[tzinfo], now: datetime) -> list[Job]:
        """Cut the job at every local midnight it crosses."""
        start = self.start.astimezone(tz)
        end = (self.end if self.end is not None else now).astimezone(tz)
        fragments = []
        while True:
            midnight = localize(datetime.combine(start.date() + timedelta(days=1), time()), tz)
            if end <= midnight:
                fragments.append(replace(self, start=start, end=end))
                return fragments
            fragments.append(replace(self, start=start, end=midnight))
            start = midnight

    def render(self, properties: Properties, context: Context) -> str:
        tz = context.tz
        hours = self.hours(properties, context.now)
        hours_text = format_total_value(hours)
        if properties.exceeded_by(hours):
            hours_text = context.style(hours_text, fg="bright_yellow", bold=True)
        bar = hours_bar(hours)
        if bar:
            color = "bright_red" if properties.exceeded_by(hours) else "yellow"
            hours_text = f"{hours_text} {context.style(bar, fg=color, bold=True)}"

        lines = [f"  Start: {context.style(format_datetime(self.start, tz), fg='green')}"]
        if self.end is not None:
            lines.append(f"    End: {context.style(format_datetime(self.end, tz), fg='magenta')}")
            lines.append(f"  Hours: {hours_text}")
        else:
            lines.append(f"  Hours: {hours_text} (running)")
        pay = self.pay(properties, context.now)
        if pay is not None:
            lines.append(f"    Pay: ${format_pay(pay)}")
        if not self.tags.is_empty():
            lines.append(f"   Tags: {format_tags(self.tags, context.tag_index, context.colors)}")
        if self.message:
            first, *rest = self.message.split("\n")
            text = "\n".join([first] + [" " * MESSAGE_INDENT + line for line in rest])
            lines.append(f"Message: {context.style(text, bold=True)}")
        return "\n".join(lines)
