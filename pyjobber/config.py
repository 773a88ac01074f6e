"""Base and per-tag job properties."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from pyjobber.pydate import format_pay, format_total_value
from pyjobber.tags import TagSet

DEFAULT_RESOLUTION = 0.25


@dataclass(frozen=True)
class Properties:
    """Rounding unit, hourly rate and daily hour limit of jobs."""

    resolution: float = DEFAULT_RESOLUTION
    rate: Optional[float] = None
    max_hours: Optional[int] = None

    def updated(
        self,
        resolution: Optional[float] = None,
        rate: Optional[float] = None,
        max_hours: Optional[int] = None,
    ) -> Properties:
        changes: dict[str, object] = {}
        if resolution is not None:
            changes["resolution"] = resolution
        if rate is not None:
            changes["rate"] = rate
        if max_hours is not None:
            changes["max_hours"] = max_hours
        return replace(self, **changes)

    def exceeded_by(self, hours: float) -> bool:
        return self.max_hours is not None and hours > self.max_hours

    def render(self) -> str:
        rate = f"${format_pay(self.rate)}/hour" if self.rate is not None else "-"
        max_hours = f"{self.max_hours} hours/day" if self.max_hours is not None else "-"
        return "\n".join(
            [
                f" Resolution: {format_total_value(self.resolution)} hours",
                f"       Rate: {rate}",
                f"  Max hours: {max_hours}",
            ]
        )


@dataclass(frozen=True)
class Configuration:
    base: Properties = field(default_factory=Properties)
    tags: dict[str, Properties] = field(default_factory=dict)

    def properties_for(self, tag: str) -> Properties:
        """Look up a single tag, the empty tag meaning the base properties."""
        if not tag:
            return self.base
        return self.tags[tag]

    def set(
        self,
        resolution: Optional[float] = None,
        rate: Optional[float] = None,
        max_hours: Optional[int] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Configuration:
        if tags is None:
            return Configuration(self.base.updated(resolution, rate, max_hours), dict(self.tags))
        overrides = dict(self.tags)
        for tag in tags:
            current = overrides.get(tag, self.base)
            overrides[tag] = current.updated(resolution, rate, max_hours)
        return Configuration(self.base, overrides)

    def render(self, tags: Optional[Iterable[str]] = None) -> str:
        if tags is None:
            sections = [f"Default configuration:\n{self.base.render()}"]
            names = sorted(self.tags)
        else:
            sections = []
            names = list(tags)
        for tag in names:
            sections.append(f"Configuration for tag '{tag}':\n{self.tags[tag].render()}")
        return "\n\n".join(sections)


def resolve(tags: TagSet, configuration: Configuration) -> tuple[str, Properties]:
    """Return the first tag of ``tags`` with an override, or ``""`` and the base."""
    for tag in tags:
        properties = configuration.tags.get(tag)
        if properties is not None:
            return tag, properties
    return "", configuration.base
