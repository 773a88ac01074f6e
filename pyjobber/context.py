"""Per-invocation rendering and evaluation context."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, tzinfo
from typing import Optional

import click

from pyjobber.tags import TagIndex


@dataclass(frozen=True)
class Context:
    """Everything a command needs besides the ledger itself.

    ``now`` stands in for the end of open jobs, ``tz`` decides where local
    days begin (``None`` for the system zone), ``tag_index`` assigns tag
    colors.
    """

    now: datetime
    tz: Optional[tzinfo] = None
    tag_index: TagIndex = field(default_factory=TagIndex)
    colors: bool = True

    @classmethod
    def current(cls, colors: bool = True, tz: Optional[tzinfo] = None) -> Context:
        now = datetime.now().astimezone(tz).replace(second=0, microsecond=0)
        return cls(now=now, tz=tz, colors=colors)

    def with_tag_index(self, tag_index: TagIndex) -> Context:
        return replace(self, tag_index=tag_index)

    def style(self, text: str, **styles) -> str:
        if not self.colors:
            return text
        return click.style(text, **styles)
