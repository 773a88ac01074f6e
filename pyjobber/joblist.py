"""Jobs selected from the ledger, keeping their ledger positions."""

from __future__ import annotations

from datetime import datetime
from typing import Iterator, Optional

from pyjobber.config import Configuration, Properties, resolve
from pyjobber.context import Context
from pyjobber.errors import TooFewJobs
from pyjobber.job import Job
from pyjobber.pydate import format_pay, format_total_value
from pyjobber.tags import TagSet


class JobList:
    """An ordered list of ``(position, job)`` pairs plus the ledger configuration.

    Positions are indices into the full ledger, not into this list, so
    output can refer back to the ledger however the list was filtered.
    """

    def __init__(self, configuration: Configuration, now: datetime) -> None:
        self.configuration = configuration
        self.now = now
        self._jobs: list[tuple[int, Job]] = []

    def __iter__(self) -> Iterator[tuple[int, Job]]:
        return iter(self._jobs)

    def __len__(self) -> int:
        return len(self._jobs)

    def is_empty(self) -> bool:
        return not self._jobs

    def push(self, pos: int, job: Job) -> None:
        self._jobs.append((pos, job))

    def limit(self, count: int) -> int:
        """Keep at most the last ``count`` jobs; return how many remain."""
        if count < len(self._jobs):
            del self._jobs[: len(self._jobs) - count]
        return len(self._jobs)

    def drain(self, count: int) -> None:
        """Keep exactly the last ``count`` jobs or raise ``TooFewJobs``."""
        if count > len(self._jobs):
            raise TooFewJobs(count, len(self._jobs))
        self.limit(count)

    def tags(self) -> TagSet:
        tags = TagSet()
        for _, job in self._jobs:
            tags.insert_many(job.tags)
        return tags

    def positions(self) -> set[int]:
        return {pos for pos, _ in self._jobs}

    def properties(self, job: Job) -> Properties:
        return resolve(job.tags, self.configuration)[1]

    def hours_overall(self) -> float:
        return sum(job.hours(self.properties(job), self.now) for _, job in self._jobs)

    def pay_overall(self) -> Optional[float]:
        pay_sum = 0.0
        has_payment = False
        for _, job in self._jobs:
            pay = job.pay(self.properties(job), self.now)
            if pay is not None:
                pay_sum += pay
                has_payment = True
        return pay_sum if has_payment else None

    def total_line(self) -> str:
        pay = self.pay_overall()
        pay_text = f" = ${format_pay(pay)}" if pay is not None else ""
        return f"Total: {len(self)} job(s), {format_total_value(self.hours_overall())} hours{pay_text}"

    def render(self, context: Context) -> str:
        blocks = []
        for pos, job in self._jobs:
            blocks.append(f"    Pos: {pos + 1}\n{job.render(self.properties(job), context)}\n")
        blocks.append(self.total_line())
        return "\n".join(blocks)
