"""User-facing errors; each aborts the invocation before anything is written."""

from __future__ import annotations

from typing import Iterable

import click


class InvalidInvocation(click.UsageError):
    """The given options do not describe any command."""


class NoOpenJob(click.ClickException):
    def __init__(self) -> None:
        super().__init__("There is no open job.")


class OpenJobExists(click.ClickException):
    def __init__(self, position: int) -> None:
        super().__init__(f"There is still an open job at position {position + 1}. End it with -e first.")
        self.position = position


class EndBeforeStart(click.ClickException):
    def __init__(self) -> None:
        super().__init__("End time is ahead of start time.")


class TooFewJobs(click.ClickException):
    def __init__(self, requested: int, available: int) -> None:
        super().__init__(f"Requested {requested} job(s) but only {available} available.")
        self.requested = requested
        self.available = available


class UnknownTags(click.ClickException):
    def __init__(self, tags: Iterable[str]) -> None:
        self.tags = list(tags)
        super().__init__(f"Unknown tag(s): {', '.join(self.tags)}.")


class DataFormatError(click.ClickException):
    """A stored or imported value could not be parsed."""
