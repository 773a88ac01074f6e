"""What an executed command did to the ledger, for confirmation output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from pyjobber.config import Configuration, resolve
from pyjobber.context import Context
from pyjobber.job import Job
from pyjobber.tags import TagSet, format_tags


@dataclass(frozen=True)
class Nothing:
    def describe(self, configuration: Configuration, context: Context) -> str:
        return "Database unchanged."


@dataclass(frozen=True)
class Push:
    job: Job

    def describe(self, configuration: Configuration, context: Context) -> str:
        body = self.job.render(resolve(self.job.tags, configuration)[1], context)
        if self.job.is_open():
            return f"Started new job:\n\n{body}"
        return f"Added new job:\n\n{body}"


@dataclass(frozen=True)
class Modify:
    position: int
    job: Job
    ended: bool = False

    def describe(self, configuration: Configuration, context: Context) -> str:
        body = self.job.render(resolve(self.job.tags, configuration)[1], context)
        title = "Ended open job" if self.ended else "Modified job"
        return f"{title}:\n\n    Pos: {self.position + 1}\n{body}"


@dataclass(frozen=True)
class Import:
    count: int
    new_tags: TagSet

    def describe(self, configuration: Configuration, context: Context) -> str:
        if self.new_tags.is_empty():
            return f"Imported {self.count} jobs."
        tags = format_tags(self.new_tags, context.tag_index, context.colors)
        return f"Imported {self.count} jobs and added new tags {tags}."


@dataclass(frozen=True)
class ConfigurationChanged:
    tags: Optional[TagSet]
    configuration: Configuration

    def describe(self, configuration: Configuration, context: Context) -> str:
        if self.tags is None:
            return (
                "Changed the following default configuration values:\n\n"
                f"{self.configuration.base.render()}"
            )
        tags = format_tags(self.tags, context.tag_index, context.colors)
        return (
            f"Changed the following configuration values for tag(s) {tags}:\n\n"
            f"{self.configuration.render(self.tags)}"
        )


Change = Union[Nothing, Push, Modify, Import, ConfigurationChanged]
