"""The in-memory job ledger and execution of commands against it."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, Optional

import click

from pyjobber import command as cmd
from pyjobber.change import Change, ConfigurationChanged, Import, Modify, Nothing, Push
from pyjobber.config import Configuration
from pyjobber.context import Context
from pyjobber.errors import EndBeforeStart, NoOpenJob, OpenJobExists, UnknownTags
from pyjobber.job import Job
from pyjobber.joblist import JobList
from pyjobber.legacy import import_file
from pyjobber.report import export_csv, render_report
from pyjobber.tags import TagIndex, TagModification, TagSet, format_tags

logger = logging.getLogger(__name__)


def _apply_tags(modification: Optional[TagModification], base: TagSet) -> TagSet:
    if modification is None:
        return base.copy()
    return modification.apply(base)


class Jobs:
    """All recorded jobs in insertion order plus the configuration."""

    def __init__(self, jobs: Optional[Iterable[Job]] = None, configuration: Optional[Configuration] = None) -> None:
        self.jobs: list[Job] = list(jobs or [])
        self.configuration = configuration or Configuration()

    def __iter__(self) -> Iterator[Job]:
        return iter(self.jobs)

    def __len__(self) -> int:
        return len(self.jobs)

    def __getitem__(self, position: int) -> Job:
        return self.jobs[position]

    def open_job(self) -> Optional[tuple[int, Job]]:
        for position in range(len(self.jobs) - 1, -1, -1):
            if self.jobs[position].is_open():
                return position, self.jobs[position]
        return None

    def open_start(self) -> Optional[datetime]:
        open_job = self.open_job()
        return open_job[1].start if open_job is not None else None

    def last(self) -> Optional[Job]:
        return self.jobs[-1] if self.jobs else None

    def tag_index(self) -> TagIndex:
        return TagIndex.from_tag_sets(job.tags for job in self.jobs)

    def select(self, range_: cmd.Range, tags: Optional[TagSet], now: datetime) -> JobList:
        """Jobs starting within ``range_`` that carry any of ``tags``."""
        job_list = JobList(self.configuration, now)
        for position, job in enumerate(self.jobs):
            if not range_.contains(job.start):
                continue
            if tags and not any(tag in job.tags for tag in tags):
                continue
            job_list.push(position, job)
        if range_.count is not None:
            remaining = job_list.limit(range_.count)
            if remaining < range_.count:
                logger.warning("Only %d of %d requested jobs available.", remaining, range_.count)
        logger.debug("Selected positions %s.", sorted(job_list.positions()))
        return job_list

    def execute(self, command: cmd.Command, context: Context) -> tuple[Change, str]:
        """Apply ``command``; return what changed and any text to show.

        Nothing is modified unless the whole command succeeds.
        """
        if isinstance(command, (cmd.Start, cmd.Back)):
            return self._start(command), ""
        if isinstance(command, (cmd.Add, cmd.BackAdd)):
            return self._add(command), ""
        if isinstance(command, cmd.End):
            return self._end(command), ""
        if isinstance(command, cmd.MessageTags):
            return self._message_tags(command), ""
        if isinstance(command, cmd.List):
            return Nothing(), self.select(command.range, command.tags, context.now).render(context)
        if isinstance(command, cmd.Report):
            return Nothing(), render_report(self.select(command.range, command.tags, context.now), context)
        if isinstance(command, cmd.ExportCSV):
            return Nothing(), self._export(command, context)
        if isinstance(command, cmd.ListTags):
            return Nothing(), self._list_tags(command, context)
        if isinstance(command, cmd.ShowConfiguration):
            return Nothing(), self.configuration.render()
        if isinstance(command, cmd.SetConfiguration):
            return self._set_configuration(command), ""
        if isinstance(command, cmd.LegacyImport):
            return self._legacy_import(command), ""
        raise AssertionError(f"unhandled command {command!r}")

    def _previous(self) -> Job:
        previous = self.last()
        if previous is None:
            raise click.ClickException("There is no previous job to take message and tags from.")
        return previous

    def _new_job(self, command, end: Optional[datetime]) -> Job:
        if isinstance(command, (cmd.Back, cmd.BackAdd)):
            previous = self._previous()
            return Job(
                start=command.start,
                end=end,
                message=command.message or previous.message,
                tags=_apply_tags(command.tags, previous.tags),
            )
        return Job(start=command.start, end=end, message=command.message or None, tags=_apply_tags(command.tags, TagSet()))

    def _start(self, command) -> Change:
        open_job = self.open_job()
        if open_job is not None:
            raise OpenJobExists(open_job[0])
        job = self._new_job(command, None)
        self.jobs.append(job)
        return Push(job)

    def _add(self, command) -> Change:
        if command.end < command.start:
            raise EndBeforeStart()
        job = self._new_job(command, command.end)
        self.jobs.append(job)
        return Push(job)

    def _end(self, command: cmd.End) -> Change:
        open_job = self.open_job()
        if open_job is None:
            raise NoOpenJob()
        position, job = open_job
        if command.end < job.start:
            raise EndBeforeStart()
        job = replace(
            job,
            end=command.end,
            message=command.message or job.message,
            tags=_apply_tags(command.tags, job.tags),
        )
        self.jobs[position] = job
        return Modify(position, job, ended=True)

    def _message_tags(self, command: cmd.MessageTags) -> Change:
        open_job = self.open_job()
        if open_job is None:
            raise NoOpenJob()
        position, job = open_job
        job = replace(job, message=command.message or job.message, tags=_apply_tags(command.tags, job.tags))
        self.jobs[position] = job
        return Modify(position, job)

    def _export(self, command: cmd.ExportCSV, context: Context) -> str:
        job_list = self.select(replace(command.range, count=None), command.tags, context.now)
        if command.range.count is not None:
            job_list.drain(command.range.count)
        return export_csv(job_list, context, command.columns)

    def _list_tags(self, command: cmd.ListTags, context: Context) -> str:
        tags = self.select(command.range, command.tags, context.now).tags()
        if tags.is_empty():
            return "No tags found."
        lines = []
        for tag in tags:
            line = format_tags([tag], context.tag_index, context.colors)
            if tag in self.configuration.tags:
                line += " (configured)"
            lines.append(line)
        return "\n".join(lines)

    def _set_configuration(self, command: cmd.SetConfiguration) -> Change:
        tags = command.tags.to_list() if command.tags is not None else None
        if tags is not None:
            index = self.tag_index()
            unknown = [tag for tag in tags if not index.is_known(tag)]
            if unknown:
                raise UnknownTags(unknown)
        self.configuration = self.configuration.set(command.resolution, command.pay, command.max_hours, tags)
        return ConfigurationChanged(command.tags, self.configuration)

    def _legacy_import(self, command: cmd.LegacyImport) -> Change:
        imported, new_tags = import_file(Path(command.filename), self.tag_index(), command.tags)
        open_count = sum(1 for job in [*self.jobs, *imported] if job.is_open())
        if open_count > 1:
            raise click.ClickException("Import would leave more than one open job.")
        self.jobs.extend(imported)
        return Import(len(imported), new_tags)
