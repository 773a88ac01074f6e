"""Import of the old semicolon separated ``jobber.dat`` format.

Each line holds ``"start";"end";"message"`` and optionally ``"tag*tag"``.
An end of ``0`` marks a job that was still running; newlines inside a
message are stored as a literal ``\\n``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import click

from pyjobber.errors import DataFormatError
from pyjobber.job import Job
from pyjobber.tags import TagIndex, TagSet

logger = logging.getLogger(__name__)


def _unquote(field: str) -> str:
    field = field.strip()
    if len(field) >= 2 and field[0] == '"' and field[-1] == '"':
        return field[1:-1]
    return field


def _parse_instant(value: str, line_number: int) -> datetime:
    try:
        instant = datetime.fromisoformat(value)
    except ValueError as exc:
        raise DataFormatError(f"Line {line_number}: invalid timestamp {value!r}.") from exc
    if instant.tzinfo is None:
        instant = instant.astimezone()
    return instant


def parse_line(line: str, line_number: int) -> Job:
    fields = [_unquote(field) for field in line.rstrip("\n").split(";")]
    if len(fields) < 3:
        raise DataFormatError(f"Line {line_number}: expected at least three fields.")
    start = _parse_instant(fields[0], line_number)
    end = None if fields[1] in ("0", "") else _parse_instant(fields[1], line_number)
    message = fields[2].replace("\\n", "\n") or None
    tags = TagSet(tag for tag in fields[3].split("*") if tag) if len(fields) > 3 else TagSet()
    return Job(start=start, end=end, message=message, tags=tags)


def read_jobs(lines: Iterable[str], extra_tags: Optional[TagSet] = None) -> list[Job]:
    jobs = []
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        job = parse_line(line, line_number)
        if extra_tags:
            job = Job(job.start, job.end, job.message, job.tags.union(extra_tags))
        jobs.append(job)
    return jobs


def import_file(path: Path, known: TagIndex, extra_tags: Optional[TagSet] = None) -> tuple[list[Job], TagSet]:
    """Read a legacy file; also return the tags ``known`` has not seen before."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            jobs = read_jobs(handle, extra_tags)
    except OSError as exc:
        raise click.ClickException(f"Cannot read legacy file {path}: {exc.strerror}") from exc
    new_tags = TagSet()
    for job in jobs:
        new_tags.insert_many(tag for tag in job.tags if not known.is_known(tag))
    logger.info("Read %d legacy jobs from %s.", len(jobs), path)
    return jobs, new_tags
