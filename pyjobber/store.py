"""SQLite persistence for the job ledger."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from pyjobber.config import Configuration, Properties
from pyjobber.errors import DataFormatError
from pyjobber.job import Job
from pyjobber.ledger import Jobs
from pyjobber.tags import TagSet

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".pyjobber" / "jobber.db"


def resolve_db_path(db_path: Optional[Path]) -> Path:
    """Return database path, creating its parent directory when needed."""
    path = db_path or DEFAULT_DB_PATH
    path = path.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def connect(db_path: Path) -> sqlite3.Connection:
    """Create a SQLite connection and initialize the schema."""
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    _init_schema(conn)
    return conn


def _init_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS jobs (
            position INTEGER PRIMARY KEY,
            start_ts TEXT NOT NULL,
            end_ts TEXT,
            message TEXT,
            tags TEXT NOT NULL DEFAULT '[]'
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS configuration (
            tag TEXT PRIMARY KEY,
            resolution REAL NOT NULL,
            rate REAL,
            max_hours INTEGER
        )
        """
    )
    conn.commit()


def _parse_instant(value: str, position: int) -> datetime:
    try:
        instant = datetime.fromisoformat(value)
    except ValueError as exc:
        raise DataFormatError(f"Job {position + 1}: invalid timestamp {value!r}.") from exc
    if instant.tzinfo is None:
        raise DataFormatError(f"Job {position + 1}: timestamp {value!r} has no UTC offset.")
    return instant


def _parse_tags(value: str, position: int) -> TagSet:
    try:
        tags = json.loads(value)
    except ValueError as exc:
        raise DataFormatError(f"Job {position + 1}: invalid tag list {value!r}.") from exc
    if not isinstance(tags, list):
        raise DataFormatError(f"Job {position + 1}: invalid tag list {value!r}.")
    return TagSet(str(tag) for tag in tags)


def load(conn: sqlite3.Connection) -> Jobs:
    """Read the whole ledger in position order."""
    jobs = []
    for row in conn.execute("SELECT position, start_ts, end_ts, message, tags FROM jobs ORDER BY position ASC"):
        position = len(jobs)
        jobs.append(
            Job(
                start=_parse_instant(row["start_ts"], position),
                end=_parse_instant(row["end_ts"], position) if row["end_ts"] is not None else None,
                message=row["message"],
                tags=_parse_tags(row["tags"], position),
            )
        )

    base = Properties()
    overrides: dict[str, Properties] = {}
    for row in conn.execute("SELECT tag, resolution, rate, max_hours FROM configuration ORDER BY tag ASC"):
        properties = Properties(row["resolution"], row["rate"], row["max_hours"])
        if row["tag"]:
            overrides[row["tag"]] = properties
        else:
            base = properties

    logger.debug("Loaded %d jobs and %d tag configurations.", len(jobs), len(overrides))
    return Jobs(jobs, Configuration(base, overrides))


def save(conn: sqlite3.Connection, jobs: Jobs) -> None:
    """Replace the stored ledger with ``jobs`` in a single transaction."""
    configuration = jobs.configuration
    with conn:
        conn.execute("DELETE FROM jobs")
        conn.executemany(
            "INSERT INTO jobs (position, start_ts, end_ts, message, tags) VALUES (?, ?, ?, ?, ?)",
            [
                (
                    position,
                    job.start.isoformat(),
                    job.end.isoformat() if job.end is not None else None,
                    job.message,
                    json.dumps(job.tags.to_list()),
                )
                for position, job in enumerate(jobs)
            ],
        )
        conn.execute("DELETE FROM configuration")
        conn.executemany(
            "INSERT INTO configuration (tag, resolution, rate, max_hours) VALUES (?, ?, ?, ?)",
            [
                (tag, properties.resolution, properties.rate, properties.max_hours)
                for tag, properties in [("", configuration.base), *configuration.tags.items()]
            ],
        )
    logger.debug("Saved %d jobs.", len(jobs))
