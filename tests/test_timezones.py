import os
import time
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from pyjobber.command import RawArgs, infer, parse_range
from pyjobber.config import Configuration
from pyjobber.context import Context
from pyjobber.job import Job
from pyjobber.joblist import JobList
from pyjobber.pydate import format_datetime, parse_partial
from pyjobber.report import collect_hours
from pyjobber.pyjob import jobber_cli

BERLIN = ZoneInfo("Europe/Berlin")
SUMMER_NOW = datetime(2026, 7, 15, 12, 0, tzinfo=BERLIN)


def berlin(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=BERLIN)


def job_list(*jobs):
    result = JobList(Configuration(), SUMMER_NOW)
    for position, job in enumerate(jobs):
        result.push(position, job)
    return result


@pytest.fixture
def berlin_system_zone():
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "Europe/Berlin"
    time.tzset()
    yield
    if previous is None:
        del os.environ["TZ"]
    else:
        os.environ["TZ"] = previous
    time.tzset()


def test_winter_date_entered_in_summer_gets_winter_offset():
    command = infer(RawArgs(start="1.1.2026,9:00", end="17:00"), None, SUMMER_NOW, BERLIN)
    assert command.start.utcoffset() == timedelta(hours=1)
    assert command.start.hour == 9
    assert command.end == berlin(2026, 1, 1, 17)


def test_relative_day_keeps_wall_clock_across_dst_change():
    now = berlin(2026, 3, 30, 12)
    start = parse_partial("yesterday,9:00").resolve(now, BERLIN)
    assert start == berlin(2026, 3, 29, 9)
    assert start.utcoffset() == timedelta(hours=2)
    assert parse_partial("28.3.2026,9:00").resolve(now, BERLIN).utcoffset() == timedelta(hours=1)


def test_range_of_winter_day_covers_local_day():
    range_ = parse_range("10.1.2026", SUMMER_NOW, BERLIN)
    assert range_.start == berlin(2026, 1, 10)
    assert range_.start.utcoffset() == timedelta(hours=1)
    range_ = parse_range("..10.1.2026", SUMMER_NOW, BERLIN)
    assert range_.end == berlin(2026, 1, 11)


def test_late_winter_job_is_bucketed_on_its_local_day():
    # stored as UTC the job falls on 22:30..22:45
    job = Job(start=berlin(2026, 1, 10, 23, 30), end=berlin(2026, 1, 10, 23, 45))
    context = Context(now=SUMMER_NOW, tz=BERLIN, colors=False)
    buckets = collect_hours(job_list(job), context)
    assert buckets.day(2026, 1, 10) == {"": 0.25}
    assert buckets.day(2026, 1, 11) is None
    assert format_datetime(job.start, BERLIN) == "Sat Jan 10 2026, 23:30"


def test_split_on_dst_night_uses_real_hours():
    job = Job(start=berlin(2026, 3, 28, 22), end=berlin(2026, 3, 29, 4))
    fragments = job.split(BERLIN, SUMMER_NOW)
    assert [fragment.start for fragment in fragments] == [berlin(2026, 3, 28, 22), berlin(2026, 3, 29)]
    assert fragments[0].duration(SUMMER_NOW).in_hours() == 2
    assert fragments[1].duration(SUMMER_NOW).in_hours() == 3
    assert job.duration(SUMMER_NOW).in_hours() == 5


def test_system_zone_offset_follows_the_date(berlin_system_zone):
    command = infer(RawArgs(start="1.1.2026,9:00", end="17:00"), None, SUMMER_NOW)
    assert command.start.isoformat() == "2026-01-01T09:00:00+01:00"

    job = Job(start=berlin(2026, 1, 10, 23, 30), end=berlin(2026, 1, 10, 23, 45))
    context = Context(now=SUMMER_NOW, tz=None, colors=False)
    buckets = collect_hours(job_list(job), context)
    assert buckets.day(2026, 1, 10) == {"": 0.25}
    assert format_datetime(job.start) == "Sat Jan 10 2026, 23:30"


def test_timezone_option(runner, db_path):
    args = ["--db", str(db_path), "--no-colors", "--timezone", "Europe/Berlin"]
    result = runner.invoke(jobber_cli, [*args, "-s", "10.1.2026 23:30", "-e", "23:45"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(jobber_cli, [*args, "-l"])
    assert "Start: Sat Jan 10 2026, 23:30" in result.output

    result = runner.invoke(jobber_cli, [*args, "-r"])
    assert "1/2026" in result.output


def test_unknown_timezone_is_a_usage_error(runner, db_path):
    result = runner.invoke(jobber_cli, ["--db", str(db_path), "--timezone", "Nowhere/Land", "-l"])
    assert result.exit_code == 2
    assert "Unknown time zone" in result.output
