"""Shared fixtures: a fixed clock in UTC and a throwaway database."""

from datetime import datetime, timezone

import pytest
from click.testing import CliRunner

from pyjobber.context import Context

UTC = timezone.utc
NOW = datetime(2023, 6, 15, 12, 0, tzinfo=timezone.utc)


def utc(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def context():
    return Context(now=NOW, tz=timezone.utc, colors=False)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "jobber.db"
