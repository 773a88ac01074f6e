import pytest

from conftest import NOW, UTC, utc
from pyjobber import command as cmd
from pyjobber.command import RawArgs, Range, infer, needs_message, parse_range, set_message
from pyjobber.errors import InvalidInvocation
from pyjobber.tags import TagSet


def test_start_now():
    assert infer(RawArgs(start=""), None, NOW, UTC) == cmd.Start(NOW)


def test_start_with_message_and_tags():
    command = infer(RawArgs(start="9:00", message="write docs", tags="a,b"), None, NOW, UTC)
    assert isinstance(command, cmd.Start)
    assert command.start == utc(2023, 6, 15, 9)
    assert command.message == "write docs"
    assert command.tags.replacement == ("a", "b")


def test_explicit_end_before_start_rolls_into_next_day():
    command = infer(RawArgs(start="12:00", end="6:00"), None, NOW, UTC)
    assert command == cmd.Add(utc(2023, 6, 15, 12), utc(2023, 6, 16, 6))


def test_bare_end_before_start_moves_start_back():
    command = infer(RawArgs(start="13:00", end=""), None, NOW, UTC)
    assert command == cmd.Add(utc(2023, 6, 14, 13), NOW)


def test_start_with_duration():
    command = infer(RawArgs(start="9:00", duration="1:30"), None, NOW, UTC)
    assert command == cmd.Add(utc(2023, 6, 15, 9), utc(2023, 6, 15, 10, 30))


def test_back_variants():
    assert infer(RawArgs(back=""), None, NOW, UTC) == cmd.Back(NOW)
    command = infer(RawArgs(back="8:00", end="10:00", tags="+extra"), None, NOW, UTC)
    assert isinstance(command, cmd.BackAdd)
    assert command.end == utc(2023, 6, 15, 10)
    assert command.tags.edits[0].tag == "extra"


class TestEnd:
    open_start = utc(2023, 1, 1, 9)

    def test_time_resolves_against_open_start(self):
        assert infer(RawArgs(end="17:00"), self.open_start, NOW, UTC) == cmd.End(utc(2023, 1, 1, 17))

    def test_time_before_open_start_stays_on_that_day(self):
        open_start = utc(2023, 6, 15, 9)
        command = infer(RawArgs(end="8:30"), open_start, NOW, UTC)
        assert command == cmd.End(utc(2023, 6, 15, 8, 30))
        assert command.end <= NOW

    def test_bare_end_is_now(self):
        assert infer(RawArgs(end=""), self.open_start, NOW, UTC) == cmd.End(NOW)

    def test_without_open_job_resolves_against_now(self):
        assert infer(RawArgs(end="10:00"), None, NOW, UTC) == cmd.End(utc(2023, 6, 15, 10))


def test_queries():
    assert infer(RawArgs(list=""), None, NOW, UTC) == cmd.List(Range())
    assert infer(RawArgs(list="3", tags="work"), None, NOW, UTC) == cmd.List(Range(count=3), TagSet(["work"]))
    assert infer(RawArgs(report=""), None, NOW, UTC) == cmd.Report(Range())
    assert infer(RawArgs(export="", csv="start,hours"), None, NOW, UTC) == cmd.ExportCSV(Range(), None, "start,hours")
    assert infer(RawArgs(list_tags=""), None, NOW, UTC) == cmd.ListTags(Range())
    assert infer(RawArgs(configuration=True), None, NOW, UTC) == cmd.ShowConfiguration()


def test_set_configuration():
    command = infer(RawArgs(pay=20.0, tags="a,b"), None, NOW, UTC)
    assert command == cmd.SetConfiguration(None, 20.0, TagSet(["a", "b"]), None)
    assert infer(RawArgs(resolution=0.5), None, NOW, UTC) == cmd.SetConfiguration(resolution=0.5)


def test_legacy_import():
    assert infer(RawArgs(legacy_import="old.dat", tags="imported"), None, NOW, UTC) == cmd.LegacyImport(
        "old.dat", TagSet(["imported"])
    )


def test_message_and_tags_amend_open_job():
    command = infer(RawArgs(message="", tags="+x"), None, NOW, UTC)
    assert isinstance(command, cmd.MessageTags)
    assert command.message == ""
    assert needs_message(command)
    assert infer(RawArgs(tags="a"), None, NOW, UTC).message is None


def test_job_options_win_over_queries():
    assert isinstance(infer(RawArgs(start="", list=""), None, NOW, UTC), cmd.Start)
    assert isinstance(infer(RawArgs(list="", report=""), None, NOW, UTC), cmd.List)
    assert isinstance(infer(RawArgs(export="", report=""), None, NOW, UTC), cmd.ExportCSV)


@pytest.mark.parametrize(
    "raw",
    [RawArgs(), RawArgs(start="", pay=10.0), RawArgs(end="", resolution=1.0), RawArgs(duration="1h")],
)
def test_invalid_invocations(raw):
    with pytest.raises(InvalidInvocation):
        infer(raw, None, NOW, UTC)


def test_set_message():
    command = set_message(cmd.Start(NOW, ""), "hello")
    assert command == cmd.Start(NOW, "hello")
    assert needs_message(cmd.End(NOW, ""))
    assert not needs_message(cmd.End(NOW, "done"))
    with pytest.raises(TypeError):
        set_message(cmd.List(Range()), "hello")


class TestParseRange:
    def test_everything(self):
        assert parse_range("", NOW, UTC) == Range()
        assert parse_range(None, NOW, UTC) == Range()

    def test_count(self):
        assert parse_range("10", NOW, UTC) == Range(count=10)

    def test_between_dates_includes_last_day(self):
        assert parse_range("1.6.2023..3.6.2023", NOW, UTC) == Range(utc(2023, 6, 1), utc(2023, 6, 4))

    def test_between_times_is_exact(self):
        assert parse_range("10:00..11:00", NOW, UTC) == Range(utc(2023, 6, 15, 10), utc(2023, 6, 15, 11))

    def test_open_sides(self):
        assert parse_range("..1.6.2023", NOW, UTC) == Range(end=utc(2023, 6, 2))
        assert parse_range("1.6.2023..", NOW, UTC) == Range(start=utc(2023, 6, 1))
        assert parse_range("1.6.2023", NOW, UTC) == Range(start=utc(2023, 6, 1))

    def test_contains(self):
        range_ = Range(utc(2023, 6, 1), utc(2023, 6, 2))
        assert range_.contains(utc(2023, 6, 1))
        assert range_.contains(utc(2023, 6, 1, 23, 59))
        assert not range_.contains(utc(2023, 6, 2))
        assert Range().contains(NOW)
