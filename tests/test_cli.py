from pyjobber.pyjob import jobber_cli


def invoke(runner, db_path, *args, **kwargs):
    return runner.invoke(jobber_cli, ["--db", str(db_path), "--no-colors", *args], **kwargs)


def test_add_and_list(runner, db_path):
    result = invoke(runner, db_path, "-s", "1.6.2023 9:00", "-e", "1.6.2023 11:00", "-m", "docs", "-t", "work")
    assert result.exit_code == 0, result.output
    assert "Added new job:" in result.output

    result = invoke(runner, db_path, "-l")
    assert result.exit_code == 0, result.output
    assert "Pos: 1" in result.output
    assert "Message: docs" in result.output
    assert "Tags: work" in result.output
    assert "Total: 1 job(s), 2 hours" in result.output


def test_start_end_cycle(runner, db_path):
    result = invoke(runner, db_path, "-s", "1.6.2023 9:00", "-m", "running")
    assert result.exit_code == 0, result.output
    assert "Started new job:" in result.output

    result = invoke(runner, db_path, "-s", "1.6.2023 10:00")
    assert result.exit_code == 1
    assert "open job at position 1" in result.output

    result = invoke(runner, db_path, "-e", "17:00", "-t", "+late")
    assert result.exit_code == 0, result.output
    assert "Ended open job:" in result.output
    assert "End: Thu Jun 01 2023, 17:00" in result.output
    assert "Tags: late" in result.output

    result = invoke(runner, db_path, "-e")
    assert result.exit_code == 1
    assert "There is no open job." in result.output


def test_end_time_before_open_start_is_rejected(runner, db_path):
    invoke(runner, db_path, "-s", "1.6.2023 9:00")
    result = invoke(runner, db_path, "-e", "8:30")
    assert result.exit_code == 1
    assert "End time is ahead of start time." in result.output

    result = invoke(runner, db_path, "-l")
    assert "End:" not in result.output


def test_message_prompt(runner, db_path):
    result = invoke(runner, db_path, "-s", "1.6.2023 9:00", "-m", input="typed message\n")
    assert result.exit_code == 0, result.output
    assert "Message: typed message" in result.output


def test_nothing_to_do_is_a_usage_error(runner, db_path):
    result = invoke(runner, db_path)
    assert result.exit_code == 2
    assert "Nothing to do" in result.output


def test_configuration(runner, db_path):
    invoke(runner, db_path, "-s", "1.6.2023 9:00", "-e", "1.6.2023 11:00", "-t", "work")

    result = invoke(runner, db_path, "-t", "nope", "-p", "20")
    assert result.exit_code == 1
    assert "Unknown tag(s): nope." in result.output

    result = invoke(runner, db_path, "-t", "work", "-p", "20")
    assert result.exit_code == 0, result.output
    assert "Changed the following configuration values for tag(s) work" in result.output

    result = invoke(runner, db_path, "-c")
    assert "Configuration for tag 'work':" in result.output
    assert "Rate: $20.00/hour" in result.output

    result = invoke(runner, db_path, "-l")
    assert "Total: 1 job(s), 2 hours = $40.00" in result.output


def test_export_to_file(runner, db_path, tmp_path):
    invoke(runner, db_path, "-s", "1.6.2023 9:00", "-d", "2h", "-m", "a, b")
    out = tmp_path / "export" / "jobs.csv"
    result = invoke(runner, db_path, "-x", "--csv", "pos,hours,message", "-o", str(out))
    assert result.exit_code == 0, result.output
    assert str(out) in result.output
    assert out.read_text().splitlines() == ["pos,hours,message", '1,2,"a, b"']

    result = invoke(runner, db_path, "-x", "5")
    assert result.exit_code == 1
    assert "Requested 5 job(s) but only 1 available." in result.output


def test_report_and_tags(runner, db_path):
    invoke(runner, db_path, "-s", "30.6.2023 23:00", "-e", "1:00", "-t", "night")
    result = invoke(runner, db_path, "-r", "1.6.2023..31.7.2023")
    assert result.exit_code == 0, result.output
    assert "6/2023" in result.output
    assert "Jul 2023: 1 hours" in result.output

    result = invoke(runner, db_path, "-T")
    assert result.output.strip() == "night"


def test_database_from_environment(runner, db_path):
    result = runner.invoke(jobber_cli, ["-s", "1.6.2023 9:00"], env={"PYJOBBER_DB": str(db_path)})
    assert result.exit_code == 0, result.output
    assert db_path.exists()


def test_legacy_import(runner, db_path, tmp_path):
    legacy = tmp_path / "jobber.dat"
    legacy.write_text('"2023-06-01T09:00:00+00:00";"2023-06-01T10:00:00+00:00";"old";"x"\n')
    result = invoke(runner, db_path, "--legacy-import", str(legacy))
    assert result.exit_code == 0, result.output
    assert "Imported 1 jobs and added new tags x." in result.output
