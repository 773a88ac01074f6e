"""Command line front end: one command, the options decide what it does."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import click

from pyjobber.change import Nothing
from pyjobber.command import MESSAGE_COMMANDS, RawArgs, describe, infer, needs_message, set_message
from pyjobber.context import Context
from pyjobber.store import DEFAULT_DB_PATH, connect, load, resolve_db_path, save

logger = logging.getLogger(__name__)

RANGE_HELP = "empty for all, N for the last N jobs, A..B between two times, A since a time"


def _optional_value(*names: str, help_text: str):
    return click.option(*names, type=str, is_flag=False, flag_value="", default=None, help=help_text)


def _zone(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[tzinfo]:
    if not value:
        return None
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise click.BadParameter(f"Unknown time zone {value!r}.") from exc


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@_optional_value("-s", "--start", help_text="Start a job now or at the given time.")
@_optional_value("-b", "--back", help_text="Like --start but reuse message and tags of the previous job.")
@_optional_value("-e", "--end", help_text="End the open job now or at the given time; with -s/-b add a closed job.")
@click.option("-d", "--duration", type=str, help="Duration instead of an end time, e.g. 1:30, 2h 15m or 1.5.")
@_optional_value("-m", "--message", help_text="Job message; prompts when given without text.")
@click.option("-t", "--tags", type=str, help="Comma separated tags; +tag/-tag add or remove.")
@_optional_value("-l", "--list", "list_range", help_text=f"List jobs ({RANGE_HELP}).")
@_optional_value("-r", "--report", "report_range", help_text=f"Calendar report ({RANGE_HELP}).")
@_optional_value("-x", "--export", "export_range", help_text=f"Export jobs as CSV ({RANGE_HELP}).")
@click.option("--csv", "columns", type=str, help="CSV columns to export, e.g. start,hours,message.")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write output to a file.")
@_optional_value("-T", "--list-tags", "tags_range", help_text=f"List used tags ({RANGE_HELP}).")
@click.option("-c", "--configuration", "show_configuration", is_flag=True, help="Show the configuration.")
@click.option("-R", "--resolution", type=float, help="Set the rounding resolution in hours.")
@click.option("-p", "--pay", type=float, help="Set the hourly rate.")
@click.option("-H", "--max-hours", type=int, help="Set the daily hour limit.")
@click.option("--legacy-import", type=click.Path(dir_okay=False), help="Import jobs from an old jobber.dat file.")
@click.option(
    "--db",
    "db_path",
    envvar="PYJOBBER_DB",
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"SQLite database path (defaults to {DEFAULT_DB_PATH}).",
)
@click.option(
    "--timezone",
    "tz",
    envvar="PYJOBBER_TZ",
    callback=_zone,
    help="IANA time zone for entered and shown times, e.g. Europe/Berlin (defaults to the system zone).",
)
@click.option("--no-colors", is_flag=True, help="Disable colored output.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
def jobber_cli(
    start: Optional[str],
    back: Optional[str],
    end: Optional[str],
    duration: Optional[str],
    message: Optional[str],
    tags: Optional[str],
    list_range: Optional[str],
    report_range: Optional[str],
    export_range: Optional[str],
    columns: Optional[str],
    output: Optional[Path],
    tags_range: Optional[str],
    show_configuration: bool,
    resolution: Optional[float],
    pay: Optional[float],
    max_hours: Optional[int],
    legacy_import: Optional[str],
    db_path: Optional[Path],
    tz: Optional[tzinfo],
    no_colors: bool,
    verbose: bool,
) -> None:
    """Track working hours of jobs, list them and report them per month."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s: %(message)s")
    raw = RawArgs(
        start=start,
        back=back,
        end=end,
        duration=duration,
        message=message,
        tags=tags,
        list=list_range,
        report=report_range,
        export=export_range,
        csv=columns,
        list_tags=tags_range,
        configuration=show_configuration,
        resolution=resolution,
        pay=pay,
        max_hours=max_hours,
        legacy_import=legacy_import,
    )

    path = resolve_db_path(db_path)
    logger.debug("Using database %s.", path)
    conn = connect(path)
    try:
        jobs = load(conn)
        context = Context.current(colors=not no_colors, tz=tz).with_tag_index(jobs.tag_index())
        command = infer(raw, jobs.open_start(), context.now, context.tz)
        if needs_message(command):
            text = click.prompt("Message")
            if isinstance(command, MESSAGE_COMMANDS):
                command = set_message(command, text)
            else:
                command = replace(command, message=text)
        logger.debug("Executing %s.", describe(command))

        change, text = jobs.execute(command, context)
        if text:
            _emit(text, output)
        if not isinstance(change, Nothing):
            save(conn, jobs)
        if not text:
            click.echo(change.describe(jobs.configuration, context))
    finally:
        conn.close()


def _emit(text: str, output: Optional[Path]) -> None:
    if output is None:
        click.echo(text, nl=not text.endswith("\n"))
        return
    output = output.expanduser()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Output written to {output}")


if __name__ == "__main__":
    jobber_cli()
