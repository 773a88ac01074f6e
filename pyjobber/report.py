"""Calendar report and CSV export of job lists."""

from __future__ import annotations

import csv
import io
from collections import defaultdict
from datetime import date
from typing import Iterator, Optional

import click

from pyjobber.config import resolve
from pyjobber.context import Context
from pyjobber.joblist import JobList
from pyjobber.pydate import days_in_month, format_datetime, format_pay, format_total_value

WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
DAY_WIDTH = 3
COLUMN_WIDTH = 8
LINE_WIDTH = DAY_WIDTH + COLUMN_WIDTH * 8

CSV_COLUMNS = ("pos", "start", "end", "hours", "pay", "tags", "message")


class HourBuckets:
    """Hours per resolved tag, per day, per month, per year.

    Iteration is always in key order so the report reads chronologically
    whatever order the jobs were recorded in.
    """

    def __init__(self) -> None:
        self._years: dict[int, dict[int, dict[int, dict[str, float]]]] = defaultdict(
            lambda: defaultdict(lambda: defaultdict(lambda: defaultdict(float)))
        )

    def add(self, day: date, tag: str, hours: float) -> None:
        self._years[day.year][day.month][day.day][tag] += hours

    def years(self) -> list[int]:
        return sorted(self._years)

    def months(self, year: int) -> list[int]:
        return sorted(self._years[year])

    def day(self, year: int, month: int, day: int) -> Optional[dict[str, float]]:
        return self._years[year][month].get(day)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        for year in self.years():
            for month in self.months(year):
                yield year, month


def collect_hours(job_list: JobList, context: Context) -> HourBuckets:
    """Split jobs at local midnight and sum fragment hours per day and resolved tag."""
    buckets = HourBuckets()
    tz = context.tz
    for _, job in job_list:
        for fragment in job.split(tz, context.now):
            tag, properties = resolve(fragment.tags, job_list.configuration)
            buckets.add(fragment.start.date(), tag, fragment.hours(properties, context.now))
    return buckets


def _day_cell(tag_hours: dict[str, float], job_list: JobList, context: Context) -> tuple[str, float, Optional[float]]:
    day_hours = 0.0
    day_costs: Optional[float] = None
    exceeded = False
    for tag, hours in tag_hours.items():
        properties = job_list.configuration.properties_for(tag)
        if properties.exceeded_by(hours):
            exceeded = True
        day_hours += hours
        if properties.rate is not None:
            day_costs = (day_costs or 0.0) + hours * properties.rate

    cell = f"{format_total_value(day_hours):>{COLUMN_WIDTH}}"
    if day_hours > 24:
        cell = context.style(cell, fg="bright_red", bold=True)
    elif exceeded:
        cell = context.style(cell, fg="yellow", bold=True)
    else:
        cell = context.style(cell, bold=True)
    return cell, day_hours, day_costs


def _render_month(year: int, month: int, buckets: HourBuckets, job_list: JobList, context: Context) -> list[str]:
    lines = [f"{month}/{year}".center(LINE_WIDTH)]
    lines.append(f"{'Day':>{DAY_WIDTH}}" + "".join(f"{name:>{COLUMN_WIDTH}}" for name in WEEKDAYS) + f"{'Week':>{COLUMN_WIDTH}}")

    # date.weekday() counts from Monday, columns start at Sunday
    first_column = (date(year, month, 1).weekday() + 1) % 7
    row = f"{1:>{DAY_WIDTH}}" + " " * COLUMN_WIDTH * first_column
    column = first_column
    week_hours = 0.0
    month_hours = 0.0
    month_costs: Optional[float] = None

    for day in range(1, days_in_month(year, month) + 1):
        if column == 7:
            lines.append(row + f"{format_total_value(week_hours):>{COLUMN_WIDTH}}")
            row = f"{day:>{DAY_WIDTH}}"
            column = 0
            week_hours = 0.0

        tag_hours = buckets.day(year, month, day)
        if tag_hours is None:
            row += f"{'-':>{COLUMN_WIDTH}}"
        else:
            cell, day_hours, day_costs = _day_cell(tag_hours, job_list, context)
            row += cell
            week_hours += day_hours
            month_hours += day_hours
            if day_costs is not None:
                month_costs = (month_costs or 0.0) + day_costs
        column += 1

    row += " " * COLUMN_WIDTH * (7 - column)
    lines.append(row + f"{format_total_value(week_hours):>{COLUMN_WIDTH}}")

    pay = f" = ${format_pay(month_costs)}" if month_costs is not None else ""
    summary = f"{MONTHS[month - 1]} {year}: {format_total_value(month_hours)} hours{pay}"
    lines.append(f"{summary:>{LINE_WIDTH}}")
    return lines


def render_report(job_list: JobList, context: Context) -> str:
    """Render one calendar grid per month touched by the jobs, then the totals."""
    buckets = collect_hours(job_list, context)
    lines: list[str] = []
    for year, month in buckets:
        lines.extend(_render_month(year, month, buckets, job_list, context))
        lines.append("")
    lines.append(job_list.total_line())
    return "\n".join(lines)


def parse_columns(columns: Optional[str]) -> list[str]:
    if not columns:
        return list(CSV_COLUMNS)
    selected = [column.strip().lower() for column in columns.split(",") if column.strip()]
    unknown = [column for column in selected if column not in CSV_COLUMNS]
    if unknown:
        raise click.ClickException(
            f"Unknown CSV column(s): {', '.join(unknown)}. Choose from {', '.join(CSV_COLUMNS)}."
        )
    return selected


def export_csv(job_list: JobList, context: Context, columns: Optional[str] = None) -> str:
    """Return the jobs as CSV text with the selected columns."""
    headers = parse_columns(columns)
    tz = context.tz
    handle = io.StringIO()
    writer = csv.writer(handle)
    writer.writerow(headers)
    for pos, job in job_list:
        properties = job_list.properties(job)
        pay = job.pay(properties, context.now)
        row = {
            "pos": pos + 1,
            "start": format_datetime(job.start, tz),
            "end": format_datetime(job.end, tz) if job.end is not None else "",
            "hours": format_total_value(job.hours(properties, context.now)),
            "pay": f"{pay:.2f}" if pay is not None else "",
            "tags": ",".join(job.tags),
            "message": job.message or "",
        }
        writer.writerow([row[header] for header in headers])
    return handle.getvalue()
