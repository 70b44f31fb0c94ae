"""
Console formatters for portal payloads.

This module renders backend payloads for the terminal:
- Timetable: one grid per department (courses x weekdays)
- Instructor schedule: week grid (time slots x weekdays)
- Admin resources: one table per collection
- Generation status: a status panel

The ``print_*`` functions write to a rich console; the ``format_*``
functions return the same output as plain text.
"""

from __future__ import annotations

import json
from datetime import datetime
from io import StringIO
from typing import Callable, Optional, Sequence

from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from portal.data.models import (
    DAY_NAMES,
    TIME_SLOTS,
    AdminResource,
    ClassSession,
    InstructorSchedule,
    InstructorScheduleView,
    Timetable,
)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_WIDTH = 120

STATUS_STYLES = {
    "idle": ("Ready", "dim"),
    "starting": ("Starting...", "yellow"),
    "generating": ("Generating...", "yellow"),
    "completed": ("Completed", "green"),
    "failed": ("Failed", "red"),
}

RESOURCE_COLUMNS: dict[AdminResource, list[tuple[str, str]]] = {
    AdminResource.DEPARTMENTS: [
        ("ID", "id"), ("Name", "name"), ("Code", "code"),
        ("Head", "head"), ("Courses", "course_count"),
    ],
    AdminResource.COURSES: [
        ("ID", "id"), ("Code", "course_code"), ("Name", "course_name"),
        ("Credits", "credits"), ("Department", "department_id"),
    ],
    AdminResource.INSTRUCTORS: [
        ("ID", "id"), ("Name", "full_name"), ("Email", "email"),
        ("Phone", "phone"), ("Department", "department_id"),
    ],
    AdminResource.PROGRAMS: [
        ("ID", "id"), ("Name", "name"), ("Duration", "duration"),
        ("Department", "department_id"),
    ],
}


# =============================================================================
# Helper Functions
# =============================================================================

def _cell(value: object) -> str:
    return "-" if value is None else escape(str(value))


def _capture(render: Callable[[Console], None], width: int = DEFAULT_WIDTH) -> str:
    """Run a print function against an off-screen console and return its text."""
    console = Console(record=True, file=StringIO(), width=width)
    render(console)
    return console.export_text()


def format_timestamp(value: Optional[datetime]) -> str:
    """Format a timestamp in local time, or '-' when missing."""
    if value is None:
        return "-"
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


# =============================================================================
# Timetable
# =============================================================================

def timetable_tables(timetable: Timetable) -> list[Table]:
    """Build one table per department: courses x weekdays."""
    tables = []
    for department in timetable.departments:
        table = Table(title=escape(department.name), show_header=True, header_style="bold cyan")
        table.add_column("Course")
        table.add_column("Code", style="dim")
        table.add_column("Instructor")
        for day in DAY_NAMES:
            table.add_column(day, justify="center")

        for course in department.courses:
            row = [_cell(course.name), _cell(course.code), _cell(course.instructor or None)]
            for day in DAY_NAMES:
                slot = course.slot_on(day)
                if slot:
                    cell = f"{slot.start_time} - {slot.end_time}"
                    if slot.room:
                        cell += f"\n{slot.room}"
                    row.append(escape(cell))
                else:
                    row.append("-")
            table.add_row(*row)
        tables.append(table)
    return tables


def print_timetable(timetable: Timetable, console: Console, search: str = "") -> None:
    """Print the timetable, optionally filtered by a search term."""
    filtered = timetable.filter(search)
    if not filtered.departments:
        console.print("[yellow]No courses match.[/yellow]")
        return
    for table in timetable_tables(filtered):
        console.print(table)


def format_timetable(timetable: Timetable, search: str = "") -> str:
    return _capture(lambda c: print_timetable(timetable, c, search))


# =============================================================================
# Instructor Schedules
# =============================================================================

def schedule_grid(sessions: Sequence[ClassSession], title: str = "Weekly Schedule") -> Table:
    """Build a time-slot x weekday grid of class sessions."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Time", style="dim")
    for day in DAY_NAMES:
        table.add_column(day, justify="center")

    for time_slot in TIME_SLOTS:
        row = [time_slot]
        for day in DAY_NAMES:
            session = next((s for s in sessions if s.occupies(day, time_slot)), None)
            if session:
                lines = [session.course_code or session.course_name or "Class"]
                if session.room:
                    lines.append(session.room)
                row.append(escape("\n".join(lines)))
            else:
                row.append("")
        table.add_row(*row)
    return table


def print_instructor_view(view: InstructorScheduleView, console: Console) -> None:
    """Admin view: instructor header followed by the week grid."""
    if view.instructor:
        details = [f"[bold]{escape(view.instructor.name)}[/bold]"]
        if view.instructor.email:
            details.append(escape(view.instructor.email))
        if view.instructor.department:
            details.append(escape(view.instructor.department))
        console.print(Panel("\n".join(details), title="Instructor Schedule"))
    console.print(schedule_grid(view.schedule))
    if not view.schedule:
        console.print("[dim]No classes scheduled.[/dim]")


def format_instructor_view(view: InstructorScheduleView) -> str:
    return _capture(lambda c: print_instructor_view(view, c))


def print_own_schedule(schedule: InstructorSchedule, console: Console) -> None:
    """Instructor's own view: summary figures followed by the week grid."""
    summary = Table(show_header=False, box=None)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value")
    summary.add_row("Total courses", _cell(schedule.total_courses))
    summary.add_row("Weekly hours", _cell(schedule.weekly_hours))
    summary.add_row("Rooms used", _cell(schedule.rooms_used))
    summary.add_row("Classes today", _cell(schedule.today_classes))
    console.print(summary)
    console.print(schedule_grid(schedule.classes, "My Schedule"))


def format_own_schedule(schedule: InstructorSchedule) -> str:
    return _capture(lambda c: print_own_schedule(schedule, c))


# =============================================================================
# Admin Resources
# =============================================================================

def resource_table(resource: AdminResource, items: Sequence[BaseModel]) -> Table:
    """Build a table for an admin collection."""
    table = Table(
        title=resource.value.capitalize(),
        caption=f"{len(items)} {resource.value}",
        show_header=True,
        header_style="bold cyan",
    )
    columns = RESOURCE_COLUMNS[resource]
    for header, _ in columns:
        table.add_column(header)
    for item in items:
        table.add_row(*[_cell(getattr(item, attr, None)) for _, attr in columns])
    return table


def format_resources(resource: AdminResource, items: Sequence[BaseModel]) -> str:
    return _capture(lambda c: c.print(resource_table(resource, items)))


def format_json(payload: BaseModel) -> str:
    """Format a payload as wire-format JSON."""
    return json.dumps(payload.model_dump(by_alias=True, mode="json"), indent=2)


# =============================================================================
# Generation Status
# =============================================================================

def status_panel(
    state: str,
    last_generated_at: Optional[datetime] = None,
    error_message: Optional[str] = None,
) -> Panel:
    """Build the 'Current Status' panel."""
    label, style = STATUS_STYLES.get(state, (state.capitalize(), "white"))
    body = Text(label, style=f"bold {style}")
    body.append(f"\nLast generated: {format_timestamp(last_generated_at)}")
    if error_message:
        body.append(f"\n{error_message}", style="red")
    return Panel(body, title="Current Status")


def format_status(
    state: str,
    last_generated_at: Optional[datetime] = None,
    error_message: Optional[str] = None,
) -> str:
    return _capture(lambda c: c.print(status_panel(state, last_generated_at, error_message)))
