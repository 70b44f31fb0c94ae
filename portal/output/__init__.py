"""Console output formatting."""

from .formatters import (
    RESOURCE_COLUMNS,
    format_instructor_view,
    format_json,
    format_own_schedule,
    format_resources,
    format_status,
    format_timestamp,
    format_timetable,
    print_instructor_view,
    print_own_schedule,
    print_timetable,
    resource_table,
    schedule_grid,
    status_panel,
    timetable_tables,
)

__all__ = [
    "RESOURCE_COLUMNS",
    "format_instructor_view",
    "format_json",
    "format_own_schedule",
    "format_resources",
    "format_status",
    "format_timestamp",
    "format_timetable",
    "print_instructor_view",
    "print_own_schedule",
    "print_timetable",
    "resource_table",
    "schedule_grid",
    "status_panel",
    "timetable_tables",
]
