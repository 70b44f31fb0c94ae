"""Payload schemas for the timetable backend."""

from .models import (
    DAY_NAMES,
    INPUT_CONTEXT,
    TIME_SLOTS,
    AdminResource,
    ClassSession,
    Course,
    Department,
    GenerationRequest,
    GenerationStatusPayload,
    Instructor,
    InstructorSchedule,
    InstructorScheduleView,
    InstructorSummary,
    JobStatus,
    Program,
    RESOURCE_MODELS,
    TimeSlot,
    Timetable,
    TimetableCourse,
    TimetableDepartment,
)

__all__ = [
    "DAY_NAMES",
    "INPUT_CONTEXT",
    "TIME_SLOTS",
    "AdminResource",
    "ClassSession",
    "Course",
    "Department",
    "GenerationRequest",
    "GenerationStatusPayload",
    "Instructor",
    "InstructorSchedule",
    "InstructorScheduleView",
    "InstructorSummary",
    "JobStatus",
    "Program",
    "RESOURCE_MODELS",
    "TimeSlot",
    "Timetable",
    "TimetableCourse",
    "TimetableDepartment",
]
