"""
Pydantic models for the payloads exchanged with the timetable backend.

Field names are snake_case in Python and camelCase on the wire
(e.g. ``course_name`` <-> ``courseName``). Resource models keep unknown
fields so that proxied payloads survive a round trip unmodified.

Schedule conventions:
- Days are full English names ("Monday" ... "Friday")
- Time slots are one-hour ranges between 08:00 and 18:00 ("09:00-10:00")
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)


# =============================================================================
# Constants and Enums
# =============================================================================

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

TIME_SLOTS = [f"{h:02d}:00-{h + 1:02d}:00" for h in range(8, 18)]

MIN_CREDITS = 1
MAX_CREDITS = 6

# Validation context for payloads typed in by a user (CLI files)
INPUT_CONTEXT = {"input": True}

_DATETIME = TypeAdapter(datetime)


class JobStatus(str, Enum):
    """Status of the remote generation job, as reported by the backend."""
    NOT_STARTED = "not_started"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class AdminResource(str, Enum):
    """Admin collections exposed under /admin/{resource}."""
    DEPARTMENTS = "departments"
    COURSES = "courses"
    INSTRUCTORS = "instructors"
    PROGRAMS = "programs"


# Backend ids are numeric for some resources and strings for others
ResourceId = Union[int, str]


# =============================================================================
# Helper Functions
# =============================================================================

def normalize_time_slot(slot: str) -> str:
    """Normalize "09:00 - 10:00" and "09:00-10:00" to the same key."""
    return "".join(slot.split())


def normalize_day(day: str) -> str:
    """Normalize a day name for comparison ("monday" -> "Monday")."""
    return day.strip().capitalize()


class _WireModel(BaseModel):
    """
    Base for backend payloads.

    Backend responses are accepted as stored. Stricter checks apply only to
    user-supplied payloads, validated with ``context=INPUT_CONTEXT``.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    # Fields that must not be blank in user input
    required_text: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def apply_input_checks(self, info: ValidationInfo) -> _WireModel:
        if info.context and info.context.get("input"):
            self.check_input()
        return self

    def check_input(self) -> None:
        """Raise ValueError if this item is not acceptable as user input."""
        for name in self.required_text:
            value = getattr(self, name)
            if value is None or not str(value).strip():
                raise ValueError(f"{name} must not be blank")

    def to_payload(self) -> dict[str, Any]:
        """Serialize with wire (camelCase) names, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# =============================================================================
# Admin Resources
# =============================================================================

class Department(_WireModel):
    """Academic department."""
    id: Optional[ResourceId] = None
    name: str
    code: str
    description: Optional[str] = None
    head: Optional[str] = None
    course_count: Optional[int] = Field(default=None, alias="courseCount")

    required_text: ClassVar[tuple[str, ...]] = ("name", "code")

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class Course(_WireModel):
    """Course offered by a department."""
    id: Optional[ResourceId] = None
    course_name: str = Field(alias="courseName")
    course_code: str = Field(alias="courseCode")
    credits: int
    department_id: Optional[ResourceId] = Field(default=None, alias="departmentId")
    description: Optional[str] = None

    required_text: ClassVar[tuple[str, ...]] = ("course_name", "course_code")

    def check_input(self) -> None:
        super().check_input()
        if not MIN_CREDITS <= self.credits <= MAX_CREDITS:
            raise ValueError(f"credits must be between {MIN_CREDITS} and {MAX_CREDITS}")

    def __str__(self) -> str:
        return f"{self.course_code} {self.course_name}"


class Instructor(_WireModel):
    """Teaching staff member."""
    id: Optional[ResourceId] = None
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    phone: Optional[str] = None
    department_id: Optional[ResourceId] = Field(default=None, alias="departmentId")

    required_text: ClassVar[tuple[str, ...]] = ("first_name", "last_name", "email")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:
        return self.full_name


class Program(_WireModel):
    """Degree program."""
    id: Optional[ResourceId] = None
    name: str
    department_id: Optional[ResourceId] = Field(default=None, alias="departmentId")
    duration: Optional[Union[int, str]] = None
    description: Optional[str] = None

    required_text: ClassVar[tuple[str, ...]] = ("name",)

    def __str__(self) -> str:
        return self.name


RESOURCE_MODELS: dict[AdminResource, type[_WireModel]] = {
    AdminResource.DEPARTMENTS: Department,
    AdminResource.COURSES: Course,
    AdminResource.INSTRUCTORS: Instructor,
    AdminResource.PROGRAMS: Program,
}


# =============================================================================
# Schedules
# =============================================================================

class ClassSession(_WireModel):
    """One weekly class slot taught by an instructor."""
    id: Optional[ResourceId] = None
    course_code: Optional[str] = Field(default=None, alias="courseCode")
    course_name: Optional[str] = Field(default=None, alias="courseName")
    room: Optional[str] = None
    students: Optional[int] = None
    day: str
    time_slot: str = Field(alias="timeSlot")

    def occupies(self, day: str, time_slot: str) -> bool:
        """Check whether this session sits in the given grid cell."""
        return (
            normalize_day(self.day) == normalize_day(day)
            and normalize_time_slot(self.time_slot) == normalize_time_slot(time_slot)
        )


class InstructorSchedule(_WireModel):
    """The signed-in instructor's own weekly schedule."""
    classes: list[ClassSession] = Field(default_factory=list)
    total_courses: Optional[int] = Field(default=None, alias="totalCourses")
    weekly_hours: Optional[float] = Field(default=None, alias="weeklyHours")
    rooms_used: Optional[int] = Field(default=None, alias="roomsUsed")
    today_classes: Optional[int] = Field(default=None, alias="todayClasses")


class InstructorSummary(_WireModel):
    """Instructor header shown above an admin schedule view."""
    name: str
    email: Optional[str] = None
    department: Optional[str] = None


class InstructorScheduleView(_WireModel):
    """Admin view of one instructor's weekly schedule."""
    instructor: Optional[InstructorSummary] = None
    schedule: list[ClassSession] = Field(default_factory=list)


# =============================================================================
# Public Timetable
# =============================================================================

class TimeSlot(_WireModel):
    """A weekly meeting of a course."""
    day: str
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    room: Optional[str] = None


class TimetableCourse(_WireModel):
    """A course row in the published timetable."""
    id: Optional[ResourceId] = None
    name: str
    code: str
    instructor: str = ""
    time_slots: list[TimeSlot] = Field(default_factory=list, alias="timeSlots")

    def matches(self, term: str) -> bool:
        """Case-insensitive match on name, code or instructor."""
        term = term.lower()
        return (
            term in self.name.lower()
            or term in self.code.lower()
            or term in self.instructor.lower()
        )

    def slot_on(self, day: str) -> Optional[TimeSlot]:
        """First meeting on the given day, if any."""
        for slot in self.time_slots:
            if normalize_day(slot.day) == normalize_day(day):
                return slot
        return None


class TimetableDepartment(_WireModel):
    """A department section of the published timetable."""
    id: Optional[ResourceId] = None
    name: str
    courses: list[TimetableCourse] = Field(default_factory=list)


class Timetable(_WireModel):
    """The published timetable, grouped by department."""
    departments: list[TimetableDepartment] = Field(default_factory=list)

    @property
    def total_courses(self) -> int:
        return sum(len(d.courses) for d in self.departments)

    def filter(self, term: str) -> Timetable:
        """
        Keep only courses matching a search term.

        Departments with no matching course are dropped. An empty term
        returns the timetable unchanged.
        """
        if not term:
            return self
        departments = []
        for department in self.departments:
            courses = [c for c in department.courses if c.matches(term)]
            if courses:
                departments.append(department.model_copy(update={"courses": courses}))
        return self.model_copy(update={"departments": departments})


# =============================================================================
# Generation
# =============================================================================

class GenerationRequest(_WireModel):
    """Payload that starts a timetable generation job."""
    semester: str
    academic_year: str = Field(alias="academicYear")


class GenerationStatusPayload(_WireModel):
    """Body of the generation status endpoint."""
    status: str
    last_generated: Optional[datetime] = Field(default=None, alias="lastGenerated")

    @field_validator("last_generated", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: Any) -> Optional[datetime]:
        """Unparseable timestamps become None."""
        if v is None:
            return None
        try:
            return _DATETIME.validate_python(v)
        except ValidationError:
            return None

    @property
    def job_status(self) -> JobStatus:
        """Map the raw status string onto `JobStatus` (unknown -> NOT_STARTED)."""
        try:
            return JobStatus(self.status.lower())
        except ValueError:
            return JobStatus.NOT_STARTED
