"""Tests for the named endpoint facades."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from pydantic import ValidationError

from portal.client.facades import AdminApi, InstructorApi, TimetableApi
from portal.data.models import AdminResource, Course, GenerationRequest, JobStatus
from portal.errors import ApiError


def run_with(make_client, api_cls, action):
    """Run `action(api)` with a fresh client."""

    async def run():
        async with make_client() as client:
            return await action(api_cls(client))

    return asyncio.run(run())


class TestAdminApi:
    """Tests for the admin collections."""

    def test_list_courses(self, backend, make_client):
        backend.add("GET", "/api/admin/courses", httpx.Response(200, json=[
            {"id": 1, "courseName": "Algebra", "courseCode": "MA102", "credits": 3},
            {"id": 2, "courseName": "Compilers", "courseCode": "CS401", "credits": 4},
        ]))

        courses = run_with(make_client, AdminApi, lambda api: api.courses.list())

        assert [c.course_code for c in courses] == ["MA102", "CS401"]
        assert all(isinstance(c, Course) for c in courses)

    def test_create_sends_wire_payload(self, backend, make_client):
        backend.add("POST", "/api/admin/courses", httpx.Response(
            200, json={"id": 9, "courseName": "Algebra", "courseCode": "MA102", "credits": 3}
        ))
        course = Course(course_name="Algebra", course_code="MA102", credits=3)

        created = run_with(make_client, AdminApi, lambda api: api.courses.create(course))

        assert created.id == 9
        body = backend.json_body(backend.requests[0])
        assert body == {"courseName": "Algebra", "courseCode": "MA102", "credits": 3}

    def test_update_and_delete(self, backend, make_client):
        backend.add("PUT", "/api/admin/departments/4", httpx.Response(
            200, json={"id": 4, "name": "Physics", "code": "PH"}
        ))
        backend.add("DELETE", "/api/admin/departments/4", httpx.Response(204))

        async def action(api):
            updated = await api.departments.update(
                4, api.departments.model(name="Physics", code="PH")
            )
            deleted = await api.departments.delete(4)
            return updated, deleted

        updated, deleted = run_with(make_client, AdminApi, action)

        assert updated.name == "Physics"
        assert deleted is None
        assert [r.method for r in backend.requests] == ["PUT", "DELETE"]

    def test_resource_lookup(self, make_client):
        async def action(api):
            return api.resource(AdminResource.PROGRAMS).path

        assert run_with(make_client, AdminApi, action) == "/admin/programs"

    def test_invalid_payload_raises_validation_error(self, backend, make_client):
        backend.add("GET", "/api/admin/courses/1", httpx.Response(200, json={"id": 1}))

        with pytest.raises(ValidationError):
            run_with(make_client, AdminApi, lambda api: api.courses.get(1))

    def test_instructor_schedule(self, backend, make_client):
        backend.add("GET", "/api/instructors/7/schedule", httpx.Response(200, json={
            "instructor": {"name": "Dr. Smith", "department": "Computer Science"},
            "schedule": [{"courseCode": "CS201", "day": "Monday", "timeSlot": "09:00-10:00"}],
        }))

        view = run_with(make_client, AdminApi, lambda api: api.get_instructor_schedule(7))

        assert view.instructor.name == "Dr. Smith"
        assert view.schedule[0].occupies("Monday", "09:00-10:00")

    def test_instructor_schedule_not_found(self, backend, make_client):
        backend.add("GET", "/api/instructors/99/schedule", httpx.Response(404))

        assert run_with(make_client, AdminApi, lambda api: api.get_instructor_schedule(99)) is None


class TestInstructorApi:
    """Tests for the instructor's own schedule."""

    def test_get_schedule(self, backend, make_client):
        backend.add("GET", "/api/instructor/3/schedule", httpx.Response(200, json={
            "classes": [{"courseCode": "CS201", "day": "Tuesday", "timeSlot": "10:00-11:00"}],
            "totalCourses": 1,
            "weeklyHours": 3,
        }))

        schedule = run_with(make_client, InstructorApi, lambda api: api.get_schedule(3))

        assert schedule.total_courses == 1
        assert schedule.weekly_hours == 3
        assert schedule.classes[0].course_code == "CS201"


class TestTimetableApi:
    """Tests for the timetable and generation endpoints."""

    def test_get_timetable(self, backend, make_client):
        backend.add("GET", "/api/timetable", httpx.Response(200, json={
            "departments": [{"name": "CS", "courses": [{"name": "Compilers", "code": "CS401"}]}]
        }))

        timetable = run_with(make_client, TimetableApi, lambda api: api.get_timetable())

        assert timetable.total_courses == 1

    def test_missing_timetable_is_none(self, backend, make_client):
        backend.add("GET", "/api/timetable", httpx.Response(404))

        assert run_with(make_client, TimetableApi, lambda api: api.get_timetable()) is None

    def test_start_generation(self, backend, make_client):
        backend.add("POST", "/api/timetable/generate", httpx.Response(200, json={"message": "started"}))
        request = GenerationRequest(semester="SPRING", academic_year="2025-2026")

        result = run_with(make_client, TimetableApi, lambda api: api.start_generation(request))

        assert result == {"message": "started"}
        body = backend.json_body(backend.requests[0])
        assert body == {"semester": "SPRING", "academicYear": "2025-2026"}

    def test_generation_status(self, backend, make_client):
        backend.add("GET", "/api/timetable/generation-status", httpx.Response(
            200, json={"status": "generating", "lastGenerated": None}
        ))

        payload = run_with(make_client, TimetableApi, lambda api: api.get_generation_status())

        assert payload.job_status is JobStatus.GENERATING

    def test_generation_status_error(self, backend, make_client):
        backend.add("GET", "/api/timetable/generation-status", httpx.Response(
            500, json={"message": "database offline"}
        ))

        with pytest.raises(ApiError, match="database offline"):
            run_with(make_client, TimetableApi, lambda api: api.get_generation_status())
