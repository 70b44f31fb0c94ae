"""
Named backend endpoints.

Each method is a fixed path + HTTP verb over `ApiClient`; payloads are
validated against the resource schemas on the way in and out, nothing else.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, TypeAdapter

from portal.data.models import (
    AdminResource,
    Course,
    Department,
    GenerationRequest,
    GenerationStatusPayload,
    Instructor,
    InstructorSchedule,
    InstructorScheduleView,
    Program,
    ResourceId,
    Timetable,
)

from .api_client import ApiClient

ModelT = TypeVar("ModelT", bound=BaseModel)


class ResourceApi(Generic[ModelT]):
    """CRUD endpoints of one admin collection (``/admin/{resource}``)."""

    def __init__(self, client: ApiClient, resource: AdminResource, model: type[ModelT]):
        self._client = client
        self.resource = resource
        self.model = model
        self.path = f"/admin/{resource.value}"
        self._list_adapter = TypeAdapter(list[model])

    async def list(self) -> list[ModelT]:
        return self._list_adapter.validate_python(await self._client.get(self.path))

    async def get(self, item_id: ResourceId) -> ModelT:
        return self.model.model_validate(await self._client.get(f"{self.path}/{item_id}"))

    async def create(self, item: ModelT) -> ModelT:
        return self.model.model_validate(await self._client.post(self.path, item.to_payload()))

    async def update(self, item_id: ResourceId, item: ModelT) -> ModelT:
        return self.model.model_validate(
            await self._client.put(f"{self.path}/{item_id}", item.to_payload())
        )

    async def delete(self, item_id: ResourceId) -> None:
        await self._client.delete(f"{self.path}/{item_id}")


class AdminApi:
    """Admin screens: the four collections plus per-instructor schedules."""

    def __init__(self, client: ApiClient):
        self._client = client
        self.departments = ResourceApi(client, AdminResource.DEPARTMENTS, Department)
        self.courses = ResourceApi(client, AdminResource.COURSES, Course)
        self.instructors = ResourceApi(client, AdminResource.INSTRUCTORS, Instructor)
        self.programs = ResourceApi(client, AdminResource.PROGRAMS, Program)

    def resource(self, resource: AdminResource) -> ResourceApi[Any]:
        """Look up a collection by enum value."""
        return getattr(self, resource.value)

    async def get_instructor_schedule(self, instructor_id: ResourceId) -> Optional[InstructorScheduleView]:
        data = await self._client.get(f"/instructors/{instructor_id}/schedule", allow_not_found=True)
        return None if data is None else InstructorScheduleView.model_validate(data)


class InstructorApi:
    """The signed-in instructor's own endpoints."""

    def __init__(self, client: ApiClient):
        self._client = client

    async def get_schedule(self, user_id: ResourceId) -> Optional[InstructorSchedule]:
        data = await self._client.get(f"/instructor/{user_id}/schedule", allow_not_found=True)
        return None if data is None else InstructorSchedule.model_validate(data)


class TimetableApi:
    """Public timetable and the generation trigger/status endpoints."""

    def __init__(self, client: ApiClient):
        self._client = client

    async def get_timetable(self) -> Optional[Timetable]:
        """Published timetable, or None when none has been generated yet."""
        data = await self._client.get("/timetable", allow_not_found=True)
        return None if data is None else Timetable.model_validate(data)

    async def start_generation(self, request: GenerationRequest) -> Any:
        return await self._client.post("/timetable/generate", request.to_payload())

    async def get_generation_status(self) -> GenerationStatusPayload:
        return GenerationStatusPayload.model_validate(
            await self._client.get("/timetable/generation-status")
        )
