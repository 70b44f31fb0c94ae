"""
Proxy route handlers.

Each handler forwards one request to the backend through the shared
`ApiClient` and returns the backend payload unmodified. Backend errors are
turned into responses by the handlers registered in `portal.server.app`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from portal.client.api_client import ApiClient
from portal.config import PortalSettings
from portal.data.models import AdminResource, GenerationRequest
from portal.errors import ApiError
from portal.generation.orchestrator import START_FAILED_MESSAGE

from .auth import RequestContext, Role, require_role

logger = logging.getLogger(__name__)

require_admin = require_role(Role.ADMIN)
require_instructor = require_role(Role.INSTRUCTOR)


def get_api_client(request: Request) -> ApiClient:
    return request.app.state.api_client


def get_portal_settings(request: Request) -> PortalSettings:
    return request.app.state.settings


def _json_or_not_found(data: Any) -> Response:
    if data is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return JSONResponse(content=data)


# =============================================================================
# Public
# =============================================================================

public_router = APIRouter(prefix="/api")


@public_router.get("/timetable")
async def get_timetable(client: ApiClient = Depends(get_api_client)) -> Response:  # noqa: B008
    """Published timetable; 404 when none has been generated yet."""
    return _json_or_not_found(await client.get("/timetable", allow_not_found=True))


# =============================================================================
# Timetable generation
# =============================================================================

generation_router = APIRouter(
    prefix="/api/admin/timetable-generation",
    dependencies=[Depends(require_admin)],
)


@generation_router.post("")
async def start_generation(
    payload: Optional[GenerationRequest] = Body(default=None),  # noqa: B008
    client: ApiClient = Depends(get_api_client),  # noqa: B008
    settings: PortalSettings = Depends(get_portal_settings),  # noqa: B008
) -> Response:
    """Trigger generation; the body defaults to the configured semester."""
    payload = payload or GenerationRequest(
        semester=settings.semester, academic_year=settings.academic_year
    )
    try:
        data = await client.post("/timetable/generate", payload.to_payload())
    except ApiError as e:
        if e.status_code is None or e.status_code < 400:
            raise
        return JSONResponse(
            content={"message": e.server_message or START_FAILED_MESSAGE},
            status_code=e.status_code,
        )
    return JSONResponse(content=data)


@generation_router.get("/status")
async def get_generation_status(client: ApiClient = Depends(get_api_client)) -> Response:  # noqa: B008
    return JSONResponse(content=await client.get("/timetable/generation-status"))


# =============================================================================
# Schedules
# =============================================================================

schedule_router = APIRouter(prefix="/api")


@schedule_router.get("/admin/instructors/{instructor_id}/schedule", dependencies=[Depends(require_admin)])
async def get_instructor_schedule(
    instructor_id: str,
    client: ApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    data = await client.get(f"/instructors/{instructor_id}/schedule", allow_not_found=True)
    return _json_or_not_found(data)


@schedule_router.get("/instructor/schedule")
async def get_own_schedule(
    context: RequestContext = Depends(require_instructor),  # noqa: B008
    client: ApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    """Schedule of the signed-in instructor."""
    data = await client.get(f"/instructor/{context.user_id}/schedule", allow_not_found=True)
    return _json_or_not_found(data)


# =============================================================================
# Admin resources
# =============================================================================

resource_router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])


@resource_router.get("/{resource}")
async def list_resources(
    resource: AdminResource,
    client: ApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    return JSONResponse(content=await client.get(f"/admin/{resource.value}"))


@resource_router.post("/{resource}")
async def create_resource(
    resource: AdminResource,
    payload: Any = Body(...),  # noqa: B008
    client: ApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    return JSONResponse(content=await client.post(f"/admin/{resource.value}", payload))


@resource_router.get("/{resource}/{item_id}")
async def get_resource(
    resource: AdminResource,
    item_id: str,
    client: ApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    return JSONResponse(content=await client.get(f"/admin/{resource.value}/{item_id}"))


@resource_router.put("/{resource}/{item_id}")
async def update_resource(
    resource: AdminResource,
    item_id: str,
    payload: Any = Body(...),  # noqa: B008
    client: ApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    return JSONResponse(content=await client.put(f"/admin/{resource.value}/{item_id}", payload))


@resource_router.delete("/{resource}/{item_id}")
async def delete_resource(
    resource: AdminResource,
    item_id: str,
    client: ApiClient = Depends(get_api_client),  # noqa: B008
) -> Response:
    await client.delete(f"/admin/{resource.value}/{item_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Specific routes must be registered before the /{resource} catch-alls
ROUTERS = [public_router, generation_router, schedule_router, resource_router]
