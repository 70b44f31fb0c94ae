"""Timetable Portal - admin tools, schedules and generation front end for a timetable backend."""

from .client import AdminApi, ApiClient, InstructorApi, TimetableApi
from .config import PortalSettings, get_settings
from .errors import ApiError, GenerationInProgressError, PortalError
from .generation import GenerationOrchestrator, GenerationState

__all__ = [
    # Client
    "ApiClient",
    "AdminApi",
    "InstructorApi",
    "TimetableApi",
    # Generation
    "GenerationOrchestrator",
    "GenerationState",
    # Config
    "PortalSettings",
    "get_settings",
    # Errors
    "PortalError",
    "ApiError",
    "GenerationInProgressError",
]
