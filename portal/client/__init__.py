"""Backend API client and endpoint façades."""

from .api_client import ApiClient, build_async_client
from .facades import AdminApi, InstructorApi, ResourceApi, TimetableApi

__all__ = [
    "ApiClient",
    "build_async_client",
    "AdminApi",
    "InstructorApi",
    "ResourceApi",
    "TimetableApi",
]
