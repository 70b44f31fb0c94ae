"""HTTP proxy in front of the timetable backend."""

from .app import create_app
from .auth import RequestContext, Role

__all__ = ["create_app", "RequestContext", "Role"]
