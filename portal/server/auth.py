"""
Request identity for the proxy routes.

The upstream auth gateway authenticates the user and forwards the identity
in two headers:

    X-User-Id:   backend user id
    X-User-Role: ADMIN | INSTRUCTOR

Handlers receive it as an explicit `RequestContext` dependency.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status


class Role(str, Enum):
    ADMIN = "ADMIN"
    INSTRUCTOR = "INSTRUCTOR"


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller of one request."""
    user_id: str
    role: Role


def get_request_context(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> RequestContext:
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        role = Role(x_user_role.strip().upper())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return RequestContext(user_id=x_user_id, role=role)


def require_role(role: Role) -> Callable[..., RequestContext]:
    """Dependency factory: the caller must hold `role`."""

    def dependency(context: RequestContext = Depends(get_request_context)) -> RequestContext:  # noqa: B008
        if context.role is not role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return context

    return dependency
