"""Exception types shared across the portal."""

from __future__ import annotations

from typing import Optional


class PortalError(Exception):
    """Base class for all portal errors."""
    pass


class ApiError(PortalError):
    """
    Raised when the backend answers with a non-2xx status or an undecodable body.

    Attributes:
        message: Human-readable message (server-supplied when available)
        status_code: HTTP status of the response
        endpoint: Relative endpoint that was requested
        server_message: The `message` field from the response body, if any
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        server_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.endpoint = endpoint
        self.server_message = server_message

    def __repr__(self) -> str:
        return (
            f"ApiError(message={self.message!r}, status_code={self.status_code}, "
            f"endpoint={self.endpoint!r})"
        )


class GenerationInProgressError(PortalError):
    """Raised when a generation is started while another one is in flight."""
    pass
