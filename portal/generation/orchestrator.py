"""
Timetable generation orchestrator.

Starts a generation job on the backend, then polls its status endpoint at a
fixed interval until the job reaches a terminal state or a deadline elapses.

State machine:

    IDLE -> STARTING -> GENERATING -> COMPLETED
               |             |
               +---------> FAILED

A new attempt may only be started from IDLE, COMPLETED or FAILED. The
backend is the source of truth for the job: the orchestrator only mirrors
what the last start/status response said.

Polling policy:
- "completed" / "failed" end the poll session with the matching state
- any other status keeps the session open
- a request or decode error during a tick ends the session but keeps the
  last observed state (the remote job may still be running)
- the deadline ends the session and keeps the last observed state
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol

import httpx
from pydantic import ValidationError

from portal.data.models import GenerationRequest, GenerationStatusPayload, JobStatus
from portal.errors import ApiError, GenerationInProgressError

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_POLL_TIMEOUT = 300.0

START_FAILED_MESSAGE = "Failed to start timetable generation"
GENERATION_FAILED_MESSAGE = "Timetable generation failed. Please try again."

# Errors that end a poll session without changing state
TICK_ERRORS = (ApiError, httpx.HTTPError, ValidationError)


class GenerationState(str, Enum):
    """Client-visible state of a generation attempt."""
    IDLE = "idle"
    STARTING = "starting"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_busy(self) -> bool:
        return self in (GenerationState.STARTING, GenerationState.GENERATING)

    @property
    def is_terminal(self) -> bool:
        return self in (GenerationState.COMPLETED, GenerationState.FAILED)


_STATE_FOR_STATUS = {
    JobStatus.NOT_STARTED: GenerationState.IDLE,
    JobStatus.GENERATING: GenerationState.GENERATING,
    JobStatus.COMPLETED: GenerationState.COMPLETED,
    JobStatus.FAILED: GenerationState.FAILED,
}


class GenerationBackend(Protocol):
    """The two endpoints the orchestrator needs (see `TimetableApi`)."""

    async def start_generation(self, request: GenerationRequest) -> object: ...

    async def get_generation_status(self) -> GenerationStatusPayload: ...


# =============================================================================
# Poll Session
# =============================================================================

@dataclass
class PollSession:
    """
    One polling run, owned by a single orchestrator.

    Attributes:
        interval: Seconds between two status checks
        deadline: Clock value after which no further tick is issued
        ticks: Number of status requests issued so far
        close_reason: Why the session ended (None while open)
    """
    interval: float
    deadline: float
    ticks: int = 0
    close_reason: Optional[str] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def closed(self) -> bool:
        return self.close_reason is not None

    def expired(self, now: float) -> bool:
        return now >= self.deadline

    def close(self, reason: str) -> None:
        """Mark the session closed and cancel its task unless called from it."""
        if self.close_reason is None:
            self.close_reason = reason
        task = self.task
        if task is not None and not task.done():
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            if task is not current:
                task.cancel()


# =============================================================================
# Orchestrator
# =============================================================================

class GenerationOrchestrator:
    """
    Drives one timetable generation at a time.

    Consumers read `current_state`, `last_generated_at` and `error_message`
    and call `start()`. Use it as an async context manager (or call
    `close()`) so an open poll session is cancelled when the consumer goes
    away.

    Example:
        >>> async with GenerationOrchestrator(TimetableApi(client)) as orchestrator:
        ...     await orchestrator.refresh_status()
        ...     await orchestrator.start()
        ...     await orchestrator.wait()
        ...     print(orchestrator.current_state)
    """

    def __init__(
        self,
        backend: GenerationBackend,
        *,
        request: Optional[GenerationRequest] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT,
        on_change: Optional[Callable[[GenerationOrchestrator], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Initialize the orchestrator.

        Args:
            backend: Object exposing the start and status endpoints
            request: Fixed start payload (semester / academic year)
            poll_interval: Seconds between status checks
            poll_timeout: Seconds after start at which polling stops
            on_change: Called after every state update
            clock: Monotonic clock used for the deadline
            sleep: Coroutine used to wait between ticks
            now: Wall clock used for `last_generated_at`
        """
        self._backend = backend
        self.request = request or GenerationRequest(semester="FALL", academic_year="2024-2025")
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self._on_change = on_change
        self._clock = clock
        self._sleep = sleep
        self._now = now

        self.current_state = GenerationState.IDLE
        self.last_generated_at: Optional[datetime] = None
        self.error_message: Optional[str] = None
        self._session: Optional[PollSession] = None
        self._closed = False

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def session(self) -> Optional[PollSession]:
        """The open poll session, if any."""
        return self._session

    @property
    def polling(self) -> bool:
        return self._session is not None and not self._session.closed

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """
        Start a generation and open a poll session.

        Raises:
            GenerationInProgressError: If a generation is already starting or
                running; no request is sent and state is unchanged.
        """
        if self.current_state.is_busy or self.polling:
            raise GenerationInProgressError(
                f"Cannot start generation while {self.current_state.value}"
            )

        self._closed = False
        self.error_message = None
        self._set_state(GenerationState.STARTING)

        try:
            await self._backend.start_generation(self.request)
        except ApiError as e:
            if not self._closed:
                self._fail(e.server_message or START_FAILED_MESSAGE)
            return
        except httpx.HTTPError as e:
            logger.error("Error starting timetable generation: %s", e)
            if not self._closed:
                self._fail(START_FAILED_MESSAGE)
            return

        # Closed while the start request was in flight: no session
        if self._closed:
            logger.debug("Generation started after close; not polling")
            return

        logger.info(
            "Timetable generation started (%s %s)",
            self.request.semester, self.request.academic_year,
        )
        self._set_state(GenerationState.GENERATING)
        self._open_session()

    async def refresh_status(self) -> GenerationStatusPayload:
        """
        Fetch the job status once, without polling.

        Rehydrates `current_state` and `last_generated_at` from the backend,
        e.g. after a restart. Errors propagate to the caller.
        """
        payload = await self._backend.get_generation_status()
        if payload.last_generated is not None:
            self.last_generated_at = payload.last_generated
        state = _STATE_FOR_STATUS[payload.job_status]
        if state is not GenerationState.FAILED:
            self.error_message = None
        self._set_state(state)
        return payload

    async def wait(self) -> GenerationState:
        """Wait for the open poll session (if any) to end."""
        session = self._session
        if session is not None and session.task is not None:
            try:
                await asyncio.shield(session.task)
            except asyncio.CancelledError:
                if not session.task.cancelled():
                    raise
        return self.current_state

    async def close(self) -> None:
        """
        Cancel the open poll session, if any.

        A start request still in flight completes on the backend, but no
        poll session is opened for it and no state change is applied.
        """
        self._closed = True
        session = self._session
        if session is None:
            return
        session.close("closed")
        self._session = None
        if session.task is not None:
            try:
                await session.task
            except asyncio.CancelledError:
                if not session.task.cancelled():
                    raise
        logger.debug("Generation orchestrator closed")

    async def __aenter__(self) -> GenerationOrchestrator:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Polling
    # -------------------------------------------------------------------------

    def _open_session(self) -> None:
        session = PollSession(
            interval=self.poll_interval,
            deadline=self._clock() + self.poll_timeout,
        )
        session.task = asyncio.create_task(self._poll(session))
        self._session = session

    async def _poll(self, session: PollSession) -> None:
        try:
            while True:
                await self._sleep(session.interval)
                if session.closed:
                    return
                if session.expired(self._clock()):
                    logger.warning(
                        "Stopped polling generation status after %.0fs; job still %s",
                        self.poll_timeout, self.current_state.value,
                    )
                    session.close("deadline")
                    return

                session.ticks += 1
                try:
                    payload = await self._backend.get_generation_status()
                except TICK_ERRORS as e:
                    logger.warning("Error polling generation status: %s", e)
                    session.close("error")
                    return

                if session.closed:
                    return
                if self._apply_tick(payload):
                    session.close(payload.job_status.value)
                    return
        finally:
            if self._session is session:
                self._session = None

    def _apply_tick(self, payload: GenerationStatusPayload) -> bool:
        """Apply one poll result; return True if the job reached a terminal state."""
        status = payload.job_status
        if status is JobStatus.COMPLETED:
            self.last_generated_at = self._now()
            logger.info("Timetable generated successfully")
            self._set_state(GenerationState.COMPLETED)
            return True
        if status is JobStatus.FAILED:
            self._fail(GENERATION_FAILED_MESSAGE)
            return True
        return False

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    def _fail(self, message: str) -> None:
        logger.error("Timetable generation failed: %s", message)
        self.error_message = message
        self._set_state(GenerationState.FAILED)

    def _set_state(self, state: GenerationState) -> None:
        if state is not self.current_state:
            logger.debug("Generation state %s -> %s", self.current_state.value, state.value)
        self.current_state = state
        if self._on_change is not None:
            self._on_change(self)
