"""
Command-line interface for the timetable portal.

Usage:
    python -m portal serve --port 8000
    python -m portal generate
    python -m portal status
    python -m portal timetable --search "CS101"
    python -m portal schedule 42
    python -m portal list courses
    python -m portal create courses course.json
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Awaitable, Optional, TypeVar

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .client.api_client import ApiClient
from .client.facades import AdminApi, InstructorApi, TimetableApi
from .config import PortalSettings, get_settings
from .data.models import INPUT_CONTEXT, RESOURCE_MODELS, AdminResource, GenerationRequest
from .errors import ApiError, GenerationInProgressError
from .generation.orchestrator import GenerationOrchestrator, GenerationState
from .log_config import configure_logging
from .output.formatters import (
    format_json,
    print_instructor_view,
    print_own_schedule,
    print_timetable,
    resource_table,
    status_panel,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Create Typer app
app = typer.Typer(
    name="portal",
    help="University timetable portal: admin tools, schedules and timetable generation.",
    add_completion=False,
)

# Rich console for pretty output
console = Console()


# =============================================================================
# Helper Functions
# =============================================================================

def build_api_client(settings: PortalSettings) -> ApiClient:
    """Create the backend client used by every command."""
    return ApiClient.from_settings(settings)


def run_async(coro: Awaitable[T]) -> T:
    """Run a coroutine, turning backend errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except ApiError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(code=1)
    except httpx.HTTPError as e:
        console.print(f"[red]Backend unavailable:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except ValidationError as e:
        console.print(f"[red]Unexpected response from backend:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)


def load_payload(resource: AdminResource, path: Path) -> Any:
    """Load and validate a resource JSON file."""
    if not path.exists():
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(code=1)

    try:
        with open(path) as f:
            data = json.load(f)
        return RESOURCE_MODELS[resource].model_validate(data, context=INPUT_CONTEXT)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except ValidationError as e:
        console.print(f"[red]Invalid {resource.value[:-1]}:[/red]")
        for line in str(e).split("\n"):
            console.print(f"   {escape(line)}")
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
) -> None:
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)


# =============================================================================
# Commands: server
# =============================================================================

@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port", min=1, max=65535),
) -> None:
    """
    Run the proxy server in front of the backend.

    Example:
        python -m portal serve --port 8000
    """
    import uvicorn

    from .server.app import create_app

    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


# =============================================================================
# Commands: generation
# =============================================================================

@app.command()
def generate(
    no_wait: bool = typer.Option(
        False,
        "--no-wait",
        help="Return right after the job is started",
    ),
) -> None:
    """
    Start timetable generation and follow it until it finishes.

    Builds a new timetable from the current courses, instructors and
    constraints. The process may take several minutes.

    Example:
        python -m portal generate
    """
    settings = get_settings()
    console.print(
        f"\n[bold]Generating timetable for[/bold] {settings.semester} {settings.academic_year}"
    )

    try:
        state, last_generated_at, error_message = run_async(_generate(settings, wait=not no_wait))
    except GenerationInProgressError:
        console.print("[yellow]A timetable generation is already in progress.[/yellow]")
        raise typer.Exit(code=1)

    console.print(status_panel(state.value, last_generated_at, error_message))

    if state is GenerationState.COMPLETED:
        console.print("[green]Timetable generated successfully![/green]")
    elif state is GenerationState.FAILED:
        raise typer.Exit(code=1)
    elif no_wait:
        console.print("[green]Timetable generation started successfully![/green]")
    else:
        console.print("[yellow]Generation is still running.[/yellow] Check again with: portal status")


async def _generate(settings: PortalSettings, wait: bool) -> tuple[GenerationState, Any, Optional[str]]:
    async with build_api_client(settings) as client:
        orchestrator = GenerationOrchestrator(
            TimetableApi(client),
            request=GenerationRequest(semester=settings.semester, academic_year=settings.academic_year),
            poll_interval=settings.poll_interval_seconds,
            poll_timeout=settings.poll_timeout_seconds,
        )
        async with orchestrator:
            try:
                await orchestrator.refresh_status()
            except (ApiError, httpx.HTTPError, ValidationError) as e:
                logger.warning("Could not fetch current generation status: %s", e)

            await orchestrator.start()
            if wait and orchestrator.polling:
                with console.status("Generating timetable..."):
                    await orchestrator.wait()

        return orchestrator.current_state, orchestrator.last_generated_at, orchestrator.error_message


@app.command()
def status() -> None:
    """
    Show the current generation status reported by the backend.

    Example:
        python -m portal status
    """
    settings = get_settings()
    state, last_generated_at = run_async(_status(settings))
    console.print(status_panel(state.value, last_generated_at))


async def _status(settings: PortalSettings) -> tuple[GenerationState, Any]:
    async with build_api_client(settings) as client:
        orchestrator = GenerationOrchestrator(TimetableApi(client))
        await orchestrator.refresh_status()
        return orchestrator.current_state, orchestrator.last_generated_at


# =============================================================================
# Commands: viewers
# =============================================================================

@app.command()
def timetable(
    search: str = typer.Option(
        "",
        "--search", "-s",
        help="Only show courses whose name, code or instructor contains this text",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the raw timetable JSON",
    ),
) -> None:
    """
    Display the published timetable.

    Examples:
        python -m portal timetable
        python -m portal timetable --search smith
    """
    settings = get_settings()
    result = run_async(_fetch_timetable(settings))

    if result is None:
        console.print("[yellow]No timetable has been generated yet.[/yellow]")
        return

    if as_json:
        console.print_json(format_json(result.filter(search)))
        return

    console.print(f"[bold]{result.total_courses}[/bold] courses in {len(result.departments)} departments")
    print_timetable(result, console, search)


async def _fetch_timetable(settings: PortalSettings):
    async with build_api_client(settings) as client:
        return await TimetableApi(client).get_timetable()


@app.command()
def schedule(
    instructor_id: str = typer.Argument(..., help="Instructor ID (or user ID with --own)"),
    own: bool = typer.Option(
        False,
        "--own",
        help="Use the instructor self-service endpoint for this user ID",
    ),
) -> None:
    """
    Display an instructor's weekly schedule.

    Examples:
        python -m portal schedule 42
        python -m portal schedule 7 --own
    """
    settings = get_settings()
    result = run_async(_fetch_schedule(settings, instructor_id, own))

    if result is None:
        console.print(f"[yellow]No schedule found for instructor {escape(instructor_id)}.[/yellow]")
        raise typer.Exit(code=1)

    if own:
        print_own_schedule(result, console)
    else:
        print_instructor_view(result, console)


async def _fetch_schedule(settings: PortalSettings, instructor_id: str, own: bool):
    async with build_api_client(settings) as client:
        if own:
            return await InstructorApi(client).get_schedule(instructor_id)
        return await AdminApi(client).get_instructor_schedule(instructor_id)


# =============================================================================
# Commands: admin resources
# =============================================================================

@app.command("list")
def list_resources(
    resource: AdminResource = typer.Argument(..., help="Collection to list"),
) -> None:
    """
    List departments, courses, instructors or programs.

    Example:
        python -m portal list instructors
    """
    settings = get_settings()
    items = run_async(_admin_call(settings, resource, "list"))
    console.print(resource_table(resource, items))


@app.command()
def create(
    resource: AdminResource = typer.Argument(..., help="Collection to add to"),
    input_file: Path = typer.Argument(..., help="JSON file with the new item"),
) -> None:
    """
    Create an item from a JSON file.

    Example:
        python -m portal create courses course.json
    """
    item = load_payload(resource, input_file)
    settings = get_settings()
    created = run_async(_admin_call(settings, resource, "create", item))
    console.print(f"[green]Created {resource.value[:-1]}:[/green] {escape(str(created))}")
    console.print_json(format_json(created))


@app.command()
def update(
    resource: AdminResource = typer.Argument(..., help="Collection of the item"),
    item_id: str = typer.Argument(..., help="ID of the item to update"),
    input_file: Path = typer.Argument(..., help="JSON file with the new values"),
) -> None:
    """
    Replace an item with the contents of a JSON file.

    Example:
        python -m portal update programs 3 program.json
    """
    item = load_payload(resource, input_file)
    settings = get_settings()
    updated = run_async(_admin_call(settings, resource, "update", item_id, item))
    console.print(f"[green]Updated {resource.value[:-1]}:[/green] {escape(str(updated))}")


@app.command()
def delete(
    resource: AdminResource = typer.Argument(..., help="Collection of the item"),
    item_id: str = typer.Argument(..., help="ID of the item to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """
    Delete an item.

    Example:
        python -m portal delete departments 5 --yes
    """
    if not yes:
        typer.confirm(f"Delete {resource.value[:-1]} {item_id}?", abort=True)
    settings = get_settings()
    run_async(_admin_call(settings, resource, "delete", item_id))
    console.print(f"[green]Deleted {resource.value[:-1]} {item_id}[/green]")


async def _admin_call(settings: PortalSettings, resource: AdminResource, action: str, *args: Any):
    async with build_api_client(settings) as client:
        api = AdminApi(client).resource(resource)
        return await getattr(api, action)(*args)


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
