"""Composition root shared by every transport.

This module builds the long-lived objects once (completion client, calendar
backend, scheduling service, tool registry, session manager, orchestrator)
and hands them to the HTTP app, the console loop or the Telegram bot.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from agenda_server.config import AgendaServerSettings
from agenda_server.ollama import OllamaClient
from agenda_server.orchestrator import Orchestrator
from agenda_server.prompts import build_system_prompt, load_prompt_template
from agenda_server.scheduling import (
    CalendarBackend,
    GoogleCalendarBackend,
    InMemoryCalendarBackend,
    SchedulingService,
)
from agenda_server.sessions import SessionManager
from agenda_server.tools import CalendarTools, ToolRegistry, register_calendar_tools

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Assistant:
    """Everything a transport needs to run conversations."""

    settings: AgendaServerSettings
    ollama_client: OllamaClient
    backend: CalendarBackend
    scheduling: SchedulingService
    registry: ToolRegistry
    session_manager: SessionManager
    orchestrator: Orchestrator

    async def aclose(self) -> None:
        """Release the remote clients."""
        await self.ollama_client.close()
        await self.backend.close()
        logger.info("Assistant resources released")


def build_backend(settings: AgendaServerSettings) -> CalendarBackend:
    """Create the calendar backend selected by ``calendar_backend``.

    The Google backend authorizes lazily on its first request, so building it
    never blocks.
    """
    if settings.calendar_backend == "memory":
        logger.info("Using in-memory calendar backend")
        return InMemoryCalendarBackend()

    logger.info(f"Using Google Calendar backend for calendar {settings.calendar_id}")
    return GoogleCalendarBackend(
        calendar_id=settings.calendar_id,
        default_timezone=settings.default_timezone,
        token_file=settings.resolved_google_token_file,
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        client_secrets_file=settings.resolved_google_client_secrets_file,
        interactive=settings.google_interactive_auth,
        timeout_seconds=settings.calendar_timeout_seconds,
        auth_timeout_seconds=settings.auth_timeout_seconds,
    )


def build_assistant(
    settings: AgendaServerSettings,
    ollama_client: OllamaClient | None = None,
    backend: CalendarBackend | None = None,
    clock: Callable[[], datetime] = _utc_now,
) -> Assistant:
    """Wire up an Assistant from settings.

    Args:
        settings: Application settings
        ollama_client: Completion client to use instead of a new one
        backend: Calendar backend to use instead of the configured one
        clock: Returns the current aware instant (defaults to the wall clock)

    Returns:
        Assistant: The wired components, with a frozen tool registry

    Raises:
        DuplicateTool: If two tools share a name
        FileNotFoundError: If system_prompt_file is set but missing
    """
    if ollama_client is None:
        ollama_client = OllamaClient(
            host=settings.ollama_host,
            timeout_seconds=settings.request_timeout_seconds,
        )
    if backend is None:
        backend = build_backend(settings)

    scheduling = SchedulingService(backend, settings.default_timezone, clock=clock)

    registry = ToolRegistry()
    register_calendar_tools(
        registry,
        CalendarTools(
            scheduling,
            timezone=settings.default_timezone,
            event_duration=timedelta(minutes=settings.default_event_duration_minutes),
            upcoming_limit=settings.upcoming_events_limit,
        ),
    )
    registry.freeze()

    orchestrator = Orchestrator(
        client=ollama_client,
        registry=registry,
        model=settings.model,
        max_tool_iterations=settings.max_tool_iterations,
        max_history_messages=settings.max_history_messages or None,
    )
    template = load_prompt_template(settings)

    def system_prompt() -> str:
        return build_system_prompt(settings, now=clock(), template=template)

    logger.info(
        f"Assistant ready: model {settings.model}, {len(registry)} tools, "
        f"calendar backend {backend.name}"
    )

    return Assistant(
        settings=settings,
        ollama_client=ollama_client,
        backend=backend,
        scheduling=scheduling,
        registry=registry,
        session_manager=SessionManager(system_prompt),
        orchestrator=orchestrator,
    )
