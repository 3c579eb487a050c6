"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject the settings and the shared assistant components.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from agenda_server.config import AgendaServerSettings
from agenda_server.container import Assistant
from agenda_server.orchestrator import Orchestrator
from agenda_server.sessions import SessionManager


@lru_cache
def get_settings() -> AgendaServerSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the AGENDA_ prefix.

    Returns:
        AgendaServerSettings: The application configuration settings.
    """
    return AgendaServerSettings()


def get_assistant(request: Request) -> Assistant:
    """Get the assistant built during application startup.

    Args:
        request: The FastAPI request object.

    Returns:
        Assistant: The shared assistant components.

    Raises:
        HTTPException: If the assistant is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "assistant"):
        raise HTTPException(
            status_code=503,
            detail="Assistant not initialized",
        )
    return request.app.state.assistant


def get_orchestrator(request: Request) -> Orchestrator:
    return get_assistant(request).orchestrator


def get_session_manager(request: Request) -> SessionManager:
    return get_assistant(request).session_manager
