"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from agenda_server.container import Assistant
from agenda_server.models.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the current health status and version of the agenda-server.
    Also checks connectivity to Ollama and the calendar backend if the
    assistant is initialized.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and version information.
    """
    if not hasattr(request.app.state, "assistant"):
        return HealthResponse(status="ok", version="0.1.0")

    assistant: Assistant = request.app.state.assistant

    try:
        ollama_connected = await assistant.ollama_client.check_connection()
        logger.debug(f"Ollama connectivity check: {ollama_connected}")
    except Exception as e:
        logger.warning(f"Ollama connectivity check failed: {e}")
        ollama_connected = False

    return HealthResponse(
        status="ok",
        version="0.1.0",
        ollama_connected=ollama_connected,
        ollama_host=assistant.ollama_client.host,
        calendar_backend=assistant.backend.name,
        calendar_connected=await assistant.backend.check_connection(),
        tools=len(assistant.registry),
    )
