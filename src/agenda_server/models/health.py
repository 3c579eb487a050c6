"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of agenda-server.
        ollama_connected: Whether the Ollama server answered.
        ollama_host: The Ollama host URL.
        calendar_backend: Name of the configured calendar backend.
        calendar_connected: Whether the calendar backend is ready to serve requests.
        tools: Number of registered tools.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of agenda-server")
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is connected",
    )
    ollama_host: str | None = Field(
        default=None,
        description="Ollama host URL",
    )
    calendar_backend: str | None = Field(
        default=None,
        description="Configured calendar backend (google or memory)",
    )
    calendar_connected: bool | None = Field(
        default=None,
        description="Whether the calendar backend has an authorized connection",
    )
    tools: int = Field(default=0, description="Number of registered tools")
