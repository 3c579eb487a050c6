"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from agenda_server.models.chat import ChatRequest, ChatResponse, ToolCallResponse
from agenda_server.models.health import HealthResponse
from agenda_server.models.sessions import (
    MessageResponse,
    MessagesResponse,
    SessionListItem,
    SessionListResponse,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "HealthResponse",
    "MessageResponse",
    "MessagesResponse",
    "SessionListItem",
    "SessionListResponse",
    "ToolCallResponse",
]
