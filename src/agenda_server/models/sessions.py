"""Pydantic models for the sessions API."""

from pydantic import BaseModel, Field


class SessionListItem(BaseModel):
    """Summary of one conversation."""

    session_id: str
    created_at: str
    updated_at: str
    message_count: int
    preview: str = Field("", description="Preview of first user message")


class SessionListResponse(BaseModel):
    """Response for GET /api/v1/sessions."""

    sessions: list[SessionListItem]


class MessageResponse(BaseModel):
    """One stored message."""

    role: str
    content: str
    ordinal: int
    message_id: str | None = None
    timestamp: str | None = None
    tool_calls: list[dict] | None = None
    tool_name: str | None = None
    call_index: int | None = None


class MessagesResponse(BaseModel):
    """Response for GET /api/v1/sessions/{session_id}/messages."""

    session_id: str
    messages: list[MessageResponse]
