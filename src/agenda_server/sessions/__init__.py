"""Conversation session management for agenda-server.

This package provides the append-only message history of each conversation
and the in-process registry of sessions.
"""

from agenda_server.sessions.manager import SessionManager
from agenda_server.sessions.session import ConversationSession
from agenda_server.sessions.types import (
    AssistantMessage,
    Message,
    SystemMessage,
    ToolMessage,
    UserMessage,
)

__all__ = [
    # Core classes
    "ConversationSession",
    "SessionManager",
    # Message types
    "Message",
    "UserMessage",
    "SystemMessage",
    "AssistantMessage",
    "ToolMessage",
]
