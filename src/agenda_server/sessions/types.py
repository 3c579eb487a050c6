"""Data types for conversation sessions.

Messages are frozen: once appended to a session they never change.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SystemMessage:
    """The system instructions seeding a session."""

    content: str
    ordinal: int = 0
    message_id: str = ""
    timestamp: str = ""
    role: str = field(default="system", init=False)


@dataclass(frozen=True)
class UserMessage:
    """A message from the user."""

    content: str
    ordinal: int = 0
    message_id: str = ""
    timestamp: str = ""
    role: str = field(default="user", init=False)


@dataclass(frozen=True)
class AssistantMessage:
    """A response from the model.

    ``tool_calls`` holds the tool invocations the model requested in this
    response, in Ollama's wire shape: {"function": {"name", "arguments"}}.
    """

    content: str
    ordinal: int = 0
    message_id: str = ""
    timestamp: str = ""
    tool_calls: tuple[dict[str, Any], ...] = ()
    role: str = field(default="assistant", init=False)


@dataclass(frozen=True)
class ToolMessage:
    """The result of one tool invocation.

    ``call_index`` is the position of the answered request within the
    preceding assistant message's ``tool_calls``.
    """

    tool_name: str
    content: str
    call_index: int = 0
    ordinal: int = 0
    message_id: str = ""
    timestamp: str = ""
    role: str = field(default="tool", init=False)


# Union type for all message types
Message = SystemMessage | UserMessage | AssistantMessage | ToolMessage
