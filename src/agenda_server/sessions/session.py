"""ConversationSession: append-only message history for one conversation.

This module provides the ConversationSession class which handles:
- Seeding the history with the system instructions
- Appending user, assistant and tool-result messages
- Immutable snapshots and bounded windows of the history
- Per-session mutual exclusion for turn processing
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from agenda_server.sessions.types import (
    AssistantMessage,
    Message,
    SystemMessage,
    ToolMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _new_message_id() -> str:
    return uuid.uuid4().hex[:10]


class ConversationSession:
    """Ordered, append-only history of a single conversation.

    The first message is always the system instructions. There is no way to
    delete, edit or reorder messages; the log lives as long as the process.

    Attributes:
        session_id: Stable external identifier (chat or user id)
        created_at: ISO 8601 creation timestamp
        lock: Held by the orchestrator around append + orchestrate so that
              turns of the same session never interleave
    """

    def __init__(self, session_id: str, system_prompt: str):
        """Initialize a ConversationSession.

        Args:
            session_id: Stable external identifier
            system_prompt: Instructions stored as the first message
        """
        self.session_id = session_id
        self.created_at = _now()
        self.updated_at = self.created_at
        self.lock = asyncio.Lock()
        self._messages: list[Message] = [
            SystemMessage(
                content=system_prompt,
                ordinal=0,
                message_id=_new_message_id(),
                timestamp=self.created_at,
            )
        ]

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def system_prompt(self) -> str:
        return self._messages[0].content

    def _append(self, message: Message) -> Message:
        self._messages.append(message)
        self.updated_at = message.timestamp
        return message

    def append_user(self, text: str) -> UserMessage:
        """Append a user message."""
        return self._append(
            UserMessage(
                content=text,
                ordinal=len(self._messages),
                message_id=_new_message_id(),
                timestamp=_now(),
            )
        )

    def append_assistant(
        self, content: str, tool_calls: list[dict[str, Any]] | None = None
    ) -> AssistantMessage:
        """Append a model response, with the tool calls it requested if any."""
        return self._append(
            AssistantMessage(
                content=content,
                ordinal=len(self._messages),
                message_id=_new_message_id(),
                timestamp=_now(),
                tool_calls=tuple(tool_calls or ()),
            )
        )

    def append_tool_result(
        self, tool_name: str, text: str, call_index: int = 0
    ) -> ToolMessage:
        """Append the result of one tool invocation."""
        return self._append(
            ToolMessage(
                tool_name=tool_name,
                content=text,
                call_index=call_index,
                ordinal=len(self._messages),
                message_id=_new_message_id(),
                timestamp=_now(),
            )
        )

    def snapshot(self) -> tuple[Message, ...]:
        """Return an immutable copy of the full history."""
        return tuple(self._messages)

    def window(self, max_messages: int | None) -> tuple[Message, ...]:
        """Return the system message plus the newest ``max_messages`` messages.

        Everything from the latest user message onward is always kept, even
        past ``max_messages``, so a turn with many tool calls still sends the
        question being answered. The window never starts with a tool result
        whose requesting assistant message was cut off. The stored history is
        not modified.

        Args:
            max_messages: Number of non-system messages to keep; None or 0
                          keeps everything
        """
        if not max_messages or len(self._messages) - 1 <= max_messages:
            return self.snapshot()

        start = len(self._messages) - max_messages
        for index in range(len(self._messages) - 1, 0, -1):
            if isinstance(self._messages[index], UserMessage):
                start = min(start, index)
                break

        recent = self._messages[start:]
        while recent and isinstance(recent[0], ToolMessage):
            recent = recent[1:]

        logger.debug(
            f"Windowed session {self.session_id}: {len(recent)} of "
            f"{len(self._messages) - 1} messages"
        )
        return (self._messages[0], *recent)

    def get_preview(self, max_length: int = 100) -> str:
        """Get a preview of the session (first user message).

        Args:
            max_length: Maximum length of the preview

        Returns:
            Preview string, truncated if necessary
        """
        for message in self._messages:
            if isinstance(message, UserMessage):
                content = message.content
                if len(content) > max_length:
                    return content[: max_length - 3] + "..."
                return content
        return ""
