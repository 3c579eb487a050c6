"""SessionManager for the in-process conversation registry.

Sessions are created on first interaction with an identifier and live for the
lifetime of the process; nothing is persisted.
"""

import logging
from collections.abc import Callable

from agenda_server.sessions.session import ConversationSession

logger = logging.getLogger(__name__)


class SessionManager:
    """Keeps one ConversationSession per session identifier."""

    def __init__(self, system_prompt: str | Callable[[], str]):
        """Initialize the SessionManager.

        Args:
            system_prompt: Instructions seeding every new session, or a
                           callable rendering them when a session is created
        """
        self._system_prompt = system_prompt
        self._sessions: dict[str, ConversationSession] = {}

    def _render_system_prompt(self) -> str:
        if callable(self._system_prompt):
            return self._system_prompt()
        return self._system_prompt

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def get_or_create(self, session_id: str) -> ConversationSession:
        """Get the session for an identifier, creating it on first use.

        New sessions are seeded with freshly rendered instructions, so dates
        in the prompt refer to the day the session starts. There is no await
        between the lookup and the insert, so concurrent callers on the event
        loop always get the same session object.
        """
        session = self._sessions.get(session_id)
        if session is None:
            session = ConversationSession(session_id, self._render_system_prompt())
            self._sessions[session_id] = session
            logger.info(f"Created new session {session_id}")
        return session

    def get(self, session_id: str) -> ConversationSession:
        """Get an existing session.

        Raises:
            KeyError: If the session doesn't exist
        """
        return self._sessions[session_id]

    def list_sessions(self) -> list[ConversationSession]:
        """List all sessions, most recently updated first."""
        return sorted(
            self._sessions.values(), key=lambda s: s.updated_at, reverse=True
        )
