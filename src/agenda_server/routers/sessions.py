"""Sessions router for inspecting conversations.

This module provides REST API endpoints for:
- Listing all sessions
- Getting session messages
"""

import logging
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from agenda_server.dependencies import get_session_manager
from agenda_server.models.sessions import (
    MessageResponse,
    MessagesResponse,
    SessionListItem,
    SessionListResponse,
)
from agenda_server.sessions import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.get(
    "",
    response_model=SessionListResponse,
    summary="List all sessions",
)
async def list_sessions(
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> SessionListResponse:
    """List all sessions, most recently updated first."""
    sessions = [
        SessionListItem(
            session_id=session.session_id,
            created_at=session.created_at,
            updated_at=session.updated_at,
            message_count=len(session),
            preview=session.get_preview(),
        )
        for session in session_manager.list_sessions()
    ]
    logger.debug(f"Listed {len(sessions)} sessions")
    return SessionListResponse(sessions=sessions)


@router.get(
    "/{session_id}/messages",
    response_model=MessagesResponse,
    summary="Get session messages",
)
async def get_messages(
    session_id: str,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> MessagesResponse:
    """Get the full message history of a session.

    Args:
        session_id: Session identifier
        session_manager: Injected SessionManager

    Returns:
        All messages in order, starting with the system instructions

    Raises:
        HTTPException: 404 if session not found
    """
    try:
        session = session_manager.get(session_id)
    except KeyError:
        logger.warning(f"Session {session_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error": {
                    "code": "session_not_found",
                    "message": f"Session {session_id} not found",
                    "details": {"session_id": session_id},
                }
            },
        )

    messages = []
    for msg in session.snapshot():
        msg_dict = asdict(msg)
        if "tool_calls" in msg_dict:
            msg_dict["tool_calls"] = list(msg_dict["tool_calls"]) or None
        messages.append(MessageResponse(**msg_dict))

    return MessagesResponse(session_id=session_id, messages=messages)
