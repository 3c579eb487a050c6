"""Chat API endpoint.

Each POST runs one full turn: the user message is appended, the model may
call calendar tools any number of times (bounded), and the final reply is
returned.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from agenda_server.dependencies import get_orchestrator, get_session_manager
from agenda_server.models.chat import ChatRequest, ChatResponse, ToolCallResponse
from agenda_server.orchestrator import Orchestrator
from agenda_server.sessions import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


@router.post("/{session_id}", response_model=ChatResponse)
async def chat(
    session_id: str,
    request_body: ChatRequest,
    orchestrator: Annotated[Orchestrator, Depends(get_orchestrator)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> ChatResponse:
    """Send a message and get the assistant's reply.

    The session is created on first use. Model and tool failures are
    reported in the reply text, not as HTTP errors.

    Args:
        session_id: Session identifier chosen by the caller
        request_body: Chat request containing the message
        orchestrator: Injected Orchestrator
        session_manager: Injected SessionManager

    Returns:
        ChatResponse with the final reply and the executed tools

    Raises:
        HTTPException: 500 if the turn fails unexpectedly
    """
    session = session_manager.get_or_create(session_id)

    try:
        result = await orchestrator.run_turn(session, request_body.message)
    except Exception as e:
        logger.error(f"Turn failed for session {session_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={
                "error": {
                    "code": "turn_failed",
                    "message": f"Failed to process message: {str(e)}",
                    "details": {"session_id": session_id},
                }
            },
        )

    return ChatResponse(
        session_id=session_id,
        message=result.reply,
        outcome=result.outcome.value,
        iterations=result.iterations,
        tool_calls_executed=[
            ToolCallResponse(
                name=record.name,
                arguments=record.arguments,
                result=record.result,
                error=record.error,
            )
            for record in result.tool_calls_executed
        ],
    )
