"""Tool-calling orchestration loop.

This module turns one user utterance into zero or more tool invocations and
exactly one final reply:

    AWAITING_MODEL --text--> DONE
    AWAITING_MODEL --tool calls--> EXECUTING_TOOLS --> AWAITING_MODEL

Tool failures become tool-result messages the model can react to. Completion
service failures end the turn with an apology. The number of tool phases per
turn is bounded.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from agenda_server.errors import (
    AgendaError,
    ArgumentValidationError,
    MalformedModelResponse,
    ModelUnavailable,
)
from agenda_server.ollama import OllamaClient
from agenda_server.sessions import ConversationSession, Message
from agenda_server.tools import ToolInvocationRequest, ToolRegistry

logger = logging.getLogger(__name__)

MODEL_FAILURE_REPLY = (
    "Sorry, I couldn't process your request right now. Please try again in a moment."
)
ITERATION_LIMIT_REPLY = "Sorry, I was unable to complete this request."


class TurnOutcome(str, Enum):
    """How a turn ended."""

    COMPLETED = "completed"
    MODEL_FAILURE = "model_failure"
    ITERATION_LIMIT = "iteration_limit"


@dataclass
class ToolCallRecord:
    """One executed tool invocation and its result text."""

    name: str
    arguments: dict[str, Any]
    result: str
    error: bool = False


@dataclass
class TurnResult:
    """Outcome of processing one user message.

    Attributes:
        reply: Final natural-language text for the user
        outcome: How the turn ended
        iterations: Number of completion requests made
        tool_calls_executed: Executed invocations, in order
    """

    reply: str
    outcome: TurnOutcome
    iterations: int = 0
    tool_calls_executed: list[ToolCallRecord] = field(default_factory=list)


def _convert_messages_to_ollama_format(messages: tuple[Message, ...]) -> list[dict]:
    """Convert session messages to Ollama API format.

    Args:
        messages: Session messages (system, user, assistant, tool)

    Returns:
        List of message dicts in Ollama format: [{"role": "...", "content": "..."}, ...]
    """
    ollama_messages = []

    for msg in messages:
        ollama_msg: dict[str, Any] = {
            "role": msg.role,
            "content": msg.content,
        }

        # Add tool_calls for assistant messages that have them
        if getattr(msg, "tool_calls", None):
            ollama_msg["tool_calls"] = list(msg.tool_calls)

        # Tool results name the tool they answer
        if msg.role == "tool":
            ollama_msg["tool_name"] = msg.tool_name

        ollama_messages.append(ollama_msg)

    return ollama_messages


def _describe_tool_error(error: Exception) -> str:
    """Phrase a tool failure as text the model can act on."""
    if isinstance(error, ArgumentValidationError):
        return (
            f"Error: the argument '{error.parameter}' is invalid: {error.reason}. "
            "Ask the user for a corrected value."
        )
    if isinstance(error, AgendaError):
        return f"Error: {error.message}"
    return "Error: the tool failed unexpectedly. Tell the user the action could not be completed."


class Orchestrator:
    """Drives completion requests, tool invocations and history updates.

    All collaborators are injected; the orchestrator holds no global state
    and is shared by every session.

    Attributes:
        client: Completion service client
        registry: Frozen tool registry
        model: Model name sent with each request
        max_tool_iterations: Maximum tool phases per turn
        max_history_messages: Size of the history window sent to the model
    """

    def __init__(
        self,
        client: OllamaClient,
        registry: ToolRegistry,
        model: str,
        max_tool_iterations: int = 5,
        max_history_messages: int | None = None,
    ) -> None:
        if max_tool_iterations < 1:
            raise ValueError("max_tool_iterations must be at least 1")
        self.client = client
        self.registry = registry
        self.model = model
        self.max_tool_iterations = max_tool_iterations
        self.max_history_messages = max_history_messages

    async def run_turn(self, session: ConversationSession, text: str) -> TurnResult:
        """Process one user message to completion.

        Holds the session lock for the whole turn, so concurrent messages for
        the same session are handled one after the other.

        Args:
            session: The conversation to extend
            text: Raw user text

        Returns:
            TurnResult with the final reply
        """
        async with session.lock:
            session.append_user(text)
            logger.info(f"Processing turn for session {session.session_id}")
            return await self._run(session)

    async def _run(self, session: ConversationSession) -> TurnResult:
        tools = self.registry.to_ollama_tools()
        executed: list[ToolCallRecord] = []
        tool_phases = 0
        iterations = 0

        while True:
            iterations += 1
            messages = _convert_messages_to_ollama_format(
                session.window(self.max_history_messages)
            )

            try:
                completion = await self.client.chat(
                    model=self.model, messages=messages, tools=tools
                )
            except (ModelUnavailable, MalformedModelResponse) as e:
                logger.error(
                    f"Completion failed for session {session.session_id}: {e.message}"
                )
                session.append_assistant(MODEL_FAILURE_REPLY)
                return TurnResult(
                    reply=MODEL_FAILURE_REPLY,
                    outcome=TurnOutcome.MODEL_FAILURE,
                    iterations=iterations,
                    tool_calls_executed=executed,
                )

            if not completion.has_tool_calls:
                session.append_assistant(completion.content)
                break

            logger.debug(
                f"Session {session.session_id}: executing "
                f"{len(completion.tool_calls)} tool call(s)"
            )
            session.append_assistant(completion.content, completion.raw_tool_calls())
            for call_index, request in enumerate(completion.tool_calls):
                record = await self._execute_tool(request)
                session.append_tool_result(request.name, record.result, call_index)
                executed.append(record)

            tool_phases += 1
            if tool_phases >= self.max_tool_iterations:
                logger.warning(
                    f"Session {session.session_id} hit the limit of "
                    f"{self.max_tool_iterations} tool iterations"
                )
                session.append_assistant(ITERATION_LIMIT_REPLY)
                return TurnResult(
                    reply=ITERATION_LIMIT_REPLY,
                    outcome=TurnOutcome.ITERATION_LIMIT,
                    iterations=iterations,
                    tool_calls_executed=executed,
                )

        logger.info(
            f"Turn completed for session {session.session_id} after {iterations} "
            f"completion(s) and {len(executed)} tool call(s)"
        )
        return TurnResult(
            reply=completion.content,
            outcome=TurnOutcome.COMPLETED,
            iterations=iterations,
            tool_calls_executed=executed,
        )

    async def _execute_tool(self, request: ToolInvocationRequest) -> ToolCallRecord:
        """Invoke one tool, converting any failure into result text."""
        arguments = request.raw_arguments()
        try:
            result = await self.registry.invoke(request.name, request.arguments)
            return ToolCallRecord(name=request.name, arguments=arguments, result=result)
        except AgendaError as e:
            logger.warning(f"Tool {request.name} failed: {e.message}")
            error = e
        except Exception as e:
            logger.exception(f"Tool {request.name} raised an unexpected error")
            error = e
        return ToolCallRecord(
            name=request.name,
            arguments=arguments,
            result=_describe_tool_error(error),
            error=True,
        )
