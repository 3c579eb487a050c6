"""Type definitions for Ollama integration.

This module contains the ChatCompletion dataclass, the parsed form of one
non-streaming chat response, and the parser that builds it from the raw
response payload.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from agenda_server.errors import MalformedModelResponse
from agenda_server.tools.types import ToolInvocationRequest


@dataclass
class ChatCompletion:
    """A single model response: either final text or tool-invocation requests.

    Attributes:
        content: Text content (may accompany tool calls)
        tool_calls: Tool invocations requested by the model, in order
        model: Model that produced the response
        eval_count: Number of tokens generated
        prompt_eval_count: Number of tokens in the prompt
    """

    content: str
    tool_calls: list[ToolInvocationRequest] = field(default_factory=list)
    model: str = ""
    eval_count: int | None = None
    prompt_eval_count: int | None = None

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def raw_tool_calls(self) -> list[dict[str, Any]]:
        """Return the tool calls in Ollama's wire shape for the history."""
        return [
            {"function": {"name": call.name, "arguments": call.raw_arguments()}}
            for call in self.tool_calls
        ]

    @staticmethod
    def from_ollama_response(data: dict[str, Any]) -> "ChatCompletion":
        """Parse a chat response payload.

        Tool-call arguments are accepted either as objects or as JSON-encoded
        strings, since providers differ.

        Args:
            data: Response dict with a "message" entry

        Returns:
            ChatCompletion: Parsed response

        Raises:
            MalformedModelResponse: If the payload has no usable message, a
                tool call is missing its name or has undecodable arguments, or
                the response has neither text nor tool calls
        """
        message = data.get("message")
        if not isinstance(message, dict):
            raise MalformedModelResponse("Response has no message")

        content = message.get("content") or ""
        tool_calls: list[ToolInvocationRequest] = []

        for raw_call in message.get("tool_calls") or []:
            function = raw_call.get("function") if isinstance(raw_call, dict) else None
            if not isinstance(function, dict) or not function.get("name"):
                raise MalformedModelResponse(f"Tool call without a function name: {raw_call}")

            arguments = function.get("arguments") or {}
            if isinstance(arguments, str):
                try:
                    arguments = json.loads(arguments)
                except json.JSONDecodeError as e:
                    raise MalformedModelResponse(
                        f"Arguments for tool '{function['name']}' are not valid JSON"
                    ) from e
            if not isinstance(arguments, dict):
                raise MalformedModelResponse(
                    f"Arguments for tool '{function['name']}' are not an object"
                )

            tool_calls.append(ToolInvocationRequest.from_raw(function["name"], arguments))

        if not tool_calls and not content.strip():
            raise MalformedModelResponse("Response has neither content nor tool calls")

        return ChatCompletion(
            content=content,
            tool_calls=tool_calls,
            model=data.get("model") or "",
            eval_count=data.get("eval_count"),
            prompt_eval_count=data.get("prompt_eval_count"),
        )
