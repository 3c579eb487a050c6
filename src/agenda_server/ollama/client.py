"""Async Ollama client wrapper.

This module provides an async wrapper around the ollama.AsyncClient used as
the completion service. The client is created once at startup and reused by
every session.
"""

import asyncio
import logging
from typing import Any

import httpx
import ollama

from agenda_server.errors import ModelUnavailable
from agenda_server.ollama.types import ChatCompletion

logger = logging.getLogger(__name__)


class OllamaClient:
    """Async client for the Ollama chat API with function calling.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        timeout_seconds: Upper bound for a single chat request
        _client: The underlying ollama.AsyncClient instance
    """

    def __init__(self, host: str, timeout_seconds: float = 120.0) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
            timeout_seconds: Upper bound for a single chat request
        """
        self.host = host
        self.timeout_seconds = timeout_seconds
        self._client = ollama.AsyncClient(host=host)
        logger.info(f"OllamaClient initialized with host: {host}")

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            # Try to list models as a connectivity check
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        options: dict[str, Any] | None = None,
    ) -> ChatCompletion:
        """Request one chat completion.

        Args:
            model: The model name to use for the chat
            messages: List of message dicts in Ollama format:
                      [{"role": "user", "content": "..."}, ...]
            tools: Function schemas the model may call
            options: Optional model parameters (temperature, etc.)

        Returns:
            ChatCompletion: The parsed response

        Raises:
            ModelUnavailable: If the request fails or times out
            MalformedModelResponse: If the response cannot be used
        """
        logger.debug(
            f"Chat request with model {model}: {len(messages)} messages, "
            f"{len(tools or [])} tools"
        )

        try:
            response = await asyncio.wait_for(
                self._client.chat(
                    model=model,
                    messages=messages,
                    tools=tools or None,
                    stream=False,
                    options=options,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Chat request timed out after {self.timeout_seconds}s")
            raise ModelUnavailable(
                f"Model did not answer within {self.timeout_seconds}s"
            ) from e
        except ollama.ResponseError as e:
            logger.error(f"Ollama API error: {e.status_code} {e.error}")
            raise ModelUnavailable(
                f"Ollama returned an error: {e.error}",
                details={"status_code": e.status_code},
            ) from e
        except (ollama.RequestError, httpx.HTTPError, ConnectionError) as e:
            logger.error(f"Chat request failed: {e}")
            raise ModelUnavailable(f"Failed to reach Ollama: {e}") from e

        # Convert the response to a dict if it's not already
        if hasattr(response, "model_dump"):
            response_dict = response.model_dump()
        elif isinstance(response, dict):
            response_dict = response
        else:
            response_dict = vars(response)

        completion = ChatCompletion.from_ollama_response(response_dict)
        logger.debug(
            f"Chat response: {len(completion.content)} chars, "
            f"{len(completion.tool_calls)} tool calls"
        )
        return completion

    async def close(self) -> None:
        """Close the client and clean up resources.

        ollama.AsyncClient uses httpx internally which handles cleanup.
        """
        logger.debug("OllamaClient closed")
