"""Ollama client wrapper and integration layer.

This package provides the async client used as the completion service and
the parsed response type it returns.
"""

from agenda_server.ollama.client import OllamaClient
from agenda_server.ollama.types import ChatCompletion

__all__ = ["ChatCompletion", "OllamaClient"]
