"""Pytest configuration and shared fixtures for agenda-server tests.

This module provides common fixtures used across all test modules,
including test settings, a fake completion client and async client setup.
"""

from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from agenda_server import create_app
from agenda_server.config import AgendaServerSettings
from agenda_server.ollama import ChatCompletion
from agenda_server.tools import ToolInvocationRequest


def _text_reply(content: str) -> ChatCompletion:
    """Build a completion that ends the turn with text."""
    return ChatCompletion(content=content, model="test-model")


def _tool_reply(*calls: tuple[str, dict]) -> ChatCompletion:
    """Build a completion requesting the given (name, arguments) tool calls."""
    return ChatCompletion(
        content="",
        tool_calls=[ToolInvocationRequest.from_raw(name, args) for name, args in calls],
        model="test-model",
    )


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings with an in-memory calendar.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.

    Returns:
        AgendaServerSettings: Settings instance configured for testing.
    """
    return AgendaServerSettings(
        host="127.0.0.1",
        port=8000,
        ollama_host="http://localhost:11434",
        model="test-model",
        data_dir=str(tmp_path),
        calendar_backend="memory",
        default_timezone="UTC",
        system_prompt="You are a test agenda assistant.",
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def mock_ollama_client():
    """Replace the OllamaClient built by the assistant with an AsyncMock.

    Tests queue completions through ``mock_ollama_client.chat.side_effect``.
    """
    with patch("agenda_server.container.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True
        mock_instance.chat.return_value = _text_reply("Hello!")
        mock_client_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def test_app(test_settings, mock_ollama_client):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.
        mock_ollama_client: Fake completion client fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture
def text_reply():
    """Factory for completions that end the turn with text."""
    return _text_reply


@pytest.fixture
def tool_reply():
    """Factory for completions requesting (name, arguments) tool calls."""
    return _tool_reply
