"""Pytest configuration for integration tests.

Integration tests run the full app: real orchestrator, tool registry and
scheduling service over the in-memory calendar. Only the completion service
is faked.
"""

import pytest


@pytest.fixture(autouse=True)
def ollama(mock_ollama_client):
    """Patch the completion client for every integration test."""
    return mock_ollama_client


@pytest.fixture
def calendar(async_client, test_app):
    """The in-memory calendar backing the running app."""
    return test_app.state.assistant.backend
