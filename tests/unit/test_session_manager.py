"""Unit tests for the in-process SessionManager."""

import pytest

from agenda_server.sessions import SessionManager


@pytest.fixture
def manager():
    return SessionManager("System prompt")


def test_get_or_create_returns_same_session(manager):
    first = manager.get_or_create("alice")
    second = manager.get_or_create("alice")

    assert first is second
    assert "alice" in manager


def test_sessions_are_isolated(manager):
    alice = manager.get_or_create("alice")
    bob = manager.get_or_create("bob")

    alice.append_user("Hi from Alice")

    assert len(alice) == 2
    assert len(bob) == 1
    assert bob.system_prompt == "System prompt"


def test_get_unknown_session_raises(manager):
    with pytest.raises(KeyError):
        manager.get("nobody")


def test_list_sessions_most_recent_first(manager):
    old = manager.get_or_create("old")
    new = manager.get_or_create("new")
    new.append_user("hello")
    old.updated_at = "2000-01-01T00:00:00Z"

    sessions = manager.list_sessions()

    assert [s.session_id for s in sessions] == ["new", "old"]


def test_list_sessions_empty(manager):
    assert manager.list_sessions() == []


def test_prompt_factory_runs_for_each_new_session():
    prompts = iter(["Prompt one", "Prompt two"])
    manager = SessionManager(lambda: next(prompts))

    alice = manager.get_or_create("alice")
    manager.get_or_create("alice")
    bob = manager.get_or_create("bob")

    assert alice.system_prompt == "Prompt one"
    assert bob.system_prompt == "Prompt two"
