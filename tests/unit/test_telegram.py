"""Unit tests for the Telegram transport handlers."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from agenda_server.container import build_assistant
from agenda_server.transports import TelegramTransport
from agenda_server.transports.telegram import GREETING, session_id_for_chat, split_message


def make_update(chat_id: int, text: str | None):
    update = MagicMock()
    update.effective_chat.id = chat_id
    update.message.text = text
    update.message.reply_text = AsyncMock()
    return update


@pytest.fixture
def assistant(test_settings, mock_ollama_client):
    return build_assistant(test_settings)


@pytest.fixture
def transport(assistant):
    return TelegramTransport(assistant, token="123:abc")


def test_requires_token(assistant):
    with pytest.raises(ValueError):
        TelegramTransport(assistant, token="")


def test_session_ids_are_per_chat():
    assert session_id_for_chat(42) == "telegram:42"
    assert session_id_for_chat(-100) == "telegram:-100"


def test_split_message():
    assert split_message("short") == ["short"]
    assert split_message("") == []
    chunks = split_message("a" * 5 + "\n" + "b" * 5, limit=8)
    assert chunks == ["aaaaa", "bbbbb"]
    assert split_message("c" * 10, limit=4) == ["cccc", "cccc", "cc"]


@pytest.mark.asyncio
async def test_start_sends_greeting(transport):
    update = make_update(1, "/start")

    await transport.handle_start(update, MagicMock())

    update.message.reply_text.assert_awaited_once_with(GREETING)


@pytest.mark.asyncio
async def test_text_runs_a_turn(transport, assistant, mock_ollama_client, text_reply):
    mock_ollama_client.chat.return_value = text_reply("You have no events.")
    update = make_update(42, "What's on my calendar?")

    await transport.handle_text(update, MagicMock())

    update.message.reply_text.assert_awaited_once_with("You have no events.")
    session = assistant.session_manager.get("telegram:42")
    assert session.snapshot()[1].content == "What's on my calendar?"


@pytest.mark.asyncio
async def test_empty_message_is_ignored(transport, mock_ollama_client):
    update = make_update(42, None)

    await transport.handle_text(update, MagicMock())

    mock_ollama_client.chat.assert_not_awaited()


def test_build_application_registers_handlers(transport):
    application = transport.build_application()

    assert len(application.handlers[0]) == 2


@pytest.mark.asyncio
async def test_run_stops_on_event(transport):
    application = MagicMock()
    application.initialize = AsyncMock()
    application.start = AsyncMock()
    application.stop = AsyncMock()
    application.shutdown = AsyncMock()
    application.updater.start_polling = AsyncMock()
    application.updater.stop = AsyncMock()
    stop_event = asyncio.Event()
    stop_event.set()

    with patch.object(transport, "build_application", return_value=application):
        await transport.run(stop_event)

    application.updater.start_polling.assert_awaited_once()
    application.updater.stop.assert_awaited_once()
    application.shutdown.assert_awaited_once()
