"""Unit tests for the interactive console transport."""

from unittest.mock import MagicMock

import pytest

from agenda_server.container import build_assistant
from agenda_server.transports import ConsoleTransport
from agenda_server.transports.console import CONSOLE_SESSION_ID


def scripted_input(*lines):
    """Return an input() replacement that replays lines, then hits EOF."""
    remaining = list(lines)

    def fake_input(prompt: str) -> str:
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return fake_input


@pytest.fixture
def assistant(test_settings, mock_ollama_client):
    return build_assistant(test_settings)


@pytest.mark.asyncio
async def test_replies_until_exit(assistant, mock_ollama_client, text_reply):
    mock_ollama_client.chat.side_effect = [text_reply("First answer"), text_reply("Second")]
    output = MagicMock()
    transport = ConsoleTransport(
        assistant, input_func=scripted_input("hello", "again", "exit", "ignored"), output_func=output
    )

    await transport.run()

    printed = [call.args[0] for call in output.call_args_list]
    assert "Assistant: First answer" in printed
    assert "Assistant: Second" in printed
    assert printed[-1] == "Goodbye!"
    assert mock_ollama_client.chat.await_count == 2
    session = assistant.session_manager.get(CONSOLE_SESSION_ID)
    assert [m.content for m in session.snapshot() if m.role == "user"] == ["hello", "again"]


@pytest.mark.asyncio
@pytest.mark.parametrize("lines", [("quit",), ("",), ()])
async def test_stops_on_quit_empty_line_or_eof(assistant, mock_ollama_client, lines):
    output = MagicMock()
    transport = ConsoleTransport(assistant, input_func=scripted_input(*lines), output_func=output)

    await transport.run()

    mock_ollama_client.chat.assert_not_awaited()
    assert output.call_args_list[-1].args[0] == "Goodbye!"
