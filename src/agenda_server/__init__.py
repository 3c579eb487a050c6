"""agenda-server: Conversational calendar assistant driven by Ollama tool calling.

This package provides an assistant that reads and creates Google Calendar
events from natural language, reachable over HTTP, an interactive console
or a Telegram bot.
"""

from agenda_server.app import create_app

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]
