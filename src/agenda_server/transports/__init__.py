"""Chat transports: interactive console and Telegram bot.

The HTTP transport lives in agenda_server.app.
"""

from agenda_server.transports.console import ConsoleTransport
from agenda_server.transports.telegram import TelegramTransport

__all__ = ["ConsoleTransport", "TelegramTransport"]
