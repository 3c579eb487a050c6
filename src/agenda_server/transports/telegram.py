"""Telegram bot transport using python-telegram-bot long polling.

Each Telegram chat is its own session ("telegram:<chat_id>"). Updates are
processed concurrently, so different chats never wait on each other; the
per-session lock keeps messages of one chat in order.
"""

import asyncio
import logging

from telegram import Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from agenda_server.container import Assistant

logger = logging.getLogger(__name__)

GREETING = (
    "Hi! I'm your agenda assistant. Ask me about your upcoming events, "
    "or tell me what to schedule."
)
# Telegram rejects messages longer than this
MAX_MESSAGE_LENGTH = 4096


def session_id_for_chat(chat_id: int) -> str:
    return f"telegram:{chat_id}"


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split a reply into chunks Telegram accepts, preferring line breaks."""
    chunks = []
    while len(text) > limit:
        cut = text.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(text[:cut])
        text = text[cut:].lstrip("\n")
    if text:
        chunks.append(text)
    return chunks


class TelegramTransport:
    """Bridges Telegram chats to the orchestrator.

    Attributes:
        assistant: Wired assistant components
        token: Bot token from BotFather
    """

    def __init__(self, assistant: Assistant, token: str) -> None:
        if not token:
            raise ValueError("A Telegram bot token is required")
        self.assistant = assistant
        self.token = token
        self.application: Application | None = None

    def build_application(self) -> Application:
        """Create the python-telegram-bot application with our handlers."""
        application = (
            ApplicationBuilder().token(self.token).concurrent_updates(True).build()
        )
        application.add_handler(CommandHandler("start", self.handle_start))
        application.add_handler(
            MessageHandler(filters.TEXT & ~filters.COMMAND, self.handle_text)
        )
        return application

    async def handle_start(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        if update.message is None:
            return
        await update.message.reply_text(GREETING)

    async def handle_text(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Run one turn for an incoming text message and send the reply."""
        message = update.message
        if message is None or not message.text or update.effective_chat is None:
            return

        session_id = session_id_for_chat(update.effective_chat.id)
        logger.debug(f"Telegram message for {session_id}")
        session = self.assistant.session_manager.get_or_create(session_id)
        result = await self.assistant.orchestrator.run_turn(session, message.text)

        for chunk in split_message(result.reply):
            await message.reply_text(chunk)

    async def run(self, stop_event: asyncio.Event) -> None:
        """Poll Telegram until stop_event is set.

        Args:
            stop_event: Set from outside (e.g. a signal handler) to stop polling
        """
        self.application = self.build_application()
        await self.application.initialize()
        await self.application.start()
        await self.application.updater.start_polling(allowed_updates=["message"])
        logger.info("Telegram transport started")

        try:
            await stop_event.wait()
        finally:
            await self.application.updater.stop()
            await self.application.stop()
            await self.application.shutdown()
            logger.info("Telegram transport stopped")
