"""Interactive console chat loop."""

import asyncio
import logging
from typing import Callable

from agenda_server.container import Assistant

logger = logging.getLogger(__name__)

CONSOLE_SESSION_ID = "console"
EXIT_COMMANDS = frozenset({"exit", "quit"})


class ConsoleTransport:
    """Reads user lines from a terminal and prints the assistant's replies.

    The whole console run is a single session. The loop ends on "exit",
    "quit", an empty line or end of input.

    Attributes:
        assistant: Wired assistant components
        input_func: Blocking line reader, run in a worker thread
        output_func: Writes one reply
    """

    def __init__(
        self,
        assistant: Assistant,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self.assistant = assistant
        self.input_func = input_func
        self.output_func = output_func

    async def _read_line(self) -> str | None:
        try:
            return await asyncio.to_thread(self.input_func, "You: ")
        except EOFError:
            return None

    async def run(self) -> None:
        """Run the loop until the user leaves."""
        session = self.assistant.session_manager.get_or_create(CONSOLE_SESSION_ID)
        self.output_func("Agenda assistant ready. Type 'exit' to leave.")
        logger.info("Console transport started")

        while True:
            line = await self._read_line()
            if line is None:
                break
            text = line.strip()
            if not text or text.lower() in EXIT_COMMANDS:
                break

            result = await self.assistant.orchestrator.run_turn(session, text)
            self.output_func(f"Assistant: {result.reply}")

        self.output_func("Goodbye!")
        logger.info("Console transport stopped")
