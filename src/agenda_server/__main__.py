"""CLI entry point for agenda-server.

This module provides the command-line interface for starting the assistant.
It can be invoked as `agenda-server` (via the script entry point) or
`python -m agenda_server`.
"""

import argparse
import asyncio
import logging
import signal
import sys

import uvicorn

from agenda_server import __version__, create_app
from agenda_server.config import AgendaServerSettings
from agenda_server.container import build_assistant
from agenda_server.transports import ConsoleTransport, TelegramTransport

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agenda-server",
        description="Conversational calendar assistant driven by Ollama tool calling",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"agenda-server {__version__}",
    )

    parser.add_argument(
        "--mode",
        type=str,
        default=None,
        choices=["server", "console", "telegram"],
        help="Transport to run (default: server, can be set via AGENDA_MODE)",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via AGENDA_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via AGENDA_PORT)",
    )

    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via AGENDA_OLLAMA_HOST)",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model with tool-calling support (can be set via AGENDA_MODEL)",
    )

    parser.add_argument(
        "--calendar-backend",
        type=str,
        default=None,
        choices=["google", "memory"],
        help="Calendar store (default: google, can be set via AGENDA_CALENDAR_BACKEND)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Base directory for token and prompt files (default: ., can be set via AGENDA_DATA_DIR)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via AGENDA_LOG_LEVEL)",
    )

    return parser


async def run_console(settings: AgendaServerSettings) -> None:
    assistant = build_assistant(settings)
    try:
        await ConsoleTransport(assistant).run()
    finally:
        await assistant.aclose()


async def run_telegram(settings: AgendaServerSettings) -> None:
    """Run the Telegram bot until SIGINT or SIGTERM."""
    assistant = build_assistant(settings)
    transport = TelegramTransport(assistant, settings.telegram_bot_token or "")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C cancels the run
            pass

    try:
        await transport.run(stop_event)
    finally:
        await assistant.aclose()


def main() -> None:
    """Main entry point for the agenda-server CLI.

    Parses command-line arguments and starts the selected transport.
    """
    args = build_parser().parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    for name in (
        "mode",
        "host",
        "port",
        "ollama_host",
        "model",
        "calendar_backend",
        "data_dir",
        "log_level",
    ):
        value = getattr(args, name)
        if value is not None:
            settings_kwargs[name] = value

    settings = AgendaServerSettings(**settings_kwargs)

    if settings.mode == "server":
        uvicorn.run(
            create_app(settings=settings),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
        return

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if settings.mode == "telegram" and not settings.telegram_bot_token:
        logger.error("AGENDA_TELEGRAM_BOT_TOKEN must be set for telegram mode")
        sys.exit(1)

    runner = run_console if settings.mode == "console" else run_telegram
    try:
        asyncio.run(runner(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    sys.exit(main())
