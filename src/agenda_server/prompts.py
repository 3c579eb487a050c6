"""System instructions seeding each conversation."""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from agenda_server.config import AgendaServerSettings

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = """\
You are a smart agenda assistant that helps the user manage events in their calendar.
You can use these tools:
- list_upcoming_events: see the user's next events
- list_events_between: see the events between two dates
- create_event: check availability and create an event

Events you create last {duration} minutes.
To create an event you need its summary, its date (YYYY-MM-DD) and its start time (HH:MM).
Today is {today} and the user's timezone is {timezone}; resolve relative dates such as \
"tomorrow" against it.
If you need more information to use a tool, ask the user.
If a tool returns an error, explain it to the user and ask for what is missing.
Important: if the user's question is not about calendar events, answer it directly \
without using any calendar tool.
"""


def load_prompt_template(settings: AgendaServerSettings) -> str:
    """Load the system prompt template.

    Precedence: ``system_prompt`` setting, then ``system_prompt_file``, then
    the built-in prompt.

    Raises:
        FileNotFoundError: If system_prompt_file is set but missing
    """
    if settings.system_prompt:
        return settings.system_prompt
    if settings.resolved_system_prompt_file is not None:
        template = settings.resolved_system_prompt_file.read_text(encoding="utf-8")
        logger.info(f"Loaded system prompt from {settings.resolved_system_prompt_file}")
        return template
    return DEFAULT_SYSTEM_PROMPT


def build_system_prompt(
    settings: AgendaServerSettings,
    now: datetime | None = None,
    template: str | None = None,
) -> str:
    """Build the system instructions for a new session.

    Placeholders {today}, {timezone} and {duration} are filled in when
    present.

    Args:
        settings: Application settings
        now: Current instant (defaults to the wall clock)
        template: Prompt template (defaults to ``load_prompt_template``)

    Returns:
        The system prompt text

    Raises:
        FileNotFoundError: If system_prompt_file is set but missing
    """
    if template is None:
        template = load_prompt_template(settings)

    tz = ZoneInfo(settings.default_timezone)
    now = (now or datetime.now(tz)).astimezone(tz)
    values = {
        "today": f"{now:%A %Y-%m-%d}",
        "timezone": settings.default_timezone,
        "duration": settings.default_event_duration_minutes,
    }
    try:
        return template.format(**values)
    except (KeyError, IndexError, ValueError):
        # Custom prompts with unrelated braces are used verbatim
        return template
