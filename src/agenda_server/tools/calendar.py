"""Calendar tools exposed to the model.

Three tools are bound to a SchedulingService:
- list_upcoming_events: the next few events
- list_events_between: events between two calendar dates (both inclusive)
- create_event: availability check followed by insertion
"""

import logging
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo

from agenda_server.errors import ArgumentValidationError
from agenda_server.scheduling import CalendarEvent, SchedulingService
from agenda_server.tools.registry import ToolRegistry
from agenda_server.tools.types import ParameterType, ToolDescriptor, ToolParameter

logger = logging.getLogger(__name__)


def format_events(events: list[CalendarEvent]) -> str:
    """Render events as one bullet line each: '- Summary (2025-06-02 10:00)'."""
    return "\n".join(f"- {event.summary} ({event.format_when()})" for event in events)


def _exists_locally(value: datetime) -> bool:
    """Return False for wall-clock times skipped by a DST transition."""
    round_trip = value.astimezone(dt_timezone.utc).astimezone(value.tzinfo)
    return round_trip.replace(tzinfo=None) == value.replace(tzinfo=None)


class CalendarTools:
    """Tool handlers bound to a scheduling service.

    Attributes:
        service: The scheduling service the handlers call
        timezone: IANA timezone that dates and times from the model are in
        event_duration: Length of events created by create_event
        upcoming_limit: How many events list_upcoming_events returns
    """

    def __init__(
        self,
        service: SchedulingService,
        timezone: str,
        event_duration: timedelta = timedelta(hours=1),
        upcoming_limit: int = 10,
    ) -> None:
        self.service = service
        self.timezone = timezone
        self.event_duration = event_duration
        self.upcoming_limit = upcoming_limit
        self._tz = ZoneInfo(timezone)

    async def list_upcoming_events(self) -> str:
        events = await self.service.list_upcoming(self.upcoming_limit)
        if not events:
            return "There are no upcoming events."
        return "Upcoming events:\n" + format_events(events)

    async def list_events_between(self, start_date: date, end_date: date) -> str:
        if end_date < start_date:
            raise ArgumentValidationError("end_date", "must not be before start_date")

        # The end date is inclusive, so the range runs to the following midnight
        start = datetime.combine(start_date, time(), self._tz)
        end = datetime.combine(end_date + timedelta(days=1), time(), self._tz)
        events = await self.service.list_between(start, end)

        if not events:
            return f"No events found between {start_date} and {end_date}."
        return f"Events between {start_date} and {end_date}:\n" + format_events(events)

    async def create_event(self, summary: str, date: date, start_time: time) -> str:
        """Create a fixed-length event if the slot is free.

        Returns a conflict message instead of creating anything when the slot
        overlaps an existing event.
        """
        start = datetime.combine(date, start_time, self._tz)
        if not _exists_locally(start):
            raise ArgumentValidationError(
                "start_time",
                f"{start_time:%H:%M} does not exist on {date} in {self.timezone} "
                "because the clocks move forward",
            )
        # Elapsed time, not wall-clock time
        end = (start.astimezone(dt_timezone.utc) + self.event_duration).astimezone(self._tz)
        when = f"{start:%Y-%m-%d %H:%M}"

        if not await self.service.check_availability(start, end):
            logger.info(f"Not creating '{summary}': slot {when} is taken")
            return (
                f"Schedule conflict: there is already an event at {when}. "
                f"The event '{summary}' was not created."
            )

        created = await self.service.create_event(summary, start, end, self.timezone)
        return f"Event '{created.summary}' created successfully for {when}."

    def descriptors(self) -> list[ToolDescriptor]:
        """Describe the calendar tools for registration."""
        return [
            ToolDescriptor(
                name="list_upcoming_events",
                description="Get a list of the user's upcoming calendar events.",
                parameters=(),
                handler=self.list_upcoming_events,
            ),
            ToolDescriptor(
                name="list_events_between",
                description="Get the calendar events between two dates, both inclusive.",
                parameters=(
                    ToolParameter(
                        name="start_date",
                        type=ParameterType.DATE,
                        description="First day to search, in YYYY-MM-DD format.",
                    ),
                    ToolParameter(
                        name="end_date",
                        type=ParameterType.DATE,
                        description="Last day to search, in YYYY-MM-DD format.",
                    ),
                ),
                handler=self.list_events_between,
            ),
            ToolDescriptor(
                name="create_event",
                description=(
                    "Check availability and create a calendar event lasting "
                    f"{int(self.event_duration.total_seconds() // 60)} minutes."
                ),
                parameters=(
                    ToolParameter(
                        name="summary",
                        type=ParameterType.STRING,
                        description='Title of the event (e.g. "Meeting", "Dentist").',
                    ),
                    ToolParameter(
                        name="date",
                        type=ParameterType.DATE,
                        description="Date of the event in YYYY-MM-DD format.",
                    ),
                    ToolParameter(
                        name="start_time",
                        type=ParameterType.TIME,
                        description="Start time of the event in HH:MM format.",
                    ),
                ),
                handler=self.create_event,
            ),
        ]


def register_calendar_tools(registry: ToolRegistry, tools: CalendarTools) -> None:
    """Register all calendar tools.

    Raises:
        DuplicateTool: If any of the names is already taken
    """
    for descriptor in tools.descriptors():
        registry.register(descriptor)
