"""SchedulingService: domain-level calendar operations.

The service exposes read, availability and insert primitives over a
CalendarBackend. Availability checking and event creation are separate on
purpose; the conflict-avoidance policy lives in the caller that composes
``check_availability`` and ``create_event``. The composition is not atomic:
the backend offers no compare-and-swap for insertion, so two concurrent
check-then-create sequences for the same slot can both succeed.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone as dt_timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from agenda_server.errors import InvalidEventData
from agenda_server.scheduling.backend import CalendarBackend
from agenda_server.scheduling.types import AvailabilityQuery, CalendarEvent, as_utc

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(dt_timezone.utc)


class SchedulingService:
    """Translates scheduling intents into calendar backend operations.

    Attributes:
        backend: The calendar backend
        default_timezone: IANA name used for naive datetimes
    """

    def __init__(
        self,
        backend: CalendarBackend,
        default_timezone: str,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the SchedulingService.

        Args:
            backend: Calendar backend to read from and write to
            default_timezone: IANA timezone applied to naive datetimes
            clock: Returns the current timezone-aware instant
        """
        self.backend = backend
        self.default_timezone = default_timezone
        self._tz = ZoneInfo(default_timezone)
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def _aware(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self._tz)
        return value

    async def list_upcoming(self, limit: int) -> list[CalendarEvent]:
        """List up to ``limit`` events that have not ended yet, soonest first.

        Raises:
            BackendUnavailable: If the backend cannot be reached
            AuthRequired: If no valid credential can be obtained
        """
        if limit <= 0:
            return []
        events = await self.backend.list_events(time_min=self.now(), max_results=limit)
        logger.debug(f"Found {len(events)} upcoming events")
        return events

    async def list_between(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """List all events overlapping the half-open range [start, end).

        Raises:
            BackendUnavailable: If the backend cannot be reached
            AuthRequired: If no valid credential can be obtained
        """
        query = AvailabilityQuery(start=self._aware(start), end=self._aware(end))
        if as_utc(query.end) <= as_utc(query.start):
            return []
        return await self.backend.list_events(time_min=query.start, time_max=query.end)

    async def check_availability(self, start: datetime, end: datetime) -> bool:
        """Return True iff no event overlaps [start, end).

        This is a read, not a reservation.
        """
        events = await self.list_between(start, end)
        if events:
            logger.info(f"Slot {start} - {end} conflicts with {len(events)} event(s)")
        return not events

    async def create_event(
        self,
        summary: str,
        start: datetime,
        end: datetime,
        timezone: str | None = None,
    ) -> CalendarEvent:
        """Insert a new event without re-checking availability.

        Args:
            summary: Event title, must not be blank
            start: Start instant
            end: End instant, must be after start
            timezone: IANA timezone name (defaults to the service timezone)

        Returns:
            The created event, including its backend-assigned id

        Raises:
            InvalidEventData: If the summary is blank, end <= start or the
                timezone is unknown
            BackendUnavailable: If the backend cannot be reached
            AuthRequired: If no valid credential can be obtained
        """
        if not summary or not summary.strip():
            raise InvalidEventData("Event summary must not be empty")

        timezone = timezone or self.default_timezone
        try:
            tz = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise InvalidEventData(f"Unknown timezone '{timezone}'") from e

        if start.tzinfo is None:
            start = start.replace(tzinfo=tz)
        if end.tzinfo is None:
            end = end.replace(tzinfo=tz)
        if as_utc(end) <= as_utc(start):
            raise InvalidEventData(
                "Event end must be after its start",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )

        event = CalendarEvent(
            summary=summary.strip(), start=start, end=end, timezone=timezone
        )
        return await self.backend.insert_event(event)
