"""Process-local calendar backend.

Honors the same contract as the Google backend (half-open overlap, start
ordering, cancelled events excluded) without any network access. Used for
offline runs and tests.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

from agenda_server.scheduling.backend import CalendarBackend
from agenda_server.scheduling.types import CalendarEvent, as_utc

logger = logging.getLogger(__name__)


class InMemoryCalendarBackend(CalendarBackend):
    """Calendar backend keeping events in a dict keyed by event id."""

    name = "memory"

    def __init__(self, events: Iterable[CalendarEvent] = ()) -> None:
        self._events: dict[str, CalendarEvent] = {}
        for event in events:
            self._store(event)

    def _store(self, event: CalendarEvent) -> CalendarEvent:
        stored = replace(event, event_id=event.event_id or uuid.uuid4().hex[:10])
        self._events[stored.event_id] = stored
        return stored

    async def list_events(
        self,
        time_min: datetime,
        time_max: datetime | None = None,
        max_results: int | None = None,
    ) -> list[CalendarEvent]:
        matching = [
            event
            for event in self._events.values()
            if event.status != "cancelled"
            and as_utc(event.end) > as_utc(time_min)
            and (time_max is None or as_utc(event.start) < as_utc(time_max))
        ]
        matching.sort(key=lambda event: as_utc(event.start))
        if max_results is not None:
            matching = matching[:max_results]
        return matching

    async def insert_event(self, event: CalendarEvent) -> CalendarEvent:
        created = self._store(replace(event, event_id=None))
        logger.info(f"Stored event {created.event_id}: {created.summary}")
        return created

    def cancel_event(self, event_id: str) -> None:
        """Mark an event as cancelled, as the remote store does on deletion.

        Raises:
            KeyError: If the event does not exist
        """
        self._events[event_id] = replace(self._events[event_id], status="cancelled")
