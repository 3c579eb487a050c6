"""Calendar scheduling layer.

This package provides the SchedulingService and the calendar backends it
runs on (Google Calendar and an in-memory store).
"""

from agenda_server.scheduling.backend import CalendarBackend, GoogleCalendarBackend
from agenda_server.scheduling.memory import InMemoryCalendarBackend
from agenda_server.scheduling.service import SchedulingService
from agenda_server.scheduling.types import AvailabilityQuery, CalendarEvent

__all__ = [
    "AvailabilityQuery",
    "CalendarBackend",
    "CalendarEvent",
    "GoogleCalendarBackend",
    "InMemoryCalendarBackend",
    "SchedulingService",
]
