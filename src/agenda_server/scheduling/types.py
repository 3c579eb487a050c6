"""Data types for calendar scheduling.

This module defines CalendarEvent and AvailabilityQuery together with the
conversions to and from the Google Calendar v3 event resource.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import Any
from zoneinfo import ZoneInfo


def as_utc(value: datetime) -> datetime:
    """Convert an aware datetime to UTC.

    Aware datetimes sharing a tzinfo compare by wall clock, which is wrong
    across DST transitions. Comparing their UTC forms compares instants.
    """
    return value.astimezone(dt_timezone.utc)


@dataclass(frozen=True)
class AvailabilityQuery:
    """A half-open time range: start inclusive, end exclusive."""

    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Check whether [start, end) intersects this range.

        Touching ranges do not overlap: an event ending exactly at ``self.start``
        or starting exactly at ``self.end`` is outside the range.
        """
        return as_utc(start) < as_utc(self.end) and as_utc(end) > as_utc(self.start)


@dataclass(frozen=True)
class CalendarEvent:
    """A calendar event.

    Attributes:
        summary: Event title
        start: Timezone-aware start instant
        end: Timezone-aware end instant
        timezone: IANA timezone name the event is expressed in
        event_id: Backend-assigned identifier, None until persisted
        status: Backend status ("confirmed", "tentative", "cancelled")
        all_day: True for date-only events
        html_link: Link to the event in the backend UI, if any
    """

    summary: str
    start: datetime
    end: datetime
    timezone: str
    event_id: str | None = None
    status: str = "confirmed"
    all_day: bool = False
    html_link: str | None = None

    @staticmethod
    def from_google_event(data: dict[str, Any], default_timezone: str) -> "CalendarEvent":
        """Create a CalendarEvent from a Google Calendar event resource.

        Args:
            data: Event resource as returned by events().list/insert
            default_timezone: Timezone used for date-only events without one

        Returns:
            CalendarEvent: Parsed event
        """
        start_data = data.get("start", {})
        end_data = data.get("end", {})
        timezone = start_data.get("timeZone") or default_timezone

        if "date" in start_data:
            tz = ZoneInfo(timezone)
            start = datetime.combine(date.fromisoformat(start_data["date"]), time(), tz)
            end_date = end_data.get("date")
            end = (
                datetime.combine(date.fromisoformat(end_date), time(), tz)
                if end_date
                else start + timedelta(days=1)
            )
            all_day = True
        else:
            start = datetime.fromisoformat(start_data["dateTime"].replace("Z", "+00:00"))
            end = datetime.fromisoformat(end_data["dateTime"].replace("Z", "+00:00"))
            all_day = False

        return CalendarEvent(
            summary=data.get("summary", "(no title)"),
            start=start,
            end=end,
            timezone=timezone,
            event_id=data.get("id"),
            status=data.get("status", "confirmed"),
            all_day=all_day,
            html_link=data.get("htmlLink"),
        )

    def to_google_event(self) -> dict[str, Any]:
        """Convert to a Google Calendar event resource for insertion."""
        return {
            "summary": self.summary,
            "start": {"dateTime": self.start.isoformat(), "timeZone": self.timezone},
            "end": {"dateTime": self.end.isoformat(), "timeZone": self.timezone},
        }

    def format_when(self) -> str:
        """Format the start for display, e.g. '2025-06-02 10:00'."""
        if self.all_day:
            return f"{self.start:%Y-%m-%d} (all day)"
        local = self.start.astimezone(ZoneInfo(self.timezone))
        return f"{local:%Y-%m-%d %H:%M}"
