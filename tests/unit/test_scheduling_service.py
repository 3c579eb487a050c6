"""Unit tests for the SchedulingService over the in-memory backend."""

from datetime import datetime, timedelta, timezone

import pytest

from agenda_server.errors import InvalidEventData
from agenda_server.scheduling import (
    AvailabilityQuery,
    CalendarEvent,
    InMemoryCalendarBackend,
    SchedulingService,
)

UTC = timezone.utc
NOW = datetime(2025, 6, 2, 8, 0, tzinfo=UTC)


def event(summary, start_hour, end_hour, day=2, status="confirmed") -> CalendarEvent:
    return CalendarEvent(
        summary=summary,
        start=datetime(2025, 6, day, start_hour, 0, tzinfo=UTC),
        end=datetime(2025, 6, day, end_hour, 0, tzinfo=UTC),
        timezone="UTC",
        status=status,
    )


@pytest.fixture
def backend():
    return InMemoryCalendarBackend()


@pytest.fixture
def service(backend):
    return SchedulingService(backend, "UTC", clock=lambda: NOW)


def test_availability_query_is_half_open():
    query = AvailabilityQuery(
        start=datetime(2025, 6, 2, 10, tzinfo=UTC),
        end=datetime(2025, 6, 2, 11, tzinfo=UTC),
    )

    assert not query.overlaps(
        datetime(2025, 6, 2, 9, tzinfo=UTC), datetime(2025, 6, 2, 10, tzinfo=UTC)
    )
    assert not query.overlaps(
        datetime(2025, 6, 2, 11, tzinfo=UTC), datetime(2025, 6, 2, 12, tzinfo=UTC)
    )
    assert query.overlaps(
        datetime(2025, 6, 2, 10, 30, tzinfo=UTC), datetime(2025, 6, 2, 12, tzinfo=UTC)
    )


@pytest.mark.asyncio
async def test_touching_events_leave_slot_available(backend, service):
    await backend.insert_event(event("Before", 9, 10))
    await backend.insert_event(event("After", 11, 12))

    available = await service.check_availability(
        datetime(2025, 6, 2, 10, tzinfo=UTC), datetime(2025, 6, 2, 11, tzinfo=UTC)
    )

    assert available is True


@pytest.mark.asyncio
async def test_overlapping_event_blocks_slot(backend, service):
    await backend.insert_event(event("Meeting", 10, 11))

    available = await service.check_availability(
        datetime(2025, 6, 2, 10, 30, tzinfo=UTC), datetime(2025, 6, 2, 11, 30, tzinfo=UTC)
    )

    assert available is False


@pytest.mark.asyncio
async def test_cancelled_events_are_ignored(backend, service):
    created = await backend.insert_event(event("Gone", 10, 11))
    backend.cancel_event(created.event_id)

    assert await service.check_availability(
        datetime(2025, 6, 2, 10, tzinfo=UTC), datetime(2025, 6, 2, 11, tzinfo=UTC)
    )
    assert await service.list_upcoming(10) == []


@pytest.mark.asyncio
async def test_list_upcoming_is_ordered_and_limited(backend, service):
    await backend.insert_event(event("Third", 14, 15))
    await backend.insert_event(event("First", 9, 10))
    await backend.insert_event(event("Second", 11, 12))
    await backend.insert_event(event("Past", 6, 7))

    events = await service.list_upcoming(2)

    assert [e.summary for e in events] == ["First", "Second"]


@pytest.mark.asyncio
async def test_list_upcoming_includes_event_in_progress(backend, service):
    await backend.insert_event(event("Running", 7, 9))

    events = await service.list_upcoming(10)

    assert [e.summary for e in events] == ["Running"]


@pytest.mark.asyncio
async def test_list_upcoming_with_zero_limit(service):
    assert await service.list_upcoming(0) == []


@pytest.mark.asyncio
async def test_empty_range_returns_nothing(backend, service):
    await backend.insert_event(event("Meeting", 10, 11))
    instant = datetime(2025, 6, 2, 10, 30, tzinfo=UTC)

    assert await service.list_between(instant, instant) == []
    assert await service.list_between(instant, instant - timedelta(hours=1)) == []


@pytest.mark.asyncio
async def test_create_then_read(service):
    start = datetime(2025, 6, 3, 10, tzinfo=UTC)

    created = await service.create_event("  Dentist ", start, start + timedelta(hours=1))

    assert created.event_id
    assert created.summary == "Dentist"
    between = await service.list_between(start, start + timedelta(hours=1))
    assert [e.event_id for e in between] == [created.event_id]
    assert await service.check_availability(start, start + timedelta(hours=1)) is False


@pytest.mark.asyncio
async def test_create_rejects_blank_summary(service):
    start = datetime(2025, 6, 3, 10, tzinfo=UTC)

    with pytest.raises(InvalidEventData):
        await service.create_event("   ", start, start + timedelta(hours=1))


@pytest.mark.asyncio
async def test_create_rejects_inverted_range(service):
    start = datetime(2025, 6, 3, 10, tzinfo=UTC)

    with pytest.raises(InvalidEventData):
        await service.create_event("Dentist", start, start)


@pytest.mark.asyncio
async def test_create_rejects_unknown_timezone(service):
    start = datetime(2025, 6, 3, 10)

    with pytest.raises(InvalidEventData):
        await service.create_event(
            "Dentist", start, start + timedelta(hours=1), "Mars/Olympus"
        )


@pytest.mark.asyncio
async def test_naive_datetimes_use_default_timezone(backend):
    service = SchedulingService(backend, "Europe/Madrid", clock=lambda: NOW)
    start = datetime(2025, 6, 3, 10, 0)

    created = await service.create_event("Dentist", start, start + timedelta(hours=1))

    # Madrid is UTC+2 in June
    assert created.start.astimezone(UTC) == datetime(2025, 6, 3, 8, 0, tzinfo=UTC)
    assert created.timezone == "Europe/Madrid"


def test_google_event_conversion():
    data = {
        "id": "abc",
        "summary": "Standup",
        "status": "confirmed",
        "start": {"dateTime": "2025-06-02T10:00:00+02:00", "timeZone": "Europe/Madrid"},
        "end": {"dateTime": "2025-06-02T10:15:00+02:00", "timeZone": "Europe/Madrid"},
    }

    parsed = CalendarEvent.from_google_event(data, "UTC")

    assert parsed.event_id == "abc"
    assert parsed.timezone == "Europe/Madrid"
    assert parsed.format_when() == "2025-06-02 10:00"
    assert parsed.to_google_event()["start"]["timeZone"] == "Europe/Madrid"


def test_all_day_google_event():
    data = {"summary": "Holiday", "start": {"date": "2025-06-02"}, "end": {"date": "2025-06-03"}}

    parsed = CalendarEvent.from_google_event(data, "UTC")

    assert parsed.all_day is True
    assert parsed.end - parsed.start == timedelta(days=1)
    assert parsed.format_when() == "2025-06-02 (all day)"


@pytest.mark.asyncio
async def test_create_rejects_range_empty_in_real_time(backend):
    service = SchedulingService(backend, "Europe/Madrid", clock=lambda: NOW)
    # 02:30 does not exist on 2025-03-30 in Madrid; both ends are 01:30 UTC
    start = datetime(2025, 3, 30, 2, 30)
    end = datetime(2025, 3, 30, 3, 30)

    with pytest.raises(InvalidEventData):
        await service.create_event("Night", start, end)

    assert await service.list_between(start, end) == []
