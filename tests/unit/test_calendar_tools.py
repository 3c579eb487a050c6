"""Unit tests for the calendar tools exposed to the model."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from agenda_server.errors import ArgumentValidationError, DuplicateTool
from agenda_server.scheduling import CalendarEvent, InMemoryCalendarBackend, SchedulingService
from agenda_server.tools import ArgumentValue, CalendarTools, ToolRegistry, register_calendar_tools

UTC = timezone.utc
NOW = datetime(2025, 6, 2, 8, 0, tzinfo=UTC)


@pytest.fixture
def backend():
    return InMemoryCalendarBackend()


@pytest.fixture
def tools(backend):
    service = SchedulingService(backend, "UTC", clock=lambda: NOW)
    return CalendarTools(service, timezone="UTC")


@pytest.fixture
def registry(tools):
    registry = ToolRegistry()
    register_calendar_tools(registry, tools)
    return registry


async def add(backend, summary, start, hours=1):
    await backend.insert_event(
        CalendarEvent(summary=summary, start=start, end=start + timedelta(hours=hours), timezone="UTC")
    )


def test_registers_three_tools(registry):
    names = [d.name for d in registry.describe_all()]

    assert names == ["list_upcoming_events", "list_events_between", "create_event"]


def test_registering_twice_fails(registry, tools):
    with pytest.raises(DuplicateTool):
        register_calendar_tools(registry, tools)


@pytest.mark.asyncio
async def test_list_upcoming_empty(tools):
    assert await tools.list_upcoming_events() == "There are no upcoming events."


@pytest.mark.asyncio
async def test_list_upcoming_formats_events(backend, tools):
    await add(backend, "Dentist", datetime(2025, 6, 3, 10, 0, tzinfo=UTC))

    result = await tools.list_upcoming_events()

    assert result == "Upcoming events:\n- Dentist (2025-06-03 10:00)"


@pytest.mark.asyncio
async def test_list_between_includes_end_date(backend, tools):
    await add(backend, "Late", datetime(2025, 6, 4, 22, 0, tzinfo=UTC))
    await add(backend, "Next day", datetime(2025, 6, 5, 0, 0, tzinfo=UTC))

    result = await tools.list_events_between(date(2025, 6, 3), date(2025, 6, 4))

    assert "Late" in result
    assert "Next day" not in result


@pytest.mark.asyncio
async def test_list_between_empty(tools):
    result = await tools.list_events_between(date(2025, 6, 3), date(2025, 6, 4))

    assert result == "No events found between 2025-06-03 and 2025-06-04."


@pytest.mark.asyncio
async def test_list_between_rejects_inverted_dates(tools):
    with pytest.raises(ArgumentValidationError) as exc_info:
        await tools.list_events_between(date(2025, 6, 4), date(2025, 6, 3))

    assert exc_info.value.parameter == "end_date"


@pytest.mark.asyncio
async def test_create_event_in_free_slot(backend, tools):
    result = await tools.create_event("Dentist", date(2025, 6, 3), time(10, 0))

    assert result == "Event 'Dentist' created successfully for 2025-06-03 10:00."
    events = await backend.list_events(time_min=NOW)
    assert len(events) == 1
    assert events[0].end - events[0].start == timedelta(hours=1)


@pytest.mark.asyncio
async def test_create_event_conflict_creates_nothing(backend, tools):
    await add(backend, "Meeting", datetime(2025, 6, 3, 10, 30, tzinfo=UTC))

    result = await tools.create_event("Dentist", date(2025, 6, 3), time(10, 0))

    assert result.startswith("Schedule conflict")
    assert "'Dentist' was not created" in result
    assert len(await backend.list_events(time_min=NOW)) == 1


@pytest.mark.asyncio
async def test_create_event_right_after_existing_one(backend, tools):
    await add(backend, "Meeting", datetime(2025, 6, 3, 9, 0, tzinfo=UTC))

    result = await tools.create_event("Dentist", date(2025, 6, 3), time(10, 0))

    assert "created successfully" in result


@pytest.mark.asyncio
async def test_invoke_through_registry_with_bad_date(registry):
    with pytest.raises(ArgumentValidationError) as exc_info:
        await registry.invoke(
            "create_event",
            {
                "summary": ArgumentValue.from_json("Dentist"),
                "date": ArgumentValue.from_json("tomorrow"),
                "start_time": ArgumentValue.from_json("10:00"),
            },
        )

    assert exc_info.value.parameter == "date"


@pytest.mark.asyncio
async def test_custom_duration(backend):
    service = SchedulingService(backend, "UTC", clock=lambda: NOW)
    tools = CalendarTools(service, timezone="UTC", event_duration=timedelta(minutes=30))

    await tools.create_event("Call", date(2025, 6, 3), time(10, 0))

    events = await backend.list_events(time_min=NOW)
    assert events[0].end - events[0].start == timedelta(minutes=30)
    assert "30 minutes" in tools.descriptors()[2].description


@pytest.fixture
def madrid_tools(backend):
    service = SchedulingService(backend, "Europe/Madrid", clock=lambda: NOW)
    return CalendarTools(service, timezone="Europe/Madrid")


@pytest.mark.asyncio
async def test_create_event_in_skipped_hour_is_rejected(backend, madrid_tools):
    # Madrid clocks jump from 02:00 to 03:00 on 2025-03-30
    with pytest.raises(ArgumentValidationError) as exc_info:
        await madrid_tools.create_event("Night", date(2025, 3, 30), time(2, 30))

    assert exc_info.value.parameter == "start_time"
    assert await backend.list_events(time_min=datetime(2025, 3, 29, tzinfo=UTC)) == []


@pytest.mark.asyncio
async def test_create_event_across_dst_change_lasts_one_hour(backend, madrid_tools):
    result = await madrid_tools.create_event("Late", date(2025, 3, 30), time(1, 30))

    assert "created successfully for 2025-03-30 01:30" in result
    (event,) = await backend.list_events(time_min=datetime(2025, 3, 29, tzinfo=UTC))
    assert event.end.astimezone(UTC) - event.start.astimezone(UTC) == timedelta(hours=1)
    assert f"{event.end:%H:%M}" == "03:30"
