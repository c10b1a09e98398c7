"""
Tests for the Google Calendar reader and meeting extraction.
"""
import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from handshakeiq.schemas.calendar import CalendarAttendee, CalendarEvent
from handshakeiq.services.calendar import CalendarService, meetings_from_events
from handshakeiq.services.errors import CalendarUnavailable

NOW = datetime(2024, 5, 6, 9, 30, tzinfo=timezone.utc)

EVENTS_RESPONSE = {
    "items": [
        {
            "id": "evt-1",
            "summary": "Intro call",
            "start": {"dateTime": "2024-05-06T15:00:00Z"},
            "end": {"dateTime": "2024-05-06T15:30:00Z"},
            "htmlLink": "https://calendar.google.com/event?eid=1",
            "organizer": {"email": "sam@acme.com", "displayName": "Sam Lee"},
            "attendees": [
                {"email": "sam@acme.com", "self": True, "responseStatus": "accepted"},
                {"email": "jane.doe@globex.com", "displayName": "Jane Doe"},
                {"email": "john_smith@gmail.com"},
                {},
            ],
        },
        {
            "id": "evt-2",
            "start": {"date": "2024-05-07"},
            "end": {"date": "2024-05-08"},
        },
    ]
}


def _run(coro_factory, handler):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            return await coro_factory(CalendarService("token-123", http_client=http))

    return asyncio.run(go())


class TestCalendarService:
    """HTTP behaviour of the calendar reader."""

    def test_get_events(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=EVENTS_RESPONSE)

        events = _run(lambda svc: svc.upcoming(days=7, now=NOW), handler)

        assert seen["path"].endswith("/calendars/primary/events")
        assert seen["auth"] == "Bearer token-123"
        assert seen["params"]["singleEvents"] == "true"
        assert seen["params"]["orderBy"] == "startTime"
        assert seen["params"]["maxResults"] == "100"
        assert seen["params"]["timeMin"].startswith("2024-05-06T09:30:00")
        assert seen["params"]["timeMax"].startswith("2024-05-13T09:30:00")

        assert [e.id for e in events] == ["evt-1", "evt-2"]
        assert events[0].attendees[0].is_self is True
        assert events[0].attendees[1].display_name == "Jane Doe"
        assert events[0].organizer.display_name == "Sam Lee"
        assert events[1].summary == "Untitled Event"
        assert events[1].start == "2024-05-07"

    def test_today_and_tomorrow_window(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"items": []})

        assert _run(lambda svc: svc.today_and_tomorrow(now=NOW), handler) == []
        assert seen["params"]["maxResults"] == "20"
        assert seen["params"]["timeMax"].startswith("2024-05-08T00:00:00")

    def test_expired_token(self):
        with pytest.raises(CalendarUnavailable):
            _run(lambda svc: svc.upcoming(now=NOW), lambda request: httpx.Response(401))

    def test_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(CalendarUnavailable):
            _run(lambda svc: svc.upcoming(now=NOW), handler)


class TestMeetingsFromEvents:
    """Attendee stubs for person search."""

    def test_builds_attendee_stubs(self):
        event = CalendarEvent.model_validate(
            {
                "id": "evt-1",
                "summary": "Intro call",
                "start": "2024-05-06T15:00:00Z",
                "end": "2024-05-06T15:30:00Z",
                "attendees": EVENTS_RESPONSE["items"][0]["attendees"],
            }
        )

        meetings = meetings_from_events([event])

        assert len(meetings) == 1
        meeting = meetings[0]
        assert meeting.title == "Intro call"
        assert meeting.time == "2024-05-06T15:00:00Z"
        assert meeting.source == "google"
        assert [(a.name, a.company) for a in meeting.attendees] == [
            ("Jane Doe", "Globex"),
            ("John Smith", None),
        ]
        assert meeting.attendees[0].id == "jane.doe@globex.com"

    def test_event_without_attendees(self):
        event = CalendarEvent(id="e", summary="Focus time", start="s", end="e", attendees=[])
        assert meetings_from_events([event])[0].attendees == []

    def test_self_alias(self):
        assert CalendarAttendee.model_validate({"self": True}).is_self is True
