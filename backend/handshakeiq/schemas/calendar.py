# backend/handshakeiq/schemas/calendar.py
from typing import Literal

from pydantic import Field

from .common import CamelModel


class CalendarAttendee(CamelModel):
    email: str | None = None
    display_name: str | None = None
    response_status: str | None = None
    organizer: bool | None = None
    optional: bool | None = None
    is_self: bool | None = Field(default=None, alias="self")


class CalendarOrganizer(CamelModel):
    email: str | None = None
    display_name: str | None = None


class CalendarEvent(CamelModel):
    id: str
    summary: str
    description: str | None = None
    start: str
    end: str
    location: str | None = None
    attendees: list[CalendarAttendee] = []
    organizer: CalendarOrganizer | None = None
    status: str | None = None
    html_link: str | None = None


class MeetingAttendee(CamelModel):
    """Person stub for a meeting attendee; feeds a person search."""

    id: str
    name: str
    email: str | None = None
    company: str | None = None


class Meeting(CamelModel):
    id: str
    title: str
    time: str
    attendees: list[MeetingAttendee] = []
    source: Literal["google", "zoho", "microsoft"] = "google"
