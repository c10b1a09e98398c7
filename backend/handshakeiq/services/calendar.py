# backend/handshakeiq/services/calendar.py
from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from ..core.config import get_settings
from ..schemas.calendar import (
    CalendarAttendee,
    CalendarEvent,
    CalendarOrganizer,
    Meeting,
    MeetingAttendee,
)
from .errors import CalendarUnavailable

logger = logging.getLogger(__name__)


def _iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def _normalise_event(item: Dict[str, Any]) -> CalendarEvent:
    start = item.get("start") or {}
    end = item.get("end") or {}
    organizer = item.get("organizer")
    return CalendarEvent(
        id=item.get("id") or "",
        summary=item.get("summary") or "Untitled Event",
        description=item.get("description"),
        start=start.get("dateTime") or start.get("date") or "",
        end=end.get("dateTime") or end.get("date") or "",
        location=item.get("location"),
        attendees=[
            CalendarAttendee.model_validate(a)
            for a in item.get("attendees") or []
            if isinstance(a, dict)
        ],
        organizer=CalendarOrganizer.model_validate(organizer) if isinstance(organizer, dict) else None,
        status=item.get("status"),
        html_link=item.get("htmlLink"),
    )


class CalendarService:
    """
    Reads the signed-in user's primary Google calendar.

    The access token comes from the auth collaborator; token refresh is
    not handled here, an expired token surfaces as CalendarUnavailable.
    """

    name = "google_calendar"

    def __init__(self, access_token: str, http_client: Optional[httpx.AsyncClient] = None) -> None:
        settings = get_settings()
        self._access_token = access_token
        self._http_client = http_client
        self.base_url = settings.GOOGLE_CALENDAR_BASE_URL.rstrip("/")
        self.timeout = settings.CALENDAR_TIMEOUT_SECONDS

    async def _get(self, client: httpx.AsyncClient, params: Dict[str, Any]) -> httpx.Response:
        try:
            return await client.get(
                f"{self.base_url}/calendars/primary/events",
                params=params,
                headers={"Authorization": f"Bearer {self._access_token}"},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise CalendarUnavailable(f"Calendar API unreachable: {e}") from e

    async def get_events(
        self,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
        max_results: int = 50,
    ) -> List[CalendarEvent]:
        params: Dict[str, Any] = {
            "timeMin": _iso(time_min or datetime.now(timezone.utc)),
            "maxResults": max_results,
            "singleEvents": "true",
            "orderBy": "startTime",
        }
        if time_max is not None:
            params["timeMax"] = _iso(time_max)

        if self._http_client is not None:
            resp = await self._get(self._http_client, params)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await self._get(client, params)

        if not resp.is_success:
            logger.warning(
                "Calendar API returned HTTP %s",
                resp.status_code,
                extra={"connector": self.name},
            )
            raise CalendarUnavailable(f"Calendar API returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise CalendarUnavailable("Calendar API returned a non-JSON body") from e

        return [
            _normalise_event(item)
            for item in (data.get("items") or [])
            if isinstance(item, dict)
        ]

    async def today_and_tomorrow(self, now: Optional[datetime] = None) -> List[CalendarEvent]:
        now = now or datetime.now(timezone.utc)
        end_of_tomorrow = datetime.combine(
            (now + timedelta(days=2)).date(), time.min, tzinfo=now.tzinfo
        )
        return await self.get_events(now, end_of_tomorrow, 20)

    async def upcoming(self, days: int = 30, now: Optional[datetime] = None) -> List[CalendarEvent]:
        now = now or datetime.now(timezone.utc)
        return await self.get_events(now, now + timedelta(days=days), 100)


def _attendee_name(attendee: CalendarAttendee) -> str:
    if attendee.display_name:
        return attendee.display_name.strip()
    if attendee.email:
        local = attendee.email.split("@", 1)[0]
        return " ".join(part.capitalize() for part in local.replace("_", ".").split(".") if part)
    return ""


def _company_from_email(email: Optional[str]) -> Optional[str]:
    if not email or "@" not in email:
        return None
    domain = email.split("@", 1)[1].lower()
    if domain in {"gmail.com", "googlemail.com", "outlook.com", "hotmail.com", "yahoo.com", "icloud.com"}:
        return None
    return domain.split(".")[0].capitalize() or None


def meetings_from_events(events: List[CalendarEvent]) -> List[Meeting]:
    """
    Meetings with attendee person stubs, skipping the user themself and
    attendees with neither name nor email.
    """
    meetings: List[Meeting] = []
    for event in events:
        attendees: List[MeetingAttendee] = []
        for i, attendee in enumerate(event.attendees):
            if attendee.is_self:
                continue
            name = _attendee_name(attendee)
            if not name:
                continue
            attendees.append(
                MeetingAttendee(
                    id=attendee.email or f"{event.id}-{i}",
                    name=name,
                    email=attendee.email,
                    company=_company_from_email(attendee.email),
                )
            )
        meetings.append(
            Meeting(id=event.id, title=event.summary, time=event.start, attendees=attendees, source="google")
        )
    return meetings
