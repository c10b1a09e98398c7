import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..models.user import User
from ..schemas.calendar import CalendarEvent, Meeting
from ..services.calendar import CalendarService, meetings_from_events
from ..services.errors import CalendarUnavailable
from .deps import get_current_user

router = APIRouter(tags=["calendar"])

logger = logging.getLogger(__name__)


def get_calendar_service(user: User = Depends(get_current_user)) -> CalendarService:
    if not user.google_access_token:
        raise HTTPException(status_code=400, detail="Calendar is not connected for this user")
    return CalendarService(user.google_access_token)


@router.get("/calendar/events", response_model=list[CalendarEvent])
async def list_calendar_events(
    days: int = Query(default=30, ge=1, le=90),
    user: User = Depends(get_current_user),
    calendar: CalendarService = Depends(get_calendar_service),
):
    try:
        return await calendar.upcoming(days=days)
    except CalendarUnavailable as e:
        logger.warning("Calendar sync failed: %s", e, extra={"user_id": user.id, "step": "calendar_events"})
        raise HTTPException(status_code=502, detail="Failed to fetch calendar events")


@router.get("/calendar/meetings", response_model=list[Meeting])
async def list_upcoming_meetings(
    user: User = Depends(get_current_user),
    calendar: CalendarService = Depends(get_calendar_service),
):
    """Today's and tomorrow's meetings with attendees ready for a person search."""
    try:
        events = await calendar.today_and_tomorrow()
    except CalendarUnavailable as e:
        logger.warning("Calendar sync failed: %s", e, extra={"user_id": user.id, "step": "calendar_meetings"})
        raise HTTPException(status_code=502, detail="Failed to fetch calendar events")
    return meetings_from_events(events)
