"""Calendar Routes — Can Chi lookup for a birth date and the birth hour slots.

Invariants:
    - Pure computation; no oracle call, no DB access
    - Malformed date or hour slot → 400 via InvalidDateError/InvalidBirthHourError
"""

from fastapi import APIRouter, Query

from thaiat.core.birth_hour import BIRTH_HOUR_SLOTS
from thaiat.core.calendar_facts import build_calendar_facts
from thaiat.schemas.reading import CalendarFactsResponse

router = APIRouter(prefix="/api/v1/calendar", tags=["calendar"])


@router.get("/can-chi", response_model=CalendarFactsResponse)
async def get_can_chi(
    date: str = Query(..., description="YYYY-MM-DD"),
    birth_time: str | None = Query(None, description="Giờ ... slot label"),
):
    """Julian Day and year/day (and hour) Can Chi of a Gregorian date."""
    facts = build_calendar_facts(date, birth_time)
    return CalendarFactsResponse(**facts.as_dict())


@router.get("/birth-hours")
async def list_birth_hours():
    return {"birth_hours": list(BIRTH_HOUR_SLOTS)}
