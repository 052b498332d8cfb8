"""Reading Routes — destiny reading and follow-up questions.

Invariants:
    - Request body validated by Pydantic before reaching the handler
    - When a redirect URL is configured it is returned with the reading and the
      click is tracked in a background task (never blocks or fails the reading)
    - Oracle failures surface as ThaiAtError envelopes via the global handler

Design Decisions:
    - Redirect lookup happens before the oracle call, mirroring the form flow:
      the sponsor link opens while the reading is computed
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends

from thaiat.core.calendar_facts import build_calendar_facts
from thaiat.schemas.reading import (
    CalendarFactsResponse,
    ChatExchange,
    FollowUpRequest,
    ReadingRequest,
    ReadingResponse,
)
from thaiat.services.config_store import ConfigStore, get_config_store
from thaiat.services.reading_service import ReadingService, get_reading_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/readings", tags=["readings"])


@router.post("", response_model=ReadingResponse)
async def create_reading(
    body: ReadingRequest,
    background_tasks: BackgroundTasks,
    service: ReadingService = Depends(get_reading_service),
    store: ConfigStore = Depends(get_config_store),
):
    """Compute Can Chi facts and ask the oracle for a full reading."""
    facts = build_calendar_facts(body.birth_date, body.birth_time)
    config = await store.get_app_config()
    redirect_url = config.redirect_url.strip()
    if redirect_url:
        background_tasks.add_task(store.track_click)

    reading = await service.get_reading(body, facts)
    return ReadingResponse(
        reading=reading,
        calendar=CalendarFactsResponse(**facts.as_dict()),
        redirect_url=redirect_url,
    )


@router.post("/follow-up", response_model=ChatExchange)
async def ask_follow_up(
    body: FollowUpRequest,
    service: ReadingService = Depends(get_reading_service),
):
    """Answer one follow-up question about an existing reading."""
    answer = await service.ask_follow_up(body.question, body.reading)
    return ChatExchange(question=body.question, answer=answer)
