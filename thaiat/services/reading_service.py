"""Reading Service — orchestrates calendar facts, prompts, and the oracle call.

Invariants:
    - One oracle request per reading/follow-up (retries only if configured)
    - Calendar facts computed before the oracle is contacted; a bad date never
      costs an API call
    - Reading output validated against ReadingResult before it leaves the service
    - Empty follow-up answer falls back to FOLLOW_UP_FALLBACK, never raises

Design Decisions:
    - Client injected (constructor) so tests replace it at the create_message
      boundary without touching the SDK
    - current_year injectable via clock for deterministic prompts in tests
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from pydantic import ValidationError

from thaiat.config import get_settings
from thaiat.core.calendar_facts import CalendarFacts, build_calendar_facts
from thaiat.core.errors import (
    EmptyOracleResponseError,
    MissingAPIKeyError,
    OracleResponseInvalidError,
)
from thaiat.core.reading_prompt import build_follow_up_prompt, build_reading_prompt
from thaiat.infrastructure.anthropic_client import ResilientAnthropicClient
from thaiat.schemas.reading import ReadingRequest, ReadingResult
from thaiat.services.define_reading_tools import (
    READING_TOOL_CHOICE,
    READING_TOOL_NAME,
    TOOLS_READING,
)

logger = logging.getLogger(__name__)

FOLLOW_UP_FALLBACK = "Thiên cơ bất khả lộ."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReadingService:
    """Turns a ReadingRequest into a ReadingResult via the oracle."""

    def __init__(
        self,
        client: ResilientAnthropicClient,
        model: str,
        reading_max_tokens: int = 8000,
        follow_up_max_tokens: int = 1024,
        temperature: float = 0.6,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.client = client
        self.model = model
        self.reading_max_tokens = reading_max_tokens
        self.follow_up_max_tokens = follow_up_max_tokens
        self.temperature = temperature
        self._clock = clock

    async def get_reading(
        self, request: ReadingRequest, facts: CalendarFacts | None = None,
    ) -> ReadingResult:
        facts = facts or build_calendar_facts(request.birth_date, request.birth_time)
        prompt = build_reading_prompt(
            full_name=request.full_name,
            birth_date=request.birth_date,
            birth_time=request.birth_time,
            gender=request.gender,
            facts=facts,
            current_year=self._clock().year,
        )
        response = await self.client.create_message(
            model=self.model,
            max_tokens=self.reading_max_tokens,
            messages=[{"role": "user", "content": prompt}],
            tools=TOOLS_READING,
            tool_choice=READING_TOOL_CHOICE,
            temperature=self.temperature,
        )
        payload = _extract_tool_input(response, READING_TOOL_NAME)
        if payload is None:
            logger.error(
                "Oracle returned no reading",
                extra={"error_code": "ORACLE_EMPTY_RESPONSE"},
            )
            raise EmptyOracleResponseError()
        try:
            return ReadingResult.model_validate(payload)
        except ValidationError as e:
            raise OracleResponseInvalidError(
                f"{e.error_count()} field error(s)",
            )

    async def ask_follow_up(self, question: str, reading: ReadingResult) -> str:
        prompt = build_follow_up_prompt(
            question,
            reading.hexagram_name,
            reading.transformed_hexagram.name,
        )
        response = await self.client.create_message(
            model=self.model,
            max_tokens=self.follow_up_max_tokens,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
        )
        answer = _extract_text(response)
        return answer or FOLLOW_UP_FALLBACK


def _extract_tool_input(response, tool_name: str) -> dict | None:
    """Input of the first tool_use block with the given name."""
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) == "tool_use" and block.name == tool_name:
            return block.input if isinstance(block.input, dict) else None
    return None


def _extract_text(response) -> str:
    """Concatenated text blocks, stripped."""
    parts = [
        block.text for block in getattr(response, "content", None) or []
        if getattr(block, "type", None) == "text" and block.text
    ]
    return "".join(parts).strip()


# Lazy singleton — constructed on first use, after settings are loaded
_reading_service: ReadingService | None = None


def get_reading_service() -> ReadingService:
    """FastAPI dependency: shared ReadingService built from settings."""
    global _reading_service
    settings = get_settings()
    if not settings.anthropic_api_key:
        raise MissingAPIKeyError()
    if _reading_service is None:
        client = ResilientAnthropicClient(
            api_key=settings.anthropic_api_key,
            max_retries=settings.anthropic_max_retries,
            base_delay_ms=settings.anthropic_base_delay_ms,
            max_delay_ms=settings.anthropic_max_delay_ms,
            timeout_seconds=settings.anthropic_timeout_seconds,
        )
        _reading_service = ReadingService(
            client,
            model=settings.reading_model,
            reading_max_tokens=settings.reading_max_tokens,
            follow_up_max_tokens=settings.follow_up_max_tokens,
            temperature=settings.reading_temperature,
        )
    return _reading_service
