"""Reading Schemas — form input and the structured destiny reading.

Invariants:
    - ReadingRequest.birth_date must parse via core.calendar_converter.parse_date
    - ReadingRequest.birth_time must be one of BIRTH_HOUR_SLOTS
    - ReadingResult mirrors the record_reading tool schema field for field
    - hexagram codes are exactly 6 characters of 0 (yin) / 1 (yang)

Design Decisions:
    - field_validator delegates to core parsers so the API and the prompt
      builder agree on what a valid date/hour is
    - InvalidDateError/InvalidBirthHourError re-raised as ValueError:
      pydantic turns them into field-level 400 responses
"""

from pydantic import BaseModel, Field, field_validator

from thaiat.core.birth_hour import BIRTH_HOUR_SLOTS, hour_branch_index
from thaiat.core.calendar_converter import parse_date
from thaiat.core.domain_types import Gender, LifeStageType
from thaiat.core.errors import InvalidBirthHourError, InvalidDateError

HEXAGRAM_CODE_PATTERN = r"^[01]{6}$"


class ReadingRequest(BaseModel):
    """Form submission — who is asking and when they were born."""
    full_name: str = Field(min_length=1, max_length=120)
    birth_date: str = Field(description="YYYY-MM-DD")
    birth_time: str = Field(description="One of the twelve 'Giờ ...' slots")
    gender: Gender

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full_name cannot be empty or whitespace")
        return v

    @field_validator("birth_date")
    @classmethod
    def check_birth_date(cls, v: str) -> str:
        try:
            parse_date(v)
        except InvalidDateError as e:
            raise ValueError(e.message)
        return v.strip()

    @field_validator("birth_time")
    @classmethod
    def check_birth_time(cls, v: str) -> str:
        try:
            hour_branch_index(v)
        except InvalidBirthHourError as e:
            raise ValueError(
                f"{e.message}; expected one of: {', '.join(BIRTH_HOUR_SLOTS)}",
            )
        return v.strip()


# --- Oracle output ------------------------------------------------------------

class HexagramDetail(BaseModel):
    """Transformed hexagram (Quẻ Biến)."""
    code: str = Field(pattern=HEXAGRAM_CODE_PATTERN)
    name: str
    meaning: str


class ThaiAtInfo(BaseModel):
    lunar_date: str
    can_chi: str
    ruling_star: str


class CareerAdvice(BaseModel):
    suitable_careers: list[str]
    analysis: str
    potential_success: str


class LifeStage(BaseModel):
    age_range: str
    summary: str
    details: str
    type: LifeStageType


class YearlyAdvice(BaseModel):
    """Advance (do) / retreat (avoid) advice for one year."""
    do: str
    avoid: str


class YearlyPrediction(BaseModel):
    year: int
    overview: str
    career: str
    health: str
    love: str
    advice: YearlyAdvice


class ReadingResult(BaseModel):
    """Structured destiny reading returned by the oracle."""
    hexagram_name: str
    hexagram_code: str = Field(pattern=HEXAGRAM_CODE_PATTERN)
    transformed_hexagram: HexagramDetail
    thai_at_info: ThaiAtInfo
    the_ung_analysis: str
    general_analysis: str
    elemental_balance: str
    career_advice: CareerAdvice
    poem: str
    life_stages: list[LifeStage]
    yearly_predictions: list[YearlyPrediction]
    suggested_questions: list[str]


# --- API envelopes ------------------------------------------------------------

class CalendarFactsResponse(BaseModel):
    """Precomputed pillars shown next to the reading."""
    birth_date: str
    julian_day: float
    year_can_chi: str
    day_can_chi: str
    day_stem_index: int = Field(ge=0, le=9)
    hour_can_chi: str | None = None


class ReadingResponse(BaseModel):
    reading: ReadingResult
    calendar: CalendarFactsResponse
    redirect_url: str = ""


class FollowUpRequest(BaseModel):
    """Follow-up chat question about an existing reading."""
    question: str = Field(min_length=1, max_length=1000)
    reading: ReadingResult

    @field_validator("question")
    @classmethod
    def strip_question(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("question cannot be empty or whitespace")
        return v


class ChatExchange(BaseModel):
    question: str
    answer: str
