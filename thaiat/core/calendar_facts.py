"""Calendar Facts — the precomputed Can Chi block embedded in reading prompts.

Invariants:
    - Pure: derived only from the birth date text and birth hour slot
    - hour label uses the day stem, so it always agrees with the day label

Design Decisions:
    - Computed server-side so the oracle receives exact pillars instead of
      deriving them itself
"""

from dataclasses import dataclass

from thaiat.core.birth_hour import hour_branch_index, hour_can_chi
from thaiat.core.calendar_converter import (
    GregorianDate,
    SexagenaryLabel,
    day_can_chi,
    day_stem_index,
    julian_day,
    parse_date,
    year_can_chi,
)


@dataclass(frozen=True)
class CalendarFacts:
    """Sexagenary pillars of a birth moment."""
    birth_date: GregorianDate
    julian_day: float
    year: SexagenaryLabel
    day: SexagenaryLabel
    day_stem_index: int
    hour: SexagenaryLabel | None = None

    def as_dict(self) -> dict:
        return {
            "birth_date": (
                f"{self.birth_date.year:04d}-{self.birth_date.month:02d}"
                f"-{self.birth_date.day:02d}"
            ),
            "julian_day": self.julian_day,
            "year_can_chi": str(self.year),
            "day_can_chi": str(self.day),
            "day_stem_index": self.day_stem_index,
            "hour_can_chi": str(self.hour) if self.hour else None,
        }


def build_calendar_facts(
    birth_date: str, birth_time: str | None = None,
) -> CalendarFacts:
    """Parse the date (and optional hour slot) and compute all pillars."""
    d = parse_date(birth_date)
    stem = day_stem_index(d.day, d.month, d.year)
    hour = None
    if birth_time:
        hour = hour_can_chi(stem, hour_branch_index(birth_time))
    return CalendarFacts(
        birth_date=d,
        julian_day=julian_day(d.day, d.month, d.year),
        year=year_can_chi(d.year),
        day=day_can_chi(d.day, d.month, d.year),
        day_stem_index=stem,
        hour=hour,
    )
