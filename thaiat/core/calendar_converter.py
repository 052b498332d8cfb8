"""Calendar Converter — Julian Day Number and sexagenary (Can Chi) labels.

Invariants:
    - Every function is pure: same input, same output, no module state mutated
    - HEAVENLY_STEMS (10) and EARTHLY_BRANCHES (12) are tuples, never mutated
    - Indices are reduced with Python's floored %, so they land in [0, n-1]
      even for negative sums
    - Arithmetic functions accept any integers (no range checks);
      parse_date is the only validating entry point

Design Decisions:
    - julian_day reproduces the astronomical (Meeus) formula exactly, including
      the 30.6001 factor: day-stem parity depends on its integer residues
    - parse_date validates and raises InvalidDateError instead of letting
      malformed text flow into the arithmetic as garbage
"""

import math
import re
from dataclasses import dataclass
from datetime import date

from thaiat.core.errors import InvalidDateError


HEAVENLY_STEMS: tuple[str, ...] = (
    "Giáp", "Ất", "Bính", "Đinh", "Mậu", "Kỷ", "Canh", "Tân", "Nhâm", "Quý",
)
EARTHLY_BRANCHES: tuple[str, ...] = (
    "Tý", "Sửu", "Dần", "Mão", "Thìn", "Tỵ",
    "Ngọ", "Mùi", "Thân", "Dậu", "Tuất", "Hợi",
)

# Offsets calibrating index 0 of each table (1984 = Giáp Tý)
_YEAR_STEM_OFFSET = 6
_YEAR_BRANCH_OFFSET = 8
_DAY_STEM_OFFSET = 9
_DAY_BRANCH_OFFSET = 1

_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True)
class GregorianDate:
    """Proleptic Gregorian calendar date."""
    year: int
    month: int
    day: int


@dataclass(frozen=True)
class SexagenaryLabel:
    """One position in the 60-unit stem × branch cycle."""
    stem_index: int
    branch_index: int

    @classmethod
    def from_indices(cls, stem: int, branch: int) -> "SexagenaryLabel":
        return cls(stem % len(HEAVENLY_STEMS), branch % len(EARTHLY_BRANCHES))

    @property
    def stem(self) -> str:
        return HEAVENLY_STEMS[self.stem_index]

    @property
    def branch(self) -> str:
        return EARTHLY_BRANCHES[self.branch_index]

    def __str__(self) -> str:
        return f"{self.stem} {self.branch}"


def julian_day(day: int, month: int, year: int) -> float:
    """Julian Day (at 00:00) of a Gregorian date; ends in .5 for whole dates."""
    if month <= 2:
        month += 12
        year -= 1
    a = year // 100
    b = 2 - a + a // 4
    return (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + day + b - 1524.5
    )


def julian_day_number(day: int, month: int, year: int) -> int:
    """Integer day count used by the day cycle (noon-rounded Julian Day)."""
    return math.floor(julian_day(day, month, year) + 0.5)


def year_can_chi(year: int) -> SexagenaryLabel:
    return SexagenaryLabel.from_indices(
        year + _YEAR_STEM_OFFSET, year + _YEAR_BRANCH_OFFSET,
    )


def day_can_chi(day: int, month: int, year: int) -> SexagenaryLabel:
    jd = julian_day_number(day, month, year)
    return SexagenaryLabel.from_indices(
        jd + _DAY_STEM_OFFSET, jd + _DAY_BRANCH_OFFSET,
    )


def day_stem_index(day: int, month: int, year: int) -> int:
    """Stem index of the day, for callers deriving further pillars (hour stem)."""
    return (julian_day_number(day, month, year) + _DAY_STEM_OFFSET) % len(HEAVENLY_STEMS)


def parse_date(text: str) -> GregorianDate:
    """Parse strict YYYY-MM-DD text; raises InvalidDateError otherwise."""
    match = _DATE_PATTERN.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise InvalidDateError(str(text), "expected YYYY-MM-DD")
    year, month, day = (int(part) for part in match.groups())
    try:
        date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(text, str(e))
    return GregorianDate(year=year, month=month, day=day)
