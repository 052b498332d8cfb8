"""Domain Types — enums that replace bare strings across the codebase.

Invariants:
    - All valid states encoded as Enums — no raw string matching
    - str Enums serialize to JSON without custom encoders
"""

from enum import Enum


class Gender(str, Enum):
    """Gender as submitted by the form."""
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

    @property
    def label_vi(self) -> str:
        return _GENDER_LABELS[self]


_GENDER_LABELS = {
    Gender.MALE: "Nam",
    Gender.FEMALE: "Nữ",
    Gender.OTHER: "Khác",
}


class LifeStageType(str, Enum):
    """Where a life stage sits relative to today."""
    PAST = "past"
    PRESENT = "present"
    FUTURE = "future"


class AppSettingKey(str, Enum):
    """Keys of the local key-value fallback store."""
    APP_CONFIG = "destiny_local_config"
    DATABASE_URL = "destiny_db_url"
