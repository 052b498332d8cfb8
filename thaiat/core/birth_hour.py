"""Birth Hour — the twelve two-hour branch slots and the hour-stem rule.

Invariants:
    - BIRTH_HOUR_SLOTS[i] names EARTHLY_BRANCHES[i] (Tý first, 23:00 - 01:00)
    - hour_branch_index accepts only the exact slot labels (surrounding
      whitespace aside); any other text raises InvalidBirthHourError
    - hour stem = (day stem * 2 + hour branch) mod 10

Design Decisions:
    - Slot labels are the exact strings the form submits and the exact text
      echoed into the reading prompt, so lookup is by whole label
"""

from thaiat.core.calendar_converter import EARTHLY_BRANCHES, SexagenaryLabel
from thaiat.core.errors import InvalidBirthHourError


def _slot_label(index: int) -> str:
    start = (23 + 2 * index) % 24
    end = (start + 2) % 24
    return f"Giờ {EARTHLY_BRANCHES[index]} ({start:02d}:00 - {end:02d}:00)"


BIRTH_HOUR_SLOTS: tuple[str, ...] = tuple(
    _slot_label(i) for i in range(len(EARTHLY_BRANCHES))
)


def hour_branch_index(slot_label: str) -> int:
    label = slot_label.strip() if isinstance(slot_label, str) else None
    if label not in BIRTH_HOUR_SLOTS:
        raise InvalidBirthHourError(str(slot_label))
    return BIRTH_HOUR_SLOTS.index(label)


def hour_branch_for_clock(hour: int) -> int:
    """Branch index for a 0-23 clock hour (23:00 already belongs to Tý)."""
    return ((hour + 1) // 2) % len(EARTHLY_BRANCHES)


def hour_can_chi(day_stem: int, branch_index: int) -> SexagenaryLabel:
    return SexagenaryLabel.from_indices(day_stem * 2 + branch_index, branch_index)
