"""Which days to surface for review, and how to label them."""

from __future__ import annotations

from .datekey import DateKeyCodec
from .errors import OffsetOutOfRangeError
from .models import OffsetChoice, PlanEntry

FIXED_OFFSETS = (1, 7, 14)
MAX_SELECTABLE_OFFSET = 30

_NAMED_OFFSETS = {
    0: "today",
    1: "yesterday",
    7: "one week ago",
    14: "two weeks ago",
}


def label_for(offset: int, key: str) -> str:
    """Human label for a review slot."""
    named = _NAMED_OFFSETS.get(offset)
    if named is not None:
        return named
    return f"{key} ({offset} days ago)"


class ReviewPlanner:
    """Pure function of "now" and an offset; holds no notes."""

    def __init__(self, codec: DateKeyCodec, max_offset: int = MAX_SELECTABLE_OFFSET) -> None:
        self._codec = codec
        self._max_offset = max_offset

    @property
    def max_offset(self) -> int:
        return self._max_offset

    @staticmethod
    def fixed_offsets() -> tuple[int, ...]:
        return FIXED_OFFSETS

    def _entry(self, offset: int) -> PlanEntry:
        key = self._codec.key_minus(offset)
        return PlanEntry(offset=offset, date_key=key, label=label_for(offset, key))

    def plan_fixed(self) -> list[PlanEntry]:
        """Yesterday, one week ago and two weeks ago, in that order."""
        return [self._entry(offset) for offset in FIXED_OFFSETS]

    def plan_selectable(self, offset: int) -> PlanEntry:
        """Plan for a caller-chosen offset in ``[0, max_offset]``."""
        if not 0 <= offset <= self._max_offset:
            raise OffsetOutOfRangeError(offset, self._max_offset)
        return self._entry(offset)

    def offset_choices(self) -> list[OffsetChoice]:
        """Options for an offset picker, today first."""
        return [
            OffsetChoice(
                offset=i,
                label="today (0 days ago)" if i == 0 else f"{i} days ago",
            )
            for i in range(self._max_offset + 1)
        ]
