"""Pydantic models for the study log."""

from __future__ import annotations

import secrets
import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator

APP_MARKER = "StudyLog"
SCHEMA_VERSION = 1


def epoch_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def new_note_id(now_ms: Optional[int] = None) -> str:
    """Timestamp plus random suffix, unique without coordination."""
    stamp = epoch_ms() if now_ms is None else now_ms
    return f"{stamp}-{secrets.token_hex(6)}"


class Note(BaseModel):
    """A single study note.

    Persisted with camelCase timestamps (``createdAt`` / ``updatedAt``).
    Title and body are checked by the journal on save; stored or imported
    notes are accepted as they are.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(default_factory=new_note_id)
    title: str = ""
    body: str = ""
    created_at: int = Field(0, alias="createdAt", description="Epoch ms, set once")
    updated_at: int = Field(0, alias="updatedAt", description="Epoch ms, set on every write")

    @property
    def has_content(self) -> bool:
        """Whether the trimmed title or body is non-empty."""
        return bool(self.title.strip() or self.body.strip())


class DayBucket(BaseModel):
    """Notes recorded on one date key, newest first."""

    model_config = ConfigDict(extra="allow")

    items: list[Note] = Field(default_factory=list)


class Store(RootModel[dict[str, DayBucket]]):
    """The whole persisted state: date key -> bucket."""

    root: dict[str, DayBucket] = Field(default_factory=dict)

    def bucket(self, key: str) -> DayBucket:
        """Return the bucket for ``key``, creating it if missing."""
        if key not in self.root:
            self.root[key] = DayBucket()
        return self.root[key]

    @property
    def note_count(self) -> int:
        return sum(len(b.items) for b in self.root.values())


class PlanEntry(BaseModel):
    """One review slot: which day to surface and how to label it."""

    offset: int
    date_key: str
    label: str


class ReviewSlot(BaseModel):
    """A review plan entry together with the notes found for its day."""

    plan: PlanEntry
    items: list[Note] = Field(default_factory=list)


class OffsetChoice(BaseModel):
    offset: int
    label: str


# Week-aligned grids spill into the neighbouring year, so the first and last
# years that datetime.date can represent are left out.
MIN_YEAR = 2
MAX_YEAR = 9998


class MonthAnchor(BaseModel):
    """A displayed month; ``month`` runs 1-12, ``year`` MIN_YEAR-MAX_YEAR."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR)
    month: int = Field(..., ge=1, le=12)

    def previous(self) -> Optional[MonthAnchor]:
        """The month before, or None at the start of the range."""
        if self.month == 1:
            if self.year == MIN_YEAR:
                return None
            return MonthAnchor(year=self.year - 1, month=12)
        return MonthAnchor(year=self.year, month=self.month - 1)

    def next(self) -> Optional[MonthAnchor]:
        """The month after, or None at the end of the range."""
        if self.month == 12:
            if self.year == MAX_YEAR:
                return None
            return MonthAnchor(year=self.year + 1, month=1)
        return MonthAnchor(year=self.year, month=self.month + 1)


class CalendarCell(BaseModel):
    """A single day in a month grid."""

    date_key: str
    in_current_month: bool
    has_record: bool = False


class BackupDocument(BaseModel):
    """Portable snapshot of the whole store."""

    model_config = ConfigDict(populate_by_name=True)

    app: str = APP_MARKER
    version: int = SCHEMA_VERSION
    exported_at: str = Field(..., alias="exportedAt", description="ISO-8601 timestamp")
    storage_key: str = Field(..., alias="storageKey")
    data: dict[str, DayBucket] = Field(default_factory=dict)


class ActionPlan(BaseModel):
    """Description of a destructive action awaiting confirmation."""

    action: str
    summary: str
    affected_notes: int = 0
    key: Optional[str] = None
    note_id: Optional[str] = None

    @field_validator("action")
    @classmethod
    def _known_action(cls, value: str) -> str:
        if value not in {"delete", "import", "wipe"}:
            raise ValueError(f"unknown action {value!r}")
        return value
