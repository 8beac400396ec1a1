"""Study log workflows: record, review, browse and back up notes.

The :class:`Journal` ties the date codec, note store, review planner,
calendar and backup codec together and applies the checks a user-facing
caller needs (trimmed non-empty input, edit targets that still exist,
confirmation plans before destructive actions).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from .backends import build_backend
from .backup import BackupCodec, FILENAME_PREFIX, to_store, validate
from .calendar_index import CalendarIndex
from .config import STORAGE_KEY, Settings
from .datekey import DateKeyCodec, parse_key, resolve_timezone
from .errors import NoteNotFoundError, NoteValidationError
from .models import (
    ActionPlan,
    BackupDocument,
    CalendarCell,
    MonthAnchor,
    Note,
    ReviewSlot,
    Store,
    new_note_id,
)
from .review import MAX_SELECTABLE_OFFSET, ReviewPlanner
from .storage import NoteStore

logger = logging.getLogger(__name__)


class Journal:
    """Entry point used by the HTTP API and the scripts."""

    def __init__(
        self,
        store: NoteStore,
        codec: DateKeyCodec,
        *,
        storage_key: str = STORAGE_KEY,
        week_start: str = "sunday",
        max_offset: int = MAX_SELECTABLE_OFFSET,
        auto_backup_dir: Optional[Path] = None,
    ) -> None:
        self.store = store
        self.codec = codec
        self.planner = ReviewPlanner(codec, max_offset=max_offset)
        self.calendar_index = CalendarIndex(store, codec, week_start=week_start)
        self.backups = BackupCodec(store, codec, storage_key=storage_key)
        self._auto_backup_dir = auto_backup_dir

    @classmethod
    def from_settings(cls, settings: Settings) -> Journal:
        """Build a journal over the configured backend and time zone."""
        codec = DateKeyCodec(resolve_timezone(settings.timezone))
        store = NoteStore(build_backend(settings))
        logger.info(
            "Journal ready — backend=%s, timezone=%s",
            settings.storage_backend,
            settings.timezone,
        )
        return cls(
            store,
            codec,
            storage_key=settings.storage_key,
            week_start=settings.week_start,
            max_offset=settings.max_review_offset,
            auto_backup_dir=settings.auto_backup_dir,
        )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def notes(self, key: Optional[str] = None) -> list[Note]:
        """Notes for ``key`` (default today), newest first."""
        key = key or self.codec.today_key()
        parse_key(key)
        return self.store.get_items(key)

    def save_note(
        self,
        title: str,
        body: str,
        note_id: Optional[str] = None,
        key: Optional[str] = None,
    ) -> Note:
        """Create a note, or update ``note_id`` in place.

        Title and body are trimmed and must not be empty. An update keeps
        the original ``created_at``.
        """
        key = key or self.codec.today_key()
        parse_key(key)
        title = (title or "").strip()
        body = (body or "").strip()
        if not title:
            raise NoteValidationError("Title is required")
        if not body:
            raise NoteValidationError("Body is required")

        now = int(self.codec.now().timestamp() * 1000)
        with self.store.lock:
            if note_id is not None:
                existing = self._find(key, note_id)
                if existing is None:
                    raise NoteNotFoundError(key, note_id)
                created_at = existing.created_at
            else:
                note_id = new_note_id(now)
                created_at = now
            note = Note(
                id=note_id,
                title=title,
                body=body,
                created_at=created_at,
                updated_at=now,
            )
            self.store.upsert_item(key, note)
        return note

    def delete_note(self, key: str, note_id: str) -> bool:
        parse_key(key)
        return self.store.delete_item(key, note_id)

    def _find(self, key: str, note_id: str) -> Optional[Note]:
        return next((n for n in self.store.get_items(key) if n.id == note_id), None)

    # ------------------------------------------------------------------
    # Reviewing
    # ------------------------------------------------------------------

    def review(self) -> list[ReviewSlot]:
        """Fixed review slots with their notes."""
        return [
            ReviewSlot(plan=plan, items=self.store.get_items(plan.date_key))
            for plan in self.planner.plan_fixed()
        ]

    def review_offset(self, offset: int) -> ReviewSlot:
        plan = self.planner.plan_selectable(offset)
        return ReviewSlot(plan=plan, items=self.store.get_items(plan.date_key))

    def calendar(self, anchor: Optional[MonthAnchor] = None) -> list[list[CalendarCell]]:
        return self.calendar_index.marked_grid(anchor or self.calendar_index.current_month())

    # ------------------------------------------------------------------
    # Confirmation plans
    # ------------------------------------------------------------------

    def plan_delete(self, key: str, note_id: str) -> ActionPlan:
        parse_key(key)
        note = self._find(key, note_id)
        if note is None:
            summary = f"No note {note_id} on {key}; nothing will be deleted"
        else:
            summary = f"Delete note '{note.title}' from {key}"
        return ActionPlan(
            action="delete",
            summary=summary,
            affected_notes=0 if note is None else 1,
            key=key,
            note_id=note_id,
        )

    def plan_import(self, doc: Any) -> ActionPlan:
        """Validate ``doc`` and describe what importing it would replace."""
        validate(doc)
        incoming = to_store(doc)
        current = self.store.load()
        return ActionPlan(
            action="import",
            summary=(
                f"Replace {current.note_count} notes on {len(current.root)} days "
                f"with {incoming.note_count} notes on {len(incoming.root)} days"
            ),
            affected_notes=current.note_count,
        )

    def plan_wipe(self) -> ActionPlan:
        current = self.store.load()
        return ActionPlan(
            action="wipe",
            summary=f"Delete all {current.note_count} notes on {len(current.root)} days",
            affected_notes=current.note_count,
        )

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def export(self) -> BackupDocument:
        return self.backups.export()

    def import_document(self, doc: Any) -> Store:
        """Full overwrite from a backup document; see ``BackupCodec``."""
        incoming = self.backups.prepare(doc)
        with self.store.lock:
            self._auto_backup("import")
            return self.backups.restore(incoming)

    def import_file(self, path: Path) -> Store:
        return self.import_document(self.backups.read_file(path))

    def wipe(self) -> None:
        with self.store.lock:
            self._auto_backup("wipe")
            self.store.wipe()

    def _auto_backup(self, reason: str) -> Optional[Path]:
        """Export the current state before it is overwritten, if enabled."""
        if self._auto_backup_dir is None:
            return None
        directory = Path(self._auto_backup_dir)
        directory.mkdir(parents=True, exist_ok=True)
        stamp = self.codec.now().strftime("%H%M%S")
        path = directory / f"{FILENAME_PREFIX}-{self.codec.today_key()}-{stamp}-before-{reason}.json"
        path.write_text(self.backups.dumps(self.export()), encoding="utf-8")
        logger.info("Saved pre-%s backup to %s", reason, path)
        return path
