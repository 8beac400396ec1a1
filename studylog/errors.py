"""Exceptions raised by the study log core.

Every error carries a short machine-readable ``kind`` next to its message so
callers (the HTTP layer, the scripts) can report it without parsing text.
"""

from __future__ import annotations

from enum import Enum


class StudyLogError(Exception):
    """Base class for all study log errors."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoteValidationError(StudyLogError):
    """A note was rejected before being written (empty title or body)."""

    kind = "validation"


class NoteNotFoundError(StudyLogError):
    """An edit targeted a note id that is not in the bucket."""

    kind = "not_found"

    def __init__(self, key: str, note_id: str) -> None:
        super().__init__(f"Note {note_id!r} not found on {key}")
        self.key = key
        self.note_id = note_id


class BackupViolation(str, Enum):
    """First structural problem found in a backup document."""

    MALFORMED_DOCUMENT = "malformed_document"
    MISSING_DATA = "missing_data"
    MALFORMED_BUCKET = "malformed_bucket"
    MISSING_ITEMS = "missing_items"


_VIOLATION_MESSAGES = {
    BackupViolation.MALFORMED_DOCUMENT: "Backup document is not a JSON object",
    BackupViolation.MISSING_DATA: "Backup document has no data object",
    BackupViolation.MALFORMED_BUCKET: "Backup data contains a malformed day entry",
    BackupViolation.MISSING_ITEMS: "Backup day entry has no items list",
}


class BackupValidationError(StudyLogError):
    """A backup document failed structural validation."""

    kind = "invalid_backup"

    def __init__(self, violation: BackupViolation, detail: str = "") -> None:
        message = _VIOLATION_MESSAGES[violation]
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.violation = violation


class ImportFailedError(StudyLogError):
    """Reading or parsing an import file failed."""

    kind = "import_failed"


class OffsetOutOfRangeError(StudyLogError, ValueError):
    """A review offset outside the selectable range."""

    kind = "offset_out_of_range"

    def __init__(self, offset: int, maximum: int) -> None:
        super().__init__(f"Review offset must be between 0 and {maximum}, got {offset}")
        self.offset = offset
        self.maximum = maximum
