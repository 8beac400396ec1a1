"""Seed the configured store with demo notes for the review slots.

Writes notes dated today, yesterday, one week ago and two weeks ago so every
review block and the current calendar month have something to show.

Usage:
    python scripts/seed_data.py [--dry-run]
"""

from __future__ import annotations

import argparse

from studylog.config import settings
from studylog.journal import Journal

# Each entry: (days ago, title, body)
NOTES: list[tuple[int, str, str]] = [
    (0, "List comprehensions", "[x * x for x in range(10) if x % 2 == 0]"),
    (0, "dict.setdefault", "Returns the existing value or inserts the default."),
    (1, "Context managers", "__enter__ / __exit__, or contextlib.contextmanager."),
    (7, "Generators", "yield pauses the frame; next() resumes it."),
    (7, "functools.lru_cache", "Memoises pure functions; arguments must be hashable."),
    (14, "Dataclasses", "@dataclass(frozen=True) gives hashable value objects."),
]


def main() -> None:
    """Write every demo note to the store."""
    parser = argparse.ArgumentParser(description="Seed demo study notes")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be written without saving",
    )
    args = parser.parse_args()

    journal = Journal.from_settings(settings)
    print(f"\n  Seeding {len(NOTES)} notes into the {settings.storage_backend} store")
    print("  " + "=" * 58)

    for days, title, body in NOTES:
        key = journal.codec.key_minus(days)
        print(f"  {key}  ({days:>2} days ago)  {title}")
        if not args.dry_run:
            journal.save_note(title, body, key=key)

    print()
    for slot in journal.review():
        print(f"  {slot.plan.label:<14} {slot.plan.date_key}: {len(slot.items)} notes")
    print()


if __name__ == "__main__":
    main()
