"""Month grids for browsing the study log by calendar."""

from __future__ import annotations

import calendar

from .datekey import DateKeyCodec, key_for
from .models import CalendarCell, MonthAnchor
from .storage import NoteStore

WEEK_STARTS = {"monday": calendar.MONDAY, "sunday": calendar.SUNDAY}


class CalendarIndex:
    """Builds full-week month grids and marks days that hold notes.

    Record markers are read from the store on every call, never cached.
    """

    def __init__(self, store: NoteStore, codec: DateKeyCodec, week_start: str = "sunday") -> None:
        self._store = store
        self._codec = codec
        self._calendar = calendar.Calendar(firstweekday=WEEK_STARTS[week_start])

    def current_month(self) -> MonthAnchor:
        today = self._codec.today()
        return MonthAnchor(year=today.year, month=today.month)

    def month_grid(self, anchor: MonthAnchor) -> list[list[CalendarCell]]:
        """Weeks of seven cells covering ``anchor``'s month.

        Leading and trailing cells borrowed from the neighbouring months are
        flagged ``in_current_month=False``.
        """
        return [
            [
                CalendarCell(date_key=key_for(day), in_current_month=day.month == anchor.month)
                for day in week
            ]
            for week in self._calendar.monthdatescalendar(anchor.year, anchor.month)
        ]

    def has_record(self, key: str) -> bool:
        """Whether any note on ``key`` has a non-blank title or body."""
        return any(note.has_content for note in self._store.get_items(key))

    def marked_grid(self, anchor: MonthAnchor) -> list[list[CalendarCell]]:
        """``month_grid`` with ``has_record`` filled in from one store read."""
        store = self._store.load()
        marked = {
            key for key, bucket in store.root.items()
            if any(note.has_content for note in bucket.items)
        }
        grid = self.month_grid(anchor)
        for week in grid:
            for cell in week:
                cell.has_record = cell.date_key in marked
        return grid
