"""Date keys: canonical ``YYYY-MM-DD`` strings for local calendar days.

Day arithmetic is done on a midday-normalised instant. A daylight-saving
transition moves wall time by at most an hour, so starting from 12:00 the
result always lands inside the intended calendar day.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_KEY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Resolve a configured zone name.

    ``None``, ``""`` and ``"local"`` mean the host's local time and resolve to
    ``None`` (naive local datetimes). Anything else must be an IANA name.

    Raises ValueError for unknown zone identifiers.
    """
    if name is None:
        return None
    s = name.strip()
    if not s or s.lower() in {"local", "system"}:
        return None
    try:
        return ZoneInfo(s)
    except (ZoneInfoNotFoundError, ValueError) as ex:
        raise ValueError(f"Invalid timezone identifier: {name!r}") from ex


def midday(instant: datetime) -> datetime:
    """Same calendar day, wall clock fixed at 12:00:00.000."""
    return instant.replace(hour=12, minute=0, second=0, microsecond=0)


def key_for(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_key(key: str) -> date:
    """Parse a date key back into a ``date``.

    Raises ValueError when ``key`` is not a zero-padded ``YYYY-MM-DD`` string
    naming a real day.
    """
    m = _KEY_RE.match(key or "")
    if not m:
        raise ValueError(f"Invalid date key: {key!r}")
    year, month, day = (int(g) for g in m.groups())
    try:
        return date(year, month, day)
    except ValueError as ex:
        raise ValueError(f"Invalid date key: {key!r}") from ex


class DateKeyCodec:
    """Maps "now" and arbitrary instants to date keys in one time zone.

    ``tz=None`` uses the host's local zone. ``clock`` returns the current
    instant and exists so tests can pin "now".
    """

    def __init__(self, tz: Optional[tzinfo] = None, clock: Optional[Clock] = None) -> None:
        self._tz = tz
        self._clock = clock

    @property
    def tz(self) -> Optional[tzinfo]:
        return self._tz

    def now(self) -> datetime:
        """Current instant expressed in the codec's zone."""
        instant = self._clock() if self._clock else datetime.now(self._tz)
        return self._localize(instant)

    def _localize(self, instant: datetime) -> datetime:
        # Naive instants are taken as already local.
        if instant.tzinfo is None:
            return instant
        return instant.astimezone(self._tz)

    def format_key(self, instant: datetime) -> str:
        """Calendar date of ``instant`` in the codec's zone."""
        return key_for(self._localize(instant).date())

    def key_minus(self, days: int) -> str:
        """Key of the calendar day ``days`` days before today."""
        if days < 0:
            raise ValueError(f"days must be non-negative, got {days}")
        anchor = midday(self.now())
        # Wall-clock arithmetic: the zone offset is recomputed for the result.
        return self.format_key(anchor - timedelta(days=days))

    def today_key(self) -> str:
        return self.key_minus(0)

    def today(self) -> date:
        return parse_key(self.today_key())
