"""Unit tests for studylog.datekey — date keys and DST-safe day arithmetic."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from studylog.datekey import (
    DateKeyCodec,
    key_for,
    midday,
    parse_key,
    resolve_timezone,
)

NEW_YORK = ZoneInfo("America/New_York")


def _codec_at(instant: datetime, tz=None) -> DateKeyCodec:
    """Codec whose clock is pinned to ``instant``."""
    return DateKeyCodec(tz=tz, clock=lambda: instant)


# ---------------------------------------------------------------------------
# Formatting and parsing
# ---------------------------------------------------------------------------


class TestFormatKey:
    def test_zero_padded(self):
        codec = _codec_at(datetime(2024, 1, 5, 9, 0))
        assert codec.format_key(datetime(2024, 1, 5, 23, 59)) == "2024-01-05"

    def test_time_of_day_ignored(self):
        codec = DateKeyCodec()
        assert codec.format_key(datetime(2024, 3, 9, 0, 0)) == codec.format_key(
            datetime(2024, 3, 9, 23, 59, 59)
        )

    def test_aware_instant_converted_to_codec_zone(self):
        """03:00 UTC on the 10th is still the 9th in New York."""
        codec = DateKeyCodec(tz=NEW_YORK)
        instant = datetime(2024, 1, 10, 3, 0, tzinfo=timezone.utc)
        assert codec.format_key(instant) == "2024-01-09"

    def test_key_for_date(self):
        assert key_for(date(987, 6, 5)) == "0987-06-05"


class TestParseKey:
    def test_round_trip(self):
        assert parse_key("2024-02-29") == date(2024, 2, 29)

    @pytest.mark.parametrize(
        "bad", ["2024-2-01", "20240201", "2023-02-29", "2024-13-01", "", "yesterday"]
    )
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValueError):
            parse_key(bad)


# ---------------------------------------------------------------------------
# Relative keys
# ---------------------------------------------------------------------------


class TestKeyMinus:
    def test_zero_is_today(self):
        codec = _codec_at(datetime(2024, 1, 10, 8, 30))
        assert codec.key_minus(0) == codec.today_key() == "2024-01-10"

    def test_crosses_month_and_year(self):
        codec = _codec_at(datetime(2024, 1, 3, 12, 0))
        assert codec.key_minus(1) == "2024-01-02"
        assert codec.key_minus(3) == "2023-12-31"
        assert codec.key_minus(14) == "2023-12-20"

    def test_leap_day(self):
        codec = _codec_at(datetime(2024, 3, 1, 7, 0))
        assert codec.key_minus(1) == "2024-02-29"

    def test_negative_rejected(self):
        codec = _codec_at(datetime(2024, 1, 10, 8, 30))
        with pytest.raises(ValueError):
            codec.key_minus(-1)

    def test_spring_forward_window(self):
        """Seven days back across the March DST switch lands on the right day.

        Subtracting 7 * 86,400,000 ms from 00:30 EDT would land at 23:30 EST
        of the previous day; counting calendar days must not.
        """
        instant = datetime(2024, 3, 12, 0, 30, tzinfo=NEW_YORK)
        utc = instant.astimezone(timezone.utc)
        naive_ms = (utc - timedelta(milliseconds=7 * 86_400_000)).astimezone(NEW_YORK)
        assert naive_ms.date() == date(2024, 3, 4)

        codec = _codec_at(instant, tz=NEW_YORK)
        assert codec.key_minus(7) == "2024-03-05"

    def test_fall_back_window(self):
        instant = datetime(2024, 11, 3, 23, 30, tzinfo=NEW_YORK)
        codec = _codec_at(instant, tz=NEW_YORK)
        assert codec.key_minus(7) == "2024-10-27"
        assert codec.key_minus(1) == "2024-11-02"

    def test_day_count_not_millisecond_delta(self):
        codec = _codec_at(datetime(2024, 3, 20, 0, 5, tzinfo=NEW_YORK), tz=NEW_YORK)
        for days in range(0, 31):
            expected = date(2024, 3, 20) - timedelta(days=days)
            assert parse_key(codec.key_minus(days)) == expected

    def test_midday_normalisation(self):
        m = midday(datetime(2024, 5, 1, 23, 59, 59, 999999))
        assert (m.hour, m.minute, m.second, m.microsecond) == (12, 0, 0, 0)
        assert m.date() == date(2024, 5, 1)


class TestResolveTimezone:
    @pytest.mark.parametrize("name", [None, "", "local", "LOCAL", "system"])
    def test_local(self, name):
        assert resolve_timezone(name) is None

    def test_iana(self):
        assert resolve_timezone("Europe/Berlin") == ZoneInfo("Europe/Berlin")

    def test_invalid(self):
        with pytest.raises(ValueError):
            resolve_timezone("Not/AZone")
