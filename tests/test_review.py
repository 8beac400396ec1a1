"""Tests for studylog.review — review slot planning."""

from datetime import datetime

import pytest

from studylog.datekey import DateKeyCodec
from studylog.errors import OffsetOutOfRangeError
from studylog.review import FIXED_OFFSETS, ReviewPlanner, label_for

NOW = datetime(2024, 1, 15, 9, 30)


@pytest.fixture()
def planner() -> ReviewPlanner:
    return ReviewPlanner(DateKeyCodec(clock=lambda: NOW))


class TestLabels:
    @pytest.mark.parametrize(
        "offset, label",
        [
            (0, "today"),
            (1, "yesterday"),
            (7, "one week ago"),
            (14, "two weeks ago"),
        ],
    )
    def test_named(self, offset, label):
        assert label_for(offset, "2024-01-01") == label

    def test_generic(self):
        assert label_for(3, "2024-01-12") == "2024-01-12 (3 days ago)"


class TestPlanFixed:
    def test_offsets(self, planner):
        assert planner.fixed_offsets() == FIXED_OFFSETS == (1, 7, 14)

    def test_plan(self, planner):
        plan = planner.plan_fixed()
        assert [(p.offset, p.date_key, p.label) for p in plan] == [
            (1, "2024-01-14", "yesterday"),
            (7, "2024-01-08", "one week ago"),
            (14, "2024-01-01", "two weeks ago"),
        ]


class TestPlanSelectable:
    def test_today(self, planner):
        entry = planner.plan_selectable(0)
        assert entry.date_key == "2024-01-15"
        assert entry.label == "today"

    def test_arbitrary(self, planner):
        entry = planner.plan_selectable(30)
        assert entry.date_key == "2023-12-16"
        assert entry.label == "2023-12-16 (30 days ago)"

    @pytest.mark.parametrize("offset", [-1, 31, 100])
    def test_out_of_range(self, planner, offset):
        with pytest.raises(OffsetOutOfRangeError):
            planner.plan_selectable(offset)

    def test_out_of_range_is_value_error(self, planner):
        with pytest.raises(ValueError):
            planner.plan_selectable(31)

    def test_custom_maximum(self):
        planner = ReviewPlanner(DateKeyCodec(clock=lambda: NOW), max_offset=14)
        with pytest.raises(OffsetOutOfRangeError):
            planner.plan_selectable(15)

    def test_choices(self, planner):
        choices = planner.offset_choices()
        assert len(choices) == 31
        assert choices[0].label == "today (0 days ago)"
        assert choices[5].offset == 5
        assert choices[5].label == "5 days ago"
