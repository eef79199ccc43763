"""Tests for the slot grid and date helpers."""
from datetime import date, timedelta

import pytest

from slots import SlotGrid, is_valid_date, is_valid_time_slot, parse_date, today, tomorrow


class TestSlotGrid:
    def test_default_grid_has_twenty_half_hour_slots(self):
        grid = SlotGrid()
        times = list(grid.times())

        assert len(grid) == 20
        assert times[:3] == ["08:00", "08:30", "09:00"]
        assert times[-1] == "17:30"

    def test_time_slots_are_prefixed_with_the_date(self):
        assert SlotGrid(9, 10, 30).time_slots("2030-01-01") == [
            "2030-01-01 09:00",
            "2030-01-01 09:30",
        ]

    def test_contains_only_grid_slots_of_the_day(self):
        grid = SlotGrid()

        assert grid.contains("2030-01-01 08:00")
        assert grid.contains("2030-01-01 17:30")
        assert not grid.contains("2030-01-01 08:15")
        assert not grid.contains("2030-01-01 03:07")
        assert not grid.contains("2030-01-01 18:00")

    def test_slot_length_that_does_not_divide_an_hour(self):
        assert list(SlotGrid(8, 10, 45).times()) == ["08:00", "08:45", "09:30"]

    @pytest.mark.parametrize(
        "start, end, minutes",
        [(18, 8, 30), (8, 8, 30), (8, 25, 30), (8, 18, 0), (8, 9, 90)],
    )
    def test_invalid_grid_is_rejected(self, start, end, minutes):
        with pytest.raises(ValueError):
            SlotGrid(start, end, minutes)


class TestDates:
    def test_today_and_tomorrow(self):
        assert today() == date.today().isoformat()
        assert tomorrow() == (date.today() + timedelta(days=1)).isoformat()

    def test_past_date_is_invalid(self):
        assert is_valid_date("2030-01-01", reference=date(2030, 1, 2)) is False

    def test_today_and_future_are_valid(self):
        reference = date(2030, 1, 1)
        assert is_valid_date("2030-01-01", reference=reference) is True
        assert is_valid_date("2031-06-15", reference=reference) is True

    @pytest.mark.parametrize("value", ["", "tomorrow", "2030-13-01", "2030-1-1", "01.01.2030"])
    def test_malformed_date_is_invalid(self, value):
        assert parse_date(value) is None
        assert is_valid_date(value) is False

    def test_time_slot_format(self):
        assert is_valid_time_slot("2030-01-01 08:00") is True
        assert is_valid_time_slot("2030-01-01 8:00") is False
        assert is_valid_time_slot("2030-01-01T08:00") is False
        assert is_valid_time_slot("2030-01-01") is False
