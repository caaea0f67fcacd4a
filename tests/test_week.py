"""Tests for Monday anchoring, ISO weeks and the week navigator."""

from datetime import date, datetime, timedelta

import pytest

from shared_calendar.week import WeekWindow, add_days, iso_week_number, monday, ymd


# ─── DATE ARITHMETIC ──────────────────────────────────────────────────────────

class TestMonday:
    @pytest.mark.parametrize("day", [date(2024, 3, 4) + timedelta(days=i) for i in range(7)])
    def test_whole_week_maps_to_same_monday(self, day):
        assert monday(day) == date(2024, 3, 4)

    def test_sunday_goes_back_six_days(self):
        assert monday(date(2024, 3, 10)) == date(2024, 3, 4)

    def test_datetime_is_normalised_to_a_date(self):
        assert monday(datetime(2024, 3, 6, 23, 59)) == date(2024, 3, 4)

    def test_idempotent_and_always_monday(self):
        start = date(2023, 12, 20)
        for i in range(60):
            d = start + timedelta(days=i)
            m = monday(d)
            assert monday(m) == m
            assert m.weekday() == 0

    def test_across_year_boundary(self):
        assert monday(date(2025, 1, 1)) == date(2024, 12, 30)


class TestHelpers:
    def test_add_days(self):
        assert add_days(date(2024, 2, 28), 2) == date(2024, 3, 1)
        assert add_days(date(2024, 3, 4), -7) == date(2024, 2, 26)

    def test_ymd(self):
        assert ymd(date(2024, 3, 4)) == "2024-03-04"
        assert ymd(datetime(2024, 1, 9, 8, 30)) == "2024-01-09"


class TestIsoWeekNumber:
    @pytest.mark.parametrize(
        "day, week",
        [
            (date(2024, 1, 1), 1),
            (date(2024, 3, 4), 10),
            (date(2024, 12, 30), 1),
            (date(2021, 1, 1), 53),
            (date(2023, 1, 1), 52),
            (date(2026, 12, 31), 53),
        ],
    )
    def test_reference_dates(self, day, week):
        assert iso_week_number(day) == week


# ─── NAVIGATOR ────────────────────────────────────────────────────────────────

class TestWeekWindow:
    def test_anchor_is_monday(self):
        window = WeekWindow(date(2024, 3, 7))
        assert window.monday == date(2024, 3, 4)
        assert window.key == "2024-03-04"

    def test_dates_are_seven_consecutive_days(self):
        window = WeekWindow(date(2024, 3, 4))
        assert window.dates == [date(2024, 3, 4) + timedelta(days=i) for i in range(7)]
        assert window.sunday == date(2024, 3, 10)

    def test_prev_and_next(self):
        window = WeekWindow(date(2024, 3, 4))
        window.next()
        assert window.key == "2024-03-11"
        window.prev()
        window.prev()
        assert window.key == "2024-02-26"

    def test_jump_to_date(self):
        window = WeekWindow(date(2024, 3, 4))
        window.jump_to_date(date(2025, 7, 19))
        assert window.monday == date(2025, 7, 14)

    def test_jump_to_today(self):
        window = WeekWindow(date(2020, 1, 1))
        window.jump_to_today(today=date(2024, 3, 9))
        assert window.key == "2024-03-04"

    def test_default_anchor_is_this_week(self):
        assert WeekWindow().monday == monday(date.today())

    def test_contains(self):
        window = WeekWindow(date(2024, 3, 4))
        assert window.contains(date(2024, 3, 10))
        assert not window.contains(date(2024, 3, 11))

    def test_label(self):
        window = WeekWindow(date(2024, 3, 4))
        assert window.week_number == 10
        assert window.label == "Week 10 · Mar 4 – Mar 10, 2024"
