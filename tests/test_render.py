"""Tests for per-cell reservation rendering and the HTML week view."""

from datetime import date

from shared_calendar.grid import SLOT_COUNT
from shared_calendar.models import Reservation
from shared_calendar.registry import user_color
from shared_calendar.render import (
    HIGHLIGHT_COLOR,
    grid_html,
    render_cell,
    render_week,
    reservations_for_cell,
)
from shared_calendar.week import WeekWindow

from conftest import NEXT_WEEK, WEEK


def _res(rid, user="Ana", day="Wed", start=4, end=6, description="Gym", week=WEEK):
    return Reservation(id=rid, day=day, start=start, end=end, user=user,
                       description=description, weekStart=week)


class TestCellQuery:
    def test_filters_by_day_slot_and_week(self):
        reservations = [
            _res("a"),
            _res("b", day="Thu"),
            _res("c", start=7, end=9),
            _res("d", week=NEXT_WEEK),
        ]
        assert [r.id for r in reservations_for_cell(reservations, "Wed", 5, WEEK)] == ["a"]

    def test_week_key_selects_the_week(self):
        reservations = [_res("a", week="2024-03-04")]
        assert reservations_for_cell(reservations, "Wed", 4, "2024-03-04")
        assert not reservations_for_cell(reservations, "Wed", 4, "2024-03-11")


class TestRenderCell:
    def test_name_on_first_slot_description_after(self):
        reservations = [_res("a", start=4, end=6)]
        assert render_cell(reservations, "Wed", 4, WEEK).segments[0].text == "Ana"
        assert render_cell(reservations, "Wed", 5, WEEK).segments[0].text == "Gym"

    def test_overlap_splits_equally_in_store_order(self):
        reservations = [_res("b", user="Bo", start=3, end=5, description="Run"), _res("a")]
        cell = render_cell(reservations, "Wed", 4, WEEK)
        assert [s.reservation.id for s in cell.segments] == ["b", "a"]
        assert [s.width for s in cell.segments] == [0.5, 0.5]
        assert [s.text for s in cell.segments] == ["Run", "Ana"]

    def test_segment_count_matches_overlaps(self):
        reservations = [_res(str(i), user=f"U{i}") for i in range(3)]
        cell = render_cell(reservations, "Wed", 5, WEEK)
        assert len(cell.segments) == 3
        assert abs(sum(s.width for s in cell.segments) - 1.0) < 1e-9

    def test_colour_from_user(self):
        cell = render_cell([_res("a", user="Bo")], "Wed", 4, WEEK)
        assert cell.segments[0].color == user_color("Bo")

    def test_empty_cell(self):
        cell = render_cell([], "Mon", 0, WEEK)
        assert cell.segments == ()
        assert cell.empty


class TestRenderWeek:
    def test_grid_shape_and_dates(self):
        grid = render_week([], WeekWindow(date(2024, 3, 6)))
        assert len(grid.rows) == SLOT_COUNT
        assert all(len(row) == 7 for row in grid.rows)
        assert grid.dates[0] == date(2024, 3, 4)
        assert grid.week_number == 10
        assert grid.week_key == WEEK

    def test_only_shown_week_is_rendered(self):
        grid = render_week([_res("a"), _res("b", week=NEXT_WEEK)], WeekWindow(date(2024, 3, 4)))
        assert [s.reservation.id for s in grid.cell("Wed", 5).segments] == ["a"]

    def test_selection_highlight_over_reservation(self, machine):
        machine.press("Wed", 5, "Bo", WEEK)
        grid = render_week([_res("a")], WeekWindow(date(2024, 3, 4)), machine)
        assert grid.cell("Wed", 5).highlighted
        assert not grid.cell("Wed", 6).highlighted
        assert HIGHLIGHT_COLOR in grid_html(grid)


class TestGridHtml:
    def test_text_is_escaped(self):
        grid = render_week([_res("a", user="<b>Ana</b>")], WeekWindow(date(2024, 3, 4)))
        page = grid_html(grid)
        assert "&lt;b&gt;Ana&lt;/b&gt;" in page
        assert "<b>Ana</b>" not in page

    def test_headers_and_times(self):
        page = grid_html(render_week([], WeekWindow(date(2024, 3, 4))))
        assert "Mon<br>" in page
        assert "Mar 4" in page
        assert "21:30" in page
        assert page.count("<tr>") == SLOT_COUNT + 1
