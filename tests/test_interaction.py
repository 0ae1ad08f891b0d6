"""Tests for click hit-testing and routing."""

from datetime import date

import pytest

from src.tracker.timeline.chart import GanttChart
from src.tracker.timeline.interaction import (
    BAR_Z,
    CELL_Z,
    ClickRouter,
    HitTarget,
    date_at,
    drawn_right_percent,
    resolve_click,
)
from src.tracker.timeline.layout import BarGeometry, min_label_width_px
from src.tracker.timeline.window import compute_window
from tests.fakes import make_event, make_exercise

pytestmark = pytest.mark.unit

TODAY = date(2024, 6, 15)


class Recorder:
    def __init__(self):
        self.created = []
        self.opened = []

    def on_create_event(self, on_date, exercise):
        self.created.append((on_date, exercise.id))

    def on_open_details(self, exercise, event):
        self.opened.append((exercise.id, event.id if event else None))


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def router(recorder):
    return ClickRouter(
        on_create_event=recorder.on_create_event,
        on_open_details=recorder.on_open_details,
    )


@pytest.fixture
def layout():
    exercise = make_exercise(
        1,
        date(2024, 6, 10),
        date(2024, 6, 20),
        events=[make_event(7, date(2024, 6, 11), date(2024, 6, 13))],
    )
    return GanttChart([exercise]).layout(TODAY)


class TestClickRouter:
    def test_bar_click_opens_details_only(self, router, recorder, layout):
        action = router.click(layout, 0, 1.8)

        assert action.kind == "open_details"
        assert recorder.opened == [(1, None)]
        assert recorder.created == []

    def test_cell_click_creates_event_on_date(self, router, recorder, layout):
        action = router.click(layout, 0, 50.0)

        assert action.kind == "create_event"
        assert action.on_date == date(2025, 6, 1)
        assert recorder.created == [(date(2025, 6, 1), 1)]
        assert recorder.opened == []

    def test_event_bar_above_lane_opens_event(self, router, recorder, layout):
        # Event sits one slot above the exercise lane
        action = router.click(layout, 0, 1.5, y_px=-20)

        assert action.event.id == 7
        assert recorder.opened == [(1, 7)]
        assert recorder.created == []

    def test_exercise_lane_under_event_column(self, router, recorder, layout):
        router.click(layout, 0, 1.5, y_px=0)

        assert recorder.opened == [(1, None)]

    def test_click_outside_rows_hits_nothing(self, router, recorder, layout):
        assert router.click(layout, 5, 50.0) is None
        assert recorder.created == []
        assert recorder.opened == []

    def test_missing_callbacks_still_return_action(self, layout):
        action = ClickRouter().click(layout, 0, 50.0)

        assert action.kind == "create_event"

    def test_click_on_widened_label_opens_details(self, router, recorder):
        exercise = make_exercise(1, date(2024, 6, 10), date(2024, 6, 11), name="Resolute Dragon")
        layout = GanttChart([exercise]).layout(TODAY)
        # One day is ~0.14% of the window; the label widens the bar to ~5%
        bar = layout.rows[0].bar
        assert bar.right_percent < 2.0

        router.click(layout, 0, 4.0)
        router.click(layout, 0, 7.0)

        assert recorder.opened == [(1, None)]
        assert recorder.created == [(date(2024, 7, 22), 1)]


class TestDrawnRightPercent:
    def test_widened_to_label(self):
        geometry = BarGeometry(left_percent=10, width_percent=0.1)

        right = drawn_right_percent(geometry, "Resolute Dragon", 2000)

        assert right == pytest.approx(10 + min_label_width_px("Resolute Dragon") / 2000 * 100)

    def test_clipped_at_window_end(self):
        geometry = BarGeometry(left_percent=99.5, width_percent=0.1)

        assert drawn_right_percent(geometry, "Resolute Dragon", 2000) == 100.0

    def test_without_timeline_width_uses_date_span(self):
        geometry = BarGeometry(left_percent=10, width_percent=0.1)

        assert drawn_right_percent(geometry, "Resolute Dragon") == pytest.approx(10.1)


class TestResolveClick:
    def test_highest_z_index_wins(self, june_exercise):
        cell = HitTarget(
            kind="cell",
            row_index=0,
            z_index=CELL_Z,
            left_percent=0,
            right_percent=100,
            exercise=june_exercise,
        )
        bar = HitTarget(
            kind="bar",
            row_index=0,
            z_index=BAR_Z,
            left_percent=10,
            right_percent=20,
            top_px=-14,
            bottom_px=14,
            exercise=june_exercise,
        )

        assert resolve_click([bar, cell], 0, 15).kind == "bar"
        assert resolve_click([cell, bar], 0, 15).kind == "bar"
        assert resolve_click([cell, bar], 0, 15, y_px=30).kind == "cell"
        assert resolve_click([cell, bar], 0, 50).kind == "cell"


class TestDateAt:
    def test_maps_position_to_day(self):
        window = compute_window("month", TODAY)

        assert date_at(window, 0) == date(2024, 6, 1)
        assert date_at(window, 50) == date(2025, 6, 1)

    def test_right_edge_stays_in_window(self):
        window = compute_window("month", TODAY)

        assert date_at(window, 100) == date(2026, 5, 31)
        assert date_at(window, 140) == date(2026, 5, 31)
