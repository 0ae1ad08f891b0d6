"""GanttChart - assembles the full timeline layout for a set of exercises.

The chart holds only view state (granularity, zoom, current exercises). Every
call to layout() recomputes the window, headers, rows and hit targets from
that state and the given "today".
"""

from datetime import date
from typing import Iterable

from pydantic import BaseModel

from src.tracker.logging import get_logger
from src.tracker.models import Exercise, Granularity
from src.tracker.timeline.interaction import HitTarget, row_targets
from src.tracker.timeline.layout import (
    BarGeometry,
    EventPlacement,
    layout_bar,
    rendered_width_px,
    row_height_px,
    stack_overlapping_events,
    tooltip_text,
)
from src.tracker.timeline.readiness import Readiness, readiness, sort_by_priority
from src.tracker.timeline.window import (
    HeaderCell,
    ViewWindow,
    build_headers,
    column_width_px,
    compute_window,
)
from src.tracker.timeline.zoom import ZoomController

log = get_logger(__name__)


class ChartRow(BaseModel):
    """One exercise row; the label is always drawn, the bar only when visible."""

    index: int
    exercise: Exercise
    label: str
    bar: BarGeometry
    bar_width_px: float
    tooltip: str
    events: list[EventPlacement]
    height_px: int
    readiness: Readiness | None = None


class ChartLayout(BaseModel):
    window: ViewWindow
    headers: list[HeaderCell]
    rows: list[ChartRow]
    targets: list[HitTarget]
    zoom_level: float
    controls_visible: bool
    column_width_px: float
    timeline_width_px: float


class GanttChart:
    """Timeline view over a list of exercises.

    Usage:
        chart = GanttChart(exercises, granularity=Granularity.WEEK)
        layout = chart.layout(today=date(2024, 6, 15))
    """

    def __init__(
        self,
        exercises: Iterable[Exercise] = (),
        *,
        granularity: Granularity | str = Granularity.MONTH,
        zoom: ZoomController | None = None,
    ) -> None:
        self.exercises: list[Exercise] = list(exercises)
        self.granularity = Granularity(granularity)
        self.zoom = zoom or ZoomController()

    def set_exercises(self, exercises: Iterable[Exercise]) -> None:
        self.exercises = list(exercises)

    def set_granularity(self, granularity: Granularity | str) -> None:
        granularity = Granularity(granularity)
        if granularity is not self.granularity:
            log.debug("granularity_changed", previous=self.granularity.value, granularity=granularity.value)
        self.granularity = granularity

    def layout(self, today: date | None = None) -> ChartLayout:
        """Compute headers, rows and hit targets for the current view state."""
        window = compute_window(self.granularity, today)
        zoom_level = self.zoom.level
        headers = build_headers(window, zoom_level)
        column_px = column_width_px(self.granularity, zoom_level)
        timeline_px = column_px * len(headers)

        rows: list[ChartRow] = []
        targets: list[HitTarget] = []
        for index, exercise in enumerate(sort_by_priority(self.exercises)):
            bar = layout_bar(exercise, window)
            placements = stack_overlapping_events(exercise, window)
            rows.append(
                ChartRow(
                    index=index,
                    exercise=exercise,
                    label=exercise.name,
                    bar=bar,
                    bar_width_px=rendered_width_px(bar, exercise.name, timeline_px),
                    tooltip=tooltip_text(exercise),
                    events=placements,
                    height_px=row_height_px(placements),
                    readiness=readiness(exercise),
                )
            )
            targets.extend(row_targets(index, exercise, bar, placements, timeline_px))

        log.debug(
            "chart_laid_out",
            granularity=self.granularity.value,
            headers=len(headers),
            rows=len(rows),
            hidden_bars=sum(1 for row in rows if not row.bar.visible),
        )
        return ChartLayout(
            window=window,
            headers=headers,
            rows=rows,
            targets=targets,
            zoom_level=zoom_level,
            controls_visible=self.zoom.controls_visible,
            column_width_px=column_px,
            timeline_width_px=timeline_px,
        )
