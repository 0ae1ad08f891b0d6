"""Click hit-testing and routing for the Gantt timeline.

Cells and bars occupy the same screen region. Each hit target carries an
explicit z-index and a click resolves to the single topmost target holding
the point, so a bar click never also registers as a cell click.
"""

import math
from datetime import date, timedelta
from typing import TYPE_CHECKING, Callable, Literal

from pydantic import BaseModel

from src.tracker.logging import get_logger
from src.tracker.models import Event, Exercise
from src.tracker.timeline.layout import (
    BAR_LANE_PX,
    EVENT_SLOT_PX,
    BarGeometry,
    EventPlacement,
    rendered_width_px,
)
from src.tracker.timeline.window import ViewWindow

if TYPE_CHECKING:
    from src.tracker.timeline.chart import ChartLayout

log = get_logger(__name__)

CELL_Z = 0
BAR_Z = 10
EVENT_Z = 20

TargetKind = Literal["cell", "bar", "event"]


class HitTarget(BaseModel):
    kind: TargetKind
    row_index: int
    z_index: int
    left_percent: float
    right_percent: float
    # Vertical extent relative to the exercise lane centre; None spans the row
    top_px: float | None = None
    bottom_px: float | None = None
    exercise: Exercise
    event: Event | None = None

    def contains(self, row_index: int, x_percent: float, y_px: float) -> bool:
        if row_index != self.row_index:
            return False
        if not self.left_percent <= x_percent <= self.right_percent:
            return False
        if self.top_px is None or self.bottom_px is None:
            return True
        return self.top_px <= y_px < self.bottom_px


class ClickAction(BaseModel):
    kind: Literal["create_event", "open_details"]
    exercise: Exercise
    event: Event | None = None
    on_date: date | None = None


def drawn_right_percent(
    geometry: BarGeometry,
    name: str,
    timeline_width_px: float | None = None,
) -> float:
    """Right edge of a bar as drawn, including any widening to fit its label."""
    left = geometry.rendered_left_percent
    if not timeline_width_px:
        return left + geometry.rendered_width_percent
    drawn_percent = rendered_width_px(geometry, name, timeline_width_px) / timeline_width_px * 100
    return min(100.0, left + drawn_percent)


def row_targets(
    row_index: int,
    exercise: Exercise,
    bar: BarGeometry,
    placements: list[EventPlacement],
    timeline_width_px: float | None = None,
) -> list[HitTarget]:
    """Hit targets for one row: the cell grid, the exercise bar and its event bars.

    With timeline_width_px given, bar targets cover the drawn width rather
    than just the date span, so a click on a widened label hits its bar.
    """
    targets = [
        HitTarget(
            kind="cell",
            row_index=row_index,
            z_index=CELL_Z,
            left_percent=0.0,
            right_percent=100.0,
            exercise=exercise,
        )
    ]
    if bar.visible:
        targets.append(
            HitTarget(
                kind="bar",
                row_index=row_index,
                z_index=BAR_Z,
                left_percent=bar.rendered_left_percent,
                right_percent=drawn_right_percent(bar, exercise.name, timeline_width_px),
                top_px=-BAR_LANE_PX / 2,
                bottom_px=BAR_LANE_PX / 2,
                exercise=exercise,
            )
        )
    for placement in placements:
        geometry = placement.geometry
        if not geometry.visible:
            continue
        targets.append(
            HitTarget(
                kind="event",
                row_index=row_index,
                z_index=EVENT_Z,
                left_percent=geometry.rendered_left_percent,
                right_percent=drawn_right_percent(geometry, placement.event.name, timeline_width_px),
                top_px=placement.offset_px - EVENT_SLOT_PX / 2,
                bottom_px=placement.offset_px + EVENT_SLOT_PX / 2,
                exercise=exercise,
                event=placement.event,
            )
        )
    return targets


def resolve_click(
    targets: list[HitTarget],
    row_index: int,
    x_percent: float,
    y_px: float = 0.0,
) -> HitTarget | None:
    """Topmost target under the point; earlier targets win z-index ties."""
    hit: HitTarget | None = None
    for target in targets:
        if not target.contains(row_index, x_percent, y_px):
            continue
        if hit is None or target.z_index > hit.z_index:
            hit = target
    return hit


def date_at(window: ViewWindow, x_percent: float) -> date:
    """Calendar date under a horizontal position of the timeline."""
    x_percent = min(100.0, max(0.0, x_percent))
    day = math.floor(x_percent / 100 * window.total_days)
    return window.anchor_start + timedelta(days=min(day, window.total_days - 1))


class ClickRouter:
    """Dispatches timeline clicks to the collaborators that open forms.

    Args:
        on_create_event: Called with (date, exercise) for a click on an empty cell.
        on_open_details: Called with (exercise, event) for a click on a bar;
            event is None for the exercise bar itself.
    """

    def __init__(
        self,
        on_create_event: Callable[[date, Exercise], None] | None = None,
        on_open_details: Callable[[Exercise, Event | None], None] | None = None,
    ) -> None:
        self.on_create_event = on_create_event
        self.on_open_details = on_open_details

    def click(
        self,
        layout: "ChartLayout",
        row_index: int,
        x_percent: float,
        y_px: float = 0.0,
    ) -> ClickAction | None:
        """Resolve a click and invoke exactly one callback.

        Returns:
            The routed action, or None when nothing was hit.
        """
        target = resolve_click(layout.targets, row_index, x_percent, y_px)
        if target is None:
            log.debug("click_missed", row_index=row_index, x_percent=x_percent)
            return None

        if target.kind == "cell":
            action = ClickAction(
                kind="create_event",
                exercise=target.exercise,
                on_date=date_at(layout.window, x_percent),
            )
            if self.on_create_event is not None:
                self.on_create_event(action.on_date, target.exercise)
        else:
            action = ClickAction(
                kind="open_details",
                exercise=target.exercise,
                event=target.event,
            )
            if self.on_open_details is not None:
                self.on_open_details(target.exercise, target.event)

        log.debug(
            "click_routed",
            action=action.kind,
            exercise_id=target.exercise.id,
            event_id=target.event.id if target.event else None,
        )
        return action
