"""Bar geometry and event stacking for the Gantt timeline.

Positions are percentages of the window's total days:

    left  = (start - anchor_start) / total_days * 100
    width = max(1, end - start) / total_days * 100

A bar is drawn only when [left, left + width] intersects [0, 100]; the drawn
part is clipped to that range. The unclipped percentages stay available so
sibling bars are always positioned against the same scale.
"""

from datetime import date, timedelta
from typing import Literal

from pydantic import BaseModel

from src.tracker.models import Event, Exercise, TimeRecord
from src.tracker.timeline.window import ViewWindow

# Vertical step between stacked event bars
EVENT_SLOT_PX = 22
# Height of the primary exercise lane
BAR_LANE_PX = 28

# Label legibility: rendered bars are never narrower than their label
LABEL_CHAR_PX = 7
LABEL_PADDING_PX = 16


class BarGeometry(BaseModel):
    left_percent: float
    width_percent: float

    @property
    def right_percent(self) -> float:
        return self.left_percent + self.width_percent

    @property
    def visible(self) -> bool:
        return self.right_percent > 0 and self.left_percent < 100

    @property
    def rendered_left_percent(self) -> float:
        return max(0.0, self.left_percent) if self.visible else 0.0

    @property
    def rendered_width_percent(self) -> float:
        if not self.visible:
            return 0.0
        return min(100.0, self.right_percent) - self.rendered_left_percent


EventSide = Literal["above", "below", "stack"]


class EventPlacement(BaseModel):
    event: Event
    geometry: BarGeometry
    side: EventSide
    slot: int  # lanes away from the exercise lane
    offset_px: int  # negative is above the exercise lane
    overlaps: bool


def duration_days(record: TimeRecord) -> int:
    """Whole days covered by a record; inverted or empty ranges count as one day."""
    return max(1, (record.end - record.start).days)


def effective_end(record: TimeRecord) -> date:
    """Exclusive end of the drawn interval."""
    return record.start + timedelta(days=duration_days(record))


def layout_bar(record: TimeRecord, window: ViewWindow) -> BarGeometry:
    offset = (record.start - window.anchor_start).days
    return BarGeometry(
        left_percent=offset / window.total_days * 100,
        width_percent=duration_days(record) / window.total_days * 100,
    )


def min_label_width_px(name: str) -> int:
    return len(name) * LABEL_CHAR_PX + LABEL_PADDING_PX


def rendered_width_px(geometry: BarGeometry, name: str, timeline_width_px: float) -> float:
    """Drawn width in pixels, widened to fit the label.

    Only the drawn width changes; percentages used for positioning do not.
    """
    if not geometry.visible:
        return 0.0
    width = geometry.rendered_width_percent / 100 * timeline_width_px
    return max(width, float(min_label_width_px(name)))


def intervals_overlap(a: TimeRecord, b: TimeRecord) -> bool:
    return a.start < effective_end(b) and b.start < effective_end(a)


def stack_overlapping_events(
    exercise: Exercise,
    window: ViewWindow,
    slot_px: int = EVENT_SLOT_PX,
) -> list[EventPlacement]:
    """Assign a vertical offset to every event of an exercise.

    Events overlapping the exercise alternate above and below its lane, each
    side moving one slot further out per event. Events outside the exercise
    interval go into a single descending stack that starts under the deepest
    "below" slot, so no two events share a lane. Iteration order decides the
    stacking; no interval packing is attempted.
    """
    overlap_flags = [intervals_overlap(event, exercise) for event in exercise.events]
    # Overlapping events at odd positions go below the lane
    below_lanes = sum(overlap_flags) // 2

    placements: list[EventPlacement] = []
    above = below = stacked = 0
    overlapping = 0

    for event, overlaps in zip(exercise.events, overlap_flags):
        side: EventSide
        if overlaps:
            if overlapping % 2 == 0:
                above += 1
                side, slot = "above", above
            else:
                below += 1
                side, slot = "below", below
            overlapping += 1
        else:
            stacked += 1
            side, slot = "stack", below_lanes + stacked

        placements.append(
            EventPlacement(
                event=event,
                geometry=layout_bar(event, window),
                side=side,
                slot=slot,
                offset_px=-slot * slot_px if side == "above" else slot * slot_px,
                overlaps=overlaps,
            )
        )
    return placements


def row_height_px(placements: list[EventPlacement], slot_px: int = EVENT_SLOT_PX) -> int:
    """Row height fitting the exercise lane plus the deepest slot on each side."""
    up = max((p.slot for p in placements if p.side == "above"), default=0)
    down = max((p.slot for p in placements if p.side != "above"), default=0)
    return BAR_LANE_PX + slot_px * (up + down)


def _long_date(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def tooltip_text(record: TimeRecord) -> str:
    """Hover text for a bar: name, then the date range."""
    return f"{record.name}\n{_long_date(record.start)} - {_long_date(record.end)}"
