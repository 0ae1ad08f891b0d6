"""Gantt timeline layout engine: windows, headers, bars, stacking, zoom and clicks."""

from src.tracker.timeline.chart import ChartLayout, ChartRow, GanttChart
from src.tracker.timeline.interaction import ClickAction, ClickRouter, resolve_click
from src.tracker.timeline.layout import BarGeometry, layout_bar, stack_overlapping_events
from src.tracker.timeline.readiness import readiness, sort_by_priority
from src.tracker.timeline.window import ViewWindow, compute_window, header_label
from src.tracker.timeline.zoom import ZoomController

__all__ = [
    "GanttChart",
    "ChartLayout",
    "ChartRow",
    "ClickAction",
    "ClickRouter",
    "resolve_click",
    "BarGeometry",
    "layout_bar",
    "stack_overlapping_events",
    "readiness",
    "sort_by_priority",
    "ViewWindow",
    "compute_window",
    "header_label",
    "ZoomController",
]
