"""Zoom state for one chart instance.

The level is a continuous scale factor applied to column widths and label
density, independent of the day/week/month granularity. Gestures show the
zoom controls; a debounced timer on the running asyncio loop hides them again
after a period of inactivity. The timer never touches the level itself.
"""

import asyncio

from src.tracker.config import TrackerConfig
from src.tracker.logging import get_logger

log = get_logger(__name__)

MIN_ZOOM = 0.5
MAX_ZOOM = 3.0
ZOOM_STEP = 0.1
DEFAULT_ZOOM = 1.0
CONTROLS_HIDE_SECONDS = 3.0


def clamp_zoom(level: float) -> float:
    # Rounded so repeated 0.1 steps land exactly on the bounds
    return round(min(MAX_ZOOM, max(MIN_ZOOM, level)), 2)


class ZoomController:
    """Owns the zoom level and the visibility of the zoom controls."""

    def __init__(
        self,
        level: float = DEFAULT_ZOOM,
        *,
        hide_after: float = CONTROLS_HIDE_SECONDS,
    ) -> None:
        self.level = clamp_zoom(level)
        self.hide_after = hide_after
        self.controls_visible = False
        self._hide_handle: asyncio.TimerHandle | None = None

    @classmethod
    def from_config(cls, config: TrackerConfig, level: float = DEFAULT_ZOOM) -> "ZoomController":
        """Build a controller using the configured control hide delay."""
        return cls(level, hide_after=config.zoom_controls_hide_seconds)

    def zoom_in(self) -> float:
        return self.set_level(self.level + ZOOM_STEP)

    def zoom_out(self) -> float:
        return self.set_level(self.level - ZOOM_STEP)

    def set_level(self, level: float) -> float:
        """Set the zoom level (clamped) and show the controls.

        Returns:
            The level actually applied.
        """
        previous = self.level
        self.level = clamp_zoom(level)
        if self.level != previous:
            log.debug("zoom_changed", previous=previous, level=self.level)
        self._show_controls()
        return self.level

    def handle_wheel(self, delta_y: float, modifier: bool) -> bool:
        """Handle one scroll tick over the timeline.

        Args:
            delta_y: Scroll delta; negative scrolls up (zoom in).
            modifier: Whether the platform zoom modifier (Ctrl/Cmd) is held.

        Returns:
            True if the tick was consumed as a zoom gesture, False if it
            should fall through to normal panning.
        """
        if not modifier:
            return False
        if delta_y < 0:
            self.zoom_in()
        elif delta_y > 0:
            self.zoom_out()
        else:
            self._show_controls()
        return True

    def _show_controls(self) -> None:
        self.controls_visible = True
        self._cancel_hide()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (e.g. one-shot CLI render): controls stay shown
            return
        self._hide_handle = loop.call_later(self.hide_after, self._hide_controls)

    def _hide_controls(self) -> None:
        self._hide_handle = None
        self.controls_visible = False

    def _cancel_hide(self) -> None:
        if self._hide_handle is not None:
            self._hide_handle.cancel()
            self._hide_handle = None

    def close(self) -> None:
        """Cancel any pending hide timer."""
        self._cancel_hide()
