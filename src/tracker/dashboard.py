"""Dashboard - wires the exercise feed into the Gantt chart.

Fetch failures never reach the caller: the chart is shown empty and the error
is logged.
"""

from datetime import date
from typing import Callable

from src.tracker.api import TrackerClient
from src.tracker.errors import TrackerError
from src.tracker.logging import get_logger
from src.tracker.models import Event, Exercise
from src.tracker.timeline.chart import ChartLayout, GanttChart
from src.tracker.timeline.interaction import ClickAction, ClickRouter

log = get_logger(__name__)


class Dashboard:
    """Exercise timeline backed by the REST API.

    Args:
        client: REST client supplying exercises.
        chart: Chart holding view state; a month view is created if omitted.
        on_open_details: Opens the detail form for a clicked bar.
        on_create_event: Opens the new-event form for a clicked cell.
        division_name: Only show exercises tasking this division.
        team_name: Only show exercises involving this team.
    """

    def __init__(
        self,
        client: TrackerClient,
        chart: GanttChart | None = None,
        *,
        on_open_details: Callable[[Exercise, Event | None], None] | None = None,
        on_create_event: Callable[[date, Exercise], None] | None = None,
        division_name: str | None = None,
        team_name: str | None = None,
    ) -> None:
        self.client = client
        self.chart = chart or GanttChart()
        self.division_name = division_name
        self.team_name = team_name
        self.router = ClickRouter(
            on_create_event=on_create_event,
            on_open_details=on_open_details,
        )

    @property
    def exercises(self) -> list[Exercise]:
        return self.chart.exercises

    async def refresh(self) -> list[Exercise]:
        """Reload exercises; on failure the chart is emptied."""
        try:
            exercises = await self.client.list_exercises(
                division_name=self.division_name,
                team_name=self.team_name,
            )
        except TrackerError as e:
            log.error("exercises_fetch_failed", error=str(e), type=type(e).__name__)
            exercises = []

        self.chart.set_exercises(exercises)
        log.info("exercises_loaded", count=len(exercises))
        return exercises

    def layout(self, today: date | None = None) -> ChartLayout:
        return self.chart.layout(today)

    def click(
        self,
        layout: ChartLayout,
        row_index: int,
        x_percent: float,
        y_px: float = 0.0,
    ) -> ClickAction | None:
        return self.router.click(layout, row_index, x_percent, y_px)

    async def select_exercise(self, exercise: Exercise, event: Event | None = None) -> list[Exercise]:
        """Open the detail form for an exercise (or one of its events), then refetch.

        The details callback is expected to return once the form is closed.

        Returns:
            The reloaded exercises.
        """
        log.debug(
            "exercise_selected",
            exercise_id=exercise.id,
            event_id=event.id if event else None,
        )
        if self.router.on_open_details is not None:
            self.router.on_open_details(exercise, event)
        return await self.refresh()

    async def details_closed(self) -> None:
        """Pick up edits made in a detail or create form."""
        await self.refresh()
