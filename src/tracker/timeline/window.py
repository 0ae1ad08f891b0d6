"""View window and header computation for the Gantt timeline.

The window is anchored on "today" and spans a fixed look-ahead per granularity:

    granularity | anchor_start                        | anchor_end          | header unit
    day         | first of current month              | start + 3 months    | 1 per day
    week        | Sunday of the week holding the 1st  | start + 6 months    | 1 per week
    month       | first of current month              | start + 2 years     | 1 per month

Everything here is recomputed on each render; nothing is stored.
"""

import calendar
from datetime import date, timedelta

from pydantic import BaseModel

from src.tracker.models import Granularity

LOOKAHEAD_MONTHS: dict[Granularity, int] = {
    Granularity.DAY: 3,
    Granularity.WEEK: 6,
    Granularity.MONTH: 24,
}

# Column width at zoom 1.0
BASE_COLUMN_WIDTH_PX: dict[Granularity, int] = {
    Granularity.DAY: 32,
    Granularity.WEEK: 64,
    Granularity.MONTH: 96,
}

# Below this zoom level month headers switch to "Jun 24"
COMPACT_MONTH_ZOOM = 0.7


class ViewWindow(BaseModel):
    granularity: Granularity
    anchor_start: date
    anchor_end: date
    total_days: int


class HeaderCell(BaseModel):
    start: date
    label: str
    month_label: str | None = None


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def start_of_month(value: date) -> date:
    return value.replace(day=1)


def start_of_week(value: date) -> date:
    """Sunday on or before ``value``."""
    return value - timedelta(days=(value.weekday() + 1) % 7)


def end_of_week(value: date) -> date:
    return start_of_week(value) + timedelta(days=6)


def compute_window(granularity: Granularity | str, today: date | None = None) -> ViewWindow:
    """Compute the visible date range for a granularity.

    Args:
        granularity: day, week or month.
        today: Anchor date (defaults to the current date).

    Returns:
        ViewWindow with anchor_end strictly after anchor_start.
    """
    granularity = Granularity(granularity)
    today = today or date.today()

    if granularity is Granularity.WEEK:
        anchor_start = start_of_week(start_of_month(today))
    else:
        anchor_start = start_of_month(today)

    anchor_end = add_months(anchor_start, LOOKAHEAD_MONTHS[granularity])
    return ViewWindow(
        granularity=granularity,
        anchor_start=anchor_start,
        anchor_end=anchor_end,
        total_days=(anchor_end - anchor_start).days,
    )


def header_dates(window: ViewWindow) -> list[date]:
    """Every header unit start from anchor_start through anchor_end inclusive."""
    dates: list[date] = []
    if window.granularity is Granularity.DAY:
        current = window.anchor_start
        while current <= window.anchor_end:
            dates.append(current)
            current += timedelta(days=1)
    elif window.granularity is Granularity.WEEK:
        current = start_of_week(window.anchor_start)
        while current <= window.anchor_end:
            dates.append(current)
            current += timedelta(days=7)
    else:
        current = start_of_month(window.anchor_start)
        while current <= window.anchor_end:
            dates.append(current)
            current = add_months(current, 1)
    return dates


def header_label(value: date, granularity: Granularity | str, zoom: float = 1.0) -> str:
    """Label for one header cell.

    day -> "15", week -> "Jun 2 - 8", month -> "Jun 2024" (or "Jun 24" when zoomed out).
    """
    granularity = Granularity(granularity)
    if granularity is Granularity.DAY:
        return str(value.day)
    if granularity is Granularity.WEEK:
        week_end = end_of_week(value)
        return f"{value:%b} {value.day} - {week_end.day}"
    if zoom < COMPACT_MONTH_ZOOM:
        return f"{value:%b %y}"
    return f"{value:%b %Y}"


def month_label(value: date, granularity: Granularity | str) -> str | None:
    """Month super-label ("June 2024") above the first day of each month in day view."""
    if Granularity(granularity) is Granularity.DAY and value.day == 1:
        return f"{value:%B %Y}"
    return None


def build_headers(window: ViewWindow, zoom: float = 1.0) -> list[HeaderCell]:
    return [
        HeaderCell(
            start=value,
            label=header_label(value, window.granularity, zoom),
            month_label=month_label(value, window.granularity),
        )
        for value in header_dates(window)
    ]


def column_width_px(granularity: Granularity | str, zoom: float = 1.0) -> float:
    """Pixel width of one header column at the given zoom level."""
    return BASE_COLUMN_WIDTH_PX[Granularity(granularity)] * zoom
