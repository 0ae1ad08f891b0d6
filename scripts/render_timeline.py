"""Render the exercise timeline as a text Gantt chart or JSON layout.

Standalone CLI script: fetches exercises from the tracker API, lays them out
for the requested view and prints the result.

Run with: python scripts/render_timeline.py
Week:     python scripts/render_timeline.py --view week
Zoomed:   python scripts/render_timeline.py --view month --zoom 0.6
Anchor:   python scripts/render_timeline.py --today 2024-06-15
Filter:   python scripts/render_timeline.py --division "Plans" --team "Blue Cell"
JSON:     python scripts/render_timeline.py --json

Exit codes:
  0 = success (chart or JSON on stdout)
  1 = error (message on stderr)
"""

import argparse
import asyncio
import json
import math
import os
import sys
from datetime import date

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.tracker.api import TrackerClient  # noqa: E402
from src.tracker.config import get_config  # noqa: E402
from src.tracker.dashboard import Dashboard  # noqa: E402
from src.tracker.logging import setup_logging  # noqa: E402
from src.tracker.models import Granularity  # noqa: E402
from src.tracker.session import SessionStore  # noqa: E402
from src.tracker.timeline.chart import ChartLayout, GanttChart  # noqa: E402
from src.tracker.timeline.layout import BarGeometry  # noqa: E402
from src.tracker.timeline.zoom import ZoomController  # noqa: E402

LABEL_WIDTH = 28
DEFAULT_COLUMNS = 72


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Render the exercise timeline as text or JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--view",
        choices=[g.value for g in Granularity],
        default=Granularity.MONTH.value,
        help="Timeline granularity (default: month).",
    )
    parser.add_argument(
        "--zoom",
        type=float,
        default=1.0,
        help="Zoom level, clamped to 0.5-3.0 (default: 1.0).",
    )
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Anchor date as YYYY-MM-DD (default: today).",
    )
    parser.add_argument("--division", default=None, help="Only exercises tasking this division.")
    parser.add_argument("--team", default=None, help="Only exercises involving this team.")
    parser.add_argument(
        "--columns",
        type=int,
        default=DEFAULT_COLUMNS,
        help=f"Character width of the timeline area (default: {DEFAULT_COLUMNS}).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the computed layout as JSON instead of a chart.",
    )
    return parser.parse_args()


def _bar_cells(geometry: BarGeometry, columns: int) -> tuple[int, int]:
    """Character span [start, end) covered by a visible bar."""
    start = math.floor(geometry.rendered_left_percent / 100 * columns)
    end = math.ceil((geometry.rendered_left_percent + geometry.rendered_width_percent) / 100 * columns)
    start = min(start, columns - 1)
    return start, max(end, start + 1)


def _bar_line(geometry: BarGeometry, columns: int, fill: str) -> str:
    line = [" "] * columns
    if geometry.visible:
        start, end = _bar_cells(geometry, columns)
        for i in range(start, min(end, columns)):
            line[i] = fill
    return "".join(line)


def _format_chart(layout: ChartLayout, columns: int) -> str:
    """Format the layout as a fixed-width text chart."""
    window = layout.window
    first, last = layout.headers[0].label, layout.headers[-1].label
    lines = [
        f"{'Exercise':<{LABEL_WIDTH}} |{first}{last:>{max(columns - len(first), 1)}}|",
        f"{'-' * LABEL_WIDTH}-+{'-' * columns}+",
    ]

    for row in layout.rows:
        label = row.label[: LABEL_WIDTH - 1]
        if row.readiness is not None:
            suffix = f" {row.readiness.percent}%"
            label = label[: LABEL_WIDTH - 1 - len(suffix)] + suffix
        lines.append(f"{label:<{LABEL_WIDTH}} |{_bar_line(row.bar, columns, '#')}|")

        for placement in row.events:
            marker = {"above": "^", "below": "v", "stack": "."}[placement.side]
            event_label = f"  {marker} {placement.event.name}"[: LABEL_WIDTH - 1]
            lines.append(f"{event_label:<{LABEL_WIDTH}} |{_bar_line(placement.geometry, columns, '=')}|")

    lines.append(
        f"{window.granularity.value} view {window.anchor_start} -> {window.anchor_end} "
        f"({window.total_days} days, zoom {layout.zoom_level})"
    )
    return "\n".join(lines)


async def main(args: argparse.Namespace) -> None:
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    session_id = SessionStore(config.state_dir).get()
    chart = GanttChart(granularity=args.view, zoom=ZoomController.from_config(config, args.zoom))

    async with TrackerClient(
        config.api_url,
        session_id,
        timeout=config.request_timeout_seconds,
    ) as client:
        dashboard = Dashboard(
            client,
            chart,
            division_name=args.division,
            team_name=args.team,
        )
        exercises = await dashboard.refresh()

    layout = dashboard.layout(args.today)
    if args.json:
        print(json.dumps(layout.model_dump(mode="json", exclude={"targets"}), indent=2))
    elif not exercises:
        print("No exercises to display.")
    else:
        print(_format_chart(layout, max(args.columns, 10)))


if __name__ == "__main__":
    args = _parse_args()
    try:
        asyncio.run(main(args))
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
