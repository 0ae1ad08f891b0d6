"""Watch the live notification channel from a terminal.

Connects to the push endpoint with this client's session id, prints every
alert and unread-count change, and disconnects cleanly on Ctrl+C.

Run with: python scripts/watch_notifications.py
List:     python scripts/watch_notifications.py --list
Read:     python scripts/watch_notifications.py --list --mode read

Exit codes:
  0 = stopped by the user, or the channel gave up reconnecting
  1 = error (message on stderr)
"""

import argparse
import asyncio
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.tracker.api import TrackerClient  # noqa: E402
from src.tracker.config import get_config  # noqa: E402
from src.tracker.logging import setup_logging  # noqa: E402
from src.tracker.models import Alert, NotificationMode  # noqa: E402
from src.tracker.notifications.center import (  # noqa: E402
    NotificationCenter,
    badge_label,
    format_timestamp,
)
from src.tracker.notifications.channel import NotificationChannel  # noqa: E402
from src.tracker.session import SessionStore  # noqa: E402

_SEVERITY_TAGS = {"error": "CRITICAL", "success": "OK", "info": "INFO"}


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Print live notifications and unread counts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the first notification page before watching.",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in NotificationMode],
        default=NotificationMode.UNREAD.value,
        help="Partition listed with --list (default: unread).",
    )
    return parser.parse_args()


def _print_alert(alert: Alert) -> None:
    tag = _SEVERITY_TAGS[alert.severity.value]
    print(f"[{tag:>8}] {alert.message}", flush=True)


def _print_count(count: int) -> None:
    print(f"[  UNREAD] {badge_label(count) or '0'}", flush=True)


async def main(args: argparse.Namespace) -> None:
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    session_id = SessionStore(config.state_dir).get()

    async with TrackerClient(
        config.api_url,
        session_id,
        timeout=config.request_timeout_seconds,
    ) as client:
        center = NotificationCenter(client, page_size=config.notification_page_size)

        if args.list:
            await center.switch_mode(args.mode)
            await center.open()
            for item in center.items:
                print(f"  {format_timestamp(item.created_at):>10}  {item.message}")
            if center.has_more:
                print("  ... more available")

        channel = NotificationChannel(
            config.ws_url,
            session_id,
            max_attempts=config.max_reconnect_attempts,
            reconnect_delay=config.reconnect_delay_seconds,
            on_alert=_print_alert,
        )
        channel.add_count_listener(center.set_count)
        channel.add_count_listener(_print_count)
        channel.connect()
        try:
            await channel.wait_closed()
            print(f"Channel stopped: {channel.status_label()}", file=sys.stderr)
        finally:
            await channel.disconnect()


if __name__ == "__main__":
    args = _parse_args()
    try:
        asyncio.run(main(args))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
