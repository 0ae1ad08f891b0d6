"""Live notification channel and paginated notification center."""

from src.tracker.notifications.center import NotificationCenter, badge_label, format_timestamp
from src.tracker.notifications.channel import NotificationChannel, alert_from_message, channel_url

__all__ = [
    "NotificationCenter",
    "NotificationChannel",
    "alert_from_message",
    "badge_label",
    "channel_url",
    "format_timestamp",
]
