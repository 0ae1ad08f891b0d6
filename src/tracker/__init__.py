"""Exercise tracker core: Gantt timeline layout and live notifications.

Ships the timeline layout engine, the reconnecting push channel, the
paginated notification center and the REST client feeding them.
"""

from src.tracker.api import TrackerClient
from src.tracker.dashboard import Dashboard
from src.tracker.models import Event, Exercise, Granularity, Notification
from src.tracker.notifications import NotificationCenter, NotificationChannel
from src.tracker.session import SessionStore
from src.tracker.timeline import GanttChart

__all__ = [
    "Dashboard",
    "Event",
    "Exercise",
    "GanttChart",
    "Granularity",
    "Notification",
    "NotificationCenter",
    "NotificationChannel",
    "SessionStore",
    "TrackerClient",
]
