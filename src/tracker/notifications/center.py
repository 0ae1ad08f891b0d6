"""NotificationCenter - paginated unread/read notification list.

The list is only ever populated by explicit fetches; pushed alerts never land
here. The unread badge count is owned by the push channel and reaches the
center through set_count(). mark_read() and clear_all() never adjust it, the
next pushed count does. A short mismatch between the list and the badge is
expected and heals itself.
"""

from datetime import datetime, timezone

from src.tracker.api import TrackerClient
from src.tracker.errors import TrackerError
from src.tracker.logging import get_logger
from src.tracker.models import Notification, NotificationMode

log = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
BADGE_CAP = 99


class NotificationCenter:
    """In-memory page of notifications for one mode (unread or read)."""

    def __init__(self, client: TrackerClient, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.client = client
        self.page_size = page_size
        self.mode = NotificationMode.UNREAD
        self.items: list[Notification] = []
        self.offset = 0
        self.has_more = True
        self.loading = False
        self.count = 0
        # Bumped whenever the page is replaced; in-flight results from an
        # older generation are dropped
        self._generation = 0

    def _invalidate(self) -> int:
        self._generation += 1
        return self._generation

    def set_count(self, count: int) -> None:
        """Count listener for the push channel."""
        self.count = count

    async def open(self) -> None:
        """Fetch the first page when the list is shown empty."""
        if not self.items:
            await self.fetch(reset=True)

    async def fetch(self, reset: bool = False) -> None:
        """Fetch the next page, or the first one when reset is True.

        Failures leave the current page untouched. A page that arrives after
        the list was replaced (mode switch, reset fetch, clear) is dropped.
        """
        mode = self.mode
        offset = 0 if reset else self.offset
        generation = self._invalidate() if reset else self._generation
        self.loading = True
        try:
            page = await self.client.list_notifications(mode, self.page_size, offset)
        except TrackerError as e:
            log.error(
                "notifications_fetch_failed",
                mode=mode.value,
                offset=offset,
                error=str(e),
                type=type(e).__name__,
            )
            return
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            log.debug(
                "notifications_page_discarded",
                mode=mode.value,
                offset=offset,
                current=self.mode.value,
            )
            return

        if reset:
            self._invalidate()
            self.items = list(page)
            self.offset = len(page)
        else:
            self.items.extend(page)
            self.offset += len(page)
        # A final page of exactly page_size items still reads as "more"
        self.has_more = len(page) == self.page_size
        log.debug(
            "notifications_fetched",
            mode=mode.value,
            received=len(page),
            offset=self.offset,
            has_more=self.has_more,
        )

    async def load_more(self) -> None:
        if not self.loading and self.has_more:
            await self.fetch(reset=False)

    async def switch_mode(self, mode: NotificationMode | str) -> None:
        """Show the other partition, starting again from offset 0."""
        mode = NotificationMode(mode)
        if mode is self.mode:
            return
        self.mode = mode
        self._invalidate()
        self.items = []
        self.offset = 0
        self.has_more = True
        self.loading = False
        await self.fetch(reset=True)

    async def mark_read(self, notification_id: int) -> bool:
        """Drop a notification from the unread page, then tell the backend.

        The item is removed before the request completes and put back where it
        was if the request fails, unless the page was replaced meanwhile.

        Returns:
            True if the backend acknowledged the change.
        """
        index = next(
            (i for i, item in enumerate(self.items) if item.id == notification_id),
            None,
        )
        removed = self.items.pop(index) if index is not None else None
        generation = self._generation

        try:
            marked = await self.client.mark_read(notification_id)
        except TrackerError as e:
            log.error(
                "notification_mark_read_failed",
                notification_id=notification_id,
                error=str(e),
            )
            marked = False

        if not marked and removed is not None:
            present = any(item.id == notification_id for item in self.items)
            if generation == self._generation and not present:
                self.items.insert(min(index, len(self.items)), removed)
            else:
                log.debug("notification_rollback_skipped", notification_id=notification_id)
        return marked

    async def clear_all(self) -> bool:
        """Mark everything read; on success empty the page and stop paging."""
        try:
            cleared = await self.client.clear_notifications()
        except TrackerError as e:
            log.error("notifications_clear_failed", error=str(e))
            return False

        self._invalidate()
        self.items = []
        self.offset = 0
        self.has_more = False
        log.info("notification_page_cleared", cleared=cleared)
        return True


def badge_label(count: int) -> str:
    """Badge text: empty for zero, capped at "99+"."""
    if count <= 0:
        return ""
    return f"{BADGE_CAP}+" if count > BADGE_CAP else str(count)


def format_timestamp(created_at: datetime | None, now: datetime | None = None) -> str:
    """Relative age of a notification: "Just now", "5h ago", or its date."""
    if created_at is None:
        return ""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    hours = (now - created_at).total_seconds() / 3600
    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{int(hours)}h ago"
    return created_at.date().isoformat()


def priority_class(priority: str | None) -> str:
    return "notification-critical" if priority == "critical" else "notification-normal"
