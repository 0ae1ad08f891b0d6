"""Live notification push channel.

NotificationChannel keeps at most one WebSocket connection to the backend,
reconnects after dirty closes with a bounded fixed-delay policy, and reduces
each pushed message into either an authoritative unread count or a one-shot
alert.

State machine:
    CONNECTING -> OPEN              handshake succeeded, reconnect_attempts = 0
    OPEN -> CLOSED (dirty)          transport error or close code != 1000;
                                    reconnect after a delay while
                                    reconnect_attempts < max_attempts
    OPEN -> CLOSED (clean)          disconnect() or a normal closure; terminal
"""

import asyncio
import contextlib
import json
from typing import Any, Awaitable, Callable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, wait_fixed
from websockets.asyncio.client import connect as websocket_connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from src.tracker.errors import PermanentError, TrackerError, TransientError
from src.tracker.logging import get_logger
from src.tracker.models import Alert, ConnectionState, ConnectionStatus, Severity

log = get_logger(__name__)

NORMAL_CLOSURE = 1000
COUNT_MESSAGE_TYPE = "notification_count"

CRITICAL_ALERT_MS = 8000
DEFAULT_ALERT_MS = 5000

Connector = Callable[[str], Awaitable[Any]]
AlertSink = Callable[[Alert], None]
CountListener = Callable[[int], None]


def channel_url(ws_url: str, session_id: str | None) -> str:
    """Append the ``sessionId`` query parameter the backend scopes counts by."""
    if not session_id:
        return ws_url
    parts = urlsplit(ws_url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k != "sessionId"]
    query.append(("sessionId", session_id))
    return urlunsplit(parts._replace(query=urlencode(query)))


def alert_from_message(payload: dict[str, Any]) -> Alert:
    """Map a pushed notification to its toast treatment.

    critical -> error for 8 s, normal -> success for 5 s, anything else -> info for 5 s.
    """
    priority = payload.get("priority")
    if priority == "critical":
        severity, duration = Severity.ERROR, CRITICAL_ALERT_MS
    elif priority == "normal":
        severity, duration = Severity.SUCCESS, DEFAULT_ALERT_MS
    else:
        severity, duration = Severity.INFO, DEFAULT_ALERT_MS

    return Alert(
        severity=severity,
        message=str(payload.get("message") or ""),
        duration_ms=duration,
        priority=priority if isinstance(priority, str) else None,
        entity_name=payload.get("entity_name") or None,
    )


class NotificationChannel:
    """Owns the single push connection of a client session.

    Usage:
        channel = NotificationChannel(config.ws_url, store.get(), on_alert=show_toast)
        channel.add_count_listener(center.set_count)
        channel.connect()
        ...
        await channel.disconnect()
    """

    def __init__(
        self,
        url: str,
        session_id: str | None = None,
        *,
        max_attempts: int = 5,
        reconnect_delay: float = 3.0,
        on_alert: AlertSink | None = None,
        connector: Connector = websocket_connect,
    ) -> None:
        """Initialize NotificationChannel.

        Args:
            url: Push endpoint (e.g. ws://localhost:8081/ws).
            session_id: Correlation key appended as ``sessionId``.
            max_attempts: Consecutive reconnects before giving up.
            reconnect_delay: Seconds to wait before each reconnect.
            on_alert: Receives each alert exactly once.
            connector: Coroutine function opening the socket for a URL.
        """
        self.url = channel_url(url, session_id)
        self.reconnect_delay = reconnect_delay
        self.state = ConnectionState(max_attempts=max_attempts)
        self._on_alert = on_alert
        self._count_listeners: list[CountListener] = []
        self._connector = connector
        self._task: asyncio.Task[None] | None = None
        self._socket: Any = None
        self._closing = False

    @property
    def count(self) -> int:
        return self.state.count

    @property
    def is_connected(self) -> bool:
        return self.state.status is ConnectionStatus.OPEN

    def add_count_listener(self, listener: CountListener) -> None:
        self._count_listeners.append(listener)

    def remove_count_listener(self, listener: CountListener) -> None:
        with contextlib.suppress(ValueError):
            self._count_listeners.remove(listener)

    def status_label(self) -> str:
        """Human-readable connection status, e.g. "Disconnected (Retries: 2/5)"."""
        label = "Connected" if self.is_connected else "Disconnected"
        if self.state.reconnect_attempts > 0:
            label += f" (Retries: {self.state.reconnect_attempts}/{self.state.max_attempts})"
        return label

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> bool:
        """Start connecting unless an attempt is in flight or a connection is open.

        Must be called from a running event loop.

        Returns:
            True if a new connection cycle was started.
        """
        if self._task is not None and not self._task.done():
            log.debug("channel_connect_skipped", reason="already_active", status=self.state.status.value)
            return False

        self._closing = False
        self.state.reconnect_attempts = 0
        self.state.status = ConnectionStatus.CONNECTING
        self.state.clean = False
        self._task = asyncio.get_running_loop().create_task(self._run())
        return True

    async def disconnect(self) -> None:
        """Close with a normal closure code and cancel any pending reconnect.

        Terminal until connect() is called again. Safe to call repeatedly.
        """
        self._closing = True
        task = self._task
        socket = self._socket

        if socket is not None:
            await socket.close(code=NORMAL_CLOSURE, reason="Manual disconnect")
        elif task is not None and not task.done():
            task.cancel()

        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

        self._task = None
        self._mark_closed(clean=True)
        log.info("channel_disconnected", url=self.url)

    async def wait_closed(self) -> None:
        """Wait until the current connection cycle ends (clean close or give-up)."""
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _run(self) -> None:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(TransientError),
            stop=self._reconnects_exhausted,
            wait=wait_fixed(self.reconnect_delay),
            before_sleep=self._before_reconnect,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self._session()
        except TransientError as e:
            # Degraded but not fatal: the count simply stops updating
            log.error(
                "channel_gave_up",
                url=self.url,
                attempts=self.state.reconnect_attempts,
                error=str(e),
            )
        except TrackerError as e:
            log.error("channel_failed", url=self.url, error=str(e), type=type(e).__name__)

    def _reconnects_exhausted(self, retry_state: RetryCallState) -> bool:
        return self._closing or self.state.reconnect_attempts >= self.state.max_attempts

    def _before_reconnect(self, retry_state: RetryCallState) -> None:
        self.state.reconnect_attempts += 1
        log.info(
            "channel_reconnect_scheduled",
            attempt=self.state.reconnect_attempts,
            max_attempts=self.state.max_attempts,
            delay_seconds=self.reconnect_delay,
        )

    async def _session(self) -> None:
        """One connection: handshake, read until closed, classify the close.

        Raises:
            TransientError: The connection failed or dropped dirty.
            PermanentError: The URL is unusable.
        """
        self.state.status = ConnectionStatus.CONNECTING
        log.info("channel_connecting", url=self.url, attempt=self.state.reconnect_attempts)

        try:
            socket = await self._connector(self.url)
        except InvalidURI as e:
            self._mark_closed(clean=False)
            raise PermanentError(f"Invalid push channel URL: {e}") from e
        except (OSError, asyncio.TimeoutError, InvalidHandshake) as e:
            self._mark_closed(clean=False)
            log.warning("channel_connect_failed", url=self.url, error=str(e), type=type(e).__name__)
            raise TransientError(f"Push channel connect failed: {e}") from e

        self._socket = socket
        self.state.status = ConnectionStatus.OPEN
        self.state.reconnect_attempts = 0
        log.info("channel_opened", url=self.url)

        try:
            async for raw in socket:
                self.handle_message(raw)
        except ConnectionClosed:
            pass
        finally:
            self._socket = None

        code = socket.close_code
        if self._closing or code == NORMAL_CLOSURE:
            self._mark_closed(clean=True)
            log.info("channel_closed", code=code)
            return

        self._mark_closed(clean=False)
        log.warning("channel_dropped", code=code)
        raise TransientError(f"Push channel closed with code {code}")

    def _mark_closed(self, *, clean: bool) -> None:
        self.state.status = ConnectionStatus.CLOSED
        self.state.clean = clean

    # ------------------------------------------------------------------
    # Message reduction
    # ------------------------------------------------------------------
    def handle_message(self, raw: str | bytes) -> Alert | None:
        """Reduce one pushed message.

        A ``notification_count`` message replaces the count and notifies the
        count listeners. Anything else becomes an alert for the alert sink.

        Returns:
            The alert produced, or None for count updates and bad messages.
        """
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            log.error("message_not_json", error=str(e))
            return None
        if not isinstance(payload, dict):
            log.warning("message_not_an_object", received=type(payload).__name__)
            return None

        if payload.get("type") == COUNT_MESSAGE_TYPE:
            try:
                count = int(payload.get("count"))
            except (TypeError, ValueError):
                log.warning("count_message_invalid", count=payload.get("count"))
                return None
            self.state.count = count
            log.debug("notification_count_updated", count=count)
            for listener in list(self._count_listeners):
                try:
                    listener(count)
                except Exception as e:
                    log.error("count_listener_failed", error=str(e), type=type(e).__name__)
            return None

        alert = alert_from_message(payload)
        log.info("alert_received", severity=alert.severity.value, message=alert.message)
        if self._on_alert is not None:
            try:
                self._on_alert(alert)
            except Exception as e:
                log.error("alert_sink_failed", error=str(e), type=type(e).__name__)
        return alert
