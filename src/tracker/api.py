"""Async REST client for the exercise tracker backend.

TrackerClient wraps httpx.AsyncClient, classifies failures into the
TransientError / PermanentError hierarchy and retries transient ones with
tenacity. Malformed collection bodies are coerced to empty lists so callers
always receive a sequence.
"""

from typing import Any

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from src.tracker.errors import (
    MalformedResponseError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from src.tracker.logging import get_logger
from src.tracker.models import Exercise, Notification, NotificationMode

logger = get_logger(__name__)

SESSION_HEADER = "X-Session-ID"

NOTIFICATION_PATHS: dict[NotificationMode, str] = {
    NotificationMode.UNREAD: "/notifications",
    NotificationMode.READ: "/notifications/read",
}


class TrackerClient:
    """Async client for exercises and session-scoped notifications.

    Usage:
        async with TrackerClient(config.api_url, store.get()) as client:
            exercises = await client.list_exercises()
    """

    def __init__(
        self,
        base_url: str,
        session_id: str,
        *,
        timeout: float = 10.0,
        retry_attempts: int = 3,
        retry_wait: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize TrackerClient.

        Args:
            base_url: REST API root (e.g. http://localhost:8080/api).
            session_id: Opaque correlation key sent with every request.
            timeout: Per-request timeout in seconds.
            retry_attempts: Total attempts for a request failing transiently.
            retry_wait: Fixed delay between attempts in seconds.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self.session_id = session_id
        self.retry_attempts = retry_attempts
        self.retry_wait = retry_wait
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={SESSION_HEADER: session_id},
            transport=transport,
        )

    async def __aenter__(self) -> "TrackerClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------
    async def list_exercises(
        self,
        division_name: str | None = None,
        team_name: str | None = None,
    ) -> list[Exercise]:
        """Fetch exercises with their nested divisions, teams and events.

        Args:
            division_name: Only exercises tasking this division.
            team_name: Only exercises involving this team.

        Returns:
            Parsed exercises; records failing validation are skipped.

        Raises:
            TransientError: Backend unreachable after all retries.
            PermanentError: Request rejected or body undecodable.
        """
        params: dict[str, str] = {}
        if division_name:
            params["division_name"] = division_name
        if team_name:
            params["team_name"] = team_name

        data = await self._request("GET", "/exercises", params=params)
        return _parse_list(data, Exercise, endpoint="/exercises")

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    async def list_notifications(
        self,
        mode: NotificationMode = NotificationMode.UNREAD,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Notification]:
        """Fetch one page of the unread or read notification partition."""
        path = NOTIFICATION_PATHS[NotificationMode(mode)]
        data = await self._request(
            "GET", path, params={"limit": limit, "offset": offset}
        )
        return _parse_list(data, Notification, endpoint=path)

    async def mark_read(self, notification_id: int) -> bool:
        """Mark one notification read for this session.

        Returns:
            The backend's ``marked`` acknowledgement.
        """
        data = await self._request(
            "POST",
            "/notifications/mark-read",
            json={"notification_id": notification_id},
        )
        marked = bool(data.get("marked", False)) if isinstance(data, dict) else False
        logger.info("notification_marked_read", notification_id=notification_id, marked=marked)
        return marked

    async def clear_notifications(self) -> int:
        """Mark every unread notification read for this session.

        Returns:
            Number of notifications cleared.
        """
        data = await self._request("POST", "/notifications/clear")
        cleared = int(data.get("cleared", 0)) if isinstance(data, dict) else 0
        logger.info("notifications_cleared", cleared=cleared)
        return cleared

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request, retrying on TransientError.

        Fails fast on PermanentError.
        """
        result: Any = None
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_fixed(self.retry_wait),
            retry=retry_if_exception_type(TransientError),
            reraise=True,
        ):
            with attempt:
                result = await self._send(method, path, **kwargs)
        return result

    async def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("request_timeout", method=method, path=path, error=str(e))
            raise TransientError(f"{method} {path} timed out: {e}") from e
        except httpx.TransportError as e:
            logger.warning(
                "request_transport_error",
                method=method,
                path=path,
                error=str(e),
                type=type(e).__name__,
            )
            raise TransientError(f"{method} {path} failed: {e}") from e

        status = response.status_code
        if status == 429:
            logger.warning("request_rate_limited", method=method, path=path)
            raise RateLimitError(f"{method} {path} rate limited")
        if status >= 500:
            logger.warning("request_server_error", method=method, path=path, status=status)
            raise TransientError(f"{method} {path} returned {status}")
        if status >= 400:
            logger.error("request_rejected", method=method, path=path, status=status)
            raise PermanentError(f"{method} {path} returned {status}")

        if not response.content.strip():
            # No body is read the same as a JSON null
            logger.warning("response_empty", method=method, path=path, status=status)
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error("response_not_json", method=method, path=path, status=status)
            raise MalformedResponseError(f"{method} {path} returned a non-JSON body") from e


def _parse_list(data: Any, model: type[BaseModel], *, endpoint: str) -> list[Any]:
    """Validate a JSON array into models, coercing anything else to []."""
    if data is None:
        return []
    if not isinstance(data, list):
        logger.error(
            "response_not_a_list",
            endpoint=endpoint,
            received=type(data).__name__,
        )
        return []

    items = []
    for raw in data:
        try:
            items.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning(
                "record_skipped",
                endpoint=endpoint,
                model=model.__name__,
                errors=e.error_count(),
            )
    return items
