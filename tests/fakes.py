"""In-memory fakes and record builders for the tracker tests."""

import asyncio
from datetime import date
from typing import Any, Iterable

from src.tracker.models import Division, Event, Exercise, Team, TeamStatus


def make_event(
    event_id: int,
    start: date,
    end: date,
    name: str | None = None,
    priority: str | None = None,
) -> Event:
    return Event(
        id=event_id,
        name=name or f"Event {event_id}",
        start=start,
        end=end,
        priority=priority,
    )


def make_exercise(
    exercise_id: int,
    start: date,
    end: date,
    name: str | None = None,
    priority: str | None = None,
    events: Iterable[Event] = (),
    statuses: Iterable[str] = (),
) -> Exercise:
    teams = [
        Team(id=i, name=f"Team {i}", status=TeamStatus(status))
        for i, status in enumerate(statuses, start=1)
    ]
    divisions = [Division(id=1, name="Operations", teams=teams)] if teams else []
    return Exercise(
        id=exercise_id,
        name=name or f"Exercise {exercise_id}",
        start=start,
        end=end,
        priority=priority,
        events=list(events),
        divisions=divisions,
    )


_CLOSE = object()


class FakeSocket:
    """Stands in for a websockets client connection.

    Yields the queued messages; unless hold_open is set it then closes with
    close_code. close() ends iteration with the code it is given.
    """

    def __init__(
        self,
        messages: Iterable[str] = (),
        close_code: int = 1000,
        hold_open: bool = False,
    ) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        for message in messages:
            self._queue.put_nowait(message)
        self._final_code = close_code
        self.hold_open = hold_open
        self.close_code: int | None = None
        self.closed_with: tuple[int, str] | None = None

    def push(self, message: str) -> None:
        self._queue.put_nowait(message)

    def __aiter__(self) -> "FakeSocket":
        return self

    async def __anext__(self) -> str:
        if self._queue.empty() and not self.hold_open:
            self.close_code = self._final_code
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        return item

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed_with = (code, reason)
        self.close_code = code
        self._queue.put_nowait(_CLOSE)


class FakeConnector:
    """Connector returning scripted sockets or raising scripted errors.

    Once the script runs out every call is refused.
    """

    def __init__(self, outcomes: Iterable[Any] = ()) -> None:
        self.outcomes = list(outcomes)
        self.urls: list[str] = []

    async def __call__(self, url: str) -> Any:
        self.urls.append(url)
        outcome = self.outcomes.pop(0) if self.outcomes else ConnectionRefusedError("refused")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll the event loop until predicate() holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)
