"""Pydantic models for exercise, timeline and notification data.

All data structures use Pydantic v2 for validation, serialization, and type safety.
Wire names follow the backend JSON (``start_date``/``end_date``); the Python side
reads them as ``start``/``end``.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


class Granularity(str, Enum):
    """Timeline zoom tier controlling header density and look-ahead window."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class TeamStatus(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class NotificationMode(str, Enum):
    """Which partition of the notification list is being paged."""

    UNREAD = "unread"
    READ = "read"


class ConnectionStatus(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class Severity(str, Enum):
    """Visual treatment of a transient alert."""

    ERROR = "error"
    SUCCESS = "success"
    INFO = "info"


def _coerce_date(value: Any) -> Any:
    """Keep only the calendar date of an ISO date or datetime string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) >= 10:
        return date.fromisoformat(value[:10])
    return value


def _none_to_list(value: Any) -> Any:
    # The backend serialises empty slices as null
    return [] if value is None else value


NullableList = BeforeValidator(_none_to_list)


class TimeRecord(BaseModel):
    """A named, time-ranged record drawn as one bar on the timeline.

    ``end`` may precede ``start``; the layout engine clamps the duration to one day.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    name: str = ""
    start: date = Field(alias="start_date")
    end: date = Field(alias="end_date")
    priority: str | None = None  # "high" | "medium" | "low"

    @field_validator("start", "end", mode="before")
    @classmethod
    def _calendar_date(cls, value: Any) -> Any:
        return _coerce_date(value)


class Team(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    exercise_id: int | None = None
    division_id: int | None = None
    name: str = ""
    poc: str = ""
    status: TeamStatus = TeamStatus.GREEN
    status_start: date | None = None
    status_end: date | None = None
    comments: str = ""

    @field_validator("status_start", "status_end", mode="before")
    @classmethod
    def _optional_date(cls, value: Any) -> Any:
        # Go zero time ("0001-01-01T00:00:00Z") means unset
        if value in (None, "") or (isinstance(value, str) and value.startswith("0001-01-01")):
            return None
        return _coerce_date(value)


class Division(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    exercise_id: int | None = None
    name: str = ""
    learning_objectives: str = ""
    teams: Annotated[list[Team], NullableList] = Field(default_factory=list)


class Event(TimeRecord):
    """A sub-interval nested within an exercise's timeline."""

    exercise_id: int | None = None
    type: str = ""  # "milestone", "phase", "meeting", ...
    poc: str = ""
    status: str = ""  # "planned", "in-progress", "completed", "cancelled"
    description: str = ""
    location: str = ""


class Exercise(TimeRecord):
    """Top-level tracked activity owning divisions and events."""

    description: str = ""
    exercise_event_poc: str = ""
    tasked_divisions: Annotated[list[str], NullableList] = Field(default_factory=list)
    aoc_involvement: str = ""
    srd_poc: str = ""
    cpd_poc: str = ""
    divisions: Annotated[list[Division], NullableList] = Field(default_factory=list)
    events: Annotated[list[Event], NullableList] = Field(default_factory=list)

    @property
    def teams(self) -> list[Team]:
        return [team for division in self.divisions for team in division.teams]


class Notification(BaseModel):
    """One entry of the paginated notification list."""

    model_config = ConfigDict(extra="ignore")

    id: int
    type: str = ""  # "exercise", "event", "task", "team"
    action: str = ""  # "created", "updated", "deleted"
    entity_id: int | None = None
    entity_name: str = ""
    message: str = ""
    user_id: str = ""
    priority: str = "normal"  # "critical", "normal", "low"
    created_at: datetime | None = None

    @field_validator("created_at", mode="before")
    @classmethod
    def _blank_timestamp(cls, value: Any) -> Any:
        return None if value == "" else value


class Alert(BaseModel):
    """A one-shot toast produced from a pushed notification."""

    severity: Severity
    message: str
    duration_ms: int
    priority: str | None = None
    entity_name: str | None = None


class ConnectionState(BaseModel):
    """Observable state of the push channel, one instance per client session.

    ``count`` only ever holds the last value pushed by the server.
    """

    status: ConnectionStatus = ConnectionStatus.CONNECTING
    clean: bool = False  # meaningful once status is CLOSED
    reconnect_attempts: int = 0
    max_attempts: int = 5
    count: int = 0
