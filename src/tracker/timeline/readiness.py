"""Readiness scoring and priority ordering of exercises.

Derived display values only; nothing here is persisted.
"""

import math
from typing import Sequence, TypeVar

from pydantic import BaseModel

from src.tracker.models import Division, Exercise, TeamStatus, TimeRecord

STATUS_SCORE: dict[TeamStatus, float] = {
    TeamStatus.GREEN: 1.0,
    TeamStatus.YELLOW: 0.5,
    TeamStatus.RED: 0.0,
}

PRIORITY_RANK: dict[str, int] = {"high": 1, "medium": 2, "low": 3}
DEFAULT_PRIORITY = "medium"

FULL_SUPPORT = "full support"
LIMITED = "limited"
UNABLE = "unable"

R = TypeVar("R", bound=TimeRecord)


class Readiness(BaseModel):
    percent: int
    band: str


def readiness_band(percent: int) -> str:
    if percent >= 75:
        return FULL_SUPPORT
    if percent >= 50:
        return LIMITED
    return UNABLE


def readiness(exercise: Exercise) -> Readiness | None:
    """Share of ready teams across all divisions, or None without teams.

    green counts 1, yellow 0.5, red 0; the percentage rounds half up.
    """
    teams = exercise.teams
    if not teams:
        return None
    score = sum(STATUS_SCORE[team.status] for team in teams)
    percent = math.floor(100 * score / len(teams) + 0.5)
    return Readiness(percent=percent, band=readiness_band(percent))


def division_status(division: Division) -> TeamStatus:
    """Worst team status of a division; green when it has no teams."""
    statuses = {team.status for team in division.teams}
    if TeamStatus.RED in statuses:
        return TeamStatus.RED
    if TeamStatus.YELLOW in statuses:
        return TeamStatus.YELLOW
    return TeamStatus.GREEN


def priority_rank(record: TimeRecord) -> int:
    priority = (record.priority or DEFAULT_PRIORITY).strip().lower()
    return PRIORITY_RANK.get(priority, PRIORITY_RANK[DEFAULT_PRIORITY])


def sort_by_priority(records: Sequence[R]) -> list[R]:
    """Order records high, medium, low; ties keep their input order."""
    return sorted(records, key=priority_rank)
