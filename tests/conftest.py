"""Shared fixtures for the tracker test suite."""

from datetime import date

import pytest

from src.tracker.config import TrackerConfig
from src.tracker.models import Exercise
from tests.fakes import make_exercise


@pytest.fixture
def june_exercise() -> Exercise:
    return make_exercise(1, date(2024, 6, 10), date(2024, 6, 20), name="Resolute Dragon")


@pytest.fixture
def config(tmp_path) -> TrackerConfig:
    return TrackerConfig(
        api_url="http://tracker.test/api",
        ws_url="ws://tracker.test/ws",
        state_dir=str(tmp_path / "state"),
        reconnect_delay_seconds=0,
        _env_file=None,
    )
