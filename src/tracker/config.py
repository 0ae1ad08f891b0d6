"""Tracker configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class TrackerConfig(BaseSettings):
    """Tracker configuration loaded from environment variables.

    Every field maps to a ``TRACKER_``-prefixed variable. For local development,
    create a .env file in the project root.
    """

    # Backend endpoints
    api_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the exercise tracker REST API",
    )
    ws_url: str = Field(
        default="ws://localhost:8081/ws",
        description="Push channel endpoint for live notifications",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout applied to every REST request",
    )

    # Paths
    state_dir: str = Field(
        default="data/state",
        description="Directory holding the persisted notification session id",
    )

    # Push channel
    max_reconnect_attempts: int = Field(
        default=5,
        description="Consecutive reconnects attempted before the channel gives up",
    )
    reconnect_delay_seconds: float = Field(
        default=3.0,
        description="Fixed delay before each reconnect attempt",
    )

    # Notification center
    notification_page_size: int = Field(
        default=20,
        description="Notifications fetched per page",
    )

    # Timeline
    zoom_controls_hide_seconds: float = Field(
        default=3.0,
        description="Idle time before the zoom controls hide again",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "TRACKER_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: TrackerConfig | None = None


def get_config() -> TrackerConfig:
    """Get the tracker configuration singleton.

    Returns:
        TrackerConfig: Tracker configuration instance
    """
    global _config
    if _config is None:
        _config = TrackerConfig()
    return _config
