"""Notification session identity persistence.

SessionStore lazily creates the opaque correlation key that scopes notification
reads, mark-read and clear requests, and persists it so later runs reuse it.
It is not a credential; the backend only uses it to tell clients apart.
"""

import secrets
import string
from pathlib import Path

from src.tracker.logging import get_logger

logger = get_logger(__name__)

SESSION_ID_PREFIX = "user_"
SESSION_ID_LENGTH = 16
_ALPHABET = string.ascii_lowercase + string.digits


def generate_session_id() -> str:
    """Return a fresh ``user_`` + 16 base36 characters identifier."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SESSION_ID_LENGTH))
    return f"{SESSION_ID_PREFIX}{suffix}"


class SessionStore:
    """Manages the locally persisted notification session identifier."""

    def __init__(self, state_dir: str = "data/state") -> None:
        """Initialize SessionStore.

        Args:
            state_dir: Directory holding the session id file.
        """
        self.state_dir = Path(state_dir)
        self.state_file = self.state_dir / "notification_session_id"
        self._session_id: str | None = None

    def get(self) -> str:
        """Return the session id, creating and persisting it on first use.

        Returns:
            The stable session identifier for this client.
        """
        if self._session_id is not None:
            return self._session_id

        if self.state_file.exists():
            stored = self.state_file.read_text(encoding="utf-8").strip()
            if stored:
                self._session_id = stored
                logger.debug("session_id_loaded", path=str(self.state_file))
                return stored
            logger.warning("session_id_empty", path=str(self.state_file))

        self._session_id = generate_session_id()
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.state_file.write_text(self._session_id, encoding="utf-8")
        logger.info("session_id_created", path=str(self.state_file))
        return self._session_id

    def clear(self) -> None:
        """Delete the persisted session id.

        The next get() call creates a new identifier.
        """
        self._session_id = None
        if self.state_file.exists():
            self.state_file.unlink()
            logger.info("session_id_cleared", path=str(self.state_file))
        else:
            logger.debug("session_id_clear_skipped", reason="file_not_found")
