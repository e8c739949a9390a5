"""Persistence of the current session as a JSON file."""

import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from pomocl.errors import NoSessionError, StorageError
from pomocl.logging import get_logger
from pomocl.models import Session

logger = get_logger(__name__)

STATE_DIR_ENV = "POMOCL_STATE_DIR"
DEFAULT_STATE_DIR = Path("~/.local/state/pomocl")


def default_state_dir() -> Path:
    """State directory from ``POMOCL_STATE_DIR`` or ``~/.local/state/pomocl``."""
    configured = os.environ.get(STATE_DIR_ENV)
    return Path(configured or DEFAULT_STATE_DIR).expanduser()


class SessionStore:
    """Reads and overwrites the single current session file.

    There is no locking: two invocations writing at once race and the last
    writer wins.
    """

    def __init__(self, state_dir: Optional[Path] = None):
        self.state_dir = Path(state_dir).expanduser() if state_dir else default_state_dir()
        self.current_file = self.state_dir / "current_pomo"

    def exists(self) -> bool:
        """Check if a session has been saved."""
        return self.current_file.exists()

    def load(self) -> Session:
        """Load the current session."""
        if not self.exists():
            raise NoSessionError(
                "No session found. Run 'pomocl start' to begin one."
            )

        try:
            text = self.current_file.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Can't read {self.current_file}: {e}") from e

        try:
            return Session.model_validate_json(text)
        except ValidationError as e:
            raise StorageError(
                f"Stored session in {self.current_file} is invalid: "
                f"{e.error_count()} problem(s), first: {e.errors()[0]['msg']}"
            ) from e

    def save(self, session: Session) -> None:
        """Overwrite the current session file."""
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            self.current_file.write_text(
                session.model_dump_json(indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise StorageError(f"Can't write {self.current_file}: {e}") from e
        logger.debug("session_saved", path=str(self.current_file))
