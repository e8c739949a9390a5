"""Polling loop that keeps a status line and an output file up to date."""

import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from pomocl.core.display import format_state, notification_message
from pomocl.core.clock import utc_now
from pomocl.core.storage import SessionStore
from pomocl.errors import NoSessionError, StorageError
from pomocl.logging import get_logger
from pomocl.models import PomodoroState

logger = get_logger(__name__)


def watch_session(
    store: SessionStore,
    output_path: Optional[Path],
    interval: float,
    on_line: Callable[[str], None],
    notifier: Optional[Callable[[str, str], None]] = None,
    iterations: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], datetime] = utc_now,
) -> None:
    """Render the session state every ``interval`` seconds.

    The session is reloaded on every poll so pause, resume and stop issued
    from other invocations show up. ``notifier`` is called with a title and
    message whenever the current kind differs from the previous poll's.
    A poll that finds the file unreadable is skipped. Runs until the
    process is killed unless ``iterations`` is given.
    """
    previous: Optional[PomodoroState] = None
    count = 0
    logger.info("watch_started", output=str(output_path), interval=interval)

    while iterations is None or count < iterations:
        count += 1
        try:
            session = store.load()
        except NoSessionError:
            raise
        except StorageError as e:
            # Another invocation may be halfway through rewriting the file.
            logger.warning("watch_poll_skipped", error=str(e))
        else:
            state = session.state(clock())
            line = format_state(state)

            if output_path is not None:
                output_path.write_text(line, encoding="utf-8")
            on_line(line)

            if previous is not None and state.current != previous:
                logger.info(
                    "state_changed",
                    previous=previous.value,
                    current=state.current.value,
                )
                if notifier is not None:
                    notifier(f"pomocl: {state.current}", notification_message(state))
            previous = state.current

        if iterations is None or count < iterations:
            sleep(interval)
