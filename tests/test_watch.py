"""Tests for the watch loop and desktop notifications."""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from pomocl.core.builder import SessionBuilder
from pomocl.core.notifier import notify
from pomocl.core.storage import SessionStore
from pomocl.core.watch import watch_session
from pomocl.errors import NoSessionError

T0 = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    """Create a store holding a 2p10b5 session that starts at T0."""
    with tempfile.TemporaryDirectory() as temp_dir:
        store = SessionStore(Path(temp_dir))
        store.save(SessionBuilder(T0, 2, 10, 5).build())
        yield store


def fake_clock(*offsets):
    instants = iter(T0 + offset for offset in offsets)
    return lambda: next(instants)


def test_watch_renders_each_poll(store):
    """Test that every poll renders a line and writes the output file."""
    lines = []
    sleeps = []
    output = store.state_dir / "pomodoro.txt"

    watch_session(
        store,
        output,
        interval=1.0,
        on_line=lines.append,
        iterations=3,
        sleep=sleeps.append,
        clock=fake_clock(
            timedelta(minutes=9, seconds=59),
            timedelta(minutes=10),
            timedelta(minutes=25),
        ),
    )

    assert lines == [
        "work 00:00:01 (-> break) 1/2",
        "break 00:05:00 (-> work) 1/2",
        "done 00:00:00 (-> done) 2/2",
    ]
    assert output.read_text() == "done 00:00:00 (-> done) 2/2"
    assert sleeps == [1.0, 1.0]


def test_watch_notifies_on_transitions_only(store):
    notifier = MagicMock()

    watch_session(
        store,
        None,
        interval=0.5,
        on_line=lambda line: None,
        notifier=notifier,
        iterations=4,
        sleep=lambda seconds: None,
        clock=fake_clock(
            timedelta(minutes=1),
            timedelta(minutes=2),
            timedelta(minutes=11),
            timedelta(minutes=12),
        ),
    )

    notifier.assert_called_once_with("pomocl: break", "Take a break for 00:04:00")


def test_watch_sees_changes_from_other_invocations(store):
    """Test that the session is reloaded on every poll."""
    lines = []

    def pause_between_polls(seconds):
        session = store.load()
        session.set_pause(T0 + timedelta(minutes=3))
        store.save(session)

    watch_session(
        store,
        None,
        interval=1.0,
        on_line=lines.append,
        iterations=2,
        sleep=pause_between_polls,
        clock=fake_clock(timedelta(minutes=3), timedelta(minutes=50)),
    )

    assert lines == [
        "work 00:07:00 (-> break) 1/2",
        "work 00:07:00 (-> break) 1/2 (paused)",
    ]


def test_watch_skips_unreadable_poll(store):
    """Test that a session file caught mid-write does not end the loop."""
    store.current_file.write_text("{\"sections\": [", encoding="utf-8")
    lines = []
    sleeps = []

    def restore_between_polls(seconds):
        sleeps.append(seconds)
        store.save(SessionBuilder(T0, 2, 10, 5).build())

    watch_session(
        store,
        None,
        interval=1.0,
        on_line=lines.append,
        iterations=2,
        sleep=restore_between_polls,
        clock=fake_clock(timedelta(minutes=3)),
    )

    assert lines == ["work 00:07:00 (-> break) 1/2"]
    assert sleeps == [1.0]


def test_watch_without_session():
    with tempfile.TemporaryDirectory() as temp_dir:
        store = SessionStore(Path(temp_dir))

        with pytest.raises(NoSessionError):
            watch_session(store, None, 1.0, on_line=print, iterations=1)


def test_notify_sends_desktop_notification():
    with patch("pomocl.core.notifier.notification") as notification:
        notify("pomocl: break", "Take a break")

    notification.notify.assert_called_once_with(
        title="pomocl: break", message="Take a break", app_name="pomocl", timeout=10
    )


def test_notify_ignores_backend_failures():
    with patch("pomocl.core.notifier.notification") as notification:
        notification.notify.side_effect = NotImplementedError("no backend")

        notify("pomocl: work", "Back to work")

    notification.notify.assert_called_once()
