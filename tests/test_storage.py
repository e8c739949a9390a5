"""Tests for SessionStore and configuration loading."""

import json
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from pomocl.core.builder import SessionBuilder
from pomocl.core.config import PomoclConfig, load_config
from pomocl.core.storage import SessionStore, default_state_dir
from pomocl.errors import ConfigError, NoSessionError, StorageError

T0 = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def store(temp_dir):
    return SessionStore(temp_dir / "state")


def test_save_and_load(store):
    """Test that a saved session loads back with identical answers."""
    session = SessionBuilder(T0, 2, 10, 5).build()
    session.set_pause(T0 + timedelta(minutes=3))

    assert not store.exists()
    store.save(session)
    assert store.exists()

    loaded = store.load()
    assert loaded.model_dump() == session.model_dump()
    assert loaded.state(T0 + timedelta(hours=1)) == session.state(T0 + timedelta(hours=1))


def test_saved_file_is_readable_json(store):
    store.save(SessionBuilder(T0, 1, 25, 5).build())

    data = json.loads(store.current_file.read_text())
    assert data == {
        "sections": [{"duration": 1500, "kind": "work"}],
        "start": int(T0.timestamp()),
        "active": True,
        "pause_marker": None,
    }


def test_save_overwrites(store):
    store.save(SessionBuilder(T0, 4, 45, 15).build())
    store.save(SessionBuilder(T0, 1, 25, 5).build())

    assert len(store.load().sections) == 1


def test_load_missing(store):
    with pytest.raises(NoSessionError, match="pomocl start"):
        store.load()


@pytest.mark.parametrize(
    "contents",
    [
        "not json",
        "[]",
        '{"sections": [], "active": true}',
        '{"sections": [{"duration": 0, "kind": "work"}], "start": 0}',
        '{"sections": [{"duration": 60, "kind": "nap"}], "start": 0}',
    ],
)
def test_load_malformed(store, contents):
    store.state_dir.mkdir(parents=True)
    store.current_file.write_text(contents)

    with pytest.raises(StorageError, match="invalid"):
        store.load()


def test_default_state_dir_from_environment(monkeypatch, temp_dir):
    monkeypatch.setenv("POMOCL_STATE_DIR", str(temp_dir))

    assert default_state_dir() == temp_dir
    assert SessionStore().current_file == temp_dir / "current_pomo"


def test_default_state_dir(monkeypatch):
    monkeypatch.delenv("POMOCL_STATE_DIR", raising=False)

    assert default_state_dir() == Path("~/.local/state/pomocl").expanduser()


class TestConfig:
    """Loading config.json."""

    def test_missing_file_gives_defaults(self, temp_dir):
        config = load_config(temp_dir / "config.json")

        assert config == PomoclConfig()
        assert config.default_spec == "4p45b15"
        assert config.watch_interval == 1.0
        assert config.notifications

    def test_values_are_loaded(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text(
            json.dumps(
                {
                    "default_spec": "4p40b10",
                    "watch_interval": 2.5,
                    "watch_file": "/tmp/pomo.txt",
                    "notifications": False,
                    "log_level": "debug",
                    "log_json": True,
                }
            )
        )

        config = load_config(path)

        assert config.default_spec == "4p40b10"
        assert config.watch_interval == 2.5
        assert config.watch_file == Path("/tmp/pomo.txt")
        assert not config.notifications
        assert config.log_level == "DEBUG"
        assert config.log_json

    def test_environment_variable(self, temp_dir, monkeypatch):
        path = temp_dir / "other.json"
        path.write_text('{"default_spec": "2p25b5"}')
        monkeypatch.setenv("POMOCL_CONFIG", str(path))

        assert load_config().default_spec == "2p25b5"

    @pytest.mark.parametrize(
        "contents,message",
        [
            ("{oops", "Can't read config"),
            ("[1, 2]", "must contain a JSON object"),
            ('{"default_spec": "p25"}', "default_spec"),
            ('{"watch_interval": 0}', "watch_interval"),
            ('{"log_level": "loud"}', "log_level"),
            ('{"colour": "red"}', "colour"),
        ],
    )
    def test_malformed(self, temp_dir, contents, message):
        path = temp_dir / "config.json"
        path.write_text(contents)

        with pytest.raises(ConfigError, match=message):
            load_config(path)
