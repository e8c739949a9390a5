"""User configuration loaded from a JSON file."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator

from pomocl.core.builder import DEFAULT_SESSION_SPEC, parse_session_spec
from pomocl.errors import ConfigError, SessionSpecError

CONFIG_ENV = "POMOCL_CONFIG"
DEFAULT_CONFIG_FILE = Path("~/.config/pomocl/config.json")


class PomoclConfig(BaseModel):
    """Settings that change pomocl's defaults."""

    default_spec: str = DEFAULT_SESSION_SPEC
    watch_interval: float = 1.0
    watch_file: Path = Path("pomodoro.txt")
    notifications: bool = True
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"extra": "forbid"}

    @field_validator("default_spec")
    @classmethod
    def _complete_spec(cls, value: str) -> str:
        try:
            parse_session_spec(value, default=value)
        except SessionSpecError as e:
            raise ValueError(str(e)) from e
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if value.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value}")
        return value.upper()

    @field_validator("watch_interval")
    @classmethod
    def _positive_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("watch_interval must be positive")
        return value


def config_path(explicit: Optional[Path] = None) -> Path:
    if explicit is not None:
        return Path(explicit).expanduser()
    return Path(os.environ.get(CONFIG_ENV) or DEFAULT_CONFIG_FILE).expanduser()


def load_config(path: Optional[Path] = None) -> PomoclConfig:
    """Load configuration; a missing file means all defaults."""
    config_file = config_path(path)
    if not config_file.exists():
        return PomoclConfig()

    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Can't read config {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_file} must contain a JSON object")

    try:
        return PomoclConfig(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigError(f"Invalid config {config_file}: {problems}") from e
