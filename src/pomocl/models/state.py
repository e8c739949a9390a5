"""Query results produced by a Session."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .section import SectionKind


class PomodoroState(str, Enum):
    """What the timer is doing, as shown to the user."""

    NOT_STARTED = "not started"
    WORK = "work"
    BREAK = "break"
    DONE = "done"

    @classmethod
    def from_kind(cls, kind: SectionKind) -> "PomodoroState":
        return cls(kind.value)

    def __str__(self) -> str:
        return self.value


class Position(str, Enum):
    """Where an instant falls relative to a session's timeline."""

    INACTIVE = "inactive"
    BEFORE_START = "before_start"
    SECTION = "section"
    AFTER_END = "after_end"


class CurrentSection(BaseModel):
    """Result of locating an instant on the timeline.

    ``index`` and ``section_start`` are only set when ``position`` is
    ``Position.SECTION``.
    """

    position: Position
    index: Optional[int] = None
    section_start: Optional[datetime] = None

    @classmethod
    def inactive(cls) -> "CurrentSection":
        return cls(position=Position.INACTIVE)

    @classmethod
    def before_start(cls) -> "CurrentSection":
        return cls(position=Position.BEFORE_START)

    @classmethod
    def after_end(cls) -> "CurrentSection":
        return cls(position=Position.AFTER_END)

    @classmethod
    def section(cls, index: int, section_start: datetime) -> "CurrentSection":
        return cls(position=Position.SECTION, index=index, section_start=section_start)


class SessionState(BaseModel):
    """Snapshot of a session as of one instant."""

    current: PomodoroState
    next: PomodoroState
    remaining: timedelta
    completed_repetitions: int
    total_repetitions: int
    is_paused: bool = False
