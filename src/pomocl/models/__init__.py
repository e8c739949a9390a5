"""Data models for pomocl."""

from .section import Section, SectionKind
from .session import Session
from .state import CurrentSection, PomodoroState, Position, SessionState

__all__ = [
    "CurrentSection",
    "PomodoroState",
    "Position",
    "Section",
    "SectionKind",
    "Session",
    "SessionState",
]
