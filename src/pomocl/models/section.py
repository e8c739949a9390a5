"""Section model: one contiguous timed interval of a session."""

from datetime import timedelta
from enum import Enum

from pydantic import BaseModel, field_serializer, field_validator


class SectionKind(str, Enum):
    """Kind of a timed section."""

    WORK = "work"
    BREAK = "break"


class Section(BaseModel):
    """A work or break interval with a strictly positive duration."""

    duration: timedelta
    kind: SectionKind

    @field_validator("duration")
    @classmethod
    def _duration_positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError(f"section duration must be positive, got {value}")
        return value

    @field_serializer("duration", when_used="json")
    def _duration_seconds(self, value: timedelta) -> int:
        return int(value.total_seconds())
