"""Session model: the interval timer state machine."""

from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, field_serializer, field_validator

from pomocl.errors import PauseInvariantError
from pomocl.logging import get_logger

from .section import Section, SectionKind
from .state import CurrentSection, PomodoroState, Position, SessionState

logger = get_logger(__name__)


class Session(BaseModel):
    """An ordered timeline of work/break sections anchored at ``start``.

    Section ``i`` begins at ``start`` plus the durations of all sections
    before it. While ``pause_marker`` is set every query is answered as of
    the pause instant, so the timer appears frozen.
    """

    sections: List[Section] = []
    start: datetime
    active: bool = True
    pause_marker: Optional[datetime] = None

    @field_validator("start", "pause_marker")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_serializer("start", "pause_marker", when_used="json")
    def _unix_seconds(self, value: Optional[datetime]) -> Optional[int]:
        if value is None:
            return None
        return int(value.timestamp())

    @property
    def is_paused(self) -> bool:
        return self.pause_marker is not None

    def repetitions(self) -> int:
        """Number of work sections in the whole timeline."""
        return sum(1 for s in self.sections if s.kind == SectionKind.WORK)

    def total_duration(self) -> timedelta:
        return sum((s.duration for s in self.sections), timedelta(0))

    def end(self) -> datetime:
        return self.start + self.total_duration()

    def section_windows(self) -> Iterator[Tuple[int, datetime, Section]]:
        """Yield ``(index, section_start, section)`` in timeline order."""
        section_start = self.start
        for index, section in enumerate(self.sections):
            yield index, section_start, section
            section_start += section.duration

    def effective_time(self, now: datetime) -> datetime:
        """The instant queries use: the pause instant while paused."""
        return self.pause_marker if self.pause_marker is not None else now

    def current_section(self, now: datetime) -> CurrentSection:
        """Locate the effective time on the timeline.

        Section windows are half-open, ``[section_start, section_end)``.
        """
        if not self.active:
            return CurrentSection.inactive()

        at = self.effective_time(now)
        if at < self.start:
            return CurrentSection.before_start()

        for index, section_start, section in self.section_windows():
            if section_start <= at < section_start + section.duration:
                return CurrentSection.section(index, section_start)

        return CurrentSection.after_end()

    def state(self, now: datetime) -> SessionState:
        """Summarize the session as of ``now``."""
        at = self.effective_time(now)
        current = self.current_section(now)
        total = self.repetitions()

        if current.position == Position.INACTIVE:
            return SessionState(
                current=PomodoroState.DONE,
                next=PomodoroState.DONE,
                remaining=timedelta(0),
                completed_repetitions=0,
                total_repetitions=0,
                is_paused=self.is_paused,
            )

        if current.position == Position.BEFORE_START:
            return SessionState(
                current=PomodoroState.NOT_STARTED,
                next=self._kind_at(0),
                remaining=self.start - at,
                completed_repetitions=0,
                total_repetitions=total,
                is_paused=self.is_paused,
            )

        if current.position == Position.SECTION:
            index = current.index
            section = self.sections[index]
            completed = sum(
                1 for s in self.sections[: index + 1] if s.kind == SectionKind.WORK
            )
            return SessionState(
                current=PomodoroState.from_kind(section.kind),
                next=self._kind_at(index + 1),
                remaining=(current.section_start + section.duration) - at,
                completed_repetitions=completed,
                total_repetitions=total,
                is_paused=self.is_paused,
            )

        return SessionState(
            current=PomodoroState.DONE,
            next=PomodoroState.DONE,
            remaining=timedelta(0),
            completed_repetitions=total,
            total_repetitions=total,
            is_paused=self.is_paused,
        )

    def _kind_at(self, index: int) -> PomodoroState:
        if index < len(self.sections):
            return PomodoroState.from_kind(self.sections[index].kind)
        return PomodoroState.DONE

    def set_active(self, active: bool) -> None:
        """Stop the session. A stopped session stays stopped."""
        if active and not self.active:
            raise ValueError("A stopped session cannot be reactivated; start a new one")
        if not active and self.active:
            logger.info("session_stopped", start=self.start.isoformat())
        self.active = active

    def set_pause(self, now: datetime) -> None:
        """Freeze the timer at ``now``. Pausing again moves the freeze point."""
        if self.pause_marker is not None:
            logger.info(
                "session_pause_moved",
                previous=self.pause_marker.isoformat(),
                pause_at=now.isoformat(),
            )
        else:
            logger.info("session_paused", pause_at=now.isoformat())
        self.pause_marker = now

    def set_unpause(self, now: datetime) -> bool:
        """Resume a paused session at ``now``.

        When the pause began inside a section, that section is split in
        place into the part before the pause, a break lasting as long as
        the pause, and the rest of the original section. Returns True if
        the timeline was spliced.

        Raises:
            PauseInvariantError: the pause began exactly at a section's
                start, or ``now`` lies before the pause instant. The
                session is left untouched.
        """
        if self.pause_marker is None:
            return False

        pause_start = self.pause_marker
        current = self.current_section(pause_start)
        spliced = False

        if current.position == Position.SECTION:
            index = current.index
            section_start = current.section_start
            if pause_start <= section_start:
                raise PauseInvariantError(
                    f"Pause at {pause_start.isoformat()} does not lie strictly "
                    f"inside section {index} starting at {section_start.isoformat()}"
                )
            if now < pause_start:
                raise PauseInvariantError(
                    f"Resume at {now.isoformat()} is earlier than the pause "
                    f"at {pause_start.isoformat()}"
                )

            # A resume at the pause instant leaves nothing to insert.
            if now > pause_start:
                original = self.sections[index]
                before = pause_start - section_start
                self.sections[index : index + 1] = [
                    Section(duration=before, kind=original.kind),
                    Section(duration=now - pause_start, kind=SectionKind.BREAK),
                    Section(duration=original.duration - before, kind=original.kind),
                ]
                spliced = True

        logger.info(
            "session_resumed",
            paused_at=pause_start.isoformat(),
            resumed_at=now.isoformat(),
            position=current.position.value,
            section_index=current.index,
            spliced=spliced,
        )
        self.pause_marker = None
        return spliced
