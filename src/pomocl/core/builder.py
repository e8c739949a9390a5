"""Session construction from high-level timer parameters."""

import re
from datetime import datetime, timedelta
from typing import Optional, Tuple

from pomocl.errors import InvalidTimeRangeError, SessionSpecError
from pomocl.logging import get_logger
from pomocl.models import Section, SectionKind, Session

logger = get_logger(__name__)

DEFAULT_SESSION_SPEC = "4p45b15"

_SPEC_CHARS = re.compile(r"^[0-9pb]*$")
_REPETITIONS = re.compile(r"^(\d+)")
_WORK_MINUTES = re.compile(r"p(\d+)")
_BREAK_MINUTES = re.compile(r"b(\d+)$")


def _spec_fields(text: str) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    if not _SPEC_CHARS.match(text):
        raise SessionSpecError(
            f"Invalid session spec '{text}': expected <repetitions>p<work>b<break>, e.g. 4p45b15"
        )

    def field(pattern: "re.Pattern[str]") -> Optional[int]:
        match = pattern.search(text)
        return int(match.group(1)) if match else None

    return field(_REPETITIONS), field(_WORK_MINUTES), field(_BREAK_MINUTES)


def parse_session_spec(
    text: str, default: str = DEFAULT_SESSION_SPEC
) -> Tuple[int, int, int]:
    """Parse a spec like ``4p45b15`` into (repetitions, work, break) minutes.

    Any field may be omitted (``p25``, ``2``, ``3b5``); missing fields are
    taken from ``default``.
    """
    default_fields = _spec_fields(default)
    if None in default_fields:
        raise SessionSpecError(f"Default session spec '{default}' must set every field")

    fields = _spec_fields(text.strip().lower())
    repetitions, work, brk = (
        value if value is not None else fallback
        for value, fallback in zip(fields, default_fields)
    )

    if repetitions < 1:
        raise SessionSpecError(f"Session needs at least one repetition, got {repetitions}")
    if work < 1:
        raise SessionSpecError(f"Work time must be at least one minute, got {work}")
    if repetitions > 1 and brk < 1:
        raise SessionSpecError(f"Break time must be at least one minute, got {brk}")
    return repetitions, work, brk


class SessionBuilder:
    """Turns repetitions/work/break parameters into a Session."""

    def __init__(
        self,
        start: datetime,
        repetitions: int,
        work_minutes: int,
        break_minutes: int,
    ):
        self.start = start
        self.repetitions = repetitions
        self.work_duration = timedelta(minutes=work_minutes)
        self.break_duration = timedelta(minutes=break_minutes)

    @classmethod
    def from_spec(
        cls, text: str, start: datetime, default: str = DEFAULT_SESSION_SPEC
    ) -> "SessionBuilder":
        repetitions, work, brk = parse_session_spec(text, default)
        return cls(start, repetitions, work, brk)

    def build(self) -> Session:
        """Emit alternating work/break sections, starting and ending on work."""
        sections = []
        for i in range(self.repetitions):
            sections.append(Section(duration=self.work_duration, kind=SectionKind.WORK))
            if i < self.repetitions - 1:
                sections.append(
                    Section(duration=self.break_duration, kind=SectionKind.BREAK)
                )

        session = Session(sections=sections, start=self.start)
        logger.info(
            "session_started",
            start=self.start.isoformat(),
            repetitions=self.repetitions,
            work_seconds=int(self.work_duration.total_seconds()),
            break_seconds=int(self.break_duration.total_seconds()),
        )
        return session

    def fit_to_end(self, target_end: datetime) -> "SessionBuilder":
        """Choose repetitions and work time so the session ends at ``target_end``.

        The break length stays fixed. For ``r`` repetitions the work length
        that fills ``d = target_end - start`` is
        ``w(r) = d // r - b * (r - 1) // r`` (whole seconds). ``r`` grows
        from 1 until ``|w(r) - w_original|`` grows again, and the first ``r``
        with the smallest difference wins. Equal differences from floor
        rounding do not end the search, and ``w(r)`` never drops below one
        second. A zero break length keeps a single repetition.

        Raises:
            InvalidTimeRangeError: ``target_end`` is not after ``start``.
        """
        if target_end <= self.start:
            raise InvalidTimeRangeError(
                f"End time {target_end.isoformat()} is not after start "
                f"{self.start.isoformat()}"
            )

        total = int((target_end - self.start).total_seconds())
        brk = int(self.break_duration.total_seconds())
        original = int(self.work_duration.total_seconds())

        def work_for(r: int) -> int:
            return total // r - (brk * (r - 1)) // r

        best_r = 1
        best_work = work_for(1)
        best_diff = abs(best_work - original)
        # Without a break length only a single work section is possible.
        max_r = total if brk > 0 else 1
        for r in range(2, max_r + 1):
            work = work_for(r)
            diff = abs(work - original)
            if work < 1 or diff > best_diff:
                break
            if diff < best_diff:
                best_r, best_work, best_diff = r, work, diff

        if best_work < 1:
            raise InvalidTimeRangeError(
                f"No positive work time fits before {target_end.isoformat()}"
            )

        logger.debug(
            "session_fitted",
            target_end=target_end.isoformat(),
            repetitions=best_r,
            work_seconds=best_work,
        )
        self.repetitions = best_r
        self.work_duration = timedelta(seconds=best_work)
        return self
