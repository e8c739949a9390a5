"""Clock helpers: the current instant and wall-clock parsing."""

from datetime import date, datetime, timezone
from typing import Optional

from pomocl.errors import TimeParseError


def utc_now() -> datetime:
    """Current time in UTC, truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def parse_clock_time(text: str, today: Optional[date] = None) -> datetime:
    """Interpret ``HH:MM`` as local time on ``today`` and convert to UTC.

    Wall-clock times skipped or repeated by a daylight saving change are
    rejected rather than guessed.
    """
    try:
        clock = datetime.strptime(text.strip(), "%H:%M").time()
    except ValueError as e:
        raise TimeParseError(f"Invalid time '{text}': expected HH:MM") from e

    day = today if today is not None else date.today()
    naive = datetime.combine(day, clock)
    earlier = naive.replace(fold=0).astimezone()
    later = naive.replace(fold=1).astimezone()

    if earlier.utcoffset() != later.utcoffset():
        if earlier.replace(tzinfo=None) != naive or later.replace(tzinfo=None) != naive:
            raise TimeParseError(f"Time '{text}' does not exist on {day} in local time")
        raise TimeParseError(f"Time '{text}' is ambiguous on {day} in local time")

    return earlier.astimezone(timezone.utc)
