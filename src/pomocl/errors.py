"""Error hierarchy for pomocl.

Input problems (bad spec strings, bad clock times, impossible end times)
also derive from ValueError so callers can treat them as ordinary bad
input. PauseInvariantError signals inconsistent pause/resume instants and
is kept apart from input errors on purpose.
"""


class PomoclError(Exception):
    """Base class for all pomocl errors."""


class InvalidTimeRangeError(PomoclError, ValueError):
    """A target end time does not lie after the session start."""


class PauseInvariantError(PomoclError):
    """Resuming would split a section into a non-positive piece."""


class SessionSpecError(PomoclError, ValueError):
    """A session spec string such as ``4p45b15`` could not be decoded."""


class TimeParseError(PomoclError, ValueError):
    """A wall-clock string such as ``17:30`` could not be decoded."""


class StorageError(PomoclError):
    """The stored session could not be read or written."""


class NoSessionError(StorageError):
    """No session has been started yet."""


class ConfigError(PomoclError):
    """The configuration file is malformed."""
