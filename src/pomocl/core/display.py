"""Human-readable rendering of session states."""

from datetime import timedelta

from pomocl.models import PomodoroState, SessionState


def format_duration(duration: timedelta) -> str:
    """Format as HH:MM:SS; hours keep counting past 24."""
    seconds = max(0, int(duration.total_seconds()))
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def format_state(state: SessionState) -> str:
    line = (
        f"{state.current} {format_duration(state.remaining)} "
        f"(-> {state.next}) "
        f"{state.completed_repetitions}/{state.total_repetitions}"
    )
    if state.is_paused:
        line += " (paused)"
    return line


def notification_message(state: SessionState) -> str:
    """Body text for the notification sent when the current kind changes."""
    if state.current == PomodoroState.DONE:
        return (
            f"All done: {state.completed_repetitions}/{state.total_repetitions} "
            "repetitions"
        )
    if state.current == PomodoroState.BREAK:
        return f"Take a break for {format_duration(state.remaining)}"
    if state.current == PomodoroState.WORK:
        return (
            f"Back to work for {format_duration(state.remaining)} "
            f"({state.completed_repetitions}/{state.total_repetitions})"
        )
    return f"Starting in {format_duration(state.remaining)}"
