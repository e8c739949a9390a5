"""Main CLI interface for pomocl."""

from datetime import datetime, timedelta
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from pomocl.core.builder import SessionBuilder
from pomocl.core.clock import parse_clock_time, utc_now
from pomocl.core.config import PomoclConfig, load_config
from pomocl.core.display import format_duration, format_state
from pomocl.core.notifier import notify
from pomocl.core.storage import STATE_DIR_ENV, SessionStore
from pomocl.core.watch import watch_session
from pomocl.errors import PauseInvariantError, PomoclError
from pomocl.logging import configure_logging, get_logger
from pomocl.logging.config import DEBUG_LOG_NAME
from pomocl.models import Position, Session

console = Console(highlight=False)
logger = get_logger(__name__)


class AppContext:
    """Objects shared by every command of one invocation."""

    def __init__(self, store: SessionStore, config: PomoclConfig):
        self.store = store
        self.config = config


def _fail(error: Exception) -> NoReturn:
    """Report an error on one line and exit with status 1."""
    if isinstance(error, PauseInvariantError):
        message = (
            f"inconsistent pause/resume: {error}. "
            "Run 'pomocl pause' to set a new pause point"
        )
    else:
        message = str(error)
    console.print(f"[red]Error: {escape(message)}[/red]", soft_wrap=True)
    logger.warning("command_failed", error_type=type(error).__name__, error=str(error))
    raise click.Abort() from error


def _load_session(app: AppContext) -> Session:
    try:
        return app.store.load()
    except PomoclError as e:
        _fail(e)


def _save_and_show(app: AppContext, session: Session) -> None:
    try:
        app.store.save(session)
    except PomoclError as e:
        _fail(e)
    console.print(format_state(session.state(utc_now())))


def _pause_instant(session: Session, now: datetime) -> datetime:
    """Move a pause that lands on a section start one second into the section."""
    section_starts = {start for _, start, _ in session.section_windows()}
    while now in section_starts:
        now += timedelta(seconds=1)
    return now


@click.group()
@click.version_option(package_name="pomocl")
@click.option(
    "--state-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=STATE_DIR_ENV,
    help="Directory holding the current session",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to config.json",
)
@click.option("--verbose", "-v", is_flag=True, help="Write debug records to the log")
@click.pass_context
def main(
    ctx: click.Context,
    state_dir: Optional[Path],
    config_file: Optional[Path],
    verbose: bool,
):
    """Pomocl - work/break interval timer."""
    store = SessionStore(state_dir)
    log_file = store.state_dir / DEBUG_LOG_NAME
    configure_logging(level="DEBUG" if verbose else "INFO", log_file=log_file)

    try:
        config = load_config(config_file)
    except PomoclError as e:
        _fail(e)
    configure_logging(
        level="DEBUG" if verbose else config.log_level,
        log_file=log_file,
        format_json=config.log_json,
    )

    ctx.obj = AppContext(store, config)


@main.command()
@click.argument("spec", required=False, default="")
@click.option(
    "--until", metavar="HH:MM", help="Fit the session to end at this local time"
)
@click.pass_obj
def start(app: AppContext, spec: str, until: Optional[str]):
    """Start a new session, e.g. 'pomocl start 4p45b15'.

    SPEC is <repetitions>p<work minutes>b<break minutes>; omitted fields
    come from the configured default.
    """
    now = utc_now()
    try:
        builder = SessionBuilder.from_spec(spec, now, default=app.config.default_spec)
        if until:
            builder.fit_to_end(parse_clock_time(until))
    except PomoclError as e:
        _fail(e)

    _save_and_show(app, builder.build())


@main.command()
@click.pass_obj
def status(app: AppContext):
    """Show the current section and time left."""
    session = _load_session(app)
    console.print(format_state(session.state(utc_now())))


@main.command()
@click.pass_obj
def sections(app: AppContext):
    """List the sections of the current session."""
    session = _load_session(app)
    current = session.current_section(utc_now())

    table = Table(title="Session Sections")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Kind", style="green")
    table.add_column("Start", style="magenta")
    table.add_column("End", style="magenta")
    table.add_column("Duration", style="blue")
    table.add_column("", style="yellow")

    for index, section_start, section in session.section_windows():
        section_end = section_start + section.duration
        marker = ""
        if current.position == Position.SECTION and current.index == index:
            marker = "paused" if session.is_paused else "now"
        table.add_row(
            str(index + 1),
            section.kind.value,
            section_start.astimezone().strftime("%H:%M:%S"),
            section_end.astimezone().strftime("%H:%M:%S"),
            format_duration(section.duration),
            marker,
        )

    console.print(table)
    if not session.active:
        console.print("[yellow]Session stopped[/yellow]")


@main.command()
@click.pass_obj
def pause(app: AppContext):
    """Pause the timer."""
    session = _load_session(app)
    session.set_pause(_pause_instant(session, utc_now()))
    _save_and_show(app, session)


@main.command()
@click.pass_obj
def resume(app: AppContext):
    """Resume a paused timer, inserting the pause as a break."""
    session = _load_session(app)
    if not session.is_paused:
        console.print("[yellow]Session is not paused[/yellow]")
        return
    try:
        # A pause moved off a section start may lie a second ahead.
        session.set_unpause(max(utc_now(), session.pause_marker))
    except PauseInvariantError as e:
        _fail(e)
    _save_and_show(app, session)


@main.command()
@click.pass_obj
def stop(app: AppContext):
    """Stop the current session."""
    session = _load_session(app)
    session.set_active(False)
    _save_and_show(app, session)


@main.command()
@click.argument("output", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds between polls",
)
@click.option("--count", type=click.IntRange(min=1), help="Stop after this many polls")
@click.option("--no-notify", is_flag=True, help="Don't send desktop notifications")
@click.pass_obj
def watch(
    app: AppContext,
    output: Optional[Path],
    interval: Optional[float],
    count: Optional[int],
    no_notify: bool,
):
    """Keep showing the status, mirroring it into OUTPUT (default pomodoro.txt)."""
    output_path = output or app.config.watch_file
    poll_interval = interval if interval is not None else app.config.watch_interval
    notifier = notify if app.config.notifications and not no_notify else None

    try:
        with Live(Text(""), console=console, refresh_per_second=4) as live:
            watch_session(
                app.store,
                output_path,
                poll_interval,
                on_line=lambda line: live.update(Text(line)),
                notifier=notifier,
                iterations=count,
                clock=utc_now,
            )
    except KeyboardInterrupt:
        logger.info("watch_interrupted")
    except (PomoclError, OSError) as e:
        _fail(e)


if __name__ == "__main__":
    main()
