import logging
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

app = typer.Typer()

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # Keep HTTP client chatter out of the schedule output.
    for name in ("httpx", "openai", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


@app.command()
def schedule(
    request: Path = typer.Argument(..., help="JSON file with `tasks`, `events` and optional `preferences`."),
    today: str = typer.Option(None, help="Schedule as of this date (YYYY-MM-DD)."),
    now: str = typer.Option(None, help="Current time (HH:MM); earlier slots today are skipped."),
    offline: bool = typer.Option(False, "--offline", help="Skip the AI assistant, use first available slots."),
    out: Path = typer.Option(None, help="Store accepted slots in this JSON file."),
    work_start: int = typer.Option(None, help="Override work hours start (hour)."),
    work_end: int = typer.Option(None, help="Override work hours end (hour)."),
    buffer: int = typer.Option(None, help="Override buffer minutes around commitments."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
):
    """Schedule the tasks of a request file into free time."""
    from zeroed.scheduling.batch import BatchScheduler, build_selector
    from zeroed.scheduling.errors import InvalidScheduleRequest
    from zeroed.scheduling.oracle import LLMDecisionOracle
    from zeroed.scheduling.persistence import JsonFileSlotSink
    from zeroed.services.config import ConfigError, load_config_or_default
    from zeroed.services.request_io import RequestFileError
    from zeroed.settings import get_settings
    from zeroed.start import create_scheduling_agent

    _configure_logging(verbose)
    settings = get_settings()

    try:
        config = load_config_or_default()
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    try:
        run_today, now_minute = _resolve_clock(today, now, config.timezone or settings.timezone)
    except (ValueError, ZoneInfoNotFoundError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    oracle = None
    if offline:
        console.print("[dim]Offline: using the first available slot for every task.[/dim]")
    elif not settings.openai_api_key:
        console.print(
            "[yellow]OPENAI_API_KEY is not set. Using the first available slot for every task.[/yellow]"
        )
    else:
        oracle = LLMDecisionOracle(
            model=settings.oracle_model,
            api_key=settings.openai_api_key,
            timeout_seconds=settings.oracle_timeout_seconds,
        )

    scheduler = BatchScheduler(
        build_selector(oracle, settings.oracle_timeout_seconds),
        sink=JsonFileSlotSink(out) if out else None,
    )
    agent = create_scheduling_agent(scheduler)

    overrides = {
        "work_hours_start": work_start,
        "work_hours_end": work_end,
        "buffer_minutes": buffer,
    }
    initial_state = {
        "request_path": request,
        "config_dir": None,
        "preference_overrides": {key: value for key, value in overrides.items() if value is not None},
        "today": run_today,
        "now_minute": now_minute,
    }

    try:
        final_state = agent.invoke(initial_state)
    except (RequestFileError, InvalidScheduleRequest) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    except ValidationError as exc:
        console.print(f"[red]Invalid preferences: {exc}[/red]")
        raise typer.Exit(code=1)

    if out and final_state["result"].scheduled:
        console.print(f"[green]Saved slots to {out}[/green]")


@app.command()
def init():
    """Initialize local scheduling preferences."""
    from zeroed.services.config import AppConfig, ConfigError, load_config_or_default, update_config
    from zeroed.scheduling.models import SchedulingPreferences

    console.print("[bold blue]Zeroed scheduling setup[/bold blue]")
    try:
        existing = load_config_or_default()
    except ConfigError as exc:
        console.print(f"[yellow]Ignoring unreadable config: {exc}[/yellow]")
        existing = AppConfig()
    current = existing.preferences

    while True:
        start = typer.prompt("Work day starts at (hour)", default=current.work_hours_start, type=int)
        end = typer.prompt("Work day ends at (hour)", default=current.work_hours_end, type=int)
        if start >= end:
            console.print("[red]The work day must start before it ends.[/red]")
            if not typer.confirm("Try again?", default=True):
                return
            continue
        break

    buffer = typer.prompt(
        "Buffer around commitments (minutes)", default=current.buffer_minutes, type=int
    )
    max_hours = typer.prompt(
        "Max scheduled task hours per day", default=current.max_hours_per_day, type=float
    )
    prefer_morning = typer.confirm(
        "Prefer mornings for high-priority tasks?", default=current.prefer_morning_for_hard
    )
    timezone = typer.prompt(
        "Timezone (IANA name, empty for system)", default=existing.timezone or "", show_default=False
    ).strip()

    try:
        preferences = SchedulingPreferences(
            work_hours_start=start,
            work_hours_end=end,
            buffer_minutes=buffer,
            max_hours_per_day=max_hours,
            prefer_morning_for_hard=prefer_morning,
        )
    except ValidationError as exc:
        console.print(f"[red]Invalid preferences: {exc}[/red]")
        raise typer.Exit(code=1)

    try:
        update_config({"preferences": preferences.model_dump(), "timezone": timezone or None})
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Preferences saved.[/green]")


@app.command()
def preferences():
    """Show the effective scheduling preferences."""
    from zeroed.services.config import ConfigError, config_exists, load_config_or_default

    try:
        config = load_config_or_default()
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    if not config_exists():
        console.print("[dim]No config found, showing defaults. Run `zeroed init` to change them.[/dim]")

    table = Table(show_header=True)
    table.add_column("Preference", style="cyan")
    table.add_column("Value", style="white")
    for key, value in config.preferences.model_dump().items():
        table.add_row(key, str(value))
    table.add_row("timezone", config.timezone or "system")
    console.print(table)


def _resolve_clock(today: str | None, now: str | None, timezone: str | None) -> tuple[date, int | None]:
    """Return the scheduling date and the minute before which today is skipped.

    An explicit `--today` without `--now` schedules the whole day.
    """
    from zeroed.scheduling.interval import parse_hhmm

    now_minute = parse_hhmm(now) if now is not None else None
    if today is not None:
        try:
            return date.fromisoformat(today), now_minute
        except ValueError as exc:
            raise ValueError(f"Invalid --today `{today}`, expected YYYY-MM-DD") from exc

    now_local = datetime.now(ZoneInfo(timezone)) if timezone else datetime.now().astimezone()
    if now_minute is None:
        now_minute = now_local.hour * 60 + now_local.minute
    return now_local.date(), now_minute


def main():
    app()


if __name__ == "__main__":
    main()
