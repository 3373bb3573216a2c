"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..adapters.event_bus import LocalEventBus
from ..adapters.selections_file import SelectionsFile
from ..config import AppConfig, get_default_config_path
from ..domain.configuration import RangeChange
from ..domain.exceptions import WhenisError
from ..domain.grid import parse_slot_id
from ..domain.settings import Settings
from ..services.calendar import CalendarService

app = typer.Typer(
    name="whenis",
    help="Find the meeting slots that work for everybody",
    add_completion=False
)

console = Console()

logger = logging.getLogger(__name__)

VOTE_DOT = "●"

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
SelectionsOption = Annotated[Optional[Path], typer.Option("--selections", "-s", help="YAML file mapping participant id -> selected slot ids")]
DaysOption = Annotated[Optional[str], typer.Option("--days", help="Day offsets from the reference date, e.g. 0-4")]
HoursOption = Annotated[Optional[str], typer.Option("--hours", help="Hours of the day, both included, e.g. 9-18")]
WeekendsOption = Annotated[Optional[bool], typer.Option("--weekends/--no-weekends", help="Show Saturdays and Sundays")]
HalfHoursOption = Annotated[Optional[bool], typer.Option("--half-hours/--no-half-hours", help="Add a slot at every half hour")]
DateOption = Annotated[Optional[str], typer.Option("--date", help="Reference date (YYYY-MM-DD). Defaults to today")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")]


@app.callback()
def main(verbose: VerboseOption = False):
    """
    Configure logging for every command.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _parse_range(value: str, option: str) -> RangeChange:
    """Parse ``"LOWER-UPPER"`` (or a single number) into a RangeChange."""
    lower, _, upper = value.partition("-")
    try:
        return RangeChange(lower=int(lower), upper=int(upper or lower))
    except ValueError:
        raise ValueError(f"{option} expects LOWER-UPPER, got '{value}'") from None


def _load_config(config_file: Optional[Path]) -> AppConfig:
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    config_path = get_default_config_path()
    if not config_path.exists():
        logger.info("No config file at %s, using defaults", config_path)
        return AppConfig()

    return AppConfig.load_from_yaml(config_path)


def _build_service(
    *,
    config: AppConfig,
    selections: Optional[Path],
    days: Optional[str],
    hours: Optional[str],
    weekends: Optional[bool],
    half_hours: Optional[bool],
    date: Optional[str],
) -> CalendarService:
    """
    Wire a calendar service from the config file plus command line overrides.
    """
    reference_date = None
    if date:
        try:
            reference_date = pendulum.from_format(date, "YYYY-MM-DD", tz=config.timezone)
        except ValueError as e:
            raise ValueError(f"Invalid --date '{date}': {e}") from e

    service = CalendarService(
        LocalEventBus(),
        Settings(config.settings),
        timezone=config.timezone,
        identity=config,
        reference_date=reference_date,
    )

    if days:
        service.change_setting("days-range", _parse_range(days, "--days"))
    if hours:
        service.change_setting("time-range", _parse_range(hours, "--hours"))
    if weekends is not None:
        service.change_setting("allow-weekends", weekends)
    if half_hours is not None:
        service.change_setting("half-hours", half_hours)

    if selections:
        for event in SelectionsFile(selections).load():
            service.publish_selection(event)

    return service


def _fail(error: Exception):
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


def _format_slot(slot_id: str, config: AppConfig) -> str:
    start = parse_slot_id(slot_id, config.timezone)
    return start.format("dddd D MMM, HH:mm", locale=config.locale)


@app.command()
def grid(
    config_file: ConfigOption = None,
    selections: SelectionsOption = None,
    days: DaysOption = None,
    hours: HoursOption = None,
    weekends: WeekendsOption = None,
    half_hours: HalfHoursOption = None,
    date: DateOption = None,
    viewer: Annotated[Optional[str], typer.Option("--as", help="Participant whose view is shown")] = None,
    focus: Annotated[Optional[List[str]], typer.Option("--focus", "-f", help="Participants to highlight (repeatable)")] = None,
):
    """
    Show the slot grid with votes per slot.

    Examples:

        # Default grid
        whenis grid

        # Next two weeks, half hours, with votes
        whenis grid --days 0-9 --half-hours --selections selections.yaml

        # Highlight what alice and bob have in common
        whenis grid -s selections.yaml --as alice -f alice -f bob
    """
    try:
        config = _load_config(config_file)
        service = _build_service(
            config=config, selections=selections, days=days, hours=hours,
            weekends=weekends, half_hours=half_hours, date=date
        )

        viewer_id = config.resolve_participants([viewer])[0] if viewer else ""
        if focus:
            service.highlights.set_targets(viewer_id, config.resolve_participants(focus))

        states = service.slot_states(viewer_id)
        days_list = service.days

        table = Table(show_header=True, header_style="bold cyan")
        for day in days_list:
            table.add_column(day.date.format("dddd D", locale=config.locale))

        for row in range(max((len(column) for column in states), default=0)):
            cells = []
            for column in states:
                state = column[row]
                text = f"{state.slot.label}hs {VOTE_DOT * state.votes}"
                if state.match:
                    text = f"[bold green]{text}[/bold green]"
                elif state.highlighted:
                    text = f"[bold yellow]{text}[/bold yellow]"
                cells.append(text)
            table.add_row(*cells)

        configuration = service.configuration
        console.print()
        console.print(table)
        console.print(
            f"[dim]Meeting duration: {configuration.duration} min · "
            f"{len(service.store)} participant(s) voted[/dim]\n"
        )

    except (WhenisError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def tally(
    config_file: ConfigOption = None,
    selections: SelectionsOption = None,
    days: DaysOption = None,
    hours: HoursOption = None,
    weekends: WeekendsOption = None,
    half_hours: HalfHoursOption = None,
    date: DateOption = None,
):
    """
    List every voted slot of the grid with who picked it.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(
            config=config, selections=selections, days=days, hours=hours,
            weekends=weekends, half_hours=half_hours, date=date
        )

        counts = service.counted_slots()
        if not counts:
            console.print("[yellow]No votes on the current grid.[/yellow]")
            return

        table = Table(title="Votes", show_header=True, header_style="bold cyan")
        table.add_column("Slot", style="bold")
        table.add_column("Votes", justify="right")
        table.add_column("Participants", style="dim")

        for slot_id in sorted(counts):
            table.add_row(
                _format_slot(slot_id, config),
                str(counts[slot_id]),
                ", ".join(service.voter_names(slot_id))
            )

        console.print()
        console.print(table)
        console.print()

    except (WhenisError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def common(
    participants: Annotated[List[str], typer.Argument(help="Participant ids or names")],
    config_file: ConfigOption = None,
    selections: SelectionsOption = None,
):
    """
    Show the slots every given participant selected.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(
            config=config, selections=selections, days=None, hours=None,
            weekends=None, half_hours=None, date=None
        )

        user_ids = config.resolve_participants(participants)
        slots = sorted(service.store.common_slots(user_ids))
        names = ", ".join(config.name(user_id) for user_id in user_ids)

        if not slots:
            console.print(f"[yellow]⚠ No common slots for {names}.[/yellow]")
            return

        console.print(f"[bold green]✓ {len(slots)} common slot(s) for {names}:[/bold green]\n")
        for slot_id in slots:
            console.print(f"  {_format_slot(slot_id, config)}")
        console.print()

    except (WhenisError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def best(
    config_file: ConfigOption = None,
    selections: SelectionsOption = None,
    days: DaysOption = None,
    hours: HoursOption = None,
    weekends: WeekendsOption = None,
    half_hours: HalfHoursOption = None,
    date: DateOption = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="How many slots to show")] = 3,
):
    """
    Show the most voted slots of the current grid.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(
            config=config, selections=selections, days=days, hours=hours,
            weekends=weekends, half_hours=half_hours, date=date
        )

        ranked = service.best_slots(limit=limit)
        if not ranked:
            console.print("[yellow]No votes on the current grid.[/yellow]")
            return

        lines = [
            f"[bold]{_format_slot(slot_id, config)}[/bold]  {VOTE_DOT * votes}  "
            f"[dim]{', '.join(service.voter_names(slot_id))}[/dim]"
            for slot_id, votes in ranked
        ]
        console.print(Panel.fit("\n".join(lines), title="Best slots"))

    except (WhenisError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def participants(config_file: ConfigOption = None):
    """
    List all configured participants.
    """
    try:
        config = _load_config(config_file)

        if not config.participants:
            console.print("[yellow]No participants defined in the config file.[/yellow]")
            return

        table = Table(
            title="Participants",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Id", style="bold yellow")
        table.add_column("Name", style="dim")

        for participant in config.participants:
            table.add_row(participant.id, participant.display_name())

        console.print()
        console.print(table)
        console.print()

    except (WhenisError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]whenis[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
