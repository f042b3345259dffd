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
from rich.table import Table

from ..adapters import build_data_source
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import ClinicSlotsError
from ..domain.models import TimeSlot
from ..services.availability import AvailabilityFailure, AvailabilityService

app = typer.Typer(
    name="clinicslots",
    help="Consultar horários disponíveis para agendamento",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
ServiceOption = Annotated[Optional[str], typer.Option("--service", "-s", help="Service id; omit to accept windows of any service")]
DurationOption = Annotated[Optional[int], typer.Option("--duration", "-d", help="Service duration in minutes")]
GraceOption = Annotated[Optional[int], typer.Option("--grace", help="Grace buffer in minutes before a slot starts")]
NowOption = Annotated[Optional[str], typer.Option("--now", help="Override the clinic wall clock (YYYY-MM-DD HH:mm)")]
JsonOption = Annotated[bool, typer.Option("--json", help="Print the raw result as JSON")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_service(config: AppConfig) -> AvailabilityService:
    return AvailabilityService(
        data_source=build_data_source(config.data_source),
        settings=config.availability,
    )


def _resolve_now(config: AppConfig, now_option: Optional[str]) -> pendulum.DateTime:
    """
    Wall-clock "now" in the clinic's timezone.

    Only the calendar fields of the returned value are used by the engine.
    """
    if not now_option:
        return config.local_now()
    try:
        return pendulum.from_format(now_option, "YYYY-MM-DD HH:mm", tz=config.timezone)
    except ValueError as e:
        console.print(f"[red]Erro ao interpretar --now: {e}[/red]")
        raise typer.Exit(1)


def _abort_on_failure(result) -> None:
    if isinstance(result, AvailabilityFailure):
        console.print(f"[bold red]Consulta inválida:[/bold red] {result.reason}")
        raise typer.Exit(1)


def _slots_table(title: str, slots: List[TimeSlot]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Início", style="bold")
    table.add_column("Fim")
    table.add_column("Duração", style="dim")

    for slot in slots:
        table.add_row(
            slot.time_range.start.format("HH:mm"),
            slot.time_range.end.format("HH:mm"),
            f"{slot.duration_minutes} min",
        )

    return table


def _run(command):
    """Run a command body, turning expected errors into exit code 1."""
    try:
        command()
    except typer.Exit:
        raise
    except FileNotFoundError as e:
        console.print(f"[bold red]Erro:[/bold red] {e}")
        raise typer.Exit(1)
    except (ClinicSlotsError, ValueError) as e:
        console.print(f"[bold red]Erro:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def slots(
    attendant: Annotated[str, typer.Argument(help="Attendant id")],
    date: Annotated[Optional[str], typer.Option("--date", help="Date (YYYY-MM-DD); defaults to today")] = None,
    service: ServiceOption = None,
    duration: DurationOption = None,
    grace: GraceOption = None,
    now: NowOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
    config_file: ConfigOption = None,
):
    """
    List the bookable slots of an attendant on one date.

    Examples:

        clinicslots slots att-1
        clinicslots slots att-1 --date 2024-01-15 --duration 45
        clinicslots slots att-1 --now "2024-01-15 08:05"
    """
    _configure_logging(verbose)

    def body():
        config = _load(config_file)
        current = _resolve_now(config, now)
        service_layer = _build_service(config)

        result = service_layer.compute_availability(
            attendant,
            date or current.format("YYYY-MM-DD"),
            service,
            duration if duration is not None else config.availability.default_duration_minutes,
            current,
            grace,
        )
        _abort_on_failure(result)

        if as_json:
            console.print_json(data=result.to_dict())
            return

        if not result.slots:
            console.print(
                "[yellow]⚠ Nenhum horário disponível nesta data.[/yellow]\n"
                "Tente outra data ou um serviço mais curto."
            )
            return

        console.print()
        console.print(_slots_table(f"Horários disponíveis em {result.date.format('DD/MM/YYYY')}", result.slots))
        console.print()

    _run(body)


@app.command()
def calendar(
    attendant: Annotated[str, typer.Argument(help="Attendant id")],
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD); defaults to today")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD); defaults to start + 6 days")] = None,
    service: ServiceOption = None,
    duration: DurationOption = None,
    grace: GraceOption = None,
    now: NowOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
    config_file: ConfigOption = None,
):
    """
    Summarize availability for each day of a date range.
    """
    _configure_logging(verbose)

    def body():
        config = _load(config_file)
        current = _resolve_now(config, now)
        service_layer = _build_service(config)

        start_date = start or current.format("YYYY-MM-DD")
        if end:
            end_date = end
        else:
            try:
                end_date = pendulum.from_format(start_date, "YYYY-MM-DD").add(days=6).format("YYYY-MM-DD")
            except ValueError:
                # Let the service report the malformed start date
                end_date = start_date

        result = service_layer.availability_calendar(
            attendant,
            start_date,
            end_date,
            service,
            duration if duration is not None else config.availability.default_duration_minutes,
            current,
            grace,
        )
        _abort_on_failure(result)

        if as_json:
            console.print_json(data=result.to_dict())
            return

        table = Table(title="Calendário de disponibilidade", show_header=True, header_style="bold cyan")
        table.add_column("Data", style="bold yellow")
        table.add_column("Horários", justify="right")
        table.add_column("Primeiro")
        table.add_column("Último")

        for day in result.days.values():
            first = day.slots[0].time_range.start.format("HH:mm") if day.slots else "-"
            last = day.slots[-1].time_range.start.format("HH:mm") if day.slots else "-"
            count = str(day.total_slots) if day.is_available else "[dim]0[/dim]"
            table.add_row(day.date.format("ddd DD/MM/YYYY", locale="pt-br"), count, first, last)

        console.print()
        console.print(table)
        console.print()

    _run(body)


@app.command()
def check(
    attendant: Annotated[str, typer.Argument(help="Attendant id")],
    time: Annotated[str, typer.Argument(help="Requested start time (HH:MM)")],
    date: Annotated[Optional[str], typer.Option("--date", help="Date (YYYY-MM-DD); defaults to today")] = None,
    service: ServiceOption = None,
    duration: DurationOption = None,
    grace: GraceOption = None,
    now: NowOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
    config_file: ConfigOption = None,
):
    """
    Check whether a specific start time can be booked.
    """
    _configure_logging(verbose)

    def body():
        config = _load(config_file)
        current = _resolve_now(config, now)
        service_layer = _build_service(config)

        result = service_layer.check_time(
            attendant,
            date or current.format("YYYY-MM-DD"),
            time,
            service,
            duration if duration is not None else config.availability.default_duration_minutes,
            current,
            grace,
        )
        _abort_on_failure(result)

        if as_json:
            console.print_json(data=result.to_dict())
            return

        requested = result.requested_time.strftime("%H:%M")
        if result.is_available:
            console.print(f"[bold green]✓ {requested} está disponível.[/bold green]")
            return

        console.print(f"[bold red]✗ {requested} não está disponível.[/bold red]")
        if result.alternatives:
            console.print(_slots_table("Alternativas próximas", result.alternatives))
        else:
            console.print("[yellow]Nenhuma alternativa próxima.[/yellow]")

    _run(body)


@app.command(name="next")
def next_slots(
    attendant: Annotated[str, typer.Argument(help="Attendant id")],
    from_date: Annotated[Optional[str], typer.Option("--from", help="First date to search (YYYY-MM-DD); defaults to today")] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum number of slots")] = 10,
    service: ServiceOption = None,
    duration: DurationOption = None,
    grace: GraceOption = None,
    now: NowOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
    config_file: ConfigOption = None,
):
    """
    Show the next bookable slots, searching day by day.
    """
    _configure_logging(verbose)

    def body():
        config = _load(config_file)
        current = _resolve_now(config, now)
        service_layer = _build_service(config)

        result = service_layer.next_available_slots(
            attendant,
            from_date or current.format("YYYY-MM-DD"),
            service,
            duration if duration is not None else config.availability.default_duration_minutes,
            current,
            limit=limit,
            grace_buffer_minutes=grace,
        )
        _abort_on_failure(result)

        if as_json:
            console.print_json(data=result.to_dict())
            return

        if not result.slots:
            console.print(
                f"[yellow]⚠ Nenhum horário nos próximos {config.availability.search_horizon_days} dias.[/yellow]"
            )
            return

        console.print(f"\n[bold]Próximos {len(result.slots)} horários:[/bold]\n")

        # Simple list output
        for slot in result.slots:
            console.print(f"  {slot.format_display()}")

        console.print()

    _run(body)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]clinicslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
