"""Command-line interface for Habital.

Usage:
    habital init
    habital add "Read" --schedule days:mon,wed,fri
    habital today
    habital toggle 3
    habital stats 3
"""

from datetime import date
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .core.config import get_settings
from .core.container import ServiceContainer, build_container
from .core.database import close_database
from .core.defaults_loader import get_label
from .domain.errors import DomainError
from .models.enums import HabitSortOption, HabitTrackingType, QuantityUnit
from .services.pattern_builder import parse_schedule
from .utils.dates import parse_day_key
from .utils.logging import log_domain_error, setup_logging
from .version import __version__

console = Console()
app = typer.Typer(help="Track habits with flexible recurrence rules", no_args_is_help=True)

_state = {"database_url": None}

_UNIT_EXAMPLES = ", ".join(u.value for u in QuantityUnit if u is not QuantityUnit.CUSTOM)


def _container() -> ServiceContainer:
    settings = get_settings()
    if _state["database_url"]:
        settings = settings.model_copy(update={"database_url": _state["database_url"]})
    return build_container(settings)


def _day(raw: Optional[str]) -> Optional[date]:
    if raw is None:
        return None
    try:
        return parse_day_key(raw)
    except ValueError:
        raise typer.BadParameter(f"Expected a YYYY-MM-DD day, got {raw!r}") from None


def _fail(error: DomainError, command: str) -> None:
    log_domain_error(error, {"command": command})
    console.print(f"[red]{error}[/red]")
    raise typer.Exit(1)


class _Session:
    """Container for one command: opens the store and always closes it."""

    def __init__(self, command: str):
        self.command = command

    def __enter__(self) -> ServiceContainer:
        self.container = _container()
        return self.container

    def __exit__(self, exc_type, exc_val, exc_tb):
        close_database(self.container.get("database"))
        if isinstance(exc_val, DomainError):
            _fail(exc_val, self.command)
        return False


def _print_version(value: bool) -> None:
    if value:
        console.print(f"habital {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    database: Optional[str] = typer.Option(
        None, "--database", "-d", help="SQLAlchemy URL (overrides HABITAL_DATABASE_URL)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show the version"
    ),
) -> None:
    settings = get_settings()
    setup_logging("DEBUG" if verbose else settings.log_level, log_to_file=settings.log_to_file)
    _state["database_url"] = database


@app.command()
def init() -> None:
    """Create the database tables."""
    with _Session("init") as c:
        console.print(f"[green]Database ready:[/green] {c.get('database').database_url}")


@app.command()
def add(
    name: str = typer.Argument(..., help="Habit name"),
    schedule: str = typer.Option(
        "daily",
        "--schedule",
        "-s",
        help="daily | every:N | days:mon,fri | rotation:mon|tue | weekly:mon/2 | monthly:1,15/3",
    ),
    start: Optional[str] = typer.Option(None, "--start", help="Start day, YYYY-MM-DD"),
    list_id: Optional[int] = typer.Option(None, "--list", "-l", help="Habit list id"),
    repeats: int = typer.Option(1, "--repeats", "-r", help="Repetitions per day"),
    duration: int = typer.Option(0, "--minutes", help="Target minutes (duration tracking)"),
    quantity: int = typer.Option(0, "--quantity", help="Target quantity (quantity tracking)"),
    unit: Optional[str] = typer.Option(None, "--unit", help=f"Quantity unit, e.g. {_UNIT_EXAMPLES}"),
    follow_up: bool = typer.Option(False, "--follow-up", help="Carry missed days over"),
    bad: bool = typer.Option(False, "--bad", help="Track a habit to avoid"),
) -> None:
    """Create a habit."""
    kind = HabitTrackingType.REPETITIONS
    if duration:
        kind = HabitTrackingType.DURATION
    elif quantity:
        kind = HabitTrackingType.QUANTITY
    start_day = _day(start)
    with _Session("add") as c:
        pattern = parse_schedule(
            schedule,
            start_day or c.get("statistics_service").today(),
            follow_up=follow_up,
            tracking_type=kind,
            repeats_per_day=repeats,
            duration=duration,
            target_quantity=quantity,
            quantity_unit=unit,
        )
        habit = c.get("habit_service").create_habit(
            name, pattern, start_date=start_day, habit_list_id=list_id, is_bad_habit=bad
        )
        console.print(f"[green]Created habit {habit.id}:[/green] {habit.name}")


@app.command("list")
def list_habits(
    day: Optional[str] = typer.Option(None, "--day", help="Day to show, YYYY-MM-DD"),
    list_id: Optional[int] = typer.Option(None, "--list", "-l", help="Habit list id"),
    archived: bool = typer.Option(False, "--archived", help="Show archived habits"),
    active_only: bool = typer.Option(False, "--active", help="Only habits due that day"),
) -> None:
    """Show habits for a day in the saved sort order."""
    with _Session("list") as c:
        target = _day(day) or c.get("statistics_service").today()
        rows = c.get("day_view").habits_for_day(
            target,
            list_id=list_id,
            archived=archived,
            sort_option=c.get("preferences").habit_sort_option,
            active_only=active_only,
        )
        title = get_label("all_habits", "All Habits") if list_id is None else f"List {list_id}"
        table = Table(title=f"{title} - {target.isoformat()}", show_header=True)
        table.add_column("ID", style="cyan")
        table.add_column("Habit")
        table.add_column("Due")
        table.add_column("Done")
        table.add_column("Progress")
        table.add_column("Streak", justify="right")
        table.add_column("Score", justify="right")
        table.add_column("Next", style="dim")
        for row in rows:
            done = "[green]yes[/green]" if row.is_completed else ("skipped" if row.is_skipped else "")
            table.add_row(
                str(row.habit_id),
                f"{row.name} (bad)" if row.is_bad_habit else row.name,
                "yes" if row.is_active else "",
                done,
                row.status_text,
                str(row.current_streak),
                str(row.score),
                row.next_occurrence,
            )
        console.print(table)


@app.command()
def today(list_id: Optional[int] = typer.Option(None, "--list", "-l")) -> None:
    """Show the habits due today."""
    list_habits(day=None, list_id=list_id, archived=False, active_only=True)


@app.command()
def toggle(
    habit_id: int,
    day: Optional[str] = typer.Option(None, "--day", help="YYYY-MM-DD, default today"),
    minutes: Optional[int] = typer.Option(None, "--minutes", help="Minutes done"),
    quantity: Optional[int] = typer.Option(None, "--quantity", help="Quantity done"),
) -> None:
    """Toggle (or log progress for) a habit on a day."""
    with _Session("toggle") as c:
        outcome = c.get("toggle_service").toggle(habit_id, _day(day), minutes, quantity)
        state = "[green]completed[/green]" if outcome.is_completed else "open"
        console.print(f"Habit {habit_id} on {outcome.day.isoformat()}: {state}")


@app.command()
def skip(
    habit_id: int,
    day: Optional[str] = typer.Option(None, "--day", help="YYYY-MM-DD, default today"),
    undo: bool = typer.Option(False, "--undo", help="Remove the skip"),
) -> None:
    """Skip a day without breaking the streak."""
    with _Session("skip") as c:
        service = c.get("toggle_service")
        outcome = service.unskip(habit_id, _day(day)) if undo else service.skip(habit_id, _day(day))
        verb = "unskipped" if undo else "skipped"
        console.print(f"Habit {habit_id} {verb} on {outcome.day.isoformat()}")


@app.command()
def archive(
    habit_id: Optional[int] = typer.Argument(None),
    restore: bool = typer.Option(False, "--restore", help="Unarchive instead"),
    all_habits: bool = typer.Option(False, "--all", help="Apply to every habit"),
) -> None:
    """Archive or restore habits."""
    if habit_id is None and not all_habits:
        raise typer.BadParameter("Give a habit id or --all")
    with _Session("archive") as c:
        service = c.get("habit_service")
        if all_habits:
            count = service.unarchive_all() if restore else service.archive_all()
            console.print(f"{'Restored' if restore else 'Archived'} {count} habit(s)")
        else:
            habit = service.unarchive_habit(habit_id) if restore else service.archive_habit(habit_id)
            console.print(f"Habit {habit.id} {'restored' if restore else 'archived'}")
        console.print(f"Archived habits: {service.archived_count()}")


@app.command()
def reorder(
    habit_ids: List[int] = typer.Argument(..., help="Complete id sequence of the scope"),
    list_id: Optional[int] = typer.Option(None, "--list", "-l", help="Reorder inside a list"),
) -> None:
    """Apply a custom order."""
    with _Session("reorder") as c:
        ids = c.get("habit_service").arrange_habits(habit_ids, list_id=list_id)
        console.print("Order: " + ", ".join(str(i) for i in ids))


@app.command()
def lists(
    create: Optional[str] = typer.Option(None, "--create", help="Name of a new list"),
    delete: Optional[int] = typer.Option(None, "--delete", help="Id of a list to delete"),
    select: Optional[int] = typer.Option(None, "--select", help="Tab index to select"),
) -> None:
    """Show, create, delete or select habit lists."""
    with _Session("lists") as c:
        service = c.get("list_service")
        if create:
            created = service.create(create)
            console.print(f"[green]Created list {created.id}:[/green] {created.name}")
        if delete is not None:
            service.delete(delete)
            console.print(f"Deleted list {delete}")
        preferences = c.get("preferences")
        if select is not None:
            preferences.selected_list_index = select
        selected = preferences.selected_list_index

        table = Table(title="Lists", show_header=True)
        table.add_column("Tab", justify="right")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_row("0", "-", get_label("all_habits", "All Habits"), style="bold" if selected == 0 else None)
        for position, habit_list in enumerate(service.all(), start=1):
            table.add_row(
                str(position),
                str(habit_list.id),
                habit_list.name,
                style="bold" if selected == position else None,
            )
        console.print(table)


@app.command()
def stats(habit_id: int) -> None:
    """Streaks, score and next occurrence of one habit."""
    with _Session("stats") as c:
        result = c.get("statistics_service").habit_stats(habit_id)
        table = Table(title=result.name, show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Value")
        table.add_row("Current streak", str(result.current_streak))
        table.add_row("Longest streak", str(result.longest_streak))
        table.add_row("Best streak ever", str(result.best_streak_ever))
        table.add_row("Total completions", str(result.total_completions))
        table.add_row(
            "Score",
            f"{result.score.total_score} "
            f"({result.score.actual_count}/{result.score.expected_count})",
        )
        table.add_row("Recent activity", f"{result.recent_score:.2f}")
        table.add_row("Next", result.next_occurrence)
        if result.overdue_days is not None:
            table.add_row("Overdue", f"{result.overdue_days} day(s)")
        console.print(table)


@app.command()
def sort(
    option: Optional[HabitSortOption] = typer.Argument(None, help="New sort option"),
) -> None:
    """Show or change the habit sort option."""
    with _Session("sort") as c:
        preferences = c.get("preferences")
        if option is not None:
            preferences.habit_sort_option = option
        current = preferences.habit_sort_option
        console.print(f"Sort: {current.value} ({current.title})")


if __name__ == "__main__":
    app()
