"""Command-line interface for Calorie Tracker."""

from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table

from .app_logging import configure_logging
from .exceptions import StorageError, ValidationError
from .models.item import Item, ItemKind, filter_items, parse_item, parse_limit
from .services import CalorieStorage, CalorieTracker
from .utils.config import get_settings

app = typer.Typer(
    name="calories",
    help="Calorie Tracker - Log meals and workouts against a daily limit",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main():
    """Configure logging before any command runs."""
    try:
        settings = get_settings()
    except PydanticValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    configure_logging(settings.log_level)


@contextmanager
def open_tracker() -> Iterator[CalorieTracker]:
    """Open storage and load a tracker, reporting failures to the user."""
    settings = get_settings()
    with CalorieStorage(settings) as storage:
        try:
            yield CalorieTracker(storage, settings)
        except ValidationError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        except StorageError as e:
            console.print(f"[red]Changes may not be saved: {e}[/red]")
            raise typer.Exit(1)


def print_summary(tracker: CalorieTracker) -> None:
    """Render the aggregate figures as a panel."""
    summary = tracker.summary()
    color = "red" if summary.over_limit else "green"
    
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan")
    table.add_column(justify="right")
    table.add_row("Daily limit", str(summary.calorie_limit))
    table.add_row("Gain/Loss", str(summary.total_calories))
    table.add_row("Consumed", str(summary.calories_consumed))
    table.add_row("Burned", str(summary.calories_burned))
    table.add_row("Remaining", f"[{color}]{summary.calories_remaining}[/{color}]")
    
    console.print(Panel(table, title="🍎 Calories"))
    console.print(ProgressBar(
        total=100,
        completed=summary.progress_percent,
        width=40,
        complete_style="red" if summary.total_calories >= summary.calorie_limit else "green",
    ))
    console.print(f"[dim]{summary.progress_ratio:.0%} of daily limit[/dim]")


def print_items(title: str, items: list[Item], style: str) -> None:
    """Render a list of meals or workouts with their ids."""
    if not items:
        console.print(f"[yellow]No {title.lower()}[/yellow]")
        return
    
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Calories", justify="right", style=style)
    for item in items:
        table.add_row(item.id, item.name, str(item.calories))
    console.print(table)


def _log_item(kind: ItemKind, name: str, calories: str) -> None:
    try:
        item = parse_item(kind, name, calories)
    except ValidationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    
    with open_tracker() as tracker:
        if kind is ItemKind.MEAL:
            tracker.add_meal(item)
        else:
            tracker.add_workout(item)
        console.print(f"[green]✓ Added {kind.value} {item.name} ({item.calories} kcal)[/green] [dim]{item.id}[/dim]")
        print_summary(tracker)


@app.command()
def meal(
    name: str = typer.Argument(..., help="What you ate"),
    calories: str = typer.Argument(..., help="Calories consumed"),
):
    """Log a meal."""
    _log_item(ItemKind.MEAL, name, calories)


@app.command()
def workout(
    name: str = typer.Argument(..., help="What you did"),
    calories: str = typer.Argument(..., help="Calories burned"),
):
    """Log a workout."""
    _log_item(ItemKind.WORKOUT, name, calories)


@app.command(name="remove-meal")
def remove_meal(
    item_id: str = typer.Argument(..., help="ID of the meal (see 'list')"),
):
    """Remove a meal."""
    with open_tracker() as tracker:
        if not any(meal.id == item_id for meal in tracker.meals):
            console.print(f"[yellow]No meal with id {item_id}[/yellow]")
            raise typer.Exit(0)
        tracker.remove_meal(item_id)
        console.print(f"[green]✓ Removed meal {item_id}[/green]")
        print_summary(tracker)


@app.command(name="remove-workout")
def remove_workout(
    item_id: str = typer.Argument(..., help="ID of the workout (see 'list')"),
):
    """Remove a workout."""
    with open_tracker() as tracker:
        if not any(workout.id == item_id for workout in tracker.workouts):
            console.print(f"[yellow]No workout with id {item_id}[/yellow]")
            raise typer.Exit(0)
        tracker.remove_workout(item_id)
        console.print(f"[green]✓ Removed workout {item_id}[/green]")
        print_summary(tracker)


@app.command()
def limit(
    value: str = typer.Argument(..., help="Daily calorie limit"),
):
    """Set the daily calorie limit."""
    try:
        new_limit = parse_limit(value)
    except ValidationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    
    with open_tracker() as tracker:
        tracker.set_limit(new_limit)
        console.print(f"[green]✓ Daily limit set to {new_limit}[/green]")
        print_summary(tracker)


@app.command()
def reset(
    yes: bool = typer.Option(
        False, "--yes", "-y",
        help="Don't ask for confirmation",
    ),
):
    """Clear all meals and workouts for the day."""
    if not yes and not typer.confirm("Clear all meals and workouts?"):
        raise typer.Exit(0)
    
    with open_tracker() as tracker:
        tracker.reset()
        console.print("[green]✓ Day reset[/green]")
        print_summary(tracker)


@app.command()
def show():
    """Show today's calorie totals."""
    with open_tracker() as tracker:
        print_summary(tracker)


@app.command(name="list")
def list_items(
    filter_text: Optional[str] = typer.Option(
        None, "--filter", "-f",
        help="Only show items whose name contains this text",
    ),
    meals: bool = typer.Option(True, "--meals/--no-meals", help="Show meals"),
    workouts: bool = typer.Option(True, "--workouts/--no-workouts", help="Show workouts"),
):
    """List logged meals and workouts."""
    with open_tracker() as tracker:
        items = tracker.items()
        if meals:
            print_items("Meals", filter_items(items.meals, filter_text or ""), "blue")
        if workouts:
            print_items("Workouts", filter_items(items.workouts, filter_text or ""), "magenta")


@app.command()
def status():
    """Show configuration status."""
    settings = get_settings()
    
    table = Table(title="Configuration Status")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Data file", str(settings.db_path.absolute()))
    table.add_row("Default limit", str(settings.default_calorie_limit))
    table.add_row("Reset restores default limit", "yes" if settings.reset_restores_default_limit else "no")
    table.add_row("Log level", settings.log_level)
    
    console.print(table)


if __name__ == "__main__":
    app()
