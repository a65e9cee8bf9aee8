"""Command line interface for HabitPulse."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Any, Callable, TypeVar

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .domain.habit import Category, Frequency, Habit, new_habit
from .errors import HabitPulseError, InvalidHabitRecord
from .logging_config import setup_logging
from .services import tracker as tracker_service
from .services.calendar import FixedClock, add_days, day_of_week
from .services.recurrence import format_frequency
from .services.snapshot import export_habits, import_habits

HEAT_LEVELS = ".:*#"
WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
CLOCK_KEY = "habitpulse.clock"

F = TypeVar("F", bound=Callable[..., Any])


def _heat_char(count: int, peak: int) -> str:
    if count <= 0:
        return HEAT_LEVELS[0]
    top = len(HEAT_LEVELS) - 1
    # Ceiling division so the busiest day always reaches the top level
    return HEAT_LEVELS[min(top, -(-count * top // peak))]


def _app_context(click_ctx: click.Context) -> AppContext:
    """Build config, logging and storage on first use, once per invocation.

    Deferred so that ``--help`` and usage errors never touch the data directory.
    """

    root = click_ctx.find_root()
    if root.obj is None:
        config = BaseConfig()
        setup_logging(config)
        root.obj = create_app_context(config, clock=root.meta.get(CLOCK_KEY))
    return root.obj


def pass_app(func: F) -> F:
    """Like ``click.pass_obj``, but creates the application context lazily."""

    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(_app_context(click.get_current_context()), *args, **kwargs)

    return functools.update_wrapper(wrapper, func)  # type: ignore[return-value]


def _resolve_habit(ctx: AppContext, key: str) -> Habit:
    """Find a habit by id, id prefix or case-insensitive name."""

    habit = ctx.habit_repo.get_by_id(key)
    if habit is not None:
        return habit
    matches = [
        h
        for h in ctx.habit_repo.load_habits()
        if h.id.startswith(key) or h.name.lower() == key.lower()
    ]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise click.ClickException(f"No habit matches '{key}'.")
    raise click.ClickException(f"'{key}' matches {len(matches)} habits; use the id.")


@click.group()
@click.option(
    "--today",
    "today_override",
    metavar="YYYY-MM-DD",
    default=None,
    help="Pretend the current day is this date.",
)
@click.pass_context
def cli(click_ctx: click.Context, today_override: str | None) -> None:
    """Track habits, streaks and completion rates."""

    clock = None
    if today_override:
        try:
            clock = FixedClock(today_override)
        except HabitPulseError as exc:
            raise click.BadParameter(str(exc), param_hint="--today") from exc
    click_ctx.meta[CLOCK_KEY] = clock


@cli.command("add")
@click.argument("name")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in Frequency]),
    default=Frequency.DAILY.value,
    show_default=True,
)
@click.option(
    "--day",
    "days",
    type=int,
    multiple=True,
    help="Weekday 0=Sun..6=Sat (weekly/custom) or day of month 1..31 (monthly).",
)
@click.option(
    "--category",
    type=click.Choice([c.value for c in Category]),
    default=Category.OTHER.value,
    show_default=True,
)
@click.option("--description", default="")
@pass_app
def add_command(
    ctx: AppContext, name: str, frequency: str, days: tuple[int, ...], category: str, description: str
) -> None:
    """Create a habit."""

    try:
        habit = new_habit(
            name, frequency=frequency, custom_days=days, category=category, description=description
        )
    except InvalidHabitRecord as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.habit_repo.save(habit)
    click.echo(f"Created '{habit.name}' ({format_frequency(habit)}) id={habit.id}")


@cli.command("edit")
@click.argument("habit")
@click.option("--name", default=None)
@click.option("--frequency", type=click.Choice([f.value for f in Frequency]), default=None)
@click.option(
    "--day",
    "days",
    type=int,
    multiple=True,
    help="Replace the scheduled days (see 'add').",
)
@click.option("--clear-days", is_flag=True, help="Remove all scheduled days.")
@click.option("--category", type=click.Choice([c.value for c in Category]), default=None)
@click.option("--description", default=None)
@click.option("--archive/--unarchive", "archived", default=None)
@pass_app
def edit_command(
    ctx: AppContext,
    habit: str,
    name: str | None,
    frequency: str | None,
    days: tuple[int, ...],
    clear_days: bool,
    category: str | None,
    description: str | None,
    archived: bool | None,
) -> None:
    """Change HABIT's details or schedule; its completion history is kept."""

    target = _resolve_habit(ctx, habit)
    changes: dict[str, Any] = {
        key: value
        for key, value in {
            "name": name,
            "frequency": frequency,
            "category": category,
            "description": description,
            "archived": archived,
        }.items()
        if value is not None
    }
    if days or clear_days:
        changes["custom_days"] = list(days)
    if not changes:
        raise click.UsageError("Nothing to change; pass at least one option.")
    try:
        updated = ctx.tracker.update_habit(ctx.habit_repo, target.id, **changes)
    except InvalidHabitRecord as exc:
        raise click.ClickException(str(exc)) from exc
    state = " [archived]" if updated.archived else ""
    click.echo(f"Updated '{updated.name}' ({format_frequency(updated)}){state}")


@cli.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include archived habits.")
@pass_app
def list_command(ctx: AppContext, show_all: bool) -> None:
    """List habits, marking those due and done today."""

    habits = ctx.habit_repo.load_habits(include_archived=show_all)
    if not habits:
        click.echo("No habits yet. Add one with 'habitpulse add'.")
        return
    tracker = ctx.tracker
    for habit in habits:
        due = "due" if tracker.is_due(habit) else "   "
        done = "x" if tracker.is_completed(habit) else " "
        click.echo(f"[{done}] {due} {habit.id[:8]}  {habit.name}  ({format_frequency(habit)})")


@cli.command("done")
@click.argument("habit")
@pass_app
def done_command(ctx: AppContext, habit: str) -> None:
    """Toggle today's completion for HABIT (id, id prefix or name)."""

    target = _resolve_habit(ctx, habit)
    outcome = ctx.tracker.toggle_today(ctx.habit_repo, target.id)
    if outcome.reason == tracker_service.NOT_DUE:
        raise click.ClickException(f"'{target.name}' is not due today.")
    if outcome.reason is not None:
        raise click.ClickException(f"Cannot toggle '{target.name}': {outcome.reason}")
    state = "done" if outcome.completed else "not done"
    streak = ctx.tracker.compute_streak(outcome.habit)
    click.echo(f"'{target.name}' marked {state} for {ctx.tracker.today()}. Streak: {streak.current}")


@cli.command("show")
@click.argument("habit")
@click.option("--days", default=14, show_default=True, help="Calendar days to display.")
@pass_app
def show_command(ctx: AppContext, habit: str, days: int) -> None:
    """Show streaks, completion rate and recent calendar for HABIT."""

    target = _resolve_habit(ctx, habit)
    tracker = ctx.tracker
    streak = tracker.compute_streak(target)
    rate = tracker.completion_rate(target)
    click.echo(f"{target.name} ({format_frequency(target)}, {target.category})")
    click.echo(f"Current streak: {streak.current}")
    click.echo(f"Longest streak: {streak.longest}")
    click.echo(f"Completion rate ({tracker.completion_window_days}d): {rate:.0%}")

    end = tracker.today()
    status = tracker.completion_status(target, add_days(end, -(max(days, 1) - 1)), end)
    for day, cell in status.items():
        mark = "x" if cell.completed else ("-" if cell.due else " ")
        click.echo(f"  {day} {WEEKDAY_LABELS[day_of_week(day)]} [{mark}]")


@cli.command("stats")
@pass_app
def stats_command(ctx: AppContext) -> None:
    """Summarize all habits."""

    summary = ctx.tracker.summarize(ctx.habit_repo.load_habits())
    click.echo(f"Habits: {summary.total_habits} ({summary.active_habits} active)")
    click.echo(f"Completed today: {summary.completed_today}")
    click.echo(f"Overall completion rate: {summary.overall_completion_rate:.0%}")
    if summary.top_by_streak:
        click.echo("Top streaks:")
        for habit, streak in summary.top_by_streak:
            click.echo(f"  {habit.name}: {streak.current} (best {streak.longest})")
    if summary.categories:
        click.echo("Categories:")
        for cat in summary.categories:
            click.echo(f"  {cat.name}: {cat.count} habit(s), {cat.completion_rate:.0%}")


@cli.command("heatmap")
@pass_app
def heatmap_command(ctx: AppContext) -> None:
    """Render completions per day as a weekday-by-week grid."""

    counts = ctx.tracker.heatmap(ctx.habit_repo.load_habits())
    if not counts:
        click.echo("Nothing to show.")
        return
    peak = max(counts.values()) or 1
    days = list(counts)
    # Pad the first column so every row holds a single weekday
    first = day_of_week(days[0])
    rows = [[" "] if weekday < first else [] for weekday in range(len(WEEKDAY_LABELS))]
    for day in days:
        rows[day_of_week(day)].append(_heat_char(counts[day], peak))
    for label, row in zip(WEEKDAY_LABELS, rows):
        click.echo(f"{label} {''.join(row)}")
    click.echo(f"{days[0]} .. {days[-1]}  total completions: {sum(counts.values())}")


@cli.command("delete")
@click.argument("habit")
@click.confirmation_option(prompt="Delete this habit and its history?")
@pass_app
def delete_command(ctx: AppContext, habit: str) -> None:
    """Delete HABIT and its completion history."""

    target = _resolve_habit(ctx, habit)
    ctx.habit_repo.delete(target.id)
    click.echo(f"Deleted '{target.name}'.")


@cli.command("export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@pass_app
def export_command(ctx: AppContext, path: Path) -> None:
    """Write every habit to a JSON snapshot at PATH."""

    written = export_habits(habits=ctx.habit_repo.load_habits(), output_path=path)
    click.echo(f"Export written: {written}")


@cli.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@pass_app
def import_command(ctx: AppContext, path: Path) -> None:
    """Replace stored habits with the JSON snapshot at PATH."""

    try:
        habits = import_habits(path)
    except ValueError as exc:
        raise click.ClickException(f"Could not read snapshot: {exc}") from exc
    ctx.habit_repo.save_habits(habits)
    click.echo(f"Imported {len(habits)} habit(s).")


def main() -> None:
    cli(prog_name="habitpulse")


if __name__ == "__main__":  # pragma: no cover
    main()
