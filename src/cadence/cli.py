"""Cadence CLI - recurring task scheduler."""

import json
import sys
from datetime import datetime

import click

from .config import load_config, setup_logging
from .core.due import days_overdue, is_overdue, next_due_date
from .core.errors import CadenceError
from .core.rules import parse_weekday
from .core.scoring import stats_for
from .core.snapshot import active_snapshots, refresh_points
from .core.tasks import Task, filter_completed_one_offs, recompute_missed_count
from .core.undo import UndoStack
from .core.units import PeriodUnit
from .workflows import (
    active_tasks,
    add_task,
    complete_task,
    edit_task,
    get_snapshot_sink,
    get_store,
    get_task,
    refresh_all,
    remove_task,
    reschedule_task,
    undo_last,
)

UNITS = [u.value.lower() for u in PeriodUnit]


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _parse_when(value: str | None) -> datetime | None:
    """Parse YYYY-MM-DD or an ISO datetime."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a date (YYYY-MM-DD) or ISO datetime")


def _parse_weekday(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return parse_weekday(value)
    except CadenceError as e:
        raise click.BadParameter(str(e))


def _format_task_line(task: Task, now: datetime) -> str:
    """One list line: name, schedule, due/overdue state, missed badge."""
    due = next_due_date(task)
    if task.is_completed_one_off:
        state = "done"
    elif is_overdue(task, now):
        state = f"overdue by {days_overdue(task, now)} days"
    else:
        state = f"due {due.strftime('%a %b %d %H:%M')}"
    missed = f" [missed {task.missed_count}]" if task.missed_count else ""
    return f"{task.id[:8]}  {task.name} ({task.rule.describe()}) - {state}{missed}"


def _task_json(task: Task, now: datetime) -> dict:
    due = next_due_date(task)
    return {
        "id": task.id,
        "name": task.name,
        "schedule": task.rule.describe(),
        "next_due": due.isoformat(),
        "overdue": is_overdue(task, now),
        "days_overdue": days_overdue(task, now),
        "missed_count": task.missed_count,
        "total_points": task.total_points,
        "average_points": task.average_points,
    }


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """Cadence - recurring task scheduler."""
    config = load_config()
    setup_logging(config, debug)
    ctx.obj = config


@main.command()
@click.argument("name")
@click.option("--every", "-e", default=1, show_default=True, help="Repeat every N units")
@click.option("--unit", "-u", type=click.Choice(UNITS, case_sensitive=False), default="days", show_default=True)
@click.option("--hour", "-h", "hour", default=0, show_default=True, help="Hour of day the task falls due (0-23)")
@click.option("--once", is_flag=True, help="One-off task, due once at the first due date")
@click.option("--first-due", default=None, help="First due date (YYYY-MM-DD)")
@click.option("--weekday", default=None, help="Weekday weekly tasks fall on (e.g. sat)")
@click.option("--day", type=int, default=None, help="Day of month monthly/yearly tasks fall on")
@click.option("--month", type=int, default=None, help="Month yearly tasks fall in")
@click.pass_obj
def add(config, name, every, unit, hour, once, first_due, weekday, day, month):
    """Add a task."""
    try:
        task = add_task(
            get_store(config),
            name,
            PeriodUnit.parse(unit),
            every=every,
            hour=hour,
            repeating=not once,
            first_due=_parse_when(first_due),
            weekday=_parse_weekday(weekday),
            day=day,
            month=month,
        )
    except CadenceError as e:
        _fail(e)
    click.echo(f"Added {task.name} ({task.rule.describe()}), next due {next_due_date(task):%a %b %d %H:%M}")
    click.echo(f"id: {task.id}")


@main.command()
@click.argument("key")
@click.option("--name", default=None, help="New name")
@click.option("--every", "-e", type=int, default=None, help="Repeat every N units")
@click.option("--unit", "-u", type=click.Choice(UNITS, case_sensitive=False), default=None)
@click.option("--hour", "-h", "hour", type=int, default=None, help="Hour of day (0-23)")
@click.option("--repeat/--once", "repeating", default=None, help="Make the task repeating or one-off")
@click.option("--first-due", default=None, help="Re-anchor so the task is next due on this date")
@click.option("--weekday", default=None, help="New target weekday")
@click.option("--day", type=int, default=None, help="New target day of month")
@click.option("--month", type=int, default=None, help="New target month")
@click.pass_obj
def edit(config, key, name, every, unit, hour, repeating, first_due, weekday, day, month):
    """Edit a task's name or schedule."""
    try:
        task = edit_task(
            get_store(config),
            key,
            name=name,
            unit=PeriodUnit.parse(unit) if unit else None,
            every=every,
            hour=hour,
            repeating=repeating,
            first_due=_parse_when(first_due),
            weekday=_parse_weekday(weekday),
            day=day,
            month=month,
        )
    except CadenceError as e:
        _fail(e)
    click.echo(f"Updated {task.name} ({task.rule.describe()}), next due {next_due_date(task):%a %b %d %H:%M}")


@main.command("list")
@click.option("--all", "show_all", is_flag=True, help="Show every task, not just today's")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--at", "at", default=None, help="Evaluate at this time instead of now")
@click.pass_obj
def list_tasks(config, show_all: bool, as_json: bool, at: str | None):
    """List tasks due today or overdue."""
    now = _parse_when(at) or datetime.now()
    store = get_store(config)
    try:
        if show_all:
            tasks = store.load_all()
            for task in tasks:
                recompute_missed_count(task, now)
        else:
            tasks = active_tasks(store, now)
    except CadenceError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([_task_json(t, now) for t in tasks], indent=2))
        return

    if not tasks:
        click.echo("Done! All tasks completed for today.")
        return

    for task in tasks:
        click.echo(_format_task_line(task, now))


@main.command()
@click.argument("key")
@click.option("--at", "at", default=None, help="Completion time (default now)")
@click.pass_obj
def done(config, key: str, at: str | None):
    """Mark a task completed."""
    try:
        task, record = complete_task(get_store(config), UndoStack(), key, _parse_when(at))
    except CadenceError as e:
        _fail(e)
    click.echo(f"✓ {task.name} (+{record.points} pts), next due {next_due_date(task):%a %b %d %H:%M}")


@main.command()
@click.argument("key")
@click.pass_obj
def history(config, key: str):
    """Show a task's completion history and points."""
    try:
        task = get_task(get_store(config), key)
    except CadenceError as e:
        _fail(e)

    click.echo(f"{task.name} History\n")
    if not task.history:
        click.echo("This task has not been completed yet.")
        return

    for record in sorted(task.history, key=lambda r: r.completion_date, reverse=True):
        if record.missed_count_at_completion:
            note = f"{record.missed_count_at_completion} missed at completion"
        else:
            note = "on time"
        click.echo(f"  {record.completion_date:%Y-%m-%d %H:%M}  {record.points} pts  ({note})")

    stats = stats_for(task)
    click.echo("")
    click.echo(f"Completions:         {stats.completions}")
    click.echo(f"Total points:        {stats.total_points}")
    click.echo(f"Average points:      {stats.average_points:.1f}")
    click.echo(f"Average missed:      {stats.average_missed_count:.1f}")
    click.echo(f"On-time rate:        {int(stats.on_time_rate * 100)}%")


@main.command()
@click.argument("key", required=False)
@click.pass_obj
def reschedule(config, key: str | None):
    """Put a completed one-off task back on the list (no KEY: list candidates)."""
    store = get_store(config)
    try:
        if key is None:
            candidates = filter_completed_one_offs(store.load_all())
            if not candidates:
                click.echo("No completed one-off tasks.")
            for task in candidates:
                click.echo(f"{task.id[:8]}  {task.name} (completed {task.last_completed_date:%Y-%m-%d})")
            return
        task = reschedule_task(store, key)
    except CadenceError as e:
        _fail(e)
    click.echo(f"Rescheduled {task.name}")


@main.command()
@click.argument("key")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def remove(config, key: str, yes: bool):
    """Delete a task."""
    store = get_store(config)
    try:
        task = get_task(store, key)
        if not yes and not click.confirm(f"Delete {task.name}?"):
            return
        remove_task(store, task.id)
    except CadenceError as e:
        _fail(e)
    click.echo(f"Deleted {task.name}")


@main.command()
@click.pass_obj
def refresh(config):
    """Recompute missed counts and publish the snapshot."""
    try:
        tasks = refresh_all(get_store(config), get_snapshot_sink(config))
    except CadenceError as e:
        _fail(e)
    click.echo(f"Refreshed {len(tasks)} tasks → {config.snapshot_path}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output the raw snapshot")
@click.option("--at", "at", default=None, help="Evaluate at this time instead of now")
@click.pass_obj
def snapshot(config, as_json: bool, at: str | None):
    """Show what the published snapshot says is due."""
    snapshots = get_snapshot_sink(config).read()
    if as_json:
        click.echo(json.dumps([s.to_dict() for s in snapshots], indent=2))
        return

    moment = _parse_when(at) or datetime.now()
    active = active_snapshots(snapshots, moment)
    if not active:
        click.echo("All done!")
    else:
        click.echo(f"{len(active)} task{'' if len(active) == 1 else 's'} due")
        for s in active:
            missed = f" [missed {s.missed_count}]" if s.missed_count else ""
            click.echo(f"  {s.name}{missed}")
    click.echo(f"Next refresh: {refresh_points(moment)[1]:%a %b %d %H:%M}")


@main.command()
@click.pass_obj
def watch(config):
    """Run the nightly refresh daemon."""
    from .refresh import run_refresh_daemon

    click.echo(f"Refreshing nightly at {config.refresh_time}")
    click.echo("Press Ctrl+C to stop")
    try:
        run_refresh_daemon(config)
    except KeyboardInterrupt:
        click.echo("\nRefresh daemon stopped.")


@main.command()
@click.pass_obj
def session(config):
    """Interactive to-do list: number completes, u undoes, q quits."""
    store = get_store(config)
    undo_stack = UndoStack(config.undo_capacity)

    while True:
        now = datetime.now()
        try:
            tasks = active_tasks(store, now)
        except CadenceError as e:
            _fail(e)

        click.echo("")
        if tasks:
            for i, task in enumerate(tasks, 1):
                click.echo(f"{i:2}. {_format_task_line(task, now)}")
        else:
            click.echo("Done! All tasks completed for today.")

        choice = click.prompt("> [number, u=undo, q=quit]", default="q", show_default=False).strip().lower()
        if choice in ("q", "quit"):
            return
        if choice in ("u", "undo"):
            undone = undo_last(store, undo_stack)
            click.echo(f"Undid {undone.name}" if undone else "Nothing to undo.")
            continue
        if not choice.isdigit() or not 1 <= int(choice) <= len(tasks):
            click.echo(f"Unknown choice: {choice}")
            continue

        try:
            task, record = complete_task(store, undo_stack, tasks[int(choice) - 1].id, now)
        except CadenceError as e:
            click.echo(f"Error: {e}", err=True)
            continue
        click.echo(f"✓ {task.name} (+{record.points} pts)")


if __name__ == "__main__":
    main()
