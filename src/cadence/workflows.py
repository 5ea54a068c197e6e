"""Shared workflow layer between the CLI and the refresh daemon.

Each function loads what it needs from the store, applies core logic, and
persists the result. `now` is injectable everywhere for tests.
"""

import dataclasses
import logging
from datetime import datetime

from .adapters.json_store import JsonTaskStore
from .adapters.snapshot_file import SnapshotFile
from .config import Config
from .core.rules import RecurrenceRule, compute_anchor_date
from .core.snapshot import build_snapshot
from .core.tasks import (
    CompletionRecord,
    Task,
    complete,
    filter_active,
    find_task,
    recompute_missed_count,
    rename,
    reschedule_one_off,
    sort_by_urgency,
    undo_last_completion,
    update_rule,
)
from .core.undo import UndoStack
from .core.units import PeriodUnit
from .ports.snapshot_sink import SnapshotSink
from .ports.task_store import TaskStore

logger = logging.getLogger(__name__)


def get_store(config: Config) -> JsonTaskStore:
    """Resolve the task file from config."""
    return JsonTaskStore(config.data_path)


def get_snapshot_sink(config: Config) -> SnapshotFile:
    """Resolve the snapshot file from config."""
    return SnapshotFile(config.snapshot_path)


def get_task(store: TaskStore, key: str) -> Task:
    """Task by id or unique id prefix; raises TaskNotFoundError."""
    return find_task(store.load_all(), key)


def add_task(
    store: TaskStore,
    name: str,
    unit: PeriodUnit,
    every: int = 1,
    hour: int = 0,
    repeating: bool = True,
    first_due: datetime | None = None,
    *,
    weekday: int | None = None,
    day: int | None = None,
    month: int | None = None,
    now: datetime | None = None,
) -> Task:
    """
    Create and store a task.

    Without a first due date or target the task is anchored at `now`.
    A target alone anchors from today.
    """
    now = now or datetime.now()
    rule = RecurrenceRule(period_unit=unit, period_count=every, scheduled_hour=hour, is_repeating=repeating)
    has_targets = any(v is not None for v in (weekday, day, month))
    if first_due is None and has_targets:
        first_due = now.replace(hour=0, minute=0, second=0, microsecond=0)

    created = now
    if first_due is not None:
        created = compute_anchor_date(rule, first_due, weekday=weekday, day=day, month=month)

    task = Task.new(name, rule, created=created)
    store.save(task)
    logger.info(f"Added task {task.name!r} ({rule.describe()})")
    return task


def edit_task(
    store: TaskStore,
    key: str,
    name: str | None = None,
    unit: PeriodUnit | None = None,
    every: int | None = None,
    hour: int | None = None,
    repeating: bool | None = None,
    first_due: datetime | None = None,
    *,
    weekday: int | None = None,
    day: int | None = None,
    month: int | None = None,
    now: datetime | None = None,
) -> Task:
    """Apply field edits; target changes re-anchor the task."""
    task = get_task(store, key)
    if name is not None:
        rename(task, name)

    changes = {
        k: v
        for k, v in {
            "period_unit": unit,
            "period_count": every,
            "scheduled_hour": hour,
            "is_repeating": repeating,
        }.items()
        if v is not None
    }
    has_targets = any(v is not None for v in (weekday, day, month))
    if changes or has_targets or first_due is not None:
        rule = dataclasses.replace(task.rule, **changes)
        if has_targets and first_due is None:
            first_due = (now or datetime.now()).replace(hour=0, minute=0, second=0, microsecond=0)
        update_rule(task, rule, first_due, weekday=weekday, day=day, month=month)

    store.save(task)
    return task


def remove_task(store: TaskStore, key: str) -> Task:
    task = get_task(store, key)
    store.delete(task.id)
    return task


def complete_task(
    store: TaskStore,
    undo_stack: UndoStack,
    key: str,
    now: datetime | None = None,
) -> tuple[Task, CompletionRecord]:
    """Refresh the missed count, remember how to undo, complete, and save."""
    now = now or datetime.now()
    task = get_task(store, key)
    recompute_missed_count(task, now)
    undo_stack.record_completion(task, now)
    record = complete(task, now)
    store.save(task)
    logger.info(f"Completed {task.name!r} ({record.points} pts, {record.missed_count_at_completion} missed)")
    return task, record


def undo_last(store: TaskStore, undo_stack: UndoStack) -> Task | None:
    """
    Reverse the most recent completion on the stack.

    Returns None if there is nothing to undo or the task no longer exists.
    """
    entry = undo_stack.pop()
    if entry is None:
        return None
    task = store.get(entry.task_id)
    if task is None:
        logger.warning(f"Cannot undo completion: task {entry.task_id} no longer exists")
        return None
    undo_last_completion(task, entry.previous_last_completed_date, entry.previous_missed_count)
    store.save(task)
    logger.info(f"Undid completion of {task.name!r}")
    return task


def reschedule_task(store: TaskStore, key: str) -> Task:
    """Return a completed one-off task to the list."""
    task = get_task(store, key)
    reschedule_one_off(task)
    store.save(task)
    return task


def active_tasks(store: TaskStore, now: datetime | None = None) -> list[Task]:
    """Tasks due today or overdue, with fresh missed counts, most urgent first."""
    now = now or datetime.now()
    tasks = store.load_all()
    for task in tasks:
        recompute_missed_count(task, now)
    return sort_by_urgency(filter_active(tasks, now))


def refresh_all(store: TaskStore, sink: SnapshotSink, now: datetime | None = None) -> list[Task]:
    """Recompute every missed count, persist, and publish the snapshot."""
    now = now or datetime.now()
    tasks = store.load_all()
    for task in tasks:
        recompute_missed_count(task, now)
    store.save_all(tasks)
    sink.publish(build_snapshot(tasks))
    logger.info(f"Refreshed {len(tasks)} tasks")
    return tasks
