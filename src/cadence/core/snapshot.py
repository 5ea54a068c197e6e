"""Flattened task projection for display surfaces - no I/O dependencies.

A snapshot carries just enough for another process to recompute due
dates and overdue state itself: the anchor is the creation date, so no
separate target fields are exported.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from .due import is_active_for_date, next_due_date
from .rules import RecurrenceRule
from .tasks import Task
from .units import PeriodUnit

REFRESH_INTERVAL = timedelta(hours=2)
DAYS_AHEAD = 4
MIN_REFRESH_GAP = timedelta(seconds=60)


@dataclass(frozen=True)
class TaskSnapshot:
    name: str
    missed_count: int
    period_count: int
    period_unit: str
    creation_date: datetime
    last_completed_date: datetime | None
    is_repeating: bool
    total_points: int
    scheduled_hour: int

    @classmethod
    def from_task(cls, task: Task) -> "TaskSnapshot":
        return cls(
            name=task.name,
            missed_count=task.missed_count,
            period_count=task.rule.period_count,
            period_unit=task.rule.period_unit.value,
            creation_date=task.creation_date,
            last_completed_date=task.last_completed_date,
            is_repeating=task.rule.is_repeating,
            total_points=task.total_points,
            scheduled_hour=task.rule.scheduled_hour,
        )

    def to_task(self) -> Task:
        """Rebuild a history-less task so the due-date functions apply as-is."""
        rule = RecurrenceRule(
            period_unit=PeriodUnit.parse(self.period_unit),
            period_count=self.period_count,
            scheduled_hour=self.scheduled_hour,
            is_repeating=self.is_repeating,
        )
        return Task(
            id="",
            name=self.name,
            rule=rule,
            creation_date=self.creation_date,
            last_completed_date=self.last_completed_date,
            missed_count=self.missed_count,
        )

    def next_due_date(self) -> datetime:
        return next_due_date(self.to_task())

    def is_overdue(self, now: datetime) -> bool:
        return self.next_due_date() < now

    def is_active_for_date(self, moment: datetime) -> bool:
        return is_active_for_date(self.to_task(), moment)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "missedCount": self.missed_count,
            "schedulePeriod": self.period_count,
            "scheduleUnit": self.period_unit,
            "creationDate": self.creation_date.isoformat(),
            "lastCompletedDate": self.last_completed_date.isoformat() if self.last_completed_date else None,
            "isRepeating": self.is_repeating,
            "totalPoints": self.total_points,
            "scheduledHour": self.scheduled_hour,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TaskSnapshot":
        last = data.get("lastCompletedDate")
        return cls(
            name=data["name"],
            missed_count=data.get("missedCount", 0),
            period_count=data.get("schedulePeriod", 1),
            period_unit=PeriodUnit.parse(data.get("scheduleUnit", PeriodUnit.DAYS.value)).value,
            creation_date=datetime.fromisoformat(data["creationDate"]),
            last_completed_date=datetime.fromisoformat(last) if last else None,
            is_repeating=data.get("isRepeating", True),
            total_points=data.get("totalPoints", 0),
            scheduled_hour=data.get("scheduledHour", 0),
        )


def build_snapshot(tasks: list[Task]) -> list[TaskSnapshot]:
    return [TaskSnapshot.from_task(t) for t in tasks]


def active_snapshots(snapshots: list[TaskSnapshot], moment: datetime) -> list[TaskSnapshot]:
    """Snapshots on the list at `moment`, most missed first, then earliest due."""
    active = [s for s in snapshots if s.is_active_for_date(moment)]
    return sorted(active, key=lambda s: (-s.missed_count, s.next_due_date()))


def refresh_points(now: datetime) -> list[datetime]:
    """
    Moments a display surface should re-evaluate its snapshot.

    Now, just after each of the next few midnights (when tasks roll over to
    a new day), and every two hours for the rest of today. Points closer
    than a minute to the previous one are dropped.
    """
    start_of_tomorrow = datetime.combine(now.date() + timedelta(days=1), datetime.min.time(), tzinfo=now.tzinfo)
    points = [now]
    points.extend(start_of_tomorrow + timedelta(days=i, seconds=1) for i in range(DAYS_AHEAD))

    moment = now + REFRESH_INTERVAL
    while moment < start_of_tomorrow:
        points.append(moment)
        moment += REFRESH_INTERVAL

    merged: list[datetime] = []
    for point in sorted(points):
        if not merged or point - merged[-1] > MIN_REFRESH_GAP:
            merged.append(point)
    return merged
