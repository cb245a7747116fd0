"""
Task and milestone alerts.

Generates overdue, critical-path, deadline and milestone alerts. Which
alerts were already delivered is state owned by the caller: it passes the
keys it has seen and gets back the alerts that are new together with the
updated key set. Nothing is stored here.

Usage:
    check = check_task_alerts(tasks, today=date.today(), seen=delivered)
    for alert in check.alerts:
        notify(alert)
    delivered = check.seen
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from taskflow.models import Milestone, MilestoneStatus, Task, TaskStatus, parse_date
from taskflow.platform.config import Settings, settings as default_settings

AlertKey = Tuple[str, str]


class AlertType(str, Enum):
    """Types of alerts."""
    OVERDUE = "overdue"
    CRITICAL_PATH = "critical-path"
    DEADLINE_REMINDER = "deadline-reminder"
    DUE_TODAY = "due-today"
    MILESTONE = "milestone"


@dataclass
class Alert:
    """An alert for a task or a milestone."""
    type: AlertType
    title: str
    message: str
    related_task_id: Optional[str] = None
    related_milestone_id: Optional[str] = None

    @property
    def key(self) -> AlertKey:
        return (self.type.value, self.related_task_id or self.related_milestone_id or "")

    def to_dict(self) -> dict:
        return {
            'type': self.type.value,
            'title': self.title,
            'message': self.message,
            'relatedTaskId': self.related_task_id,
            'relatedMilestoneId': self.related_milestone_id,
        }


@dataclass
class AlertCheck:
    """New alerts plus every key delivered so far."""
    alerts: List[Alert] = field(default_factory=list)
    seen: FrozenSet[AlertKey] = frozenset()


def _collect(candidates: List[Alert], seen: Optional[FrozenSet[AlertKey]]) -> AlertCheck:
    known = set(seen or ())
    fresh = []
    for alert in candidates:
        if alert.key in known:
            continue
        known.add(alert.key)
        fresh.append(alert)
    return AlertCheck(alerts=fresh, seen=frozenset(known))


def check_task_alerts(
    tasks: List[Task],
    today: Optional[date] = None,
    seen: Optional[FrozenSet[AlertKey]] = None,
) -> AlertCheck:
    """Overdue tasks and critical-path tasks that have not started."""
    today = today or date.today()
    candidates = []
    for task in tasks:
        if task.status == TaskStatus.DONE:
            continue

        deadline = task.deadline_date()
        if deadline is not None and deadline < today:
            candidates.append(Alert(
                type=AlertType.OVERDUE,
                title="Task Overdue",
                message=f'"{task.title}" was due on {task.deadline} and is still {task.status.value}.',
                related_task_id=task.id,
            ))

        if task.critical_path and task.status != TaskStatus.IN_PROGRESS:
            candidates.append(Alert(
                type=AlertType.CRITICAL_PATH,
                title="Critical Path Task Waiting",
                message=f'"{task.title}" is on the critical path and hasn\'t started yet.',
                related_task_id=task.id,
            ))

    return _collect(candidates, seen)


def check_deadline_reminders(
    tasks: List[Task],
    today: Optional[date] = None,
    seen: Optional[FrozenSet[AlertKey]] = None,
    settings: Optional[Settings] = None,
) -> AlertCheck:
    """Reminders for tasks due within DEADLINE_REMINDER_DAYS, and on the day."""
    settings = settings or default_settings
    today = today or date.today()
    candidates = []
    for task in tasks:
        deadline = task.deadline_date()
        if task.status == TaskStatus.DONE or deadline is None:
            continue

        days_left = (deadline - today).days
        if 0 <= days_left <= settings.DEADLINE_REMINDER_DAYS:
            plural = "" if days_left == 1 else "s"
            candidates.append(Alert(
                type=AlertType.DEADLINE_REMINDER,
                title="Upcoming Deadline",
                message=f'"{task.title}" is due in {days_left} day{plural} ({task.deadline}).',
                related_task_id=task.id,
            ))
        if days_left == 0:
            candidates.append(Alert(
                type=AlertType.DUE_TODAY,
                title="Task Due Today",
                message=f'"{task.title}" is due today! Make sure to complete it.',
                related_task_id=task.id,
            ))

    return _collect(candidates, seen)


def check_milestone_alerts(
    milestones: List[Milestone],
    today: Optional[date] = None,
    seen: Optional[FrozenSet[AlertKey]] = None,
) -> AlertCheck:
    """Milestones whose target date passed before completion."""
    today = today or date.today()
    candidates = []
    for milestone in milestones:
        if milestone.status in (MilestoneStatus.COMPLETED, MilestoneStatus.OVERDUE):
            continue
        target = parse_date(milestone.target_date)
        if target is not None and target < today:
            candidates.append(Alert(
                type=AlertType.MILESTONE,
                title="Milestone Overdue",
                message=(
                    f'"{milestone.title}" target date ({milestone.target_date}) has passed '
                    f'with {milestone.completion_percentage}% completion.'
                ),
                related_milestone_id=milestone.id,
            ))

    return _collect(candidates, seen)
