"""
Task factory and task-list utilities.

``create_task`` is the only way loosely typed data (generated breakdowns,
HTTP bodies, JSON files) becomes a Task: every field is validated or
defaulted here.

Readiness vs. blocking:
- ``get_ready_tasks``: status todo and every dependency done
- ``detect_blocked_tasks``: not done and at least one dependency not done

Detected blocking is independent of the manual ``blocked`` status. A todo
task can be detected as blocked, and a task marked blocked may have no
unmet dependency at all.
"""

import math
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic.alias_generators import to_camel

from taskflow.exceptions import InvalidTaskError
from taskflow.models import (
    NO_DEADLINE,
    UNASSIGNED,
    Task,
    TaskComplexity,
    TaskPriority,
    TaskStatus,
    parse_date,
)

DEFAULT_ESTIMATED_HOURS = 4.0

E = TypeVar("E", bound=Enum)


def generate_task_id() -> str:
    """Short random task id."""
    return uuid.uuid4().hex[:9]


def _pick(data: Mapping[str, Any], name: str) -> Any:
    """Read a field by snake_case or camelCase name."""
    if name in data:
        return data[name]
    return data.get(to_camel(name))


def _coerce_enum(enum_cls: Type[E], value: Any, default: E) -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().lower().replace("_", "-").replace(" ", "-")
        for member in enum_cls:
            if member.value == key:
                return member
    return default


def _coerce_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _coerce_complexity(value: Any) -> TaskComplexity:
    number = _coerce_number(value)
    if number is None or number != int(number):
        return TaskComplexity.MODERATE
    try:
        return TaskComplexity(int(number))
    except ValueError:
        return TaskComplexity.MODERATE


def _coerce_str_list(value: Any) -> List[str]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable):
        return [str(v) for v in value if v is not None and str(v) != ""]
    return []


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def create_task(
    partial: Optional[Mapping[str, Any]] = None,
    id_factory: Callable[[], str] = generate_task_id,
    **fields: Any,
) -> Task:
    """
    Build a well-formed Task from partial, loosely typed data.

    Keys may be snake_case or camelCase; keyword arguments override the
    mapping. Missing or unusable values fall back to the defaults:
    assignee "Unassigned", deadline "No Deadline", status todo, priority
    medium, complexity moderate, 4 estimated hours.

    Raises:
        InvalidTaskError: when the data is not a mapping or has no usable title
    """
    if partial is not None and not isinstance(partial, Mapping):
        raise InvalidTaskError("Task data must be an object")
    data: Dict[str, Any] = dict(partial or {})
    data.update(fields)

    title = _pick(data, "title")
    if not isinstance(title, str) or not title.strip():
        raise InvalidTaskError("Task title is required")

    raw_id = _pick(data, "id")
    task_id = str(raw_id) if raw_id not in (None, "") else id_factory()

    assigned_to = _pick(data, "assigned_to")
    assigned_to = str(assigned_to).strip() if assigned_to else ""

    deadline = parse_date(_pick(data, "deadline"))

    score = _coerce_number(_pick(data, "priority_score"))
    score = int(max(0, min(100, round(score)))) if score is not None else 0

    hours = _coerce_number(_pick(data, "estimated_hours"))
    if hours is None or hours <= 0:
        hours = DEFAULT_ESTIMATED_HOURS

    actual = _coerce_number(_pick(data, "actual_hours"))
    if actual is not None and actual < 0:
        actual = None

    subtasks = _pick(data, "subtasks")
    critical = _pick(data, "critical_path")

    return Task(
        id=task_id,
        title=title.strip(),
        description=str(_pick(data, "description") or ""),
        assigned_to=assigned_to or UNASSIGNED,
        status=_coerce_enum(TaskStatus, _pick(data, "status"), TaskStatus.TODO),
        deadline=deadline.isoformat() if deadline else NO_DEADLINE,
        priority=_coerce_enum(TaskPriority, _pick(data, "priority"), TaskPriority.MEDIUM),
        priority_score=score,
        complexity=_coerce_complexity(_pick(data, "complexity")),
        estimated_hours=hours,
        actual_hours=actual,
        dependencies=_coerce_str_list(_pick(data, "dependencies")),
        subtasks=_coerce_str_list(subtasks) if subtasks is not None else None,
        parent_task_id=_optional_str(_pick(data, "parent_task_id")),
        tags=_coerce_str_list(_pick(data, "tags")),
        scheduled_start=_optional_str(_pick(data, "scheduled_start")),
        scheduled_end=_optional_str(_pick(data, "scheduled_end")),
        critical_path=bool(critical) if critical is not None else None,
        milestone_id=_optional_str(_pick(data, "milestone_id")),
    )


def create_tasks(items: Iterable[Mapping[str, Any]]) -> List[Task]:
    """Build tasks from a list of raw mappings."""
    return [create_task(item) for item in items]


def get_ready_tasks(tasks: List[Task]) -> List[Task]:
    """Todo tasks whose every dependency is done: can start right now."""
    done_ids = {t.id for t in tasks if t.status == TaskStatus.DONE}
    return [
        t for t in tasks
        if t.status == TaskStatus.TODO
        and all(dep in done_ids for dep in t.dependencies)
    ]


def detect_blocked_tasks(tasks: List[Task]) -> List[Task]:
    """
    Tasks that are not done and wait on at least one unfinished dependency.

    Dependency ids are taken literally: an id that no longer exists counts
    as unfinished. Run ``filter_dangling_dependencies`` first to ignore them.
    """
    done_ids = {t.id for t in tasks if t.status == TaskStatus.DONE}
    return [
        t for t in tasks
        if t.status != TaskStatus.DONE
        and any(dep not in done_ids for dep in t.dependencies)
    ]


def filter_dangling_dependencies(tasks: List[Task]) -> List[Task]:
    """Copies of the tasks whose dependencies only reference existing ids."""
    known = {t.id for t in tasks}
    cleaned = []
    for t in tasks:
        kept = [dep for dep in t.dependencies if dep in known]
        if len(kept) == len(t.dependencies):
            cleaned.append(t)
        else:
            cleaned.append(t.model_copy(update={'dependencies': kept}))
    return cleaned


def remove_task(tasks: List[Task], task_id: str) -> List[Task]:
    """
    Delete a task from the list.

    References to it in other tasks' dependencies are left in place.
    """
    return [t for t in tasks if t.id != task_id]


def transition_status(task: Task, status: Any) -> Task:
    """
    Manually change a task's status.

    Raises:
        InvalidTaskError: for an unknown status
    """
    try:
        new_status = TaskStatus(status)
    except ValueError:
        raise InvalidTaskError(f"Unknown task status: {status!r}") from None
    return task.model_copy(update={'status': new_status})


@dataclass
class ProgressStats:
    """Completion statistics for a task list."""
    total: int
    completed: int
    in_progress: int
    overdue: int
    progress: float  # 0-100


def progress_stats(tasks: List[Task], today: Optional[date] = None) -> ProgressStats:
    """Count completed, in-progress and overdue tasks."""
    today = today or date.today()
    total = len(tasks)
    completed = sum(1 for t in tasks if t.status == TaskStatus.DONE)
    in_progress = sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS)
    overdue = 0
    for t in tasks:
        deadline = t.deadline_date()
        if t.status != TaskStatus.DONE and deadline is not None and deadline < today:
            overdue += 1
    return ProgressStats(
        total=total,
        completed=completed,
        in_progress=in_progress,
        overdue=overdue,
        progress=(completed / total) * 100 if total > 0 else 0.0,
    )


def sort_by_deadline(tasks: List[Task]) -> List[Task]:
    """Earliest deadline first, tasks without a deadline last."""
    return sorted(tasks, key=lambda t: (t.deadline_date() is None, t.deadline_date() or date.max))


def sort_by_assignee(tasks: List[Task]) -> List[Task]:
    """Alphabetical by assignee."""
    return sorted(tasks, key=lambda t: t.assigned_to.lower())
