"""
Task, milestone and schedule records.

Records serialize with camelCase aliases (``assignedTo``, ``estimatedHours``,
...) so the shapes exchanged with the task store, the breakdown generator
and the UI stay the same on both sides of the engine.
"""

from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NO_DEADLINE = "No Deadline"
UNASSIGNED = "Unassigned"


def parse_date(value: Any) -> Optional[date]:
    """
    Parse an ISO date (or datetime) string.

    Returns None for the "No Deadline" sentinel, empty values and anything
    that does not parse.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str) or value == NO_DEADLINE:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
    except ValueError:
        return None


class TaskStatus(str, Enum):
    """Manual workflow status of a task."""
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    BLOCKED = "blocked"


class TaskPriority(str, Enum):
    """Manually assigned priority level."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskComplexity(IntEnum):
    """Fibonacci-like task sizing."""
    TRIVIAL = 1
    SIMPLE = 2
    MODERATE = 3
    COMPLEX = 5
    EPIC = 8


class MilestoneStatus(str, Enum):
    """Derived milestone status."""
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class CamelModel(BaseModel):
    """Base record: snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Task(CamelModel):
    """
    A unit of project work.

    ``priority_score``, ``scheduled_start``, ``scheduled_end`` and
    ``critical_path`` are derived by the engine and can always be
    recomputed from the rest of the task list.
    """

    id: str
    title: str
    description: str = ""
    assigned_to: str = UNASSIGNED
    status: TaskStatus = TaskStatus.TODO
    deadline: str = NO_DEADLINE
    priority: TaskPriority = TaskPriority.MEDIUM
    priority_score: int = Field(0, ge=0, le=100)
    complexity: TaskComplexity = TaskComplexity.MODERATE
    estimated_hours: float = Field(4.0, gt=0)
    actual_hours: Optional[float] = Field(None, ge=0)
    dependencies: List[str] = Field(default_factory=list)
    subtasks: Optional[List[str]] = None
    parent_task_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    scheduled_start: Optional[str] = None
    scheduled_end: Optional[str] = None
    critical_path: Optional[bool] = None
    milestone_id: Optional[str] = None

    @field_validator("dependencies", "tags")
    @classmethod
    def _dedupe(cls, values: List[str]) -> List[str]:
        return list(dict.fromkeys(values))

    def deadline_date(self) -> Optional[date]:
        """The deadline as a date, or None when there is none."""
        return parse_date(self.deadline)

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE


class Milestone(CamelModel):
    """A roadmap phase grouping tasks through ``Task.milestone_id``."""

    id: str
    phase: str = ""
    title: str
    duration: str = ""
    description: str = ""
    status: MilestoneStatus = MilestoneStatus.NOT_STARTED
    completion_percentage: int = Field(0, ge=0, le=100)
    start_date: Optional[str] = None
    target_date: Optional[str] = None
    ai_suggested_date: Optional[str] = None
    linked_task_ids: List[str] = Field(default_factory=list)


class ScheduleSlot(CamelModel):
    """Calendar placement of one task."""

    task_id: str
    assignee: str
    start_date: str
    end_date: str
    is_critical_path: bool = False


class Reassignment(CamelModel):
    """Suggestion to move a slot from an overloaded member."""

    task_id: str
    from_member: str = Field(alias="from")
    to_member: str = Field(alias="to")
    reason: str


class ScheduleResult(CamelModel):
    """Output of the schedule optimizer."""

    slots: List[ScheduleSlot] = Field(default_factory=list)
    critical_path_length: int = 0
    total_estimated_hours: float = 0.0
    resource_utilization: Dict[str, int] = Field(default_factory=dict)
    bottlenecks: List[str] = Field(default_factory=list)
    suggested_reassignments: List[Reassignment] = Field(default_factory=list)

    def slot_for(self, task_id: str) -> Optional[ScheduleSlot]:
        for slot in self.slots:
            if slot.task_id == task_id:
                return slot
        return None
