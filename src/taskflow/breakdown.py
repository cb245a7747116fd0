"""
Task breakdown ingestion.

Turns the phase breakdown produced by the task-breakdown generator into
validated tasks and milestones. The generator's output is loosely typed,
so every task goes through ``create_task``.

Expected input (a bare list of phases is accepted too):

    {
      "phases": [
        {
          "parentTask": "Phase 1: Research & Planning",
          "subtasks": [
            {"title": "...", "assignedTo": "...", "deadline": "YYYY-MM-DD",
             "priority": "high", "complexity": 3, "estimatedHours": 10,
             "dependencies": ["<title of an earlier task>"], "tags": [...]}
          ]
        }
      ]
    }
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, List, Mapping, Optional, Union

from taskflow.exceptions import InvalidTaskError
from taskflow.milestones import schedule_milestones
from taskflow.models import (
    UNASSIGNED,
    Milestone,
    ScheduleResult,
    Task,
    TaskComplexity,
    TaskPriority,
    TaskStatus,
)
from taskflow.platform.logging import get_logger
from taskflow.schedulers import ScheduleOptimizer, rank_tasks
from taskflow.tasks import create_task

logger = get_logger(__name__)

PHASE_PREFIX = re.compile(r"^Phase \d+:\s*")


def generate_prefixed_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:6]}"


@dataclass
class Breakdown:
    """Tasks and milestones created from a phase breakdown."""
    tasks: List[Task] = field(default_factory=list)
    milestones: List[Milestone] = field(default_factory=list)
    schedule: Optional[ScheduleResult] = None
    skipped: int = 0


def _phases(data: Union[Mapping[str, Any], List[Any], None]) -> List[Mapping[str, Any]]:
    if isinstance(data, Mapping):
        data = data.get("phases") or []
    if not isinstance(data, list):
        return []
    return [p for p in data if isinstance(p, Mapping)]


def _resolve_dependencies(titles: Any, created: List[Task]) -> List[str]:
    """Map dependency titles to ids of previously created tasks."""
    if isinstance(titles, str):
        titles = [titles]
    if not isinstance(titles, list):
        return []
    resolved = []
    for title in titles:
        if not isinstance(title, str) or not title.strip():
            continue
        needle = title.strip().lower()
        match = next((t for t in created if needle in t.title.lower()), None)
        if match is not None:
            resolved.append(match.id)
    return resolved


def ingest_breakdown(
    data: Union[Mapping[str, Any], List[Any], None],
    team_members: List[str],
    id_factory: Callable[[str], str] = generate_prefixed_id,
) -> Breakdown:
    """
    Create milestones, parent tasks and subtasks from a phase breakdown.

    Per phase: one milestone, one parent task (high priority, epic
    complexity, tagged "phase", assigned round-robin over the team, hours
    summed over its children) and one task per subtask. Subtasks that
    cannot be turned into a task are skipped and counted.

    Args:
        data: Generator output, either ``{"phases": [...]}`` or the list
        team_members: Team names used for parent task assignment
        id_factory: Builds ids from a prefix ("ms", "parent", "task")

    Returns:
        Breakdown with tasks in creation order (children before parent)
    """
    result = Breakdown()

    for index, phase in enumerate(_phases(data)):
        parent_title = str(phase.get("parentTask") or f"Phase {index + 1}")
        raw_subtasks = phase.get("subtasks")
        subtasks = raw_subtasks if isinstance(raw_subtasks, list) else []

        milestone_id = id_factory("ms")
        parent_id = id_factory("parent")

        result.milestones.append(Milestone(
            id=milestone_id,
            phase=f"Phase {index + 1}",
            title=PHASE_PREFIX.sub("", parent_title),
            duration=f"{len(subtasks) * 5}-{len(subtasks) * 8} days",
            description=f"AI-generated phase encompassing {len(subtasks)} tasks.",
        ))

        children: List[Task] = []
        for raw in subtasks:
            if not isinstance(raw, Mapping):
                result.skipped += 1
                logger.warning("breakdown_subtask_skipped", phase=parent_title, reason="not an object")
                continue
            try:
                child = create_task(
                    raw,
                    id=id_factory("task"),
                    parent_task_id=parent_id,
                    dependencies=_resolve_dependencies(raw.get("dependencies"), result.tasks),
                    milestone_id=milestone_id,
                )
            except InvalidTaskError as e:
                result.skipped += 1
                logger.warning("breakdown_subtask_skipped", phase=parent_title, reason=str(e))
                continue
            children.append(child)
            result.tasks.append(child)

        result.tasks.append(create_task(
            id=parent_id,
            title=parent_title,
            status=TaskStatus.TODO,
            assigned_to=team_members[index % len(team_members)] if team_members else UNASSIGNED,
            priority=TaskPriority.HIGH,
            complexity=TaskComplexity.EPIC,
            estimated_hours=sum(c.estimated_hours for c in children),
            subtasks=[c.id for c in children],
            tags=["phase"],
            milestone_id=milestone_id,
        ))

    logger.info(
        "breakdown_ingested",
        milestones=len(result.milestones),
        tasks=len(result.tasks),
        skipped=result.skipped,
    )
    return result


def plan_breakdown(
    data: Union[Mapping[str, Any], List[Any], None],
    team_members: List[str],
    today: Optional[date] = None,
    id_factory: Callable[[str], str] = generate_prefixed_id,
) -> Breakdown:
    """
    Ingest a breakdown, then rank, schedule and date its milestones.

    Tasks come back ranked with schedule dates applied; milestone dates
    follow the scheduled tasks.
    """
    breakdown = ingest_breakdown(data, team_members, id_factory=id_factory)

    optimizer = ScheduleOptimizer(today=today)
    ranked = rank_tasks(breakdown.tasks, today=optimizer.today())
    schedule = optimizer.optimize_schedule(ranked, team_members)
    scheduled = optimizer.apply_schedule(ranked, schedule)

    return Breakdown(
        tasks=scheduled,
        milestones=schedule_milestones(breakdown.milestones, scheduled),
        schedule=schedule,
        skipped=breakdown.skipped,
    )
