"""
Milestone progress and date tracking.

Milestones group tasks through ``Task.milestone_id``. Their completion,
status and dates are derived from the linked tasks.
"""

from datetime import date, timedelta
from typing import List, Optional

from taskflow.models import Milestone, MilestoneStatus, Task, TaskStatus, parse_date
from taskflow.platform.config import Settings, settings as default_settings
from taskflow.platform.logging import get_logger
from taskflow.schedulers.base import round_half_up

logger = get_logger(__name__)


def linked_tasks(milestone: Milestone, tasks: List[Task]) -> List[Task]:
    return [t for t in tasks if t.milestone_id == milestone.id]


def milestone_progress(
    milestone: Milestone,
    tasks: List[Task],
    today: Optional[date] = None,
    settings: Optional[Settings] = None,
) -> Milestone:
    """
    Recompute completion, status and suggested date for a milestone.

    Completion is the share of linked tasks that are done; without linked
    tasks the stored percentage is kept. Status is completed at 100%,
    overdue once the target date has passed, in-progress above 0%, and
    the stored status otherwise.
    """
    settings = settings or default_settings
    today = today or date.today()
    linked = linked_tasks(milestone, tasks)
    done = sum(1 for t in linked if t.status == TaskStatus.DONE)

    if linked:
        completion = round_half_up(100 * done / len(linked))
    else:
        completion = milestone.completion_percentage

    suggested = milestone.ai_suggested_date
    if not suggested and linked:
        deadlines = [d for d in (t.deadline_date() for t in linked) if d is not None]
        if deadlines:
            suggested = (max(deadlines) + timedelta(days=settings.MILESTONE_BUFFER_DAYS)).isoformat()

    target = parse_date(milestone.target_date)
    if completion == 100:
        status = MilestoneStatus.COMPLETED
    elif target is not None and target < today:
        status = MilestoneStatus.OVERDUE
    elif completion > 0:
        status = MilestoneStatus.IN_PROGRESS
    else:
        status = milestone.status

    return milestone.model_copy(update={
        'completion_percentage': completion,
        'status': status,
        'ai_suggested_date': suggested,
        'linked_task_ids': [t.id for t in linked],
    })


def overall_progress(milestones: List[Milestone]) -> int:
    """Mean completion over milestones, 0 when there are none."""
    if not milestones:
        return 0
    return round_half_up(sum(m.completion_percentage for m in milestones) / len(milestones))


def schedule_milestones(
    milestones: List[Milestone],
    tasks: List[Task],
    settings: Optional[Settings] = None,
) -> List[Milestone]:
    """
    Fill milestone dates from scheduled tasks.

    The target date is the latest scheduled end (or deadline) among linked
    tasks, the start date the earliest scheduled start, and the suggested
    date the target plus MILESTONE_BUFFER_DAYS.
    """
    settings = settings or default_settings
    updated = []
    for milestone in milestones:
        linked = linked_tasks(milestone, tasks)
        ends = [
            d for d in (parse_date(t.scheduled_end or t.deadline) for t in linked)
            if d is not None
        ]
        changes = {'linked_task_ids': [t.id for t in linked]}
        if ends:
            target = max(ends)
            changes['target_date'] = target.isoformat()
            starts = [d for d in (parse_date(t.scheduled_start) for t in linked) if d is not None]
            if starts:
                changes['start_date'] = min(starts).isoformat()
            changes['ai_suggested_date'] = (
                target + timedelta(days=settings.MILESTONE_BUFFER_DAYS)
            ).isoformat()
        updated.append(milestone.model_copy(update=changes))
    return updated


def link_tasks_to_milestones(tasks: List[Task], milestones: List[Milestone]) -> List[Task]:
    """
    Attach unlinked tasks to milestones.

    A task joins the first milestone whose title contains one of its tags
    as a word; the rest are spread round-robin. Tasks that already have a
    milestone are left alone.
    """
    if not milestones:
        return list(tasks)

    keywords = [set(m.title.lower().split()) for m in milestones]
    linked: List[Task] = []
    unmatched = 0
    for task in tasks:
        if task.milestone_id:
            linked.append(task)
            continue
        tags = {tag.lower() for tag in task.tags}
        match = next(
            (m for m, words in zip(milestones, keywords) if tags & words),
            None,
        )
        if match is None:
            match = milestones[unmatched % len(milestones)]
            unmatched += 1
        linked.append(task.model_copy(update={'milestone_id': match.id}))

    logger.debug("tasks_linked_to_milestones", tasks=len(tasks), round_robin=unmatched)
    return linked
