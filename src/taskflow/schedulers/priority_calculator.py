"""
Priority Calculator Scheduler

Calculates a 0-100 priority score for tasks based on weighted factors:
- Urgency / deadline proximity (35%)
- Dependency impact, i.e. how many tasks it unblocks (25%)
- Complexity-to-time pressure (20%)
- Manual priority weight (20%)

Done tasks always score 0 and blocked tasks 5.

Usage:
    calculator = PriorityCalculator(today=date(2026, 2, 9))

    # Score a single task against the full list
    score = calculator.compute_priority_score(task, all_tasks)

    # "What should I work on next" ordering
    ranked = calculator.rank_tasks(all_tasks)
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from taskflow.models import Task, TaskPriority, TaskStatus
from .base import SchedulerBase, dependent_counts, round_half_up


@dataclass
class PriorityComponents:
    """Breakdown of priority score components."""
    urgency_score: int
    dependency_impact_score: int
    complexity_time_score: int
    manual_weight_score: int
    total_score: int


class PriorityCalculator(SchedulerBase):
    """
    Calculates priority scores for tasks.

    Priority Score Formula:
    ```
    priority_score = round(
        0.35 × urgency_score +
        0.25 × dependency_impact_score +
        0.20 × complexity_time_score +
        0.20 × manual_weight_score
    )
    ```
    """

    # Manual priority weights
    PRIORITY_WEIGHTS = {
        TaskPriority.CRITICAL: 100,
        TaskPriority.HIGH: 75,
        TaskPriority.MEDIUM: 50,
        TaskPriority.LOW: 25,
    }

    # Weights for priority calculation (must sum to 1.0)
    WEIGHTS = {
        'urgency': 0.35,
        'dependency_impact': 0.25,
        'complexity_time': 0.20,
        'manual_weight': 0.20,
    }

    DONE_SCORE = 0
    BLOCKED_SCORE = 5

    # Points per dependent task, saturating at 100
    DEPENDENT_POINTS = 20

    def run(self, tasks: List[Task]) -> List[Task]:
        """Rank the given tasks."""
        return self.rank_tasks(tasks)

    def compute_priority_score(self, task: Task, all_tasks: List[Task]) -> int:
        """
        Compute the priority score for a single task.

        Args:
            task: The task to score
            all_tasks: Full task list, used to count dependents

        Returns:
            Integer score in [0, 100]
        """
        if task.status == TaskStatus.DONE:
            return self.DONE_SCORE
        if task.status == TaskStatus.BLOCKED:
            return self.BLOCKED_SCORE
        counts = dependent_counts(all_tasks)
        return self._calculate_components(task, counts.get(task.id, 0), self.today()).total_score

    def get_priority_components(self, task: Task, all_tasks: List[Task]) -> PriorityComponents:
        """
        Get the full score breakdown for a task.

        The component scores are reported for every status; only the total
        reflects the done / blocked overrides.
        """
        counts = dependent_counts(all_tasks)
        return self._calculate_components(task, counts.get(task.id, 0), self.today())

    def rank_tasks(self, tasks: List[Task]) -> List[Task]:
        """
        Recompute every score against the full list and sort, highest first.

        Returns new Task copies; the input list and its tasks are untouched.
        Equal scores keep their input order.
        """
        today = self.today()
        counts = dependent_counts(tasks)
        scored = [
            task.model_copy(update={
                'priority_score': self._calculate_components(
                    task, counts.get(task.id, 0), today
                ).total_score
            })
            for task in tasks
        ]
        scored.sort(key=lambda t: -t.priority_score)

        self.logger.debug("tasks_ranked", count=len(scored))
        return scored

    def _calculate_components(
        self,
        task: Task,
        dependent_count: int,
        today: date,
    ) -> PriorityComponents:
        """Calculate all priority score components for a task."""
        days_left = self.days_until(task.deadline_date(), today)

        urgency = self._calculate_urgency_score(days_left)
        dependency_impact = min(100, dependent_count * self.DEPENDENT_POINTS)
        complexity_time = self._calculate_complexity_time_score(task, days_left)
        manual_weight = self.PRIORITY_WEIGHTS.get(task.priority, 50)

        if task.status == TaskStatus.DONE:
            total = self.DONE_SCORE
        elif task.status == TaskStatus.BLOCKED:
            total = self.BLOCKED_SCORE
        else:
            total = round_half_up(
                self.WEIGHTS['urgency'] * urgency +
                self.WEIGHTS['dependency_impact'] * dependency_impact +
                self.WEIGHTS['complexity_time'] * complexity_time +
                self.WEIGHTS['manual_weight'] * manual_weight
            )
            total = max(0, min(100, total))

        return PriorityComponents(
            urgency_score=urgency,
            dependency_impact_score=dependency_impact,
            complexity_time_score=complexity_time,
            manual_weight_score=manual_weight,
            total_score=total,
        )

    def _calculate_urgency_score(self, days_left: Optional[int]) -> int:
        """
        Score deadline proximity.

        100 when the deadline is today or past, 0 at the planning horizon
        or beyond, linear in between.
        """
        if days_left is None:
            return self.settings.NO_DEADLINE_URGENCY
        horizon = self.settings.URGENCY_HORIZON_DAYS
        if days_left <= 0:
            return 100
        if days_left >= horizon:
            return 0
        return round_half_up(100 * (1 - days_left / horizon))

    def _calculate_complexity_time_score(self, task: Task, days_left: Optional[int]) -> int:
        """
        Score how tight the remaining time is relative to the effort.

        Without a deadline the task's complexity stands in for the pressure.
        """
        if days_left is None:
            return int(task.complexity) * 10
        available_hours = max(1, days_left) * self.settings.HOURS_PER_DAY
        ratio = task.estimated_hours / available_hours
        return min(100, round_half_up(ratio * 100))


def compute_priority_score(
    task: Task,
    all_tasks: List[Task],
    today: Optional[date] = None,
) -> int:
    """Score one task against the full task list."""
    return PriorityCalculator(today=today).compute_priority_score(task, all_tasks)


def rank_tasks(tasks: List[Task], today: Optional[date] = None) -> List[Task]:
    """Return scored copies of ``tasks`` sorted by descending priority score."""
    return PriorityCalculator(today=today).rank_tasks(tasks)
