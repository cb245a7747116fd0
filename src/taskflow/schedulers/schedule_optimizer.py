"""
Schedule Optimizer Scheduler

Greedy, dependency-aware list scheduling with resource leveling.

Algorithm (single pass, no backtracking):
1. Drop done tasks, score the rest and compute the critical path
2. Walk the tasks in topological order (highest score first among ties)
3. Start each task once its dependencies have finished and its assignee is
   free; unassigned tasks go to the member who frees up first
4. Derive utilization, bottlenecks and reassignment suggestions

Durations are whole days: ceil(estimated_hours / HOURS_PER_DAY), at least 1.

Usage:
    optimizer = ScheduleOptimizer(today=date(2026, 2, 9))

    result = optimizer.optimize_schedule(tasks, ["Alice", "Bob"])
    scheduled = optimizer.apply_schedule(tasks, result)
"""

import math
from datetime import date
from typing import Dict, List, Optional

from taskflow.models import (
    UNASSIGNED,
    Reassignment,
    ScheduleResult,
    ScheduleSlot,
    Task,
    TaskStatus,
)
from .base import SchedulerBase, dependent_counts, round_half_up
from .dependency_analyzer import DependencyAnalyzer
from .priority_calculator import PriorityCalculator


class ScheduleOptimizer(SchedulerBase):
    """
    Assigns start and end dates per task per team member.

    Deterministic for a fixed task list, team list and reference date.
    """

    def run(self, tasks: List[Task], team_members: List[str]) -> ScheduleResult:
        """Optimize the schedule for the given team."""
        return self.optimize_schedule(tasks, team_members)

    def optimize_schedule(
        self,
        tasks: List[Task],
        team_members: List[str],
    ) -> ScheduleResult:
        """
        Build a schedule for all tasks that are not done.

        Args:
            tasks: Full task list
            team_members: Names of the people work can be assigned to

        Returns:
            ScheduleResult; zero-valued when there are no tasks or no members
        """
        team = list(dict.fromkeys(team_members))
        if not tasks or not team:
            if tasks:
                self.logger.warning("schedule_skipped_no_team", tasks=len(tasks))
            return ScheduleResult()

        today = self.today()
        calculator = PriorityCalculator(self.settings, today)
        analyzer = DependencyAnalyzer(self.settings, today)

        scored = calculator.rank_tasks([t for t in tasks if t.status != TaskStatus.DONE])
        analysis = analyzer.analyze_critical_path(scored)
        critical_ids = analysis.critical_ids

        hours_per_day = self.settings.HOURS_PER_DAY
        member_free_day: Dict[str, int] = {m: 0 for m in team}
        task_finish_day: Dict[str, int] = {}
        busy_days: Dict[str, int] = {m: 0 for m in team}
        slots: List[ScheduleSlot] = []

        for task in analysis.order.tasks:
            earliest_start = max(
                (task_finish_day.get(dep, 0) for dep in task.dependencies),
                default=0,
            )
            assignee = self._resolve_assignee(task, team, member_free_day)

            actual_start = max(earliest_start, member_free_day[assignee])
            duration_days = max(1, math.ceil(task.estimated_hours / hours_per_day))
            actual_end = actual_start + duration_days

            member_free_day[assignee] = actual_end
            task_finish_day[task.id] = actual_end
            busy_days[assignee] += duration_days

            slots.append(ScheduleSlot(
                task_id=task.id,
                assignee=assignee,
                start_date=self.offset_date(actual_start, today),
                end_date=self.offset_date(actual_end, today),
                is_critical_path=task.id in critical_ids,
            ))

        project_length = max(task_finish_day.values(), default=0)
        utilization = self._calculate_utilization(team, busy_days, project_length)

        counts = dependent_counts(scored)
        bottlenecks = [
            t.id for t in scored
            if t.id in critical_ids
            and counts.get(t.id, 0) >= self.settings.BOTTLENECK_MIN_DEPENDENTS
        ]

        reassignments = self._suggest_reassignments(team, utilization, slots)

        self.logger.info(
            "schedule_optimized",
            slots=len(slots),
            project_days=project_length,
            critical=len(critical_ids),
            bottlenecks=len(bottlenecks),
            reassignments=len(reassignments),
        )

        return ScheduleResult(
            slots=slots,
            critical_path_length=project_length,
            total_estimated_hours=sum(t.estimated_hours for t in scored),
            resource_utilization=utilization,
            bottlenecks=bottlenecks,
            suggested_reassignments=reassignments,
        )

    def apply_schedule(self, tasks: List[Task], schedule: ScheduleResult) -> List[Task]:
        """
        Merge a schedule back onto tasks.

        Tasks with a slot get scheduled dates, the critical path flag and the
        resolved assignee. Tasks without one are returned as they are.
        """
        slot_map = {s.task_id: s for s in schedule.slots}
        merged = []
        for task in tasks:
            slot = slot_map.get(task.id)
            if slot is None:
                merged.append(task)
                continue
            merged.append(task.model_copy(update={
                'scheduled_start': slot.start_date,
                'scheduled_end': slot.end_date,
                'critical_path': slot.is_critical_path,
                'assigned_to': slot.assignee,
            }))
        return merged

    def _resolve_assignee(
        self,
        task: Task,
        team: List[str],
        member_free_day: Dict[str, int],
    ) -> str:
        """Keep a real team member, otherwise pick the first one to free up."""
        if task.assigned_to != UNASSIGNED and task.assigned_to in member_free_day:
            return task.assigned_to
        return min(team, key=lambda m: member_free_day[m])

    def _calculate_utilization(
        self,
        team: List[str],
        busy_days: Dict[str, int],
        project_length: int,
    ) -> Dict[str, int]:
        """Percentage of the project timeline each member is occupied."""
        if project_length <= 0:
            return {m: 0 for m in team}
        return {
            m: round_half_up(100 * busy_days[m] / project_length)
            for m in team
        }

    def _suggest_reassignments(
        self,
        team: List[str],
        utilization: Dict[str, int],
        slots: List[ScheduleSlot],
    ) -> List[Reassignment]:
        """
        Propose moving one non-critical slot off each overloaded member.

        A member is overloaded when their utilization exceeds the team
        average by more than OVERLOAD_MARGIN points.
        """
        if not team:
            return []
        average = sum(utilization.values()) / len(team)
        threshold = average + self.settings.OVERLOAD_MARGIN
        least_loaded = min(team, key=lambda m: utilization.get(m, 100))

        suggestions: List[Reassignment] = []
        for member in team:
            if utilization.get(member, 0) <= threshold or least_loaded == member:
                continue
            movable = next(
                (s for s in slots if s.assignee == member and not s.is_critical_path),
                None,
            )
            if movable is None:
                continue
            suggestions.append(Reassignment(
                task_id=movable.task_id,
                from_member=member,
                to_member=least_loaded,
                reason=(
                    f"{member} is overloaded ({utilization[member]}% util) "
                    f"vs {least_loaded} ({utilization[least_loaded]}% util)"
                ),
            ))
        return suggestions


def optimize_schedule(
    tasks: List[Task],
    team_members: List[str],
    today: Optional[date] = None,
) -> ScheduleResult:
    """Build a resource-leveled schedule for ``tasks``."""
    return ScheduleOptimizer(today=today).optimize_schedule(tasks, team_members)


def apply_schedule(tasks: List[Task], schedule: ScheduleResult) -> List[Task]:
    """Return copies of ``tasks`` with the schedule merged in."""
    return ScheduleOptimizer().apply_schedule(tasks, schedule)
