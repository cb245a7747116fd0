"""
Dependency Analyzer Scheduler

Graph algorithms over the task dependency DAG (edges run from a dependency
to its dependent):
- Topological ordering with Kahn's algorithm, ties broken by priority score
- Critical path analysis (CPM forward/backward pass, weighted by
  estimated hours)
- Cycle diagnostics

Dependency ids that do not belong to the task list are ignored, so deleted
tasks never block anything. Cycles are tolerated: the tasks caught in them
are appended after the sortable part in their input order.

Usage:
    analyzer = DependencyAnalyzer()

    order = analyzer.analyze_order(tasks)
    if order.has_cycle:
        print(order.unsortable_ids)

    analysis = analyzer.analyze_critical_path(tasks)
    print(analysis.critical_ids, analysis.project_end)
"""

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Dict, List, Set

from taskflow.models import Task
from .base import SchedulerBase, dependent_counts


@dataclass
class TopologicalOrder:
    """Result of a topological sort."""
    tasks: List[Task]
    unsortable_ids: List[str] = field(default_factory=list)

    @property
    def has_cycle(self) -> bool:
        return bool(self.unsortable_ids)

    @property
    def ids(self) -> List[str]:
        return [t.id for t in self.tasks]


@dataclass
class CriticalPathAnalysis:
    """Forward/backward pass results, in hours from project start."""
    order: TopologicalOrder
    earliest_start: Dict[str, float]
    earliest_finish: Dict[str, float]
    latest_start: Dict[str, float]
    latest_finish: Dict[str, float]
    total_float: Dict[str, float]
    critical_ids: Set[str]
    project_end: float

    @property
    def critical_path(self) -> List[str]:
        """Critical task ids in topological order."""
        return [tid for tid in self.order.ids if tid in self.critical_ids]


class DependencyAnalyzer(SchedulerBase):
    """
    Orders tasks and finds the critical path.

    The topological order favours high-score tasks among those that are
    ready at the same time, so scores should be computed (see
    PriorityCalculator.rank_tasks) before ordering.
    """

    def run(self, tasks: List[Task]) -> CriticalPathAnalysis:
        """Run the full critical path analysis."""
        return self.analyze_critical_path(tasks)

    def topological_sort(self, tasks: List[Task]) -> List[Task]:
        """Order tasks so that every task follows its dependencies."""
        return self.analyze_order(tasks).tasks

    def analyze_order(self, tasks: List[Task]) -> TopologicalOrder:
        """
        Kahn's algorithm with a score-ordered ready queue.

        Among ready tasks the highest priority score goes first; equal
        scores keep the order in which they became ready. Tasks left with
        unresolved in-degree (cycles) are appended in input order.
        """
        task_map = {t.id: t for t in tasks}
        in_degree = {t.id: 0 for t in tasks}
        adjacency: Dict[str, List[str]] = {t.id: [] for t in tasks}

        for t in tasks:
            for dep in t.dependencies:
                if dep in task_map:
                    adjacency[dep].append(t.id)
                    in_degree[t.id] += 1

        sequence = itertools.count()
        ready = [
            (-task_map[tid].priority_score, next(sequence), tid)
            for tid, degree in in_degree.items()
            if degree == 0
        ]
        heapq.heapify(ready)

        ordered: List[Task] = []
        while ready:
            _, _, tid = heapq.heappop(ready)
            ordered.append(task_map[tid])
            for neighbor in adjacency[tid]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    heapq.heappush(
                        ready,
                        (-task_map[neighbor].priority_score, next(sequence), neighbor),
                    )

        unsortable: List[str] = []
        if len(ordered) < len(task_map):
            placed = {t.id for t in ordered}
            for t in tasks:
                if t.id not in placed:
                    placed.add(t.id)
                    ordered.append(t)
                    unsortable.append(t.id)
            self.logger.warning(
                "dependency_cycle_detected",
                unsortable=len(unsortable),
                task_ids=unsortable,
            )

        return TopologicalOrder(tasks=ordered, unsortable_ids=unsortable)

    def analyze_critical_path(self, tasks: List[Task]) -> CriticalPathAnalysis:
        """
        Classic CPM over estimated hours.

        Forward pass in topological order for earliest start/finish, backward
        pass in reverse order for latest start/finish. A task is critical
        when its float is within CRITICAL_FLOAT_TOLERANCE of zero.
        """
        order = self.analyze_order(tasks)

        earliest_start: Dict[str, float] = {}
        earliest_finish: Dict[str, float] = {}
        for t in order.tasks:
            start = 0.0
            for dep in t.dependencies:
                if dep in earliest_finish:
                    start = max(start, earliest_finish[dep])
            earliest_start[t.id] = start
            earliest_finish[t.id] = start + t.estimated_hours

        project_end = max(earliest_finish.values(), default=0.0)

        successors: Dict[str, List[str]] = {t.id: [] for t in tasks}
        for t in tasks:
            for dep in t.dependencies:
                if dep in successors:
                    successors[dep].append(t.id)

        latest_start: Dict[str, float] = {}
        latest_finish: Dict[str, float] = {}
        for t in reversed(order.tasks):
            following = successors[t.id]
            if following:
                finish = min(latest_start.get(s, project_end) for s in following)
            else:
                finish = project_end
            latest_finish[t.id] = finish
            latest_start[t.id] = finish - t.estimated_hours

        tolerance = self.settings.CRITICAL_FLOAT_TOLERANCE
        total_float = {
            tid: latest_start[tid] - earliest_start[tid] for tid in earliest_start
        }
        critical_ids = {tid for tid, slack in total_float.items() if abs(slack) < tolerance}

        self.logger.debug(
            "critical_path_computed",
            tasks=len(order.tasks),
            critical=len(critical_ids),
            project_end_hours=project_end,
        )

        return CriticalPathAnalysis(
            order=order,
            earliest_start=earliest_start,
            earliest_finish=earliest_finish,
            latest_start=latest_start,
            latest_finish=latest_finish,
            total_float=total_float,
            critical_ids=critical_ids,
            project_end=project_end,
        )

    def compute_critical_path(self, tasks: List[Task]) -> Set[str]:
        """Ids of the tasks with zero float."""
        return self.analyze_critical_path(tasks).critical_ids

    def find_cycles(self, tasks: List[Task]) -> List[List[str]]:
        """
        List every elementary dependency cycle as an id path.

        Each cycle is reported once, starting and ending with its earliest
        task in input order, e.g. ``["X", "Y", "Z", "X"]`` where X depends
        on Y. Overlapping cycles are reported separately. Only ids present
        in ``tasks`` are followed.
        """
        graph = {t.id: [d for d in t.dependencies] for t in tasks}
        rank = {tid: i for i, tid in enumerate(graph)}
        cycles: List[List[str]] = []

        # Only nodes ranked after the root are entered, so every cycle is
        # found from its lowest-ranked member exactly once.
        for root in graph:
            path: List[str] = [root]
            on_path: Set[str] = {root}
            iterators = [iter(graph[root])]
            while iterators:
                node = next(iterators[-1], None)
                if node is None:
                    iterators.pop()
                    on_path.discard(path.pop())
                    continue
                if node not in graph:
                    continue
                if node == root:
                    cycles.append(path + [root])
                elif rank[node] > rank[root] and node not in on_path:
                    path.append(node)
                    on_path.add(node)
                    iterators.append(iter(graph[node]))

        return cycles

    def dependents_of(self, task_id: str, tasks: List[Task]) -> List[Task]:
        """Tasks that list ``task_id`` among their dependencies."""
        return [t for t in tasks if task_id in t.dependencies and t.id != task_id]

    def dependent_counts(self, tasks: List[Task]) -> Dict[str, int]:
        """Number of dependents per task id."""
        return dependent_counts(tasks)


def topological_sort(tasks: List[Task]) -> List[Task]:
    """Order tasks dependencies-first, highest score first among ties."""
    return DependencyAnalyzer().topological_sort(tasks)


def compute_critical_path(tasks: List[Task]) -> Set[str]:
    """Ids of the tasks on the critical path."""
    return DependencyAnalyzer().compute_critical_path(tasks)


def find_cycles(tasks: List[Task]) -> List[List[str]]:
    """Dependency cycles as id paths."""
    return DependencyAnalyzer().find_cycles(tasks)
