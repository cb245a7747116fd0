"""
TaskFlow Schedulers

This package contains the planning algorithms:
- PriorityCalculator: 0-100 urgency-weighted task scores
- DependencyAnalyzer: topological ordering and critical path
- ScheduleOptimizer: greedy resource-leveling scheduler
"""

from .priority_calculator import (
    PriorityCalculator,
    PriorityComponents,
    compute_priority_score,
    rank_tasks,
)
from .dependency_analyzer import (
    CriticalPathAnalysis,
    DependencyAnalyzer,
    TopologicalOrder,
    compute_critical_path,
    find_cycles,
    topological_sort,
)
from .schedule_optimizer import ScheduleOptimizer, apply_schedule, optimize_schedule

__all__ = [
    "PriorityCalculator",
    "PriorityComponents",
    "DependencyAnalyzer",
    "TopologicalOrder",
    "CriticalPathAnalysis",
    "ScheduleOptimizer",
    "compute_priority_score",
    "rank_tasks",
    "topological_sort",
    "compute_critical_path",
    "find_cycles",
    "optimize_schedule",
    "apply_schedule",
]
