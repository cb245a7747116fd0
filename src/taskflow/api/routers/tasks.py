"""
Tasks API endpoints.

Endpoints:
- POST /tasks/rank - Tasks sorted by priority score
- POST /tasks/order - Dependency order, cycles and critical path
- POST /tasks/ready - Tasks that can start now
- POST /tasks/blocked - Tasks waiting on unfinished dependencies
"""

from dataclasses import asdict
from typing import Any, Dict

from fastapi import APIRouter
from pydantic.alias_generators import to_camel

from taskflow.platform.logging import get_logger
from taskflow.schedulers import DependencyAnalyzer, PriorityCalculator
from taskflow.tasks import detect_blocked_tasks, get_ready_tasks

from ..dependencies import build_tasks
from ..schemas import TaskListRequest

logger = get_logger(__name__)
router = APIRouter()


@router.post("/rank")
async def rank(request: TaskListRequest) -> Dict[str, Any]:
    """
    Rank tasks by priority score, highest first.

    Returns:
        Scored tasks and the score breakdown per task
    """
    tasks = build_tasks(request.tasks)
    calculator = PriorityCalculator(today=request.today)
    ranked = calculator.rank_tasks(tasks)

    return {
        "tasks": [t.to_dict() for t in ranked],
        "components": {
            t.id: {
                to_camel(key): value
                for key, value in asdict(calculator.get_priority_components(t, tasks)).items()
            }
            for t in tasks
        },
    }


@router.post("/order")
async def order(request: TaskListRequest) -> Dict[str, Any]:
    """
    Order tasks by dependencies and find the critical path.

    Scores are recomputed first so ties are broken by priority.
    """
    tasks = PriorityCalculator(today=request.today).rank_tasks(build_tasks(request.tasks))
    analyzer = DependencyAnalyzer(today=request.today)
    analysis = analyzer.analyze_critical_path(tasks)

    if analysis.order.has_cycle:
        logger.warning("order_contains_cycles", unsortable=analysis.order.unsortable_ids)

    return {
        "order": analysis.order.ids,
        "hasCycle": analysis.order.has_cycle,
        "unsortableIds": analysis.order.unsortable_ids,
        "cycles": analyzer.find_cycles(tasks),
        "criticalPath": analysis.critical_path,
        "projectEndHours": analysis.project_end,
        "float": analysis.total_float,
    }


@router.post("/ready")
async def ready(request: TaskListRequest) -> Dict[str, Any]:
    """Tasks that are todo and have every dependency done."""
    tasks = build_tasks(request.tasks)
    return {"tasks": [t.to_dict() for t in get_ready_tasks(tasks)]}


@router.post("/blocked")
async def blocked(request: TaskListRequest) -> Dict[str, Any]:
    """Tasks that are not done and wait on at least one unfinished dependency."""
    tasks = build_tasks(request.tasks)
    return {"tasks": [t.to_dict() for t in detect_blocked_tasks(tasks)]}
