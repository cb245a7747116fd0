"""
Schedule API endpoint.

Endpoints:
- POST /schedule - Resource-leveled schedule for a team
"""

from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from taskflow.platform.logging import get_logger
from taskflow.schedulers import ScheduleOptimizer

from ..dependencies import build_tasks
from ..schemas import ScheduleRequest

logger = get_logger(__name__)
router = APIRouter()


@router.post("")
async def schedule(request: ScheduleRequest) -> Dict[str, Any]:
    """
    Build a schedule for the team.

    Returns:
        The ScheduleResult, plus the scheduled tasks when ``apply`` is set
    """
    tasks = build_tasks(request.tasks)
    optimizer = ScheduleOptimizer(today=request.today)
    try:
        result = optimizer.optimize_schedule(tasks, request.team_members)
    except Exception as e:
        logger.error("Failed to build schedule", error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to build schedule: {str(e)}")

    logger.info(
        "schedule_requested",
        tasks=len(tasks),
        team=len(request.team_members),
        project_days=result.critical_path_length,
    )

    response: Dict[str, Any] = {"schedule": result.to_dict()}
    if request.apply:
        response["tasks"] = [t.to_dict() for t in optimizer.apply_schedule(tasks, result)]
    return response
