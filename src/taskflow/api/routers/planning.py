"""
Planning API endpoints.

Endpoints:
- POST /breakdown - Tasks and milestones from a generated phase breakdown
- POST /alerts - Overdue, deadline, critical-path and milestone alerts
"""

from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from taskflow.alerts import check_deadline_reminders, check_milestone_alerts, check_task_alerts
from taskflow.breakdown import ingest_breakdown, plan_breakdown
from taskflow.platform.logging import get_logger

from ..dependencies import build_milestones, build_tasks
from ..schemas import AlertsRequest, BreakdownRequest

logger = get_logger(__name__)
router = APIRouter()


@router.post("/breakdown")
async def breakdown(request: BreakdownRequest) -> Dict[str, Any]:
    """
    Turn a generated phase breakdown into tasks and milestones.

    When ``schedule`` is set the tasks are also ranked and scheduled.
    """
    try:
        if request.schedule:
            result = plan_breakdown(request.phases, request.team_members, today=request.today)
        else:
            result = ingest_breakdown(request.phases, request.team_members)
    except Exception as e:
        logger.error("Failed to process breakdown", phases=len(request.phases), error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to process breakdown: {str(e)}")

    return {
        "tasks": [t.to_dict() for t in result.tasks],
        "milestones": [m.to_dict() for m in result.milestones],
        "schedule": result.schedule.to_dict() if result.schedule else None,
        "skipped": result.skipped,
    }


@router.post("/alerts")
async def alerts(request: AlertsRequest) -> Dict[str, Any]:
    """
    Alerts not yet delivered.

    The caller sends the keys it already delivered and stores the
    returned ``seen`` list for the next call.
    """
    tasks = build_tasks(request.tasks)
    milestones = build_milestones(request.milestones)

    seen = frozenset(tuple(k) for k in request.seen)
    task_check = check_task_alerts(tasks, today=request.today, seen=seen)
    reminder_check = check_deadline_reminders(tasks, today=request.today, seen=task_check.seen)
    milestone_check = check_milestone_alerts(milestones, today=request.today, seen=reminder_check.seen)

    found = task_check.alerts + reminder_check.alerts + milestone_check.alerts
    logger.debug("alerts_checked", new=len(found))

    return {
        "alerts": [a.to_dict() for a in found],
        "seen": sorted(list(k) for k in milestone_check.seen),
    }
