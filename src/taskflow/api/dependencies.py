"""
Shared request helpers for the API routers.
"""

from typing import Any, Dict, List

from fastapi import HTTPException
from pydantic import ValidationError

from taskflow.exceptions import InvalidTaskError
from taskflow.models import Milestone, Task
from taskflow.tasks import create_task


def build_tasks(raw_tasks: List[Dict[str, Any]]) -> List[Task]:
    """Run raw task records through the task factory, 422 on bad input."""
    tasks = []
    errors = []
    for index, item in enumerate(raw_tasks):
        try:
            tasks.append(create_task(item))
        except (InvalidTaskError, ValidationError) as e:
            errors.append({"index": index, "error": str(e)})
    if errors:
        raise HTTPException(
            status_code=422,
            detail={"validation_errors": errors},
        )
    return tasks


def build_milestones(raw_milestones: List[Dict[str, Any]]) -> List[Milestone]:
    """Validate raw milestone records, 422 on bad input."""
    try:
        return [Milestone.model_validate(item) for item in raw_milestones]
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "validation_errors": [
                    {"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()
                ]
            },
        )
