from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    today: Optional[date] = Field(None, description="Reference date, defaults to the server date")


# --- Tasks ---

class TaskListRequest(RequestBase):
    tasks: List[Dict[str, Any]] = Field(default_factory=list, description="Raw task records")


# --- Schedule ---

class ScheduleRequest(TaskListRequest):
    team_members: List[str] = Field(default_factory=list)
    apply: bool = Field(False, description="Also return the tasks with the schedule merged in")


# --- Planning ---

class BreakdownRequest(RequestBase):
    phases: List[Dict[str, Any]] = Field(default_factory=list)
    team_members: List[str] = Field(default_factory=list)
    schedule: bool = True


class AlertsRequest(TaskListRequest):
    milestones: List[Dict[str, Any]] = Field(default_factory=list)
    seen: List[Tuple[str, str]] = Field(default_factory=list, description="Alert keys already delivered")
