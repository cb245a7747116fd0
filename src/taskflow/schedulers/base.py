"""
Base Scheduler class for the planning engine.

Provides the shared clock, settings, logging and date helpers. Schedulers
are pure computations over an in-memory snapshot of tasks: they never
perform I/O and hold no state between calls besides their configuration.
"""

import math
from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Optional

from taskflow.models import Task
from taskflow.platform.config import Settings, settings as default_settings
from taskflow.platform.logging import get_logger


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def dependent_counts(tasks: Iterable[Task]) -> Dict[str, int]:
    """
    Count, for every task id, how many other tasks depend on it.

    Only ids present in ``tasks`` are counted.
    """
    tasks = list(tasks)
    counts = {t.id: 0 for t in tasks}
    for t in tasks:
        for dep in t.dependencies:
            if dep in counts and dep != t.id:
                counts[dep] += 1
    return counts


class SchedulerBase(ABC):
    """
    Base class for all planning schedulers.

    Provides:
    - Settings access (hours per day, thresholds)
    - An injectable "today" so results are reproducible
    - Common date utilities
    - Structured logging
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        today: Optional[date] = None,
    ):
        """
        Initialize the scheduler.

        Args:
            settings: Engine settings, defaults to the application settings
            today: Fixed reference date; the system date is used when omitted
        """
        self.settings = settings or default_settings
        self._today = today
        self.logger = get_logger(self.__class__.__name__)

    def today(self) -> date:
        """Get the reference date."""
        return self._today or date.today()

    def days_until(self, target: Optional[date], today: Optional[date] = None) -> Optional[int]:
        """Calendar days from today to a target date (negative when past)."""
        if target is None:
            return None
        return (target - (today or self.today())).days

    def offset_date(self, days: int, today: Optional[date] = None) -> str:
        """ISO date ``days`` after today."""
        return ((today or self.today()) + timedelta(days=days)).isoformat()

    @abstractmethod
    def run(self, *args, **kwargs) -> Any:
        """
        Main entry point for the scheduler.

        Must be implemented by subclasses.
        """
        pass
