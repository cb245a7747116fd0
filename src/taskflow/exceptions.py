"""Exceptions raised at the task construction boundary."""


class TaskflowError(ValueError):
    """Base class for TaskFlow errors."""


class InvalidTaskError(TaskflowError):
    """Raised when external data cannot be turned into a Task."""
