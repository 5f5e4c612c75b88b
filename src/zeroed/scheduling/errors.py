from __future__ import annotations


class SchedulingError(RuntimeError):
    """Base class for scheduling engine errors."""


class InvalidTask(SchedulingError):
    """Raised when a task cannot enter the search (bad duration or past due date)."""

    def __init__(self, task_id: str, reason: str) -> None:
        super().__init__(reason)
        self.task_id = task_id


class NoAvailableSlot(SchedulingError):
    """Raised when the horizon holds no gap large enough for a task."""

    def __init__(self, task_id: str) -> None:
        super().__init__("No available slots found")
        self.task_id = task_id


class OracleUnavailable(SchedulingError):
    """Raised when the decision oracle fails, times out or answers with an invalid slot."""


class PersistenceFailure(SchedulingError):
    """Raised when an accepted slot cannot be written to the persistence sink."""


class InvalidScheduleRequest(SchedulingError):
    """Raised when the whole request is structurally invalid."""
