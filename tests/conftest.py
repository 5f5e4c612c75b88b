from datetime import date

import pytest

from zeroed.scheduling.models import CommittedEvent, SchedulingPreferences, TaskToSchedule


@pytest.fixture
def today() -> date:
    return date(2026, 10, 19)


@pytest.fixture
def prefs() -> SchedulingPreferences:
    return SchedulingPreferences(work_hours_start=9, work_hours_end=18, buffer_minutes=15)


def make_task(task_id: str, minutes: int | None = 60, priority: str = "normal", due=None) -> TaskToSchedule:
    return TaskToSchedule(
        id=task_id,
        title=f"Task {task_id}",
        estimated_minutes=minutes,
        priority=priority,
        due_date=due,
    )


def make_event(start: str, end: str, title: str = "Meeting", is_task: bool = False) -> CommittedEvent:
    return CommittedEvent(start_time=start, end_time=end, title=title, is_task=is_task)
