from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterator, Mapping, Sequence

from zeroed.scheduling.free_time import find_free_gaps
from zeroed.scheduling.models import (
    CandidateMap,
    CommittedEvent,
    SchedulingPreferences,
    TaskToSchedule,
)

logger = logging.getLogger(__name__)

SAFETY_HORIZON_DAYS = 14
DEFAULT_LOOKAHEAD_DAYS = 7


def horizon_dates(task: TaskToSchedule, today: date) -> Iterator[date]:
    """Yield the dates a task may be placed on, starting at `today`.

    A due date is exclusive. Without one the scan runs through
    `today + DEFAULT_LOOKAHEAD_DAYS`. Never more than `SAFETY_HORIZON_DAYS` days.
    """
    safety_end = today + timedelta(days=SAFETY_HORIZON_DAYS)
    if task.due_date is not None:
        end = min(safety_end, task.due_date)
    else:
        end = min(safety_end, today + timedelta(days=DEFAULT_LOOKAHEAD_DAYS + 1))

    current = today
    while current < end:
        yield current
        current += timedelta(days=1)


def collect_candidates(
    task: TaskToSchedule,
    events_by_date: Mapping[date, Sequence[CommittedEvent]],
    preferences: SchedulingPreferences,
    today: date,
    now_minute: int | None = None,
) -> CandidateMap:
    """Collect, per day of the horizon, the free gaps long enough for `task`.

    Days with no fitting gap are left out; an empty map means nothing fits.
    With `now_minute`, gaps on `today` start no earlier than that minute.
    """
    minutes = task.estimated_minutes or 0
    candidates: CandidateMap = {}

    for day in horizon_dates(task, today):
        work_start = preferences.work_start_minute
        if day == today and now_minute is not None:
            work_start = max(work_start, now_minute)
        busy = [event.to_interval() for event in events_by_date.get(day, ())]
        gaps = find_free_gaps(
            busy,
            work_start,
            preferences.work_end_minute,
            preferences.buffer_minutes,
        )
        fitting = [gap for gap in gaps if gap.duration_minutes >= minutes]
        if fitting:
            candidates[day] = fitting

    logger.debug(
        "Task %s: %d candidate day(s), %d gap(s)",
        task.id,
        len(candidates),
        sum(len(gaps) for gaps in candidates.values()),
    )
    return candidates
