from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Iterable, Mapping, Sequence

from zeroed.scheduling.errors import (
    InvalidScheduleRequest,
    InvalidTask,
    NoAvailableSlot,
    PersistenceFailure,
)
from zeroed.scheduling.interval import format_hhmm
from zeroed.scheduling.lookahead import collect_candidates
from zeroed.scheduling.models import (
    BatchResult,
    CommittedEvent,
    EventsByDate,
    ScheduledSlot,
    ScheduleError,
    SchedulingPreferences,
    TaskToSchedule,
)
from zeroed.scheduling.oracle import DecisionOracle
from zeroed.scheduling.persistence import SlotSink
from zeroed.scheduling.selectors import FallbackChain, FallbackSelector, OracleSelector, SlotSelector

logger = logging.getLogger(__name__)


def task_sort_key(task: TaskToSchedule) -> tuple[int, int, date]:
    has_no_due = 0 if task.due_date is not None else 1
    return (task.priority.rank, has_no_due, task.due_date or date.max)


def order_tasks(tasks: Iterable[TaskToSchedule]) -> list[TaskToSchedule]:
    """Most urgent first; within a priority, earliest due date first, undated last."""
    return sorted(tasks, key=task_sort_key)


def validate_task(task: TaskToSchedule, today: date) -> None:
    if task.estimated_minutes is None or task.estimated_minutes <= 0:
        raise InvalidTask(task.id, "Estimated duration must be a positive number of minutes")
    if task.due_date is not None and task.due_date < today:
        raise InvalidTask(task.id, f"Due date {task.due_date.isoformat()} is already in the past")


def validate_preferences(preferences: SchedulingPreferences) -> None:
    if preferences.work_hours_start >= preferences.work_hours_end:
        raise InvalidScheduleRequest(
            f"Work hours start ({preferences.work_hours_start}) must be before "
            f"work hours end ({preferences.work_hours_end})"
        )


class EventBook:
    """Busy events of one batch, grown as tasks get scheduled.

    Holds its own copy of the caller's events; nothing outside the batch sees
    the additions.
    """

    def __init__(self, events_by_date: Mapping[date, Sequence[CommittedEvent]] | None = None) -> None:
        self._events: EventsByDate = {
            day: list(events) for day, events in (events_by_date or {}).items()
        }

    def events_by_date(self) -> Mapping[date, Sequence[CommittedEvent]]:
        return self._events

    def task_minutes(self) -> dict[date, int]:
        load: dict[date, int] = {}
        for day, events in self._events.items():
            minutes = sum(event.to_interval().duration for event in events if event.is_task)
            if minutes:
                load[day] = minutes
        return load

    def commit(self, slot: ScheduledSlot, task: TaskToSchedule) -> CommittedEvent:
        end = slot.start_minute + (task.estimated_minutes or 0)
        event = CommittedEvent(
            start_time=slot.time,
            end_time=format_hhmm(end),
            title=task.title,
            is_task=True,
        )
        self._events.setdefault(slot.date, []).append(event)
        return event


class BatchScheduler:
    """Schedule tasks one after another against a shared event book.

    Each accepted slot becomes a busy event before the next task is searched,
    so two tasks of one batch never receive the same time.
    """

    def __init__(self, selector: SlotSelector | None = None, sink: SlotSink | None = None) -> None:
        self._selector = selector or FallbackSelector()
        self._sink = sink

    def schedule_all(
        self,
        tasks: Iterable[TaskToSchedule],
        events_by_date: Mapping[date, Sequence[CommittedEvent]] | None,
        preferences: SchedulingPreferences,
        today: date,
        now_minute: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchResult:
        validate_preferences(preferences)

        ordered = order_tasks(tasks)
        book = EventBook(events_by_date)
        result = BatchResult()

        for index, task in enumerate(ordered):
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                result.unprocessed = [pending.id for pending in ordered[index:]]
                logger.info("Batch cancelled with %d task(s) left", len(result.unprocessed))
                break

            try:
                slot = self._schedule_one(task, book, preferences, today, now_minute)
            except (InvalidTask, NoAvailableSlot, PersistenceFailure) as exc:
                logger.info("Task %s not scheduled: %s", task.id, exc)
                result.errors.append(ScheduleError.from_exception(task.id, exc))
                continue

            result.scheduled.append(slot)
            logger.info(
                "Task %s scheduled on %s at %s (%s)",
                task.id,
                slot.date.isoformat(),
                slot.time,
                slot.source.value,
            )

        return result

    def _schedule_one(
        self,
        task: TaskToSchedule,
        book: EventBook,
        preferences: SchedulingPreferences,
        today: date,
        now_minute: int | None,
    ) -> ScheduledSlot:
        validate_task(task, today)

        candidates = collect_candidates(
            task, book.events_by_date(), preferences, today, now_minute=now_minute
        )
        slot = self._selector.select(task, candidates, preferences, book.task_minutes())
        if slot is None:
            raise NoAvailableSlot(task.id)

        if self._sink is not None:
            self._sink.write(slot)
        book.commit(slot, task)
        return slot


def build_selector(
    oracle: DecisionOracle | None,
    timeout_seconds: float = 20.0,
) -> SlotSelector:
    if oracle is None:
        return FallbackSelector()
    return FallbackChain(OracleSelector(oracle, timeout_seconds), FallbackSelector())


def auto_schedule(
    tasks: Iterable[TaskToSchedule],
    events_by_date: Mapping[date, Sequence[CommittedEvent]] | None = None,
    *,
    preferences: SchedulingPreferences | None = None,
    overrides: Mapping[str, object] | None = None,
    oracle: DecisionOracle | None = None,
    oracle_timeout_seconds: float = 20.0,
    sink: SlotSink | None = None,
    today: date | None = None,
    now_minute: int | None = None,
    cancel_event: threading.Event | None = None,
) -> BatchResult:
    """Schedule these tasks now.

    Without an oracle every task gets the deterministic fallback slot.
    """
    effective = preferences or SchedulingPreferences()
    if overrides:
        effective = effective.with_overrides(**overrides)

    scheduler = BatchScheduler(build_selector(oracle, oracle_timeout_seconds), sink=sink)
    return scheduler.schedule_all(
        tasks,
        events_by_date,
        effective,
        today or date.today(),
        now_minute=now_minute,
        cancel_event=cancel_event,
    )
