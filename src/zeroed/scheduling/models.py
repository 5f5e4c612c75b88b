from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from zeroed.scheduling.errors import (
    InvalidTask,
    NoAvailableSlot,
    PersistenceFailure,
    SchedulingError,
)
from zeroed.scheduling.interval import Interval, format_hhmm, parse_hhmm


class Priority(StrEnum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.NORMAL: 2,
    Priority.LOW: 3,
}


class TaskToSchedule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(description="Identifier of the task in the task store.")
    title: str = Field(description="Task title, used for the synthesized busy event.")
    estimated_minutes: int | None = Field(
        default=None,
        description="Estimated duration. Missing or non-positive values are rejected per task.",
    )
    due_date: date | None = Field(
        default=None,
        description="Deadline; the task must be placed strictly before this date.",
    )
    priority: Priority = Priority.NORMAL

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        if value is None or not str(value).strip():
            raise ValueError("id must be a non-empty string")
        return str(value).strip()

    @field_validator("title")
    @classmethod
    def _validate_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must be a non-empty string")
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def _blank_due_date(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CommittedEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    start_time: str = Field(description="Start in HH:MM 24-hour format.")
    end_time: str = Field(description="End in HH:MM 24-hour format.")
    title: str = ""
    is_task: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def _validate_time(cls, value: str) -> str:
        return format_hhmm(parse_hhmm(value))

    @model_validator(mode="after")
    def _validate_order(self) -> CommittedEvent:
        if parse_hhmm(self.end_time) < parse_hhmm(self.start_time):
            raise ValueError(
                f"end_time {self.end_time} is before start_time {self.start_time}; "
                "split overnight events at midnight"
            )
        return self

    def to_interval(self) -> Interval:
        return Interval.from_hhmm(self.start_time, self.end_time)


EventsByDate = dict[date, list[CommittedEvent]]


class SchedulingPreferences(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    work_hours_start: int = Field(default=9, ge=0, le=24)
    work_hours_end: int = Field(default=18, ge=0, le=24)
    buffer_minutes: int = Field(default=15, ge=0)
    max_hours_per_day: float = Field(default=6, gt=0)
    prefer_morning_for_hard: bool = True

    @property
    def work_start_minute(self) -> int:
        return self.work_hours_start * 60

    @property
    def work_end_minute(self) -> int:
        return self.work_hours_end * 60

    def with_overrides(self, **overrides: Any) -> SchedulingPreferences:
        values = self.model_dump()
        values.update({key: value for key, value in overrides.items() if value is not None})
        return SchedulingPreferences.model_validate(values)


@dataclass(frozen=True)
class FreeGap:
    start: int
    end: int

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)

    def fits(self, start: int, minutes: int) -> bool:
        return self.interval.contains(Interval(start, start + minutes))

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": format_hhmm(self.start),
            "end": format_hhmm(self.end),
            "available_minutes": self.duration_minutes,
        }


CandidateMap = dict[date, list[FreeGap]]


class SlotSource(StrEnum):
    ORACLE = "oracle"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ScheduledSlot:
    task_id: str
    date: date
    time: str
    reasoning: str
    source: SlotSource = SlotSource.FALLBACK

    @property
    def start_minute(self) -> int:
        return parse_hhmm(self.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "date": self.date.isoformat(),
            "time": self.time,
            "reasoning": self.reasoning,
            "source": self.source.value,
        }


class ErrorKind(StrEnum):
    INVALID_TASK = "invalid_task"
    NO_AVAILABLE_SLOT = "no_available_slot"
    PERSISTENCE_FAILURE = "persistence_failure"


_ERROR_KINDS: dict[type[SchedulingError], ErrorKind] = {
    InvalidTask: ErrorKind.INVALID_TASK,
    NoAvailableSlot: ErrorKind.NO_AVAILABLE_SLOT,
    PersistenceFailure: ErrorKind.PERSISTENCE_FAILURE,
}


@dataclass(frozen=True)
class ScheduleError:
    task_id: str
    kind: ErrorKind
    message: str

    @staticmethod
    def from_exception(task_id: str, exc: SchedulingError) -> ScheduleError:
        kind = _ERROR_KINDS.get(type(exc))
        if kind is None:
            raise TypeError(f"{type(exc).__name__} is not a per-task error") from exc
        return ScheduleError(task_id=task_id, kind=kind, message=str(exc))

    def to_dict(self) -> dict[str, Any]:
        return {"task_id": self.task_id, "kind": self.kind.value, "error": self.message}


@dataclass
class BatchResult:
    scheduled: list[ScheduledSlot] = field(default_factory=list)
    errors: list[ScheduleError] = field(default_factory=list)
    cancelled: bool = False
    unprocessed: list[str] = field(default_factory=list)

    def slot_for(self, task_id: str) -> ScheduledSlot | None:
        for slot in self.scheduled:
            if slot.task_id == task_id:
                return slot
        return None

    def error_for(self, task_id: str) -> ScheduleError | None:
        for error in self.errors:
            if error.task_id == task_id:
                return error
        return None

    def summary(self) -> str:
        count = len(self.scheduled)
        message = f"Scheduled {count} task{'' if count == 1 else 's'}"
        if self.errors:
            message += f", {len(self.errors)} failed"
        if self.cancelled:
            message += f", {len(self.unprocessed)} not processed (cancelled)"
        return message

    def to_dict(self) -> dict[str, Any]:
        return {
            "scheduled": [slot.to_dict() for slot in self.scheduled],
            "errors": [error.to_dict() for error in self.errors],
            "cancelled": self.cancelled,
            "unprocessed": list(self.unprocessed),
            "message": self.summary(),
        }
