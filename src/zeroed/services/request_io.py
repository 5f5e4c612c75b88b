from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from zeroed.scheduling.models import (
    CommittedEvent,
    ErrorKind,
    EventsByDate,
    ScheduleError,
    SchedulingPreferences,
    TaskToSchedule,
)


class RequestFileError(RuntimeError):
    """Raised when a scheduling request file cannot be read or parsed."""


@dataclass(frozen=True)
class ScheduleRequest:
    tasks: list[TaskToSchedule]
    events: EventsByDate
    preference_overrides: dict[str, Any] = field(default_factory=dict)
    task_errors: list[ScheduleError] = field(default_factory=list)


def load_request(path: Path) -> ScheduleRequest:
    try:
        data = json.loads(path.read_text())
    except FileNotFoundError as exc:
        raise RequestFileError(f"Request file {path} not found") from exc
    except json.JSONDecodeError as exc:
        raise RequestFileError(f"Request file {path} is not valid JSON") from exc

    if not isinstance(data, dict):
        raise RequestFileError("Request must be a JSON object with `tasks` and `events`")
    return parse_request(data)


def parse_request(data: dict[str, Any]) -> ScheduleRequest:
    tasks_raw = data.get("tasks")
    if not isinstance(tasks_raw, list):
        raise RequestFileError("Request is missing a `tasks` list")

    tasks, task_errors = parse_tasks(tasks_raw)
    return ScheduleRequest(
        tasks=tasks,
        events=parse_events(data.get("events")),
        preference_overrides=_parse_overrides(data.get("preferences")),
        task_errors=task_errors,
    )


def parse_tasks(payloads: Iterable[Any]) -> tuple[list[TaskToSchedule], list[ScheduleError]]:
    """Validate task payloads one by one; bad entries become `invalid_task` errors."""
    tasks: list[TaskToSchedule] = []
    errors: list[ScheduleError] = []
    for index, payload in enumerate(payloads):
        task_id = _payload_id(payload, index)
        if not isinstance(payload, dict):
            errors.append(
                ScheduleError(task_id, ErrorKind.INVALID_TASK, "Task entry must be an object")
            )
            continue
        try:
            tasks.append(TaskToSchedule.model_validate(payload))
        except ValidationError as exc:
            errors.append(ScheduleError(task_id, ErrorKind.INVALID_TASK, _first_error(exc)))
    return tasks, errors


def parse_events(data: Any) -> EventsByDate:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RequestFileError("`events` must map YYYY-MM-DD dates to event lists")

    events: EventsByDate = {}
    for key, entries in data.items():
        try:
            day = date.fromisoformat(str(key))
        except ValueError as exc:
            raise RequestFileError(f"Invalid event date `{key}`") from exc
        if not isinstance(entries, list):
            raise RequestFileError(f"Events for {key} must be a list")
        try:
            events[day] = [CommittedEvent.model_validate(entry) for entry in entries]
        except ValidationError as exc:
            raise RequestFileError(f"Invalid event on {key}: {_first_error(exc)}") from exc
    return events


def _parse_overrides(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RequestFileError("`preferences` must be an object")
    unknown = set(data) - set(SchedulingPreferences.model_fields)
    if unknown:
        raise RequestFileError(f"Unknown preference(s): {', '.join(sorted(unknown))}")
    return dict(data)


def _payload_id(payload: Any, index: int) -> str:
    if isinstance(payload, dict) and payload.get("id") not in (None, ""):
        return str(payload["id"])
    return f"#{index + 1}"


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "value"
    return f"{location}: {first.get('msg', 'invalid')}"
