from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

from zeroed.scheduling.errors import PersistenceFailure
from zeroed.scheduling.models import ScheduledSlot


class SlotSink(Protocol):
    def write(self, slot: ScheduledSlot) -> None: ...


class JsonFileSlotSink:
    """Store `(task_id, date, time)` per task in a JSON file.

    Writing a task that is already present replaces its previous slot.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write(self, slot: ScheduledSlot) -> None:
        records = self.read()
        records[slot.task_id] = {"date": slot.date.isoformat(), "time": slot.time}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(records, indent=2, ensure_ascii=False))
        except OSError as exc:
            raise PersistenceFailure(f"Could not store slot for task {slot.task_id}: {exc}") from exc

    def read(self) -> dict[str, dict[str, Any]]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceFailure(f"Slot store {self._path} is unreadable") from exc
        if not isinstance(data, dict):
            raise PersistenceFailure(f"Slot store {self._path} is not a JSON object")
        return data
