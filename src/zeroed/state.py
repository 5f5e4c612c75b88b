from datetime import date
from pathlib import Path
from typing import Any, TypedDict

from zeroed.scheduling.models import BatchResult, SchedulingPreferences
from zeroed.services.request_io import ScheduleRequest


class AutoScheduleState(TypedDict, total=False):
    # Inputs
    request_path: Path
    config_dir: Path | None
    preference_overrides: dict[str, Any]
    today: date
    now_minute: int | None

    # Processed data
    request: ScheduleRequest
    preferences: SchedulingPreferences
    result: BatchResult
