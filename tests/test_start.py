import json
from datetime import timedelta

import pytest

from zeroed.scheduling.batch import BatchScheduler
from zeroed.scheduling.errors import InvalidScheduleRequest
from zeroed.scheduling.models import ErrorKind, SchedulingPreferences
from zeroed.services.config import AppConfig, write_config
from zeroed.start import create_scheduling_agent


def write_request(tmp_path, today, preferences=None):
    payload = {
        "tasks": [
            {"id": "report", "title": "Write report", "estimated_minutes": 60, "priority": "urgent"},
            {"id": "email", "title": "Answer email", "estimated_minutes": 30, "priority": "low"},
            {"id": "broken", "estimated_minutes": 30},
        ],
        "events": {
            today.isoformat(): [{"start_time": "13:00", "end_time": "14:00", "title": "Lunch with Ana"}],
            (today + timedelta(days=1)).isoformat(): [],
        },
    }
    if preferences is not None:
        payload["preferences"] = preferences
    path = tmp_path / "request.json"
    path.write_text(json.dumps(payload))
    return path


def run(tmp_path, today, request_path, overrides=None):
    agent = create_scheduling_agent(BatchScheduler(), present=False)
    return agent.invoke(
        {
            "request_path": request_path,
            "config_dir": tmp_path,
            "preference_overrides": overrides or {},
            "today": today,
            "now_minute": None,
        }
    )


def test_pipeline_schedules_and_reports_parse_errors(tmp_path, today):
    state = run(tmp_path, today, write_request(tmp_path, today))

    result = state["result"]
    assert [slot.task_id for slot in result.scheduled] == ["report", "email"]
    assert result.slot_for("report").time == "09:00"
    assert result.slot_for("email").time == "10:15"
    assert [(error.task_id, error.kind) for error in result.errors] == [
        ("broken", ErrorKind.INVALID_TASK)
    ]
    assert state["preferences"] == SchedulingPreferences()


def test_preference_precedence(tmp_path, today):
    write_config(AppConfig(preferences=SchedulingPreferences(work_hours_start=8, buffer_minutes=0)), tmp_path)

    from_config = run(tmp_path, today, write_request(tmp_path, today))
    assert from_config["result"].slot_for("report").time == "08:00"

    request_path = write_request(tmp_path, today, preferences={"work_hours_start": 10})
    from_request = run(tmp_path, today, request_path)
    assert from_request["result"].slot_for("report").time == "10:00"
    assert from_request["preferences"].buffer_minutes == 0

    from_flags = run(tmp_path, today, request_path, overrides={"work_hours_start": 11})
    assert from_flags["result"].slot_for("report").time == "11:00"


def test_inverted_hours_abort_the_pipeline(tmp_path, today):
    request_path = write_request(tmp_path, today, preferences={"work_hours_start": 18, "work_hours_end": 9})

    with pytest.raises(InvalidScheduleRequest):
        run(tmp_path, today, request_path)
