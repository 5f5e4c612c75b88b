import json
from datetime import date

import pytest

from zeroed.scheduling.models import ErrorKind, Priority
from zeroed.services.request_io import RequestFileError, load_request, parse_request


def test_parse_request_collects_bad_tasks():
    request = parse_request(
        {
            "tasks": [
                {"id": "t1", "title": "Write report", "estimated_minutes": 90, "priority": "high"},
                {"id": "t2", "estimated_minutes": 30},
                {"title": "No id"},
                "not a task",
                {"id": 7, "title": "Numeric id", "due_date": "2026-10-21", "estimated_minutes": 15},
            ],
            "events": {"2026-10-19": [{"start_time": "10:00", "end_time": "11:00", "title": "Standup"}]},
        }
    )

    assert [task.id for task in request.tasks] == ["t1", "7"]
    assert request.tasks[0].priority is Priority.HIGH
    assert request.tasks[1].due_date == date(2026, 10, 21)
    assert [(error.task_id, error.kind) for error in request.task_errors] == [
        ("t2", ErrorKind.INVALID_TASK),
        ("#3", ErrorKind.INVALID_TASK),
        ("#4", ErrorKind.INVALID_TASK),
    ]
    assert "title" in request.task_errors[0].message
    assert request.events[date(2026, 10, 19)][0].title == "Standup"
    assert request.preference_overrides == {}


def test_task_without_duration_parses_and_is_rejected_later():
    request = parse_request({"tasks": [{"id": "t1", "title": "Someday"}]})

    assert request.tasks[0].estimated_minutes is None
    assert request.task_errors == []


def test_invalid_event_time_is_a_request_error():
    with pytest.raises(RequestFileError):
        parse_request(
            {"tasks": [], "events": {"2026-10-19": [{"start_time": "25:00", "end_time": "26:00"}]}}
        )


def test_event_ending_before_it_starts_is_a_request_error():
    with pytest.raises(RequestFileError, match="before start_time 23:00"):
        parse_request(
            {"tasks": [], "events": {"2026-10-19": [{"start_time": "23:00", "end_time": "01:00"}]}}
        )


def test_zero_length_event_is_accepted():
    request = parse_request(
        {"tasks": [], "events": {"2026-10-19": [{"start_time": "12:00", "end_time": "12:00"}]}}
    )

    assert request.events[date(2026, 10, 19)][0].to_interval().duration == 0


def test_invalid_event_date_is_a_request_error():
    with pytest.raises(RequestFileError):
        parse_request({"tasks": [], "events": {"tomorrow": []}})


def test_unknown_preference_is_a_request_error():
    with pytest.raises(RequestFileError):
        parse_request({"tasks": [], "preferences": {"lunch_break": True}})


def test_missing_tasks_list_is_a_request_error():
    with pytest.raises(RequestFileError):
        parse_request({"events": {}})


def test_load_request_from_file(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(
        json.dumps(
            {
                "tasks": [{"id": "t1", "title": "Plan", "estimated_minutes": 30}],
                "preferences": {"buffer_minutes": 5},
            }
        )
    )

    request = load_request(path)

    assert request.preference_overrides == {"buffer_minutes": 5}
    assert request.events == {}


def test_load_request_reports_missing_and_broken_files(tmp_path):
    with pytest.raises(RequestFileError):
        load_request(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(RequestFileError):
        load_request(broken)
