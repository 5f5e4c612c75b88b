import threading
from datetime import timedelta

import pytest
from conftest import make_task

from zeroed.scheduling.errors import OracleUnavailable
from zeroed.scheduling.models import FreeGap, SlotSource
from zeroed.scheduling.oracle import OracleDecision, OracleRequest, build_prompt
from zeroed.scheduling.selectors import (
    FALLBACK_REASONING,
    FallbackChain,
    FallbackSelector,
    OracleSelector,
    validate_decision,
)


class FakeOracle:
    def __init__(self, decision=None, error=None):
        self.decision = decision
        self.error = error
        self.requests = []

    def decide(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.decision


class HangingOracle:
    def __init__(self):
        self.release = threading.Event()
        self.calls = 0
        self.daemon_workers = []
        self.started = threading.Event()

    def decide(self, request):
        self.calls += 1
        self.daemon_workers.append(threading.current_thread().daemon)
        self.started.set()
        self.release.wait(5)
        return OracleDecision(date="2000-01-01", time="09:00", reasoning="too late")


def chain(oracle, timeout=1.0):
    return FallbackChain(OracleSelector(oracle, timeout_seconds=timeout), FallbackSelector())


@pytest.fixture
def candidates(today):
    return {today: [FreeGap(540, 570), FreeGap(840, 900)]}


def test_fallback_picks_earliest_date_then_earliest_gap(today, prefs):
    later = today + timedelta(days=2)
    candidates = {
        later: [FreeGap(540, 600)],
        today + timedelta(days=1): [FreeGap(900, 960), FreeGap(600, 700)],
    }
    task = make_task("a", minutes=30)

    first = FallbackSelector().select(task, candidates, prefs)
    second = FallbackSelector().select(task, dict(reversed(list(candidates.items()))), prefs)

    assert first == second
    assert first.date == today + timedelta(days=1)
    assert first.time == "10:00"
    assert first.reasoning == FALLBACK_REASONING
    assert first.source is SlotSource.FALLBACK


def test_oracle_timeout_falls_back_to_earliest_gap(today, prefs, candidates):
    oracle = HangingOracle()
    try:
        slot = chain(oracle, timeout=0.05).select(make_task("a", minutes=30), candidates, prefs)
    finally:
        oracle.release.set()

    assert oracle.calls == 1
    assert slot.date == today
    assert slot.time == "09:00"
    assert slot.source is SlotSource.FALLBACK


def test_abandoned_oracle_worker_does_not_block_exit(prefs, candidates):
    oracle = HangingOracle()
    try:
        with pytest.raises(OracleUnavailable, match="did not answer"):
            OracleSelector(oracle, timeout_seconds=0.05).select(
                make_task("a", minutes=30), candidates, prefs
            )
    finally:
        oracle.release.set()

    assert oracle.started.wait(1)
    assert oracle.daemon_workers == [True]


def test_valid_oracle_choice_is_accepted(today, prefs, candidates):
    oracle = FakeOracle(
        OracleDecision(date=today.isoformat(), time="14:15", reasoning="Afternoon focus block")
    )

    slot = chain(oracle).select(make_task("a", minutes=30), candidates, prefs)

    assert slot.date == today
    assert slot.time == "14:15"
    assert slot.reasoning == "Afternoon focus block"
    assert slot.source is SlotSource.ORACLE
    assert len(oracle.requests) == 1


@pytest.mark.parametrize(
    "day_offset, time",
    [
        (0, "14:45"),  # runs past the end of the gap
        (0, "12:00"),  # between gaps
        (1, "09:00"),  # not a candidate date
        (0, "2pm"),
    ],
)
def test_invalid_oracle_choice_falls_back(today, prefs, candidates, day_offset, time):
    day = today + timedelta(days=day_offset)
    oracle = FakeOracle(OracleDecision(date=day.isoformat(), time=time, reasoning="trust me"))

    slot = chain(oracle).select(make_task("a", minutes=30), candidates, prefs)

    assert (slot.date, slot.time, slot.source) == (today, "09:00", SlotSource.FALLBACK)


def test_malformed_date_is_rejected(today, candidates):
    decision = OracleDecision(date="next monday", time="09:00", reasoning="")

    with pytest.raises(OracleUnavailable):
        validate_decision(decision, make_task("a", minutes=30), candidates)


def test_validate_returns_date_and_minute(today, candidates):
    decision = OracleDecision(date=today.isoformat(), time="14:00", reasoning="")

    assert validate_decision(decision, make_task("a", minutes=60), candidates) == (today, 840)


def test_oracle_error_falls_back(today, prefs, candidates):
    oracle = FakeOracle(error=ConnectionError("network down"))

    slot = chain(oracle).select(make_task("a", minutes=30), candidates, prefs)

    assert len(oracle.requests) == 1
    assert slot.time == "09:00"


def test_oracle_selector_alone_raises_unavailable(prefs, candidates):
    selector = OracleSelector(FakeOracle(error=ValueError("bad json")))

    with pytest.raises(OracleUnavailable):
        selector.select(make_task("a", minutes=30), candidates, prefs)


def test_empty_candidates_never_reach_the_oracle(prefs):
    oracle = FakeOracle(error=AssertionError("should not be called"))

    assert chain(oracle).select(make_task("a"), {}, prefs) is None
    assert OracleSelector(oracle).select(make_task("a"), {}, prefs) is None
    assert FallbackSelector().select(make_task("a"), {}, prefs) is None
    assert oracle.requests == []


def test_oracle_request_carries_task_candidates_and_load(today, prefs, candidates):
    task = make_task("a", minutes=30, priority="urgent", due=today + timedelta(days=1))
    oracle = FakeOracle(OracleDecision(date=today.isoformat(), time="09:00", reasoning="Early"))

    chain(oracle).select(task, candidates, prefs, {today: 90, today + timedelta(days=5): 30})

    request = oracle.requests[0]
    assert isinstance(request, OracleRequest)
    assert request.task.duration_minutes == 30
    assert request.task.priority == "urgent"
    assert request.task.due_date == today + timedelta(days=1)
    assert [gap.start for gap in request.candidates[today]] == ["09:00", "14:00"]
    assert request.candidates[today][1].available_minutes == 60
    assert request.day_load == {today: 90}


def test_prompt_lists_every_candidate_gap(today, prefs, candidates):
    request = OracleRequest.build(make_task("a", minutes=30), candidates, prefs)

    prompt = build_prompt(request)

    assert today.isoformat() in prompt
    assert "09:00 to 09:30 (30 min available)" in prompt
    assert "14:00 to 15:00 (60 min available)" in prompt
    assert "No deadline" in prompt
