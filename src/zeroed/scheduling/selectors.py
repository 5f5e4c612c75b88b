from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Any, Mapping, Protocol

from zeroed.scheduling.errors import OracleUnavailable
from zeroed.scheduling.interval import format_hhmm, parse_hhmm
from zeroed.scheduling.models import (
    CandidateMap,
    ScheduledSlot,
    SchedulingPreferences,
    SlotSource,
    TaskToSchedule,
)
from zeroed.scheduling.oracle import DecisionOracle, OracleDecision, OracleRequest

logger = logging.getLogger(__name__)

FALLBACK_REASONING = "Scheduled to first available slot"


class SlotSelector(Protocol):
    def select(
        self,
        task: TaskToSchedule,
        candidates: CandidateMap,
        preferences: SchedulingPreferences,
        day_load: Mapping[date, int] | None = None,
    ) -> ScheduledSlot | None: ...


class FallbackSelector:
    """Earliest candidate date, then the earliest gap start on it."""

    def select(
        self,
        task: TaskToSchedule,
        candidates: CandidateMap,
        preferences: SchedulingPreferences,
        day_load: Mapping[date, int] | None = None,
    ) -> ScheduledSlot | None:
        if not candidates:
            return None
        day = min(candidates)
        gap = min(candidates[day], key=lambda candidate: candidate.start)
        return ScheduledSlot(
            task_id=task.id,
            date=day,
            time=format_hhmm(gap.start),
            reasoning=FALLBACK_REASONING,
            source=SlotSource.FALLBACK,
        )


class OracleSelector:
    """Delegate the choice to a decision oracle and verify its answer.

    The oracle is called once per task and waited on for at most
    `timeout_seconds`. Failures of any kind surface as `OracleUnavailable`.
    """

    def __init__(self, oracle: DecisionOracle, timeout_seconds: float = 20.0) -> None:
        self._oracle = oracle
        self._timeout_seconds = timeout_seconds

    def select(
        self,
        task: TaskToSchedule,
        candidates: CandidateMap,
        preferences: SchedulingPreferences,
        day_load: Mapping[date, int] | None = None,
    ) -> ScheduledSlot | None:
        if not candidates:
            return None

        request = OracleRequest.build(task, candidates, preferences, day_load)
        decision = self._call_oracle(request)
        day, start = validate_decision(decision, task, candidates)
        return ScheduledSlot(
            task_id=task.id,
            date=day,
            time=format_hhmm(start),
            reasoning=decision.reasoning.strip() or "Chosen by scheduling assistant",
            source=SlotSource.ORACLE,
        )

    def _call_oracle(self, request: OracleRequest) -> OracleDecision:
        # A hung oracle must not hold the batch or the process, so the worker is a
        # daemon thread that is abandoned on timeout.
        outcome: dict[str, Any] = {}
        done = threading.Event()

        def run() -> None:
            try:
                outcome["decision"] = self._oracle.decide(request)
            except Exception as exc:
                outcome["error"] = exc
            finally:
                done.set()

        threading.Thread(target=run, name="zeroed-oracle", daemon=True).start()
        if not done.wait(self._timeout_seconds):
            raise OracleUnavailable(f"Oracle did not answer within {self._timeout_seconds:g}s")

        error = outcome.get("error")
        if isinstance(error, OracleUnavailable):
            raise error
        if error is not None:
            raise OracleUnavailable(f"Oracle call failed: {error}") from error
        return outcome["decision"]


def validate_decision(
    decision: OracleDecision,
    task: TaskToSchedule,
    candidates: CandidateMap,
) -> tuple[date, int]:
    """Return `(date, start_minute)` when the task fits one exact candidate gap."""
    try:
        day = date.fromisoformat(decision.date.strip())
        start = parse_hhmm(decision.time)
    except (AttributeError, ValueError) as exc:
        raise OracleUnavailable(
            f"Oracle returned a malformed slot {decision.date!r} {decision.time!r}"
        ) from exc

    gaps = candidates.get(day)
    if not gaps:
        raise OracleUnavailable(f"Oracle picked {day.isoformat()}, which is not a candidate date")

    minutes = task.estimated_minutes or 0
    if not any(gap.fits(start, minutes) for gap in gaps):
        raise OracleUnavailable(
            f"Oracle picked {day.isoformat()} {decision.time}, outside every candidate gap"
        )
    return day, start


class FallbackChain:
    """Try the primary selector and fall back when the oracle is unavailable."""

    def __init__(self, primary: SlotSelector, fallback: SlotSelector | None = None) -> None:
        self._primary = primary
        self._fallback = fallback or FallbackSelector()

    def select(
        self,
        task: TaskToSchedule,
        candidates: CandidateMap,
        preferences: SchedulingPreferences,
        day_load: Mapping[date, int] | None = None,
    ) -> ScheduledSlot | None:
        if not candidates:
            return None
        try:
            return self._primary.select(task, candidates, preferences, day_load)
        except OracleUnavailable as exc:
            logger.warning("Task %s: %s; using fallback slot", task.id, exc)
            return self._fallback.select(task, candidates, preferences, day_load)
