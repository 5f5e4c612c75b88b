from __future__ import annotations

import json
from datetime import date
from typing import Mapping, Protocol

from langchain_openai import ChatOpenAI
from pydantic import BaseModel, Field

from zeroed.scheduling.models import CandidateMap, SchedulingPreferences, TaskToSchedule


class OracleTask(BaseModel):
    title: str
    duration_minutes: int
    priority: str
    due_date: date | None = None


class OracleGap(BaseModel):
    start: str
    end: str
    available_minutes: int


class OracleRequest(BaseModel):
    task: OracleTask
    candidates: dict[date, list[OracleGap]]
    preferences: SchedulingPreferences
    day_load: dict[date, int] = Field(
        default_factory=dict,
        description="Minutes already scheduled per date in this batch.",
    )

    @classmethod
    def build(
        cls,
        task: TaskToSchedule,
        candidates: CandidateMap,
        preferences: SchedulingPreferences,
        day_load: Mapping[date, int] | None = None,
    ) -> OracleRequest:
        return cls(
            task=OracleTask(
                title=task.title,
                duration_minutes=task.estimated_minutes or 0,
                priority=task.priority.value,
                due_date=task.due_date,
            ),
            candidates={
                day: [OracleGap(**gap.to_dict()) for gap in gaps]
                for day, gaps in sorted(candidates.items())
            },
            preferences=preferences,
            day_load={day: load for day, load in (day_load or {}).items() if day in candidates},
        )


class OracleDecision(BaseModel):
    date: str = Field(description="Chosen date in YYYY-MM-DD format, one of the candidate dates.")
    time: str = Field(description="Chosen start time in HH:MM 24-hour format.")
    reasoning: str = Field(description="Brief explanation of why this slot is optimal.")


class DecisionOracle(Protocol):
    def decide(self, request: OracleRequest) -> OracleDecision: ...


class LLMDecisionOracle:
    """Ask a chat model to pick a slot from the candidate set."""

    def __init__(
        self,
        model: str = "gpt-5-mini",
        api_key: str | None = None,
        timeout_seconds: float = 20.0,
    ) -> None:
        llm = ChatOpenAI(
            model=model,
            api_key=api_key,
            reasoning_effort="low",
            timeout=timeout_seconds,
            max_retries=0,
        )
        self._chooser = llm.with_structured_output(OracleDecision)

    def decide(self, request: OracleRequest) -> OracleDecision:
        response = self._chooser.invoke(build_prompt(request))
        if not isinstance(response, OracleDecision):
            return OracleDecision.model_validate(response)
        return response


def build_prompt(request: OracleRequest) -> str:
    task = request.task
    prefs = request.preferences
    slots_text = "\n\n".join(
        f"{day.isoformat()}:\n"
        + "\n".join(
            f"  - {gap.start} to {gap.end} ({gap.available_minutes} min available)" for gap in gaps
        )
        for day, gaps in request.candidates.items()
    )
    load_text = json.dumps(
        {day.isoformat(): minutes for day, minutes in request.day_load.items()}
    )

    return f"""You are a smart scheduling assistant. Find the optimal time slot for this task.

TASK:
- Title: {task.title}
- Duration: {task.duration_minutes} minutes
- Priority: {task.priority}
- Due Date: {task.due_date.isoformat() if task.due_date else "No deadline"}

AVAILABLE SLOTS (by date):
{slots_text}

ALREADY SCHEDULED (minutes per date): {load_text}

SCHEDULING PREFERENCES:
- Work hours: {prefs.work_hours_start}:00 - {prefs.work_hours_end}:00
- Prefer morning for difficult/high-priority tasks: {prefs.prefer_morning_for_hard}
- Buffer between tasks: {prefs.buffer_minutes} minutes
- Max scheduled hours per day: {prefs.max_hours_per_day:g}

Pick the BEST time slot considering:
1. Priority tasks should be scheduled sooner, ideally in the morning when focus is highest
2. Leave buffer time around meetings
3. Don't overload any single day beyond the max scheduled hours
4. Respect the due date - schedule before it!
5. The task must fit entirely inside one of the listed slots

Return the date, the start time and a brief reasoning."""
