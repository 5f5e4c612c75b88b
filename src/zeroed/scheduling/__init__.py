from zeroed.scheduling.batch import BatchScheduler, EventBook, auto_schedule, order_tasks
from zeroed.scheduling.errors import (
    InvalidScheduleRequest,
    InvalidTask,
    NoAvailableSlot,
    OracleUnavailable,
    PersistenceFailure,
    SchedulingError,
)
from zeroed.scheduling.free_time import MIN_GAP_MINUTES, find_free_gaps
from zeroed.scheduling.interval import Interval, format_hhmm, parse_hhmm
from zeroed.scheduling.lookahead import collect_candidates
from zeroed.scheduling.models import (
    BatchResult,
    CommittedEvent,
    ErrorKind,
    FreeGap,
    Priority,
    ScheduledSlot,
    ScheduleError,
    SchedulingPreferences,
    SlotSource,
    TaskToSchedule,
)
from zeroed.scheduling.oracle import DecisionOracle, LLMDecisionOracle, OracleDecision, OracleRequest
from zeroed.scheduling.persistence import JsonFileSlotSink, SlotSink
from zeroed.scheduling.selectors import FallbackChain, FallbackSelector, OracleSelector, SlotSelector

__all__ = [
    "BatchResult",
    "BatchScheduler",
    "CommittedEvent",
    "DecisionOracle",
    "ErrorKind",
    "EventBook",
    "FallbackChain",
    "FallbackSelector",
    "FreeGap",
    "Interval",
    "InvalidScheduleRequest",
    "InvalidTask",
    "JsonFileSlotSink",
    "LLMDecisionOracle",
    "MIN_GAP_MINUTES",
    "NoAvailableSlot",
    "OracleDecision",
    "OracleRequest",
    "OracleSelector",
    "OracleUnavailable",
    "PersistenceFailure",
    "Priority",
    "ScheduledSlot",
    "ScheduleError",
    "SchedulingError",
    "SchedulingPreferences",
    "SlotSelector",
    "SlotSink",
    "SlotSource",
    "TaskToSchedule",
    "auto_schedule",
    "collect_candidates",
    "find_free_gaps",
    "format_hhmm",
    "order_tasks",
    "parse_hhmm",
]
