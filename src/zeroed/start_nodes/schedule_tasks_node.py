from typing import Callable

from zeroed.scheduling.batch import BatchScheduler
from zeroed.state import AutoScheduleState


def make_schedule_tasks_node(
    scheduler: BatchScheduler,
) -> Callable[[AutoScheduleState], AutoScheduleState]:
    def schedule_tasks_node(state: AutoScheduleState) -> AutoScheduleState:
        request = state["request"]
        result = scheduler.schedule_all(
            request.tasks,
            request.events,
            state["preferences"],
            state["today"],
            now_minute=state.get("now_minute"),
        )
        # Entries rejected while parsing the request are reported with the rest.
        result.errors[:0] = request.task_errors
        return {"result": result}

    return schedule_tasks_node
