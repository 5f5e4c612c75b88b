from langgraph.graph import END, StateGraph

from zeroed.scheduling.batch import BatchScheduler
from zeroed.start_nodes import (
    load_request_node,
    make_schedule_tasks_node,
    present_schedule_node,
)
from zeroed.state import AutoScheduleState


def create_scheduling_agent(scheduler: BatchScheduler, present: bool = True):
    workflow = StateGraph(AutoScheduleState)
    workflow.add_node("load_request", load_request_node)
    workflow.add_node("schedule_tasks", make_schedule_tasks_node(scheduler))

    # Define edges
    workflow.set_entry_point("load_request")
    workflow.add_edge("load_request", "schedule_tasks")
    if present:
        workflow.add_node("present_schedule", present_schedule_node)
        workflow.add_edge("schedule_tasks", "present_schedule")
        workflow.add_edge("present_schedule", END)
    else:
        workflow.add_edge("schedule_tasks", END)

    return workflow.compile()
