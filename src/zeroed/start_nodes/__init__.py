from .load_request_node import load_request_node
from .present_schedule_node import present_schedule_node
from .schedule_tasks_node import make_schedule_tasks_node

__all__ = [
    "load_request_node",
    "make_schedule_tasks_node",
    "present_schedule_node",
]
