from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from zeroed.state import AutoScheduleState

console = Console()


def present_schedule_node(state: AutoScheduleState) -> AutoScheduleState:
    """Display the scheduled slots and per-task failures"""
    result = state["result"]
    prefs = state["preferences"]
    titles = {task.id: task.title for task in state["request"].tasks}

    summary = (
        f"Work hours: {prefs.work_hours_start}:00 - {prefs.work_hours_end}:00 | "
        f"Buffer: {prefs.buffer_minutes} min | Max {prefs.max_hours_per_day:g} h/day\n"
        f"{result.summary()}"
    )
    console.print(Panel(summary, title="Auto-schedule", border_style="blue"))

    if result.scheduled:
        table = Table(title="Scheduled tasks", show_header=True)
        table.add_column("Date", style="cyan")
        table.add_column("Time", style="cyan")
        table.add_column("Task", style="white")
        table.add_column("Source", style="dim")
        table.add_column("Reasoning", style="white")
        for slot in result.scheduled:
            table.add_row(
                slot.date.isoformat(),
                slot.time,
                titles.get(slot.task_id, slot.task_id),
                slot.source.value,
                slot.reasoning,
            )
        console.print(table)

    if result.errors:
        table = Table(title="Not scheduled", show_header=True)
        table.add_column("Task", style="white")
        table.add_column("Reason", style="red")
        for error in result.errors:
            table.add_row(titles.get(error.task_id, error.task_id), error.message)
        console.print(table)

    return {}
