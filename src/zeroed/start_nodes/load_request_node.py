import logging

from zeroed.services.config import load_config_or_default
from zeroed.services.request_io import load_request
from zeroed.state import AutoScheduleState

logger = logging.getLogger(__name__)


def load_request_node(state: AutoScheduleState) -> AutoScheduleState:
    """Read the request file and resolve the effective preferences.

    Precedence: built-in defaults, then the config file, then the request's
    `preferences` block, then overrides given on the command line.
    """
    config = load_config_or_default(state.get("config_dir"))
    request = load_request(state["request_path"])

    preferences = config.preferences.with_overrides(**request.preference_overrides)
    preferences = preferences.with_overrides(**state.get("preference_overrides", {}))

    logger.info(
        "Loaded %d task(s) and events for %d day(s) from %s",
        len(request.tasks) + len(request.task_errors),
        len(request.events),
        state["request_path"],
    )
    return {"request": request, "preferences": preferences}
