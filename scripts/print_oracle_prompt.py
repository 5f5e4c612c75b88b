import sys
from datetime import date
from pathlib import Path

from zeroed.scheduling.batch import order_tasks, validate_task
from zeroed.scheduling.errors import InvalidTask
from zeroed.scheduling.lookahead import collect_candidates
from zeroed.scheduling.oracle import OracleRequest, build_prompt
from zeroed.services.config import ConfigError, load_config_or_default
from zeroed.services.request_io import RequestFileError, load_request


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: print_oracle_prompt.py REQUEST.json [YYYY-MM-DD]")
        return

    try:
        config = load_config_or_default()
        request = load_request(Path(sys.argv[1]))
    except (ConfigError, RequestFileError) as exc:
        print(f"Error: {exc}")
        return

    today = date.fromisoformat(sys.argv[2]) if len(sys.argv) > 2 else date.today()
    preferences = config.preferences.with_overrides(**request.preference_overrides)

    for task in order_tasks(request.tasks):
        try:
            validate_task(task, today)
        except InvalidTask as exc:
            print(f"# {task.id}: skipped ({exc})\n")
            continue
        candidates = collect_candidates(task, request.events, preferences, today)
        if not candidates:
            print(f"# {task.id}: no candidate slots\n")
            continue
        print(f"# {task.id}")
        print(build_prompt(OracleRequest.build(task, candidates, preferences)))
        print()


if __name__ == "__main__":
    main()
