"""Drive the session engine from a script, without Flask.

Runs one monitor pass for a user and prints what a resolution page would offer.
"""

import importlib
import sys

from config import get_settings_module

from src.worktime_session.worktime_session.container import build_container


def main(username: str, user_id: int) -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)

    outcome = container.monitor.check(username, user_id)
    print("rule:", outcome.rule.name if outcome.rule else None)
    if outcome.recorded:
        print("recorded:", outcome.recorded.kind.value, outcome.recorded.timestamp)

    current = container.session_service.get_current_session(username, user_id)
    ctx = container.resolution_service.build_context(current, container.clock())
    if ctx is None:
        print("nothing to resolve")
        return

    print(f"unresolved session from {ctx.work_date}, default end {ctx.default_end_time:%H:%M}")
    for option in ctx.overtime_options:
        marker = "*" if option.recommended else " "
        print(f" {marker} {option.label}: {option.formatted_duration}")


if __name__ == "__main__":
    main(sys.argv[1], int(sys.argv[2]))
