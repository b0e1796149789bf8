"""Startup conflict guard.

The headless daemon must not run next to the full application. At startup
we scan running processes for the full application's bundle identifier and,
on conflict, let injected callbacks alert the user and abort the process.

Matching is exact on the bundle identifier: "com.lwouis.alt-tab-macos.headless"
is not a conflict. (The blacklist in the selection engine matches by prefix.)
"""

import logging
from typing import Callable, Iterable, List

from .constants import FULL_APP_BUNDLE_IDENTIFIER
from .models.window import RunningAppSnapshot

logger = logging.getLogger(__name__)


def conflicting_pids(running_apps: Iterable[RunningAppSnapshot], current_pid: int) -> List[int]:
    """Pids of live full-application instances other than ourselves.

    Args:
        running_apps: Snapshot of running processes
        current_pid: Pid of the current process

    Returns:
        Conflicting pids, ascending
    """
    return sorted(
        app.pid
        for app in running_apps
        if not app.is_terminated
        and app.pid != current_pid
        and app.bundle_identifier == FULL_APP_BUNDLE_IDENTIFIER
    )


def conflict_failure_message(pids: Iterable[int]) -> str:
    """Fail-fast message naming the bundle and the conflicting pids."""
    joined = ",".join(str(pid) for pid in pids)
    return (
        f"AltTab GUI app is already running (bundle: {FULL_APP_BUNDLE_IDENTIFIER}, pids: {joined}). "
        "Quit AltTab before launching AltTabHeadless."
    )


def enforce_no_conflict(
    running_apps_provider: Callable[[], Iterable[RunningAppSnapshot]],
    current_pid_provider: Callable[[], int],
    present_conflict_alert: Callable[[List[int]], None],
    fail_fast: Callable[[str], None],
) -> bool:
    """Detect a running full application and sequence alert + fail-fast.

    The guard does not decide how to alert or how to abort; it only computes
    the conflicting set and invokes the callbacks in order.

    Args:
        running_apps_provider: Returns the current running-process snapshot
        current_pid_provider: Returns our own pid
        present_conflict_alert: Called with the sorted conflicting pids
        fail_fast: Called with the failure message after the alert

    Returns:
        True if a conflict was found and handled, False otherwise
    """
    pids = conflicting_pids(running_apps_provider(), current_pid_provider())
    if not pids:
        logger.debug("No conflicting full application instance found")
        return False

    logger.error(f"Full application already running with pid(s) {pids}")
    present_conflict_alert(pids)
    fail_fast(conflict_failure_message(pids))
    return True
