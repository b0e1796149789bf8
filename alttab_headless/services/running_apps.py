"""Running-application snapshots for the startup conflict guard.

Processes are mapped to bundle identifiers by the entry point they were
launched through: `alttab` is the full application, `alttab-headless` (or
`python -m alttab_headless`) is the headless daemon. A short-lived
`alttab --list` client counts as the full application too, since the client
and the application share one entry point.
"""

import logging
import os
from typing import Dict, List, Optional, Sequence

import psutil

from ..constants import FULL_APP_BUNDLE_IDENTIFIER, HEADLESS_BUNDLE_IDENTIFIER
from ..models.window import RunningAppSnapshot

logger = logging.getLogger(__name__)

ENTRY_POINT_BUNDLE_IDENTIFIERS: Dict[str, str] = {
    "alttab": FULL_APP_BUNDLE_IDENTIFIER,
    "alttab-headless": HEADLESS_BUNDLE_IDENTIFIER,
}
MODULE_BUNDLE_IDENTIFIERS: Dict[str, str] = {
    "alttab_headless": HEADLESS_BUNDLE_IDENTIFIER,
}
TERMINATED_STATUSES = frozenset({psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD})


def bundle_identifier_for_cmdline(cmdline: Optional[Sequence[str]]) -> Optional[str]:
    """Derive a bundle identifier from a process command line.

    Console scripts appear either directly (`alttab ...`) or behind their
    interpreter (`python3 /usr/bin/alttab ...`), so the first two tokens are
    inspected. `python -m alttab_headless` is recognised too.

    Args:
        cmdline: Process argv, or None if unreadable

    Returns:
        Bundle identifier, or None for unrelated processes
    """
    if not cmdline:
        return None

    for token in cmdline[:2]:
        name = os.path.basename(token)
        if name in ENTRY_POINT_BUNDLE_IDENTIFIERS:
            return ENTRY_POINT_BUNDLE_IDENTIFIERS[name]

    args = list(cmdline)
    if "-m" in args:
        module_index = args.index("-m") + 1
        if module_index < len(args):
            return MODULE_BUNDLE_IDENTIFIERS.get(args[module_index])
    return None


def running_app_snapshots() -> List[RunningAppSnapshot]:
    """Snapshot every process visible to the current user."""
    snapshots: List[RunningAppSnapshot] = []
    for proc in psutil.process_iter(["pid", "cmdline", "status"]):
        info = proc.info
        snapshots.append(
            RunningAppSnapshot(
                pid=info["pid"],
                bundle_identifier=bundle_identifier_for_cmdline(info.get("cmdline")),
                is_terminated=info.get("status") in TERMINATED_STATUSES,
            )
        )
    logger.debug(f"Scanned {len(snapshots)} running processes")
    return snapshots
