"""In-memory window source.

Holds a fixed list of snapshots and records focus requests. Used when no
window system is reachable and as the window source in tests.
"""

import logging
import threading
from typing import Iterable, List, Optional, Set

from ..models.window import WindowSnapshot

logger = logging.getLogger(__name__)


class StaticWindowSource:
    """WindowSource over a list supplied by the caller."""

    def __init__(
        self,
        windows: Optional[Iterable[WindowSnapshot]] = None,
        frontmost_pid: Optional[int] = None,
        visible_space_ids: Optional[Iterable[int]] = None,
        focus_succeeds: bool = True,
    ):
        self._lock = threading.Lock()
        self._windows: List[WindowSnapshot] = list(windows or [])
        self._frontmost_pid = frontmost_pid
        self._visible_space_ids: Set[int] = set(visible_space_ids or ())
        self.focus_succeeds = focus_succeeds
        self.focused: List[WindowSnapshot] = []
        self.refresh_count = 0

    def set_windows(self, windows: Iterable[WindowSnapshot]) -> None:
        with self._lock:
            self._windows = list(windows)

    def refresh(self) -> None:
        with self._lock:
            self.refresh_count += 1

    def snapshot(self) -> List[WindowSnapshot]:
        with self._lock:
            return list(self._windows)

    def frontmost_pid(self) -> Optional[int]:
        return self._frontmost_pid

    def visible_space_ids(self) -> Set[int]:
        return set(self._visible_space_ids)

    def focus(self, window: WindowSnapshot) -> bool:
        logger.debug(f"Focus requested for window {window.window_id} ({window.title!r})")
        with self._lock:
            self.focused.append(window)
        return self.focus_succeeds

    def close(self) -> None:
        pass
