"""Window source interface.

The executor depends on this protocol only. Production wiring supplies the
i3/Sway-backed source; tests supply in-memory fakes.
"""

from typing import List, Optional, Protocol, Set, runtime_checkable

from ..models.window import WindowSnapshot


class WindowSourceError(Exception):
    """Raised when the window system cannot be queried or commanded."""

    pass


@runtime_checkable
class WindowSource(Protocol):
    """Live window state, read and mutated only from the control thread."""

    def refresh(self) -> None:
        """Re-read window, space and screen state from the window system."""
        ...

    def snapshot(self) -> List[WindowSnapshot]:
        """Windows as of the last refresh, in window-list order."""
        ...

    def frontmost_pid(self) -> Optional[int]:
        """Pid of the application owning the focused window, if any."""
        ...

    def visible_space_ids(self) -> Set[int]:
        """Identifiers of spaces currently shown on some screen."""
        ...

    def focus(self, window: WindowSnapshot) -> bool:
        """Activate a window. Returns False if the window system refused."""
        ...

    def close(self) -> None:
        """Release any connection held by the source."""
        ...
