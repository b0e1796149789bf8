"""i3/Sway-backed window source.

Maps the i3 layout tree onto window snapshots:

- workspaces are spaces (space id = workspace con id, space index = workspace num)
- outputs are screens; the output holding the focused workspace is the
  preferred screen
- focus recency comes from the per-container focus stacks
- the scratchpad is treated as hidden, sticky floating windows as on all spaces

Uses the synchronous i3ipc connection: every call is made from the
executor's control thread, never from the event loop.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Set

import i3ipc

from ..models.window import WindowSnapshot
from .window_source import WindowSourceError

logger = logging.getLogger(__name__)

SCRATCHPAD_WORKSPACE = "__i3_scratch"
STACKED_LAYOUTS = frozenset({"tabbed", "stacked"})
WINDOW_CONTAINER_TYPES = frozenset({"con", "floating_con"})


def get_window_class(container) -> Optional[str]:
    """Get window class with Sway/Wayland compatibility.

    Native Wayland apps carry app_id; X11 and XWayland apps carry
    window_properties.class.

    Args:
        container: i3ipc Con object

    Returns:
        app_id or window class, or None if neither is set
    """
    app_id = getattr(container, "app_id", None)
    if app_id:
        return app_id
    return getattr(container, "window_class", None) or None


def is_window_container(container) -> bool:
    """True for leaf containers that hold a client window."""
    if getattr(container, "type", None) not in WINDOW_CONTAINER_TYPES:
        return False
    if getattr(container, "nodes", None):
        return False
    return getattr(container, "window", None) is not None or bool(getattr(container, "app_id", None))


@dataclass
class _Placement:
    """Where a window container sits in the tree."""

    container: Any
    parent: Any
    workspace: Any
    output_name: Optional[str]


def build_window_snapshots(tree) -> List[WindowSnapshot]:
    """Project an i3 tree onto window snapshots.

    Windows are returned in focus-recency order: the traversal always
    descends into the most recently focused child first, so the focused
    window gets last_focus_order 0.

    Args:
        tree: Root container from get_tree()

    Returns:
        Window snapshots, most recently focused first
    """
    placements = _collect_placements(tree)
    if not placements:
        return []

    creation_ranks = {
        placement.container.id: rank
        for rank, placement in enumerate(sorted(placements, key=lambda p: p.container.id))
    }
    focused = next((p for p in placements if getattr(p.container, "focused", False)), placements[0])
    preferred_output = focused.output_name

    snapshots: List[WindowSnapshot] = []
    for order, placement in enumerate(placements):
        con = placement.container
        workspace = placement.workspace
        workspace_name = getattr(workspace, "name", None) if workspace is not None else None
        in_scratchpad = workspace_name == SCRATCHPAD_WORKSPACE

        space_ids: tuple = ()
        space_indexes: tuple = ()
        if workspace is not None and not in_scratchpad:
            space_ids = (workspace.id,)
            num = getattr(workspace, "num", None)
            if num is not None and num >= 0:
                space_indexes = (num,)

        app_name = get_window_class(con)
        snapshots.append(
            WindowSnapshot(
                window_id=con.id,
                title=getattr(con, "name", None) or "",
                app_name=app_name,
                app_bundle_id=app_name,
                app_pid=_container_pid(con),
                space_ids=space_ids,
                space_indexes=space_indexes,
                last_focus_order=order,
                creation_order=creation_ranks[con.id],
                is_tabbed=_is_background_tab(con, placement.parent),
                is_hidden=in_scratchpad,
                is_fullscreen=bool(getattr(con, "fullscreen_mode", 0)),
                is_minimized=False,
                is_on_all_spaces=bool(getattr(con, "sticky", False)),
                is_windowless_app=False,
                is_on_preferred_screen=placement.output_name == preferred_output,
                position=_rect_position(con),
                size=_rect_size(con),
            )
        )

    return snapshots


def visible_workspace_ids(tree, visible_workspace_names: Iterable[str]) -> Set[int]:
    """Map visible workspace names to workspace container ids."""
    names = set(visible_workspace_names)
    return {
        workspace.id
        for workspace in _iter_workspaces(tree)
        if getattr(workspace, "name", None) in names
    }


class I3WindowSource:
    """WindowSource backed by a synchronous i3ipc connection."""

    def __init__(self, connection: Optional[i3ipc.Connection] = None):
        """Initialize source.

        Args:
            connection: Existing connection (connects lazily when None)
        """
        self._connection = connection
        self._lock = threading.Lock()
        self._windows: List[WindowSnapshot] = []
        self._visible_space_ids: Set[int] = set()
        self._frontmost_pid: Optional[int] = None

    @property
    def connection(self) -> i3ipc.Connection:
        if self._connection is None:
            try:
                self._connection = i3ipc.Connection()
            except Exception as e:
                raise WindowSourceError(f"Cannot connect to i3/Sway IPC: {e}") from e
            logger.info("Connected to i3/Sway IPC")
        return self._connection

    def refresh(self) -> None:
        connection = self.connection
        try:
            tree = connection.get_tree()
            outputs = connection.get_outputs()
        except Exception as e:
            raise WindowSourceError(f"Failed to query i3/Sway state: {e}") from e

        visible_names = [
            output.current_workspace
            for output in outputs
            if getattr(output, "active", False) and output.current_workspace
        ]
        windows = build_window_snapshots(tree)
        space_ids = visible_workspace_ids(tree, visible_names)
        frontmost = next((w.app_pid for w in windows if w.last_focus_order == 0), None)

        with self._lock:
            self._windows = windows
            self._visible_space_ids = space_ids
            self._frontmost_pid = frontmost
        logger.debug(f"Refreshed {len(windows)} windows across {len(space_ids)} visible workspaces")

    def snapshot(self) -> List[WindowSnapshot]:
        with self._lock:
            return list(self._windows)

    def frontmost_pid(self) -> Optional[int]:
        with self._lock:
            return self._frontmost_pid

    def visible_space_ids(self) -> Set[int]:
        with self._lock:
            return set(self._visible_space_ids)

    def focus(self, window: WindowSnapshot) -> bool:
        if window.window_id is None:
            return False

        replies = self.connection.command(f"[con_id={window.window_id}] focus")
        success = bool(replies) and all(reply.success for reply in replies)
        if not success:
            errors = [getattr(reply, "error", None) for reply in replies]
            logger.warning(f"Focus of window {window.window_id} failed: {errors}")
        return success

    def close(self) -> None:
        if self._connection is not None:
            try:
                self._connection.main_quit()
            except Exception as e:
                logger.debug(f"Error closing i3 connection: {e}")
            self._connection = None


def _collect_placements(tree) -> List[_Placement]:
    placements: List[_Placement] = []

    def walk(con, parent, workspace, output_name):
        con_type = getattr(con, "type", None)
        if con_type == "dockarea":
            return
        if con_type == "output":
            output_name = getattr(con, "name", None)
        elif con_type == "workspace":
            workspace = con

        if is_window_container(con):
            placements.append(_Placement(con, parent, workspace, output_name))
            return

        for child in _children_by_focus(con):
            walk(child, con, workspace, output_name)

    walk(tree, None, None, None)
    return placements


def _children_by_focus(con) -> List[Any]:
    """Children ordered by the container's focus stack; unlisted ones last."""
    children = list(getattr(con, "nodes", None) or []) + list(getattr(con, "floating_nodes", None) or [])
    focus_stack = list(getattr(con, "focus", None) or [])
    positions = {con_id: index for index, con_id in enumerate(focus_stack)}
    return sorted(children, key=lambda child: positions.get(child.id, len(positions)))


def _iter_workspaces(con):
    if getattr(con, "type", None) == "workspace":
        yield con
        return
    for child in getattr(con, "nodes", None) or []:
        yield from _iter_workspaces(child)


def _is_background_tab(con, parent) -> bool:
    if parent is None or getattr(parent, "layout", None) not in STACKED_LAYOUTS:
        return False
    focus_stack = getattr(parent, "focus", None) or []
    return bool(focus_stack) and focus_stack[0] != con.id


def _container_pid(con) -> int:
    pid = getattr(con, "pid", None)
    if pid is None:
        pid = (getattr(con, "ipc_data", None) or {}).get("pid")
    return pid or 0


def _rect_position(con):
    rect = getattr(con, "rect", None)
    if rect is None:
        return None
    return (float(rect.x), float(rect.y))


def _rect_size(con):
    rect = getattr(con, "rect", None)
    if rect is None:
        return None
    return (float(rect.width), float(rect.height))
