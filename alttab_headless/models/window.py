"""Window and running-application snapshot models.

Snapshots are frozen read-only projections handed out by a window source.
The selection engine and the listing commands only ever see these.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class WindowSnapshot(BaseModel):
    """Read-only projection of a live window.

    Attributes:
        window_id: Platform window id (None for windowless-app placeholders)
        title: Window title
        app_name: Owning application display name
        app_bundle_id: Owning application identifier (reverse-DNS style)
        app_pid: Owning application process id
        space_ids: Identifiers of the spaces the window belongs to
        space_indexes: User-facing indexes of those spaces (1-based)
        last_focus_order: 0 = currently focused, larger = less recently focused
        creation_order: Larger = created more recently
        position: Top-left corner (x, y), if known
        size: (width, height), if known
    """

    model_config = ConfigDict(frozen=True)

    window_id: Optional[int] = Field(None, description="Platform window id", ge=0)
    title: str = Field("", description="Window title")
    app_name: Optional[str] = Field(None, description="Application display name")
    app_bundle_id: Optional[str] = Field(None, description="Application bundle identifier")
    app_pid: int = Field(..., description="Owning application pid")
    space_ids: Tuple[int, ...] = Field(default_factory=tuple)
    space_indexes: Tuple[int, ...] = Field(default_factory=tuple)
    last_focus_order: int = Field(0, ge=0)
    creation_order: int = Field(0, ge=0)
    is_tabbed: bool = False
    is_hidden: bool = False
    is_fullscreen: bool = False
    is_minimized: bool = False
    is_on_all_spaces: bool = False
    is_windowless_app: bool = False
    is_on_preferred_screen: bool = True
    position: Optional[Tuple[float, float]] = None
    size: Optional[Tuple[float, float]] = None


class RunningAppSnapshot(BaseModel):
    """Ephemeral view of a running process, used by the startup conflict guard."""

    model_config = ConfigDict(frozen=True)

    pid: int
    bundle_identifier: Optional[str] = None
    is_terminated: bool = False


def visible_windows(windows: List[WindowSnapshot]) -> List[WindowSnapshot]:
    """Drop windowless-app placeholders (listing commands never report them)."""
    return [window for window in windows if not window.is_windowless_app]
