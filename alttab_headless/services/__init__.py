"""Window source and process adapters."""

from .i3_window_source import I3WindowSource, build_window_snapshots
from .running_apps import running_app_snapshots
from .static_window_source import StaticWindowSource
from .window_source import WindowSource, WindowSourceError

__all__ = [
    "I3WindowSource",
    "StaticWindowSource",
    "WindowSource",
    "WindowSourceError",
    "build_window_snapshots",
    "running_app_snapshots",
]
