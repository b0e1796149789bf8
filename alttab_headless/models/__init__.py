"""Data models for the headless control daemon."""

from .command import (
    ClientMode,
    Command,
    CommandSupport,
    DaemonMode,
    DetailedListCommand,
    FocusCommand,
    FocusUsingLastFocusOrderCommand,
    GUI_CLIENT,
    GUI_SERVER,
    HEADLESS_CLIENT,
    HEADLESS_SERVER,
    HelpCommand,
    HelpMode,
    InvalidMode,
    ListCommand,
    SendCommandMode,
    ServerCode,
    ShowCommand,
    SupportRole,
    UnsupportedMode,
)
from .preferences import (
    AppsToShow,
    BlacklistEntry,
    BlacklistHide,
    Preferences,
    ScreensToShow,
    ShowHow,
    ShowSelectionPreferences,
    SpacesToShow,
    WindowOrder,
)
from .responses import JsonWindow, JsonWindowFull, JsonWindowFullList, JsonWindowList, Response, encode_response
from .window import RunningAppSnapshot, WindowSnapshot, visible_windows

__all__ = [
    "AppsToShow",
    "BlacklistEntry",
    "BlacklistHide",
    "ClientMode",
    "Command",
    "CommandSupport",
    "DaemonMode",
    "DetailedListCommand",
    "FocusCommand",
    "FocusUsingLastFocusOrderCommand",
    "GUI_CLIENT",
    "GUI_SERVER",
    "HEADLESS_CLIENT",
    "HEADLESS_SERVER",
    "HelpCommand",
    "HelpMode",
    "InvalidMode",
    "JsonWindow",
    "JsonWindowFull",
    "JsonWindowFullList",
    "JsonWindowList",
    "ListCommand",
    "Preferences",
    "Response",
    "RunningAppSnapshot",
    "ScreensToShow",
    "SendCommandMode",
    "ServerCode",
    "ShowCommand",
    "ShowHow",
    "ShowSelectionPreferences",
    "SpacesToShow",
    "SupportRole",
    "UnsupportedMode",
    "WindowOrder",
    "WindowSnapshot",
    "encode_response",
    "visible_windows",
]
