"""Command models for the CLI control protocol.

A raw command string sent over the IPC socket is parsed into one of the
closed set of Command variants below. Whether a variant may be produced is
governed by a CommandSupport capability profile, fixed per role.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


@dataclass(frozen=True)
class ListCommand:
    """--list: window ids and titles."""


@dataclass(frozen=True)
class DetailedListCommand:
    """--detailed-list: every projected window field."""


@dataclass(frozen=True)
class FocusCommand:
    """--focus=<window_id>"""

    window_id: int


@dataclass(frozen=True)
class FocusUsingLastFocusOrderCommand:
    """--focusUsingLastFocusOrder=<focus_order>"""

    last_focus_order: int


@dataclass(frozen=True)
class ShowCommand:
    """--show=<shortcut_index>, shortcut index in 0..3."""

    shortcut_index: int


@dataclass(frozen=True)
class HelpCommand:
    """--help"""


Command = Union[
    ListCommand,
    DetailedListCommand,
    FocusCommand,
    FocusUsingLastFocusOrderCommand,
    ShowCommand,
    HelpCommand,
]


@dataclass(frozen=True)
class DaemonMode:
    """No CLI command: run the daemon."""


@dataclass(frozen=True)
class HelpMode:
    """Print usage and exit."""


@dataclass(frozen=True)
class SendCommandMode:
    """Forward the raw command to the running daemon."""

    raw: str


@dataclass(frozen=True)
class UnsupportedMode:
    """Recognized command that this profile refuses."""

    raw: str


@dataclass(frozen=True)
class InvalidMode:
    """Arguments that match nothing in the grammar."""


ClientMode = Union[DaemonMode, HelpMode, SendCommandMode, UnsupportedMode, InvalidMode]


class SupportRole(str, Enum):
    """The four fixed roles a capability profile can be bound to."""

    GUI_SERVER = "gui_server"
    GUI_CLIENT = "gui_client"
    HEADLESS_SERVER = "headless_server"
    HEADLESS_CLIENT = "headless_client"


@dataclass(frozen=True)
class CommandSupport:
    """Capability profile deciding which commands a role accepts.

    Attributes:
        role: Role this profile belongs to
        supports_focus: --focus=<id> is accepted
        supports_focus_using_last_focus_order: --focusUsingLastFocusOrder=<n> is accepted
        supports_show: --show=<n> is accepted
        supports_help: --help is accepted
    """

    role: SupportRole
    supports_focus: bool
    supports_focus_using_last_focus_order: bool
    supports_show: bool
    supports_help: bool

    @classmethod
    def for_role(cls, role: SupportRole) -> "CommandSupport":
        """Return the fixed profile for a role."""
        return _PROFILES[role]


GUI_SERVER = CommandSupport(
    role=SupportRole.GUI_SERVER,
    supports_focus=True,
    supports_focus_using_last_focus_order=True,
    supports_show=True,
    supports_help=False,
)

GUI_CLIENT = CommandSupport(
    role=SupportRole.GUI_CLIENT,
    supports_focus=True,
    supports_focus_using_last_focus_order=True,
    supports_show=True,
    supports_help=False,
)

HEADLESS_SERVER = CommandSupport(
    role=SupportRole.HEADLESS_SERVER,
    supports_focus=False,
    supports_focus_using_last_focus_order=False,
    supports_show=False,
    supports_help=False,
)

HEADLESS_CLIENT = CommandSupport(
    role=SupportRole.HEADLESS_CLIENT,
    supports_focus=False,
    supports_focus_using_last_focus_order=False,
    supports_show=False,
    supports_help=True,
)

_PROFILES = {
    SupportRole.GUI_SERVER: GUI_SERVER,
    SupportRole.GUI_CLIENT: GUI_CLIENT,
    SupportRole.HEADLESS_SERVER: HEADLESS_SERVER,
    SupportRole.HEADLESS_CLIENT: HEADLESS_CLIENT,
}


class ServerCode(str, Enum):
    """Fixed response codes, JSON-encoded as bare strings on the wire."""

    ERROR = "error"
    NO_OUTPUT = "noOutput"
    UNSUPPORTED = "unsupported"
    WARMING_UP_TIMEOUT = "warmingUpTimeout"
