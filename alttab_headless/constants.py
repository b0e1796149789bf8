"""Centralized identifiers, paths and timeouts for the control daemon.

Single source of truth for bundle identifiers, IPC endpoint names and the
fixed timeouts used on both ends of the socket.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .models.command import (
    GUI_CLIENT,
    GUI_SERVER,
    HEADLESS_CLIENT,
    HEADLESS_SERVER,
    CommandSupport,
)

FULL_APP_BUNDLE_IDENTIFIER: Final[str] = "com.lwouis.alt-tab-macos"
HEADLESS_BUNDLE_IDENTIFIER: Final[str] = "com.lwouis.alt-tab-macos.headless"

# Readiness wait applied to --list/--focus/--show before answering
READINESS_WAIT_SECONDS: Final[float] = 5.0

SUPPORTED_COMMANDS_MESSAGE: Final[str] = (
    "Supported commands: --list, --detailed-list, --focus=<window_id>, "
    "--focusUsingLastFocusOrder=<focus_order>, --show=<shortcut_index>, --help"
)
HEADLESS_SUPPORTED_COMMANDS_MESSAGE: Final[str] = "Supported commands: --list, --detailed-list, --help"
STARTUP_FAILURE_MESSAGE: Final[str] = (
    "Can't listen on message port. Is another headless daemon already running?"
)


class ConfigPaths:
    """Centralized configuration paths.

    Example:
        from .constants import ConfigPaths

        preferences = ConfigPaths.PREFERENCES_FILE.read_text()
    """

    HOME: Final[Path] = Path.home()
    CONFIG_DIR: Final[Path] = HOME / ".config" / "alttab-headless"
    PREFERENCES_FILE: Final[Path] = CONFIG_DIR / "preferences.json"


def preferences_path() -> Path:
    """Preferences file, honouring the ALTTAB_HEADLESS_CONFIG override."""
    override = os.environ.get("ALTTAB_HEADLESS_CONFIG")
    if override:
        return Path(override).expanduser()
    return ConfigPaths.PREFERENCES_FILE


def runtime_dir() -> Path:
    """Per-user runtime directory holding the IPC sockets."""
    runtime = os.environ.get("XDG_RUNTIME_DIR")
    if runtime:
        return Path(runtime)
    return Path("/tmp")


def endpoint_socket_path(endpoint_name: str) -> Path:
    """Unix socket path for a named endpoint.

    Args:
        endpoint_name: Reverse-DNS endpoint name (e.g. com.lwouis.alt-tab-macos.cli)

    Returns:
        Socket path under the runtime directory
    """
    return runtime_dir() / f"{endpoint_name}.sock"


@dataclass(frozen=True)
class AppVariant:
    """Process identity: the full application or the headless daemon.

    Attributes:
        name: Human-readable program name used in messages
        bundle_identifier: Identifier other processes see us as
        endpoint_name: Name of the local IPC endpoint we own
        server_support: Profile applied to incoming commands
        client_support: Profile applied to our own argv
        client_timeout: Send/receive timeout for CLI invocations (seconds)
        checks_for_conflicts: Refuse to start while the full app runs
        usage: Usage line printed by --help and on invalid input
    """

    name: str
    bundle_identifier: str
    endpoint_name: str
    server_support: CommandSupport
    client_support: CommandSupport
    client_timeout: float
    checks_for_conflicts: bool
    usage: str

    @property
    def socket_path(self) -> Path:
        return endpoint_socket_path(self.endpoint_name)


FULL_APP = AppVariant(
    name="AltTab",
    bundle_identifier=FULL_APP_BUNDLE_IDENTIFIER,
    endpoint_name=f"{FULL_APP_BUNDLE_IDENTIFIER}.cli",
    server_support=GUI_SERVER,
    client_support=GUI_CLIENT,
    client_timeout=2.0,
    checks_for_conflicts=False,
    usage=(
        "Usage: alttab [--list | --detailed-list | --focus=<window_id> | "
        "--focusUsingLastFocusOrder=<focus_order> | --show=<shortcut_index>]"
    ),
)

HEADLESS_APP = AppVariant(
    name="AltTabHeadless",
    bundle_identifier=HEADLESS_BUNDLE_IDENTIFIER,
    endpoint_name=f"{HEADLESS_BUNDLE_IDENTIFIER}.cli",
    server_support=HEADLESS_SERVER,
    client_support=HEADLESS_CLIENT,
    client_timeout=7.0,
    checks_for_conflicts=True,
    usage=(
        "Usage: alttab-headless [--list | --detailed-list | --focus=<window_id> | "
        "--focusUsingLastFocusOrder=<focus_order> | --show=<shortcut_index> | --help]"
    ),
)
