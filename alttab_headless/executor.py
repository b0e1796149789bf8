"""Command executor.

Turns a raw command string into a Response:

    preflight (capability, readiness) -> parse -> dispatch on control thread

All window-source access happens on one dedicated worker thread ("control"),
so command execution never overlaps with discovery refreshes.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from .cli_grammar import is_unsupported_command, parse_server_command, should_wait_for_readiness
from .constants import READINESS_WAIT_SECONDS
from .models.command import (
    Command,
    CommandSupport,
    DetailedListCommand,
    FocusCommand,
    FocusUsingLastFocusOrderCommand,
    HelpCommand,
    ListCommand,
    ServerCode,
    ShowCommand,
)
from .models.preferences import Preferences, ShowSelectionPreferences
from .models.responses import JsonWindow, JsonWindowFull, JsonWindowFullList, JsonWindowList, Response
from .models.window import WindowSnapshot, visible_windows
from .readiness import ReadinessGate
from .selection import select_window_index
from .services.window_source import WindowSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


def resolve_window_index(
    command: Command,
    windows: Sequence[WindowSnapshot],
    preferences: Optional[ShowSelectionPreferences] = None,
    frontmost_pid: Optional[int] = None,
    visible_spaces: Iterable[int] = (),
) -> Optional[int]:
    """Find the window a focus-type command targets.

    Args:
        command: FocusCommand, FocusUsingLastFocusOrderCommand or ShowCommand
        windows: Current window snapshots
        preferences: Shortcut preferences (ShowCommand only)
        frontmost_pid: Pid of the frontmost application (ShowCommand only)
        visible_spaces: Currently visible space ids (ShowCommand only)

    Returns:
        Index into `windows`, or None when nothing matches
    """
    match command:
        case FocusCommand(window_id=window_id):
            return next((i for i, w in enumerate(windows) if w.window_id == window_id), None)
        case FocusUsingLastFocusOrderCommand(last_focus_order=order):
            return next((i for i, w in enumerate(windows) if w.last_focus_order == order), None)
        case ShowCommand():
            if preferences is None:
                return None
            return select_window_index(windows, preferences, frontmost_pid, visible_spaces)
    return None


class CommandExecutor:
    """Executes raw IPC commands against a window source."""

    def __init__(
        self,
        window_source: WindowSource,
        readiness_gate: ReadinessGate,
        support: CommandSupport,
        preferences_provider: Callable[[], Preferences] = Preferences,
        readiness_wait_seconds: float = READINESS_WAIT_SECONDS,
    ):
        """Initialize executor.

        Args:
            window_source: Live window state
            readiness_gate: Gate opened once initial discovery has run
            support: Server capability profile
            preferences_provider: Returns the current preferences document
            readiness_wait_seconds: Bound on the readiness wait per request
        """
        self.window_source = window_source
        self.readiness_gate = readiness_gate
        self.support = support
        self.preferences_provider = preferences_provider
        self.readiness_wait_seconds = readiness_wait_seconds
        self._control = ThreadPoolExecutor(max_workers=1, thread_name_prefix="control")

    def preflight(self, raw: str) -> Optional[ServerCode]:
        """Capability and readiness checks, before any parsing.

        Returns:
            ServerCode to answer with immediately, or None to proceed
        """
        if is_unsupported_command(raw, self.support):
            logger.info(f"Rejecting unsupported command: {raw}")
            return ServerCode.UNSUPPORTED

        if should_wait_for_readiness(raw):
            if not self.readiness_gate.wait_until_ready(self.readiness_wait_seconds):
                logger.warning(f"Initial discovery not finished, answering {raw} with warmingUpTimeout")
                return ServerCode.WARMING_UP_TIMEOUT

        return None

    def execute(self, raw: str) -> Response:
        """Run a raw command to completion. Blocks the calling thread.

        Args:
            raw: Raw command string

        Returns:
            ServerCode or window list
        """
        code = self.preflight(raw)
        if code is not None:
            return code

        command = parse_server_command(raw, self.support)
        if command is None:
            logger.info(f"Invalid command: {raw}")
            return ServerCode.ERROR

        try:
            return self.run_on_control_thread(lambda: self._dispatch(command))
        except Exception:
            logger.exception(f"Command {raw} failed")
            return ServerCode.ERROR

    def run_on_control_thread(self, fn: Callable[[], T]) -> T:
        """Run `fn` on the control thread and wait for its result."""
        return self.submit_to_control_thread(fn).result()

    def submit_to_control_thread(self, fn: Callable[[], T]) -> "Future[T]":
        """Queue `fn` on the control thread without waiting."""
        return self._control.submit(fn)

    def shutdown(self) -> None:
        self._control.shutdown(wait=True, cancel_futures=True)

    def _dispatch(self, command: Command) -> Response:
        match command:
            case ListCommand():
                windows = self._refreshed_windows()
                return JsonWindowList(windows=[JsonWindow.from_snapshot(w) for w in visible_windows(windows)])
            case DetailedListCommand():
                windows = self._refreshed_windows()
                return JsonWindowFullList(windows=[JsonWindowFull.from_snapshot(w) for w in visible_windows(windows)])
            case FocusCommand() | FocusUsingLastFocusOrderCommand():
                windows = self._refreshed_windows()
                return self._focus(windows, resolve_window_index(command, windows))
            case ShowCommand(shortcut_index=shortcut_index):
                preferences = self.preferences_provider().show_selection_preferences(shortcut_index)
                if preferences is None:
                    logger.error(f"No preferences for shortcut index {shortcut_index}")
                    return ServerCode.ERROR
                windows = self._refreshed_windows()
                index = resolve_window_index(
                    command,
                    windows,
                    preferences,
                    self.window_source.frontmost_pid(),
                    self.window_source.visible_space_ids(),
                )
                return self._focus(windows, index)
            case HelpCommand():
                return ServerCode.ERROR
        return ServerCode.ERROR

    def _refreshed_windows(self):
        self.window_source.refresh()
        return self.window_source.snapshot()

    def _focus(self, windows: Sequence[WindowSnapshot], index: Optional[int]) -> ServerCode:
        if index is None:
            logger.info("No window matches the command")
            return ServerCode.ERROR

        window = windows[index]
        if not self.window_source.focus(window):
            logger.warning(f"Window source refused to focus window {window.window_id}")
            return ServerCode.ERROR
        return ServerCode.NO_OUTPUT
