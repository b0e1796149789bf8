"""Command grammar shared by the CLI client and the daemon.

Pure parsing: argv lists and raw command strings in, typed values out.

Grammar (literal prefixes):
    --list
    --detailed-list
    --help
    --focus=<uint>
    --focusUsingLastFocusOrder=<int>
    --show=<int in 0..3>

Three outcomes are possible for a raw string under a CommandSupport
profile: a Command, "unsupported" (recognized prefix the profile denies),
or "invalid". They are mutually exclusive.
"""

import logging
import re
from typing import List, Optional, Sequence

from .models.command import (
    ClientMode,
    Command,
    CommandSupport,
    DaemonMode,
    DetailedListCommand,
    FocusCommand,
    FocusUsingLastFocusOrderCommand,
    HelpCommand,
    HelpMode,
    InvalidMode,
    ListCommand,
    SendCommandMode,
    ShowCommand,
    UnsupportedMode,
)

logger = logging.getLogger(__name__)

LIST_COMMAND = "--list"
DETAILED_LIST_COMMAND = "--detailed-list"
HELP_COMMAND = "--help"
FOCUS_PREFIX = "--focus="
FOCUS_USING_LAST_FOCUS_ORDER_PREFIX = "--focusUsingLastFocusOrder="
SHOW_PREFIX = "--show="
LOGS_PREFIX = "--logs="

# Flags injected by launchers and the runtime, never typed by a user
IGNORED_INJECTED_FLAGS = frozenset({
    "-NSDocumentRevisionsDebugMode",
    "-ApplePersistenceIgnoreState",
    "-AppleLanguages",
    "-AppleLocale",
})
PROCESS_SERIAL_NUMBER_PREFIX = "-psn_"

SHORTCUT_INDEX_RANGE = range(0, 4)

_UINT_PATTERN = re.compile(r"\+?[0-9]+")
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


def normalize_arguments(argv: Sequence[str], ignore_injected_flags: bool = True) -> List[str]:
    """Strip the program name, --logs=... and launcher-injected flags.

    Args:
        argv: Full argument vector including the program name
        ignore_injected_flags: Also drop single-dash flags and their values

    Returns:
        Remaining user arguments

    Examples:
        >>> normalize_arguments(["prog", "--logs=x", "-AppleLanguages", "en-US", "-psn_0_1", "--list"])
        ['--list']
    """
    args = list(argv[1:])
    filtered: List[str] = []
    idx = 0
    while idx < len(args):
        arg = args[idx]
        if arg.startswith(LOGS_PREFIX):
            idx += 1
            continue
        if ignore_injected_flags and _is_injected_flag(arg):
            idx = _index_after_injected_value(args, idx)
            continue
        filtered.append(arg)
        idx += 1
    return filtered


def detect_client_mode(argv: Sequence[str], support: CommandSupport) -> ClientMode:
    """Classify a process argument vector.

    Args:
        argv: Full argument vector including the program name
        support: Client capability profile

    Returns:
        One of DaemonMode, HelpMode, SendCommandMode, UnsupportedMode, InvalidMode
    """
    args = normalize_arguments(argv)
    if not args:
        return DaemonMode()

    # Bare positional launch tokens carry no CLI intent
    if not any(arg.startswith("--") for arg in args):
        logger.debug(f"Ignoring non-CLI launch arguments: {args}")
        return DaemonMode()

    if len(args) != 1:
        return InvalidMode()

    arg = args[0]
    if arg == HELP_COMMAND:
        return HelpMode() if support.supports_help else InvalidMode()

    if _is_sendable_command(arg, support):
        return SendCommandMode(arg)

    if is_unsupported_command(arg, support):
        return UnsupportedMode(arg)

    return InvalidMode()


def parse_server_command(raw: str, support: CommandSupport) -> Optional[Command]:
    """Parse a raw command and keep it only if the profile grants it.

    Args:
        raw: Raw command string as received over IPC
        support: Server capability profile

    Returns:
        Parsed Command, or None if malformed or not granted
    """
    command = parse_command(raw)
    if command is None:
        return None

    match command:
        case FocusCommand():
            return command if support.supports_focus else None
        case FocusUsingLastFocusOrderCommand():
            return command if support.supports_focus_using_last_focus_order else None
        case ShowCommand():
            return command if support.supports_show else None
        case HelpCommand():
            return command if support.supports_help else None
        case ListCommand() | DetailedListCommand():
            return command


def is_unsupported_command(raw: str, support: CommandSupport) -> bool:
    """True if raw carries a focus/order/show prefix the profile denies.

    The payload is not inspected: "--focus=abc" under a profile without focus
    support is unsupported, not invalid.
    """
    if raw.startswith(FOCUS_PREFIX) and not support.supports_focus:
        return True
    if raw.startswith(FOCUS_USING_LAST_FOCUS_ORDER_PREFIX) and not support.supports_focus_using_last_focus_order:
        return True
    if raw.startswith(SHOW_PREFIX) and not support.supports_show:
        return True
    return False


def should_wait_for_readiness(raw: str) -> bool:
    """True for commands that need initial discovery to be complete.

    Malformed payloads and --help answer immediately.
    """
    if raw in (LIST_COMMAND, DETAILED_LIST_COMMAND):
        return True
    return isinstance(parse_command(raw), (FocusCommand, FocusUsingLastFocusOrderCommand, ShowCommand))


def parse_command(raw: str) -> Optional[Command]:
    """Parse a raw string into a Command, ignoring capabilities."""
    if raw == LIST_COMMAND:
        return ListCommand()

    if raw == DETAILED_LIST_COMMAND:
        return DetailedListCommand()

    if raw == HELP_COMMAND:
        return HelpCommand()

    if raw.startswith(FOCUS_PREFIX):
        window_id = _parse_uint(raw[len(FOCUS_PREFIX):])
        return FocusCommand(window_id) if window_id is not None else None

    if raw.startswith(FOCUS_USING_LAST_FOCUS_ORDER_PREFIX):
        last_focus_order = _parse_int(raw[len(FOCUS_USING_LAST_FOCUS_ORDER_PREFIX):])
        if last_focus_order is None:
            return None
        return FocusUsingLastFocusOrderCommand(last_focus_order)

    if raw.startswith(SHOW_PREFIX):
        shortcut_index = _parse_int(raw[len(SHOW_PREFIX):])
        if shortcut_index is None or shortcut_index not in SHORTCUT_INDEX_RANGE:
            return None
        return ShowCommand(shortcut_index)

    return None


def _is_sendable_command(arg: str, support: CommandSupport) -> bool:
    if arg in (LIST_COMMAND, DETAILED_LIST_COMMAND):
        return True
    if arg.startswith(FOCUS_PREFIX):
        return support.supports_focus
    if arg.startswith(FOCUS_USING_LAST_FOCUS_ORDER_PREFIX):
        return support.supports_focus_using_last_focus_order
    if arg.startswith(SHOW_PREFIX):
        return support.supports_show
    return False


def _is_injected_flag(arg: str) -> bool:
    if arg.startswith("--"):
        return False
    return (
        arg in IGNORED_INJECTED_FLAGS
        or arg.startswith(PROCESS_SERIAL_NUMBER_PREFIX)
        or arg.startswith("-")
    )


def _index_after_injected_value(args: List[str], current: int) -> int:
    """Skip the flag, and its value when the next token is not itself a flag."""
    next_index = current + 1
    if next_index < len(args) and not args[next_index].startswith("-"):
        return next_index + 1
    return next_index


def _parse_uint(text: str) -> Optional[int]:
    if not _UINT_PATTERN.fullmatch(text):
        return None
    return int(text)


def _parse_int(text: str) -> Optional[int]:
    if not _INT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if value < _INT64_MIN or value > _INT64_MAX:
        return None
    return value
