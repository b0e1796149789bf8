"""Entry points: `alttab-headless`, `alttab` and `python -m alttab_headless`.

With no command the process becomes the daemon; with a command it acts as
a one-shot client of the already running daemon.
"""

import logging
import sys
from typing import Optional, Sequence

from .cli_grammar import detect_client_mode
from .client import print_error, print_help, send_command_and_process_response
from .constants import FULL_APP, HEADLESS_APP, HEADLESS_SUPPORTED_COMMANDS_MESSAGE, AppVariant
from .daemon import run_daemon
from .logging_config import setup_logging
from .models.command import DaemonMode, HelpMode, InvalidMode, SendCommandMode, UnsupportedMode

logger = logging.getLogger(__name__)


def run(variant: AppVariant, argv: Optional[Sequence[str]] = None) -> int:
    """Dispatch on the client mode detected from argv.

    Args:
        variant: Process identity
        argv: Full argument vector (default: sys.argv)

    Returns:
        Process exit status
    """
    argv = list(sys.argv if argv is None else argv)
    mode = detect_client_mode(argv, variant.client_support)

    match mode:
        case DaemonMode():
            return run_daemon(variant, argv)
        case HelpMode():
            print_help(variant)
            return 0
        case SendCommandMode(raw=raw):
            setup_logging(argv, stderr_only=True)
            return send_command_and_process_response(raw, variant)
        case UnsupportedMode(raw=raw):
            print_error(f"Unsupported command in headless mode: {raw}")
            print_error(HEADLESS_SUPPORTED_COMMANDS_MESSAGE)
            return 1
        case InvalidMode():
            print_error(variant.usage)
            return 1
    return 1


def main() -> None:
    """Headless daemon / client entry point."""
    sys.exit(run(HEADLESS_APP))


def main_full() -> None:
    """Full application client entry point."""
    sys.exit(run(FULL_APP))


if __name__ == "__main__":
    main()
