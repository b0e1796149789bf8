"""Signal and fault exit policy.

Exactly two signals are intercepted by the daemon:

- SIGTERM: graceful. Logged, orderly shutdown, exit code 0, no stack dump.
- SIGTRAP: emergency. Logged, call stack dumped, immediate exit code 1.

Uncaught exceptions on any thread take the emergency path as well.
"""

import asyncio
import logging
import os
import signal
import sys
import threading
import traceback
from types import FrameType, TracebackType
from typing import Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)

GRACEFUL_SIGNAL = signal.SIGTERM
EMERGENCY_SIGNAL = signal.SIGTRAP
INTERCEPTED_SIGNALS: Tuple[signal.Signals, ...] = (GRACEFUL_SIGNAL, EMERGENCY_SIGNAL)


def should_emergency_exit(signum: int) -> bool:
    """Every intercepted signal other than SIGTERM is an emergency."""
    return signum != GRACEFUL_SIGNAL


def exit_code_for(signum: int) -> int:
    return 1 if should_emergency_exit(signum) else 0


def emergency_exit(message: str, frame: Optional[FrameType] = None) -> None:
    """Log, dump the call stack to stderr and terminate immediately.

    Args:
        message: Reason logged before exiting
        frame: Frame to dump from (defaults to the caller's frame)
    """
    logger.critical(message)
    print(message, file=sys.stderr)
    traceback.print_stack(frame, file=sys.stderr)
    sys.stderr.flush()
    logging.shutdown()
    os._exit(1)


def install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    on_graceful_exit: Callable[[], None],
) -> None:
    """Register the SIGTERM and SIGTRAP handlers.

    Args:
        loop: Event loop the graceful callback is scheduled on
        on_graceful_exit: Called on the loop thread to begin shutdown
    """

    def graceful_handler(signum, frame):
        logger.info(f"Received signal {signum}, initiating shutdown...")
        # Signal handlers run in interrupt context; hand off to the loop
        loop.call_soon_threadsafe(on_graceful_exit)

    def emergency_handler(signum, frame):
        emergency_exit(f"Exiting after receiving signal {signum}", frame)

    for signum in INTERCEPTED_SIGNALS:
        if should_emergency_exit(signum):
            signal.signal(signum, emergency_handler)
        else:
            signal.signal(signum, graceful_handler)


def install_fault_handlers() -> None:
    """Route uncaught exceptions (main and worker threads) to emergency_exit."""

    def excepthook(
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_traceback: Optional[TracebackType],
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))
        emergency_exit(f"Exiting after receiving uncaught exception: {exc_value!r}")

    def thread_excepthook(args: threading.ExceptHookArgs) -> None:
        excepthook(args.exc_type, args.exc_value, args.exc_traceback)

    sys.excepthook = excepthook
    threading.excepthook = thread_excepthook
