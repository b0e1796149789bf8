"""Readiness gate for commands that need initial discovery.

A one-way latch: NotReady -> Ready. Listener requests block in
wait_until_ready() (bounded by a timeout) until the discovery task calls
mark_ready(). All waiters are released together.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class ReadinessGate:
    """Monitor (lock + condition) around a single monotonic `ready` flag."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._ready = False

    @property
    def is_ready(self) -> bool:
        with self._condition:
            return self._ready

    def mark_ready(self) -> None:
        """Mark discovery complete and wake every waiter. Idempotent."""
        with self._condition:
            if not self._ready:
                logger.debug("Readiness gate opened")
            self._ready = True
            self._condition.notify_all()

    def wait_until_ready(self, timeout: float) -> bool:
        """Block until ready or until `timeout` seconds elapse.

        Args:
            timeout: Maximum wait in seconds

        Returns:
            True if the gate is open, False if the wait timed out
        """
        with self._condition:
            if self._ready:
                return True
            ready = self._condition.wait_for(lambda: self._ready, timeout=timeout)
            if not ready:
                logger.debug(f"Readiness wait timed out after {timeout:.2f}s")
            return ready

    def reset_for_testing(self) -> None:
        with self._condition:
            self._ready = False
