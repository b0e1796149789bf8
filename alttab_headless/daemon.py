"""Control daemon lifecycle.

Startup order:
    1. Conflict guard (headless variant only): refuse to run next to the full app
    2. Preferences load + file watcher
    3. Window source, executor, IPC endpoint bind (fail fast if owned)
    4. Initial discovery on the control thread, then open the readiness gate
    5. Serve until SIGTERM
"""

import asyncio
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel

from .config import PreferencesStore, PreferencesWatcher
from .conflict_guard import enforce_no_conflict
from .constants import STARTUP_FAILURE_MESSAGE, AppVariant, preferences_path
from .executor import CommandExecutor
from .ipc_server import IPCServer, IPCServerError
from .logging_config import setup_logging
from .models.window import RunningAppSnapshot
from .readiness import ReadinessGate
from .services.i3_window_source import I3WindowSource
from .services.running_apps import running_app_snapshots
from .services.static_window_source import StaticWindowSource
from .services.window_source import WindowSource, WindowSourceError
from .signal_policy import install_fault_handlers, install_signal_handlers

logger = logging.getLogger(__name__)


def present_conflict_alert(pids: List[int]) -> None:
    """Tell the user why the daemon refuses to start."""
    message = (
        f"AltTab is already running (pid {', '.join(str(pid) for pid in pids)}).\n"
        "Quit AltTab before launching AltTabHeadless."
    )
    logger.critical(f"Conflicting AltTab instance(s): {pids}")
    Console(stderr=True).print(
        Panel(message, title="AltTabHeadless cannot start", border_style="red", padding=(1, 2)),
        markup=False,
    )
    try:
        subprocess.run(
            ["notify-send", "-u", "critical", "AltTabHeadless cannot start", message],
            check=False,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Desktop notification unavailable: {e}")


def fail_fast(message: str) -> None:
    """Log, report on stderr and exit with status 1."""
    logger.critical(message)
    print(message, file=sys.stderr)
    sys.exit(1)


class HeadlessDaemon:
    """Owns every long-lived component of the daemon process."""

    def __init__(
        self,
        variant: AppVariant,
        window_source: Optional[WindowSource] = None,
        config_file: Optional[Path] = None,
        socket_path: Optional[Path] = None,
        running_apps_provider: Callable[[], Iterable[RunningAppSnapshot]] = running_app_snapshots,
    ) -> None:
        """Initialize daemon.

        Args:
            variant: Process identity (endpoint, capability profiles)
            window_source: Window source (i3/Sway when None)
            config_file: Preferences file (default: preferences_path())
            socket_path: Endpoint socket (default: the variant's socket)
            running_apps_provider: Process snapshot provider for the conflict guard
        """
        self.variant = variant
        self.window_source = window_source
        self.config_file = config_file or preferences_path()
        self.socket_path = socket_path or variant.socket_path
        self.running_apps_provider = running_apps_provider

        self.readiness_gate = ReadinessGate()
        self.preferences: Optional[PreferencesStore] = None
        self.preferences_watcher: Optional[PreferencesWatcher] = None
        self.executor: Optional[CommandExecutor] = None
        self.ipc_server: Optional[IPCServer] = None
        self.discovery_future = None
        self.shutdown_event = asyncio.Event()

    def ensure_full_app_not_running(self) -> bool:
        """Run the conflict guard. Exits the process on conflict."""
        if not self.variant.checks_for_conflicts:
            return False
        return enforce_no_conflict(self.running_apps_provider, os.getpid, present_conflict_alert, fail_fast)

    async def initialize(self) -> None:
        """Load preferences, build the executor and bind the endpoint.

        Raises:
            IPCServerError: If the endpoint cannot be owned
        """
        self.preferences = PreferencesStore(self.config_file)
        self.preferences_watcher = PreferencesWatcher(self.preferences)
        self.preferences_watcher.set_event_loop(asyncio.get_running_loop())
        try:
            self.preferences_watcher.start()
        except OSError as e:
            logger.warning(f"Preferences hot reload disabled: {e}")
            self.preferences_watcher = None

        if self.window_source is None:
            self.window_source = self._default_window_source()

        self.executor = CommandExecutor(
            self.window_source,
            self.readiness_gate,
            self.variant.server_support,
            self.preferences.get,
        )
        self.ipc_server = IPCServer(self.executor, self.socket_path)
        await self.ipc_server.start()

    def _default_window_source(self) -> WindowSource:
        source = I3WindowSource()
        try:
            _ = source.connection
        except WindowSourceError as e:
            logger.error(f"{e}; serving an empty window list")
            return StaticWindowSource()
        return source

    def start_initial_discovery(self):
        """Queue the first refresh on the control thread; it opens the gate."""

        def discover() -> None:
            try:
                self.window_source.refresh()
                logger.info(f"Initial discovery found {len(self.window_source.snapshot())} windows")
            except Exception:
                logger.exception("Initial discovery failed")
            finally:
                self.readiness_gate.mark_ready()

        self.discovery_future = self.executor.submit_to_control_thread(discover)
        return self.discovery_future

    def request_shutdown(self) -> None:
        self.shutdown_event.set()

    async def run(self) -> int:
        """Serve until shutdown is requested.

        Returns:
            Exit code (0 = success, 1 = endpoint bind failure)
        """
        install_signal_handlers(asyncio.get_running_loop(), self.request_shutdown)

        try:
            await self.initialize()
        except IPCServerError as e:
            logger.critical(f"{STARTUP_FAILURE_MESSAGE} ({e})")
            print(STARTUP_FAILURE_MESSAGE, file=sys.stderr)
            await self.shutdown()
            return 1

        self.start_initial_discovery()
        logger.info(f"{self.variant.name} daemon ready on {self.socket_path} (pid {os.getpid()})")

        await self.shutdown_event.wait()
        await self.shutdown()
        return 0

    async def shutdown(self) -> None:
        """Graceful shutdown with timeouts to prevent hanging."""
        logger.info("Shutting down daemon...")

        if self.preferences_watcher:
            try:
                self.preferences_watcher.stop()
            except Exception as e:
                logger.error(f"Error stopping preferences watcher: {e}")

        if self.ipc_server and self.ipc_server.server:
            try:
                await asyncio.wait_for(self.ipc_server.stop(), timeout=5.0)
            except asyncio.TimeoutError:
                logger.warning("IPC server shutdown timed out after 5s (continuing)")

        if self.executor:
            try:
                await asyncio.wait_for(asyncio.to_thread(self.executor.shutdown), timeout=5.0)
            except asyncio.TimeoutError:
                logger.warning("Control thread shutdown timed out after 5s (continuing)")

        if self.window_source:
            try:
                self.window_source.close()
            except Exception as e:
                logger.error(f"Error closing window source: {e}")

        logger.info("Daemon shutdown complete")


def run_daemon(variant: AppVariant, argv: Sequence[str]) -> int:
    """Process entry point for daemon mode.

    Args:
        variant: Process identity
        argv: Full argument vector (for --logs=)

    Returns:
        Exit code
    """
    setup_logging(argv)
    install_fault_handlers()

    logger.info(f"{variant.name} daemon starting (pid {os.getpid()})")
    daemon = HeadlessDaemon(variant)
    daemon.ensure_full_app_not_running()

    try:
        return asyncio.run(daemon.run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
