"""Preferences loader and watcher.

Loads preferences.json into the Preferences model, keeps the current
document in a thread-safe store, and reloads it when the file changes on
disk. A broken file never replaces a good document.
"""

import asyncio
import json
import logging
import subprocess
import threading
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .models.preferences import Preferences

logger = logging.getLogger(__name__)


def load_preferences(config_file: Path) -> Preferences:
    """Load preferences from JSON file.

    Args:
        config_file: Path to preferences.json

    Returns:
        Preferences document (defaults when the file does not exist)

    Raises:
        ValueError: If the file is not valid JSON or fails validation
    """
    if not config_file.exists():
        logger.info(f"No preferences file at {config_file}, using defaults")
        return Preferences()

    try:
        with open(config_file) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {config_file}: {e}") from e
    except OSError as e:
        raise ValueError(f"Cannot read {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Preferences in {config_file} must be a JSON object")

    try:
        preferences = Preferences.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid preferences in {config_file}: {e}") from e

    logger.info(f"Loaded preferences from {config_file}")
    return preferences


def load_preferences_or_defaults(config_file: Path) -> Preferences:
    """Startup load: an invalid file is logged and replaced by defaults."""
    try:
        return load_preferences(config_file)
    except ValueError as e:
        logger.error(f"Failed to load preferences, using defaults: {e}")
        return Preferences()


def reload_preferences(config_file: Path, previous: Preferences) -> Preferences:
    """Reload preferences with error handling.

    Args:
        config_file: Path to preferences.json
        previous: Currently active preferences (retained on error)

    Returns:
        Newly loaded preferences, or `previous` on error
    """
    try:
        return load_preferences(config_file)
    except ValueError as e:
        logger.error(f"Failed to reload preferences: {e}")
        _notify_reload_failure(str(e))
        logger.warning("Retaining previous preferences")
        return previous


def _notify_reload_failure(message: str) -> None:
    try:
        subprocess.run(
            ["notify-send", "-u", "critical", "AltTab Headless Preferences Error",
             f"Failed to reload preferences.json:\n{message[:100]}"],
            check=False,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Desktop notification unavailable: {e}")


class PreferencesStore:
    """Current preferences, shared between the control thread and reloads."""

    def __init__(self, config_file: Path, preferences: Optional[Preferences] = None):
        self.config_file = config_file
        self._lock = threading.Lock()
        self._preferences = preferences if preferences is not None else load_preferences_or_defaults(config_file)

    def get(self) -> Preferences:
        with self._lock:
            return self._preferences

    def reload(self) -> Preferences:
        """Re-read the file; keep the current document if it is invalid."""
        with self._lock:
            previous = self._preferences
        preferences = reload_preferences(self.config_file, previous)
        with self._lock:
            self._preferences = preferences
        return preferences


class DebouncedReloadHandler(FileSystemEventHandler):
    """File system event handler with debounced reload callback.

    Debounces rapid file modifications (e.g., editor save sequences)
    to prevent excessive reload operations. Watchdog delivers events on its
    own thread; the callback always runs on the event loop.
    """

    def __init__(self, callback: Callable[[], object], debounce_ms: int = 100, target_filename: Optional[str] = None):
        """Initialize debounced reload handler.

        Args:
            callback: Function to call after debounce period
            debounce_ms: Debounce timeout in milliseconds (default: 100ms)
            target_filename: If set, only trigger on events for this filename
        """
        super().__init__()
        self.callback = callback
        self.debounce_seconds = debounce_ms / 1000
        self.target_filename = target_filename
        self._pending: Optional[asyncio.TimerHandle] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def set_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def _schedule_callback(self) -> None:
        if self._loop is None:
            logger.warning("No event loop set for debounced handler, calling immediately")
            self.callback()
            return
        self._loop.call_soon_threadsafe(self._restart_timer)

    def _restart_timer(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            logger.debug("Debounced reload rescheduled (rapid file changes)")
        self._pending = self._loop.call_later(self.debounce_seconds, self._fire)

    def _fire(self) -> None:
        self._pending = None
        self.callback()

    def _should_trigger(self, event) -> bool:
        if event.is_directory:
            return False
        if self.target_filename:
            # Atomic saves arrive as a move onto the target name
            event_path = getattr(event, "dest_path", None) or event.src_path
            return Path(event_path).name == self.target_filename
        return True

    def on_modified(self, event) -> None:
        if self._should_trigger(event):
            self._schedule_callback()

    def on_moved(self, event) -> None:
        if self._should_trigger(event):
            self._schedule_callback()

    def on_created(self, event) -> None:
        if self._should_trigger(event):
            self._schedule_callback()


class PreferencesWatcher:
    """Watches preferences.json and reloads the store on change."""

    def __init__(self, store: PreferencesStore, debounce_ms: int = 100):
        self.store = store
        self.observer = Observer()
        self.handler = DebouncedReloadHandler(store.reload, debounce_ms, target_filename=store.config_file.name)
        self._started = False

    def set_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self.handler.set_event_loop(loop)

    def start(self) -> None:
        """Start watching.

        Watches the parent directory since some editors use atomic save
        (create temp file + rename) which doesn't trigger inotify on the file itself.
        """
        if self._started:
            logger.warning("Preferences watcher already started")
            return

        watch_dir = self.store.config_file.parent
        watch_dir.mkdir(parents=True, exist_ok=True)

        self.observer.schedule(self.handler, str(watch_dir), recursive=False)
        self.observer.start()
        self._started = True
        logger.info(f"Started watching {self.store.config_file} for modifications")

    def stop(self) -> None:
        if not self._started:
            return

        self.observer.stop()
        self.observer.join(timeout=5.0)
        self._started = False
        logger.info(f"Stopped watching {self.store.config_file}")
