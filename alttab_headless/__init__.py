"""AltTab Headless Control Daemon

Headless window-switcher control daemon.

This package provides a long-running daemon that:
- Listens on a local Unix socket for short CLI commands (--list, --focus=...)
- Waits for initial window discovery before answering listing/focus queries
- Selects the window to activate for --show=<n> from user preference profiles
- Refuses to start while the full application is already running

Author: AltTab Headless contributors
License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"
