"""Logging configuration for the daemon and the CLI.

Level resolution: --logs=<level> on the command line, else LOG_LEVEL in the
environment, else ERROR. The daemon sends records below WARNING to stdout
and the rest to stderr. CLI clients log everything to stderr so that stdout
carries only the reply.
"""

import logging
import os
import sys
from typing import Optional, Sequence

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
LOGS_FLAG_PREFIX = "--logs="
DEFAULT_LEVEL = logging.ERROR

LEVEL_NAMES = {
    "verbose": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class _BelowLevelFilter(logging.Filter):
    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def parse_level(name: Optional[str]) -> Optional[int]:
    """Map a level name (case-insensitive) to a logging level, None if unknown."""
    if not name:
        return None
    return LEVEL_NAMES.get(name.strip().lower())


def log_level_from_argv(argv: Sequence[str], environ: Optional[dict] = None) -> int:
    """Resolve the log level for this process.

    Args:
        argv: Full argument vector; the last --logs=<level> wins
        environ: Environment (defaults to os.environ)

    Returns:
        logging level constant

    Examples:
        >>> log_level_from_argv(["alttab-headless", "--logs=debug"])
        10
    """
    environ = os.environ if environ is None else environ
    level = None
    for arg in argv[1:]:
        if arg.startswith(LOGS_FLAG_PREFIX):
            level = parse_level(arg[len(LOGS_FLAG_PREFIX):]) or level
    if level is None:
        level = parse_level(environ.get("LOG_LEVEL"))
    return level if level is not None else DEFAULT_LEVEL


def _formatter_for(stream) -> logging.Formatter:
    if hasattr(stream, "isatty") and stream.isatty():
        return ColoredFormatter(LOG_FORMAT)
    return logging.Formatter(LOG_FORMAT)


def setup_logging(argv: Sequence[str], stderr_only: bool = False) -> int:
    """Configure the root logger.

    Args:
        argv: Full argument vector (for --logs=)
        stderr_only: Route every record to stderr (client mode)

    Returns:
        The resolved level
    """
    level = log_level_from_argv(argv)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    if stderr_only:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(_formatter_for(sys.stderr))
        root.addHandler(handler)
        return level

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.addFilter(_BelowLevelFilter(logging.WARNING))
    stdout_handler.setFormatter(_formatter_for(sys.stdout))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(max(level, logging.WARNING))
    stderr_handler.setFormatter(_formatter_for(sys.stderr))

    root.addHandler(stdout_handler)
    root.addHandler(stderr_handler)
    return level
