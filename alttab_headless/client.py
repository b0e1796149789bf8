"""CLI client for the control daemon.

Sends one raw command over the Unix socket, waits (bounded) for the one-line
JSON reply and turns it into process output and an exit status.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from rich.console import Console
from rich.table import Table

from .constants import SUPPORTED_COMMANDS_MESSAGE, AppVariant
from .models.command import ServerCode

logger = logging.getLogger(__name__)

INVALID_COMMAND_MESSAGE = "Couldn't execute command. Is it correct?"
UNSUPPORTED_COMMAND_MESSAGE = f"Unsupported command in headless mode. {SUPPORTED_COMMANDS_MESSAGE}"
WARMING_UP_MESSAGE = "Headless daemon is still warming up. Try again in a few seconds."
DECODE_FAILURE_MESSAGE = "Failed to decode command response"

HELP_ROWS = (
    ("--list", "List window ids and titles as JSON"),
    ("--detailed-list", "List windows with every known attribute as JSON"),
    ("--help", "Show this help"),
    ("--logs=<level>", "Log level: verbose, debug, info, warning, error"),
)


class DaemonError(Exception):
    """Exception raised for daemon communication errors."""

    pass


class DaemonClient:
    """One-shot IPC client for the control daemon."""

    def __init__(self, socket_path: Path, timeout: float):
        """Initialize daemon client.

        Args:
            socket_path: Path to daemon Unix socket
            timeout: Timeout applied to connect, send and receive, in seconds
        """
        self.socket_path = socket_path
        self.timeout = timeout

    async def send(self, command: str) -> bytes:
        """Send a raw command and return the raw reply line.

        Raises:
            DaemonError: If the daemon cannot be reached or does not answer in time
        """
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_unix_connection(str(self.socket_path)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise DaemonError(f"Connection timeout: daemon not responding at {self.socket_path}")
        except (FileNotFoundError, ConnectionRefusedError):
            raise DaemonError(f"Daemon socket not available: {self.socket_path}")
        except OSError as e:
            raise DaemonError(f"Failed to connect to daemon: {e}")

        try:
            writer.write(command.encode("utf-8") + b"\n")
            await asyncio.wait_for(writer.drain(), timeout=self.timeout)
            reply = await asyncio.wait_for(reader.readline(), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise DaemonError(f"Request timeout: {command} took too long")
        except OSError as e:
            raise DaemonError(f"Communication error: {e}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass

        if not reply:
            raise DaemonError("Daemon closed the connection without answering")
        return reply


def interpret_response(raw: bytes) -> Tuple[int, Optional[str]]:
    """Map a raw reply to an exit status and the text to print.

    Args:
        raw: Reply bytes as received from the daemon

    Returns:
        (exit_code, message). A None message means print nothing.
    """
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return 1, DECODE_FAILURE_MESSAGE

    if isinstance(payload, dict) and isinstance(payload.get("windows"), list):
        return 0, json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

    if isinstance(payload, str):
        try:
            code = ServerCode(payload)
        except ValueError:
            return 1, DECODE_FAILURE_MESSAGE

        match code:
            case ServerCode.NO_OUTPUT:
                return 0, None
            case ServerCode.ERROR:
                return 1, INVALID_COMMAND_MESSAGE
            case ServerCode.UNSUPPORTED:
                return 1, UNSUPPORTED_COMMAND_MESSAGE
            case ServerCode.WARMING_UP_TIMEOUT:
                return 1, WARMING_UP_MESSAGE

    return 1, DECODE_FAILURE_MESSAGE


def daemon_unreachable_message(variant: AppVariant) -> str:
    return f"{variant.name} daemon needs to be running for CLI commands to work"


def send_command_and_process_response(command: str, variant: AppVariant, socket_path: Optional[Path] = None) -> int:
    """Send a command to the variant's daemon and print the outcome.

    Args:
        command: Raw command string
        variant: Process identity (endpoint and timeout)
        socket_path: Override of the variant's socket path

    Returns:
        Process exit status
    """
    client = DaemonClient(socket_path or variant.socket_path, variant.client_timeout)
    try:
        raw = asyncio.run(client.send(command))
    except DaemonError as e:
        logger.info(f"Command {command} failed: {e}")
        print_error(daemon_unreachable_message(variant))
        return 1

    exit_code, message = interpret_response(raw)
    if message is not None:
        if exit_code == 0:
            print(message)
        else:
            print_error(message)
    return exit_code


def print_error(message: str) -> None:
    Console(stderr=True, highlight=False).print(message, markup=False, soft_wrap=True)


def print_help(variant: AppVariant, console: Optional[Console] = None) -> None:
    """Print usage and the command table."""
    console = console or Console(file=sys.stdout, highlight=False)
    console.print(variant.usage, markup=False, soft_wrap=True)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Command")
    table.add_column("Description")
    for command, description in HELP_ROWS:
        table.add_row(command, description)
    console.print(table)
    console.print("Run with no arguments to start the headless daemon.")
