"""Unix socket listener for CLI commands.

Protocol: the client writes one UTF-8 command line, the server answers with
one line of compact JSON and closes the connection. Requests are handled
one at a time; the blocking executor runs off the event loop.
"""

import asyncio
import logging
import socket
from pathlib import Path
from typing import Optional

from .executor import CommandExecutor
from .models.command import ServerCode
from .models.responses import Response, encode_response

logger = logging.getLogger(__name__)

READ_TIMEOUT_SECONDS = 10.0


class IPCServerError(Exception):
    """Raised when the listener cannot own its endpoint."""

    pass


def socket_is_live(socket_path: Path) -> bool:
    """True if something is accepting connections on socket_path."""
    probe = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    probe.settimeout(0.5)
    try:
        probe.connect(str(socket_path))
        return True
    except OSError:
        return False
    finally:
        probe.close()


class IPCServer:
    """IPC listener bound to a Unix socket endpoint."""

    def __init__(self, executor: CommandExecutor, socket_path: Path) -> None:
        """Initialize IPC server.

        Args:
            executor: Executor answering each command
            socket_path: Socket file to listen on
        """
        self.executor = executor
        self.socket_path = socket_path
        self.server: Optional[asyncio.Server] = None
        self.clients: set[asyncio.StreamWriter] = set()
        self._request_lock = asyncio.Lock()

    async def start(self) -> None:
        """Bind the endpoint and start serving.

        Raises:
            IPCServerError: If another daemon owns the endpoint or binding fails
        """
        socket_path = self.socket_path
        socket_path.parent.mkdir(parents=True, exist_ok=True)

        if socket_path.exists():
            if socket_is_live(socket_path):
                raise IPCServerError(f"Another daemon is listening on {socket_path}")
            logger.info(f"Removing stale socket {socket_path}")
            socket_path.unlink()

        try:
            self.server = await asyncio.start_unix_server(self._handle_client, path=str(socket_path))
        except OSError as e:
            raise IPCServerError(f"Cannot listen on {socket_path}: {e}") from e

        # Socket is user-only accessible (0600), parent directory too (0700)
        socket_path.chmod(0o600)
        if socket_path.parent != Path("/tmp"):
            socket_path.parent.chmod(0o700)

        logger.info(f"IPC server listening on {socket_path} (permissions: 0600)")

    async def stop(self) -> None:
        """Stop IPC server and close all connections."""
        if self.server:
            self.server.close()
            await self.server.wait_closed()
            self.server = None

        for writer in list(self.clients):
            writer.close()

        try:
            self.socket_path.unlink()
        except FileNotFoundError:
            pass

        logger.info("IPC server stopped")

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Handle a client connection: one request, one response."""
        self.clients.add(writer)
        try:
            data = await asyncio.wait_for(reader.readline(), timeout=READ_TIMEOUT_SECONDS)
            if not data:
                logger.debug("Client disconnected without sending a command")
                return

            response = await self._handle_request(data)
            writer.write(encode_response(response) + b"\n")
            await writer.drain()

        except asyncio.TimeoutError:
            logger.warning("Timed out waiting for a command from client")
        except (ConnectionError, asyncio.IncompleteReadError) as e:
            logger.debug(f"Client connection lost: {e}")
        except Exception as e:
            logger.error(f"Error handling client: {e}", exc_info=True)

        finally:
            self.clients.discard(writer)
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    async def _handle_request(self, data: bytes) -> Response:
        try:
            raw = data.decode("utf-8").rstrip("\r\n")
        except UnicodeDecodeError:
            logger.error("Failed to decode message")
            return ServerCode.ERROR

        logger.debug(f"Received command: {raw}")
        async with self._request_lock:
            response = await asyncio.to_thread(self.executor.execute, raw)
        logger.debug(f"Answering {raw} with {response if isinstance(response, ServerCode) else 'window list'}")
        return response
