"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps an accepted client socket with the small, line-oriented
API the web worker needs: read one line, send bytes, close.

=============================================================================
TCP IS A BYTE STREAM, NOT A LINE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. The request

    GET /page.html HTTP/1.1\r\n
    Host: localhost\r\n
    \r\n

might arrive as any of:

    recv() → "GET /page.ht"          (partial line)
    recv() → "ml HTTP/1.1\r\nHost"   (rest of line + start of next)
    recv() → ": localhost\r\n\r\n"   (rest)

So we keep a buffer and only hand out a line once its '\n' has arrived.

=============================================================================
WAITING FOR INPUT WITHOUT SPINNING
=============================================================================

A client may connect and then take its time. We wait for the socket to
become readable with a selector (epoll or poll where available, so any
file descriptor number works), one short bounded step at a time:

    ┌─────────────────────────────────────────────────────────────────┐
    │                                                                  │
    │   while no '\n' in buffer:                                       │
    │       │                                                          │
    │       ├──► selector.select(timeout=poll_interval)                 │
    │       │        │                                                 │
    │       │        ├── not readable → check idle deadline, loop     │
    │       │        └── readable     → recv() → buffer               │
    │       │                                                          │
    │       └──► recv() returned b"" → peer closed                    │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

No sleeping, no busy loop: the kernel wakes us as soon as bytes arrive,
and every poll_interval we get a chance to notice an idle deadline.

=============================================================================
"""

import selectors
import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    One connection carries exactly one request, so there is no
    keep-alive state: NEW → READING → WRITING → CLOSING → CLOSED.
    """
    NEW = "new"              # Just accepted, haven't read anything yet
    READING = "reading"      # Waiting for / reading request lines
    WRITING = "writing"      # Sending response data
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents one client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. LINE READING                                                     │
    │     └── Buffer recv() chunks, hand out complete lines               │
    │     └── Wait for readiness in bounded selector steps                │
    │                                                                      │
    │  2. WRITING                                                          │
    │     └── sendall() so a header is complete before the body starts    │
    │     └── Report failures as False instead of raising                 │
    │                                                                      │
    │  3. GRACEFUL CLOSE                                                   │
    │     └── shutdown(SHUT_WR), drain, close                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Unique connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        last_activity: Timestamp of last activity.
    """

    # Required parameters
    socket: socket.socket
    address: tuple = ("", 0)

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192
    poll_interval: float = 0.05
    idle_timeout: Optional[float] = None
    max_line_size: int = 8192
    linger: float = 0.5

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        # Readiness is handled by a selector; recv() itself may block.
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_line(self) -> Optional[str]:
        """
        Read one line from the client.

        The line terminator ('\\n', and a preceding '\\r') is removed, so the
        blank line ending an HTTP header block comes back as "".

        Returns:
            The decoded line, or None once the peer has closed its side.
            A partial line followed by close is discarded: the request
            never finished arriving.

        Raises:
            TimeoutError: If idle_timeout elapses with no complete line.
            ValueError: If a line grows beyond max_line_size.
            OSError: On any other socket failure.
        """
        self.state = ConnectionState.READING
        deadline = None
        if self.idle_timeout is not None:
            deadline = time.monotonic() + self.idle_timeout

        while b"\n" not in self._buffer:
            self._wait_readable(deadline)
            chunk = self._recv()
            if not chunk:
                if self._buffer:
                    logger.debug(
                        f"[{self.id}] Peer closed mid-line, discarding "
                        f"{len(self._buffer)} bytes"
                    )
                    self._buffer = b""
                return None

            self._buffer += chunk

            if len(self._buffer) > self.max_line_size and b"\n" not in self._buffer:
                raise ValueError(f"Request line too long: {len(self._buffer)} bytes")

        line, _, self._buffer = self._buffer.partition(b"\n")
        if line.endswith(b"\r"):
            line = line[:-1]
        return line.decode("utf-8", errors="replace")

    def _wait_readable(self, deadline: Optional[float]) -> None:
        """Block in poll_interval steps until the socket has data (or EOF)."""
        with selectors.DefaultSelector() as selector:
            selector.register(self.socket, selectors.EVENT_READ)
            while True:
                if selector.select(self.poll_interval):
                    return
                if deadline is not None and time.monotonic() >= deadline:
                    raise TimeoutError("Request read timeout")

    def _recv(self) -> bytes:
        """
        Receive data from socket.

        Returns:
            Received bytes, or empty bytes if connection closed.
        """
        try:
            data = self.socket.recv(self.buffer_size)
            self.last_activity = time.time()
            return data
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> bool:
        """
        Send data to the client.

        Uses sendall(): when this returns True every byte has been handed
        to the kernel, so a header sent here is complete before anything
        sent afterwards.

        Returns:
            True if send succeeded, False if connection lost.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            self.last_activity = time.time()
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN, the client sees end of response
        2. drain: discard whatever the client still sends, for at most
           linger seconds in total
        3. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        deadline = time.monotonic() + self.linger
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
