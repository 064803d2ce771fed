"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

The listener that sits in front of the workers: it binds, listens, and
hands every accepted socket, wrapped in a Connection, to a callback.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a socket file descriptor
    2. bind()      Associate the socket with an IP:PORT
    3. listen()    Start queueing incoming connections
    4. accept()    Wait for a client, get a NEW socket just for it
    5. close()     Release the listening socket on shutdown

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    └───────────┬───────────┘
                                │ accept()
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │ Worker 1  │         │ Worker 2  │         │ Worker 3  │
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
SIGNAL HANDLING
=============================================================================

SIGINT (Ctrl+C) and SIGTERM trigger a graceful shutdown. Python only
allows installing signal handlers from the main thread, so when the server
is started from another thread (tests, embedding) we skip that step and
rely on shutdown() being called directly.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        # The actual socket object (created in start())
        self._socket: Optional[socket.socket] = None

        self._running = False

        # Set once the socket is listening; callers using port 0 wait on it
        self.ready = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The address actually bound.

        With port=0 this reports the port the OS picked, once ready is set.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Avoid "Address already in use" when restarting
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in two small sends (header, body)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # accept() wakes up every second so shutdown() is noticed
        sock.settimeout(1.0)

        return sock

    def _setup_signals(self):
        """Install SIGTERM/SIGINT handlers (main thread only)."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Start accepting connections. Blocks until shutdown() is called.

        Args:
            connection_handler: Called with each new Connection. It must
                                return quickly (hand the work to a thread).
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._running = True

        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self.ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()

                logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    buffer_size=self.config.buffer_size,
                    poll_interval=self.config.poll_interval,
                    idle_timeout=self.config.idle_timeout,
                    max_line_size=self.config.max_line_size,
                    linger=self.config.linger,
                )

                connection_handler(conn)

            except socket.timeout:
                # Periodic wake-up to check self._running
                continue

            except OSError as e:
                # Socket error - usually means we're shutting down
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

    def shutdown(self):
        """Initiate graceful shutdown. Safe to call more than once."""
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self.ready.clear()
        logger.info("Socket server stopped")
