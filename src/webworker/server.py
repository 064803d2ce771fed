"""
=============================================================================
WEB SERVER - THREAD PER CONNECTION
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │         │                                                            │
    │         ▼                                                            │
    │   WebServer._handle_connection(conn)                                 │
    │         │                                                            │
    │         └──► threading.Thread(target=WebWorker(conn, config).run)   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Each worker thread handles one connection and exits. Workers share no
mutable state, so the only bookkeeping here is the set of live threads,
kept so shutdown can wait for in-flight requests.

=============================================================================
"""

import logging
import threading
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection
from .worker import WebWorker


logger = logging.getLogger(__name__)


class WebServer:
    """
    Accepts connections and runs one WebWorker thread per connection.

    Usage:
        server = WebServer(ServerConfig(port=8080, base_dir="./public"))
        server.run()   # blocks until Ctrl+C / SIGTERM / shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)

        self._workers: set = set()
        self._workers_lock = threading.Lock()

    @property
    def address(self):
        """Bound (host, port); meaningful once ready is set."""
        return self._socket_server.address

    @property
    def ready(self) -> threading.Event:
        """Set once the listening socket accepts connections."""
        return self._socket_server.ready

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, setup_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            setup_logging: Configure the root logger from config.log_level.
        """
        if setup_logging:
            self._setup_logging()

        logger.info(
            f"Serving {self.config.base_dir} on "
            f"{self.config.host}:{self.config.port} as {self.config.server_name}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask the server to stop; run() returns shortly after."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webworker").setLevel(level)

    def _shutdown(self, timeout: float = 5.0):
        """Wait (up to timeout seconds each) for in-flight workers."""
        logger.info("Shutting down server...")

        with self._workers_lock:
            workers = list(self._workers)

        for thread in workers:
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(f"Worker {thread.name} still running at shutdown")

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Start a worker thread for a freshly accepted connection."""
        worker = WebWorker(conn, self.config)
        thread = threading.Thread(
            target=self._run_worker,
            args=(worker,),
            name=f"worker-{conn.id}",
            daemon=True,
        )
        with self._workers_lock:
            self._workers.add(thread)
        thread.start()

    def _run_worker(self, worker: WebWorker):
        try:
            worker.run()
        finally:
            with self._workers_lock:
                self._workers.discard(threading.current_thread())
