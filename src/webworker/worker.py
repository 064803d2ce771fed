"""
=============================================================================
WEB WORKER - ONE CONNECTION, ONE REQUEST
=============================================================================

A WebWorker owns a single accepted connection from start to finish:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        WebWorker.run()                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   read lines ──────────────────────────────────────┐                │
    │       │                                              │                │
    │       ├── "GET <target> <version>" (first one only)  │                │
    │       │        │                                     │                │
    │       │        ├──► PathResolver.resolve(target)    │                │
    │       │        ├──► send header  (200 / 404)        │                │
    │       │        └──► send body    (page / file / 404)│                │
    │       │                                              │                │
    │       ├── any other line → ignored (drained)  ◄─────┘                │
    │       │                                                              │
    │       └── "" (blank line), end of stream, or error → stop            │
    │                                                                      │
    │   close connection (always)                                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FAILURE MODES
=============================================================================

    Client slow to send            wait (bounded select steps), no error
    Malformed GET line             log, abandon request, nothing sent
    Read fault / peer closed       log, stop reading, close
    Write fault                    log, stop, close
    File vanished after header     log, header stands, body omitted

None of these ever reach the client as an error page, and run() never
raises: a worker thread must not die with an unhandled exception.

=============================================================================
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from .config import ServerConfig
from .core.connection import Connection
from .handlers import ContentEmitter, PathResolver, Outcome
from .http import (
    HTTPStatus,
    ResponseHeader,
    RequestLineError,
    fixed_timezone,
    is_get_line,
    parse_request_line,
    utc_now,
)


logger = logging.getLogger(__name__)


class WebWorker:
    """
    Handles exactly one HTTP request on one connection.

    Usage:
        worker = WebWorker(conn, config)
        worker.run()   # returns once the connection is closed
    """

    def __init__(
        self,
        connection: Connection,
        config: Optional[ServerConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            connection: An accepted, open connection. The worker closes it.
            config: Server configuration (base_dir, server_name, ...).
            clock: Current-time source for the Date header and <cs371date>.
        """
        self.connection = connection
        self.config = config or ServerConfig()
        self.clock = clock

        self._resolver = PathResolver(
            self.config.base_dir,
            reject_parent_segments=self.config.reject_parent_segments,
        )
        self._emitter = ContentEmitter(
            server_name=self.config.server_name,
            content_tz=fixed_timezone(
                self.config.content_tz_name, self.config.content_utc_offset
            ),
            clock=clock,
        )
        self._responded = False

    @property
    def responded(self) -> bool:
        """Whether a response header has been sent on this connection."""
        return self._responded

    def run(self) -> None:
        """
        Worker entry point.

        Reads the request, responds, and closes the connection, whatever
        happens along the way.
        """
        conn = self.connection
        logger.debug(f"[{conn.id}] Handling connection from {conn.client_ip}")

        with conn:
            try:
                self._read_request()
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error: {e}")

        logger.debug(f"[{conn.id}] Done handling connection")

    # =========================================================================
    # REQUEST PARSER
    # =========================================================================

    def _read_request(self) -> None:
        """
        Read lines until the blank line that ends the header block.

        The first line starting with GET triggers the response. Everything
        after it is read and discarded so the request is fully drained.
        """
        conn = self.connection

        while True:
            try:
                line = conn.read_line()
            except (OSError, ValueError) as e:
                logger.warning(f"[{conn.id}] Request error: {e}")
                return

            if line is None:
                logger.debug(f"[{conn.id}] End of stream")
                return

            logger.debug(f"[{conn.id}] Request line: ({line})")

            if not line:
                return

            if self._responded or not is_get_line(line):
                continue

            try:
                request_line = parse_request_line(line)
            except RequestLineError as e:
                logger.warning(f"[{conn.id}] Malformed request line {e.line!r}: {e}")
                return

            self._responded = True
            if not self._respond(request_line.target):
                return

    # =========================================================================
    # RESPONSE
    # =========================================================================

    def _respond(self, target: str) -> bool:
        """
        Resolve the target, then send header and body, in that order.

        Returns:
            False if the connection failed and reading should stop.
        """
        conn = self.connection
        resolution = self._resolver.resolve(target)

        if resolution.outcome is Outcome.NOT_FOUND:
            status = HTTPStatus.NOT_FOUND
        else:
            status = HTTPStatus.OK

        logger.info(f"[{conn.id}] GET {target} -> {int(status)}")

        header = ResponseHeader(
            status=status,
            server_name=self.config.server_name,
            clock=self.clock,
        )
        if not conn.send(header.to_bytes()):
            return False

        try:
            body = self._emitter.render(resolution)
        except OSError as e:
            logger.error(f"[{conn.id}] Error reading {resolution.path}: {e}")
            return False

        return conn.send(body)
