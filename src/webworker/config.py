"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web worker and the listener around it.

=============================================================================
WHY PASS THE BASE DIRECTORY EXPLICITLY?
=============================================================================

A classic teaching web server resolves every request against the process's
current working directory:

    target "/page.html"  →  os.getcwd() + "/page.html"

That hides a global dependency inside the request handler. Here the base
directory is a config value, captured ONCE when the config is created and
handed to the path resolver at construction time:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ServerConfig(base_dir="/srv/site")                                │
    │         │                                                            │
    │         ▼                                                            │
    │   WebWorker(conn, config)                                           │
    │         │                                                            │
    │         └──► PathResolver(config.base_dir)                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Tests inject a temporary directory; the CLI passes --root (or the cwd).

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    1. Command-line arguments   python -m webworker --port 3000
    2. Environment variables    WEBWORKER_PORT=3000 python -m webworker
    3. Defaults below

=============================================================================
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the web worker.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size

    REQUEST READING
    - poll_interval, idle_timeout, max_line_size, linger

    CONTENT
    - base_dir, server_name, content_tz_name, content_utc_offset,
      reject_parent_segments

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """
    The port number to listen on. 0 lets the OS pick a free port.
    """

    backlog: int = 128
    """Maximum number of queued connections."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST READING
    # ─────────────────────────────────────────────────────────────────────

    poll_interval: float = 0.05
    """
    Seconds to wait for the socket to become readable before re-checking.
    The worker waits indefinitely for input, one bounded step at a time.
    """

    idle_timeout: Optional[float] = None
    """
    Give up on a silent client after this many seconds.
    None = wait forever (the classic behavior).
    """

    max_line_size: int = 8192
    """Longest request or header line accepted, in bytes."""

    linger: float = 0.5
    """Seconds spent draining unread client data while closing."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    base_dir: str = field(default_factory=os.getcwd)
    """
    Directory request targets are appended to.
    Captured from the working directory when the config is created.
    """

    server_name: str = "WebWorker/1.0"
    """
    Used for the Server header and for the <cs371server> placeholder.
    """

    content_tz_name: str = "MST"
    content_utc_offset: float = -7.0
    """
    Fixed time zone used for the <cs371date> placeholder.
    The Date header is always GMT.
    """

    reject_parent_segments: bool = False
    """
    Hardening switch. When True, targets containing a ".." segment are
    answered with 404 instead of being resolved outside base_dir.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBWORKER_HOST          Server host (default: 127.0.0.1)
        WEBWORKER_PORT          Server port (default: 8080)
        WEBWORKER_ROOT          Base directory (default: cwd)
        WEBWORKER_IDLE_TIMEOUT  Seconds before a silent client is dropped
        WEBWORKER_SERVER_NAME   Server identification string
        WEBWORKER_LOG_LEVEL     Logging level (default: INFO)

        =====================================================================
        """
        idle_timeout = os.getenv("WEBWORKER_IDLE_TIMEOUT")
        return cls(
            host=os.getenv("WEBWORKER_HOST", "127.0.0.1"),
            port=int(os.getenv("WEBWORKER_PORT", "8080")),
            base_dir=os.getenv("WEBWORKER_ROOT") or os.getcwd(),
            idle_timeout=float(idle_timeout) if idle_timeout else None,
            server_name=os.getenv("WEBWORKER_SERVER_NAME", "WebWorker/1.0"),
            log_level=os.getenv("WEBWORKER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Fails fast at startup with a ValueError instead of letting a bad
        value surface inside a worker thread.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")

        if self.idle_timeout is not None and self.idle_timeout <= 0:
            raise ValueError("idle_timeout must be > 0")

        if self.max_line_size < 64:
            raise ValueError("max_line_size must be >= 64")

        if not os.path.isdir(self.base_dir):
            raise ValueError(f"base_dir does not exist: {self.base_dir}")
