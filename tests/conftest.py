"""
pytest configuration and fixtures.
"""

import socket
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Generator, Optional
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webworker import Connection, ServerConfig, WebServer, WebWorker


FIXED_NOW = datetime(2026, 10, 19, 6, 5, 0, tzinfo=timezone.utc)
FIXED_HTTP_DATE = "Mon, 19 Oct 2026 06:05:00 GMT"
# 06:05 UTC is still the previous evening in MST (UTC-7)
FIXED_CONTENT_DATE = "Oct 18, 2026"


def recv_all(sock: socket.socket, timeout: float = 2.0) -> bytes:
    """Read until the peer closes."""
    sock.settimeout(timeout)
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes) -> tuple[bytes, bytes]:
    """Split a response at the blank line ending the header block."""
    header, sep, body = raw.partition(b"\n\n")
    assert sep, f"no header terminator in {raw!r}"
    return header + b"\n\n", body


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock pinned to FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def http_date() -> str:
    """Date header value produced by fixed_clock."""
    return FIXED_HTTP_DATE


@pytest.fixture
def content_date() -> str:
    """<cs371date> substitution produced by fixed_clock."""
    return FIXED_CONTENT_DATE


@pytest.fixture
def split() -> Callable[[bytes], tuple[bytes, bytes]]:
    """Split a raw response into (header block, body)."""
    return split_response


@pytest.fixture
def read_all() -> Callable[[socket.socket], bytes]:
    """Read a socket until the peer closes."""
    return recv_all


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """A base directory with a few files to serve."""
    (tmp_path / "page.html").write_text("Hello <cs371date> from <cs371server>")
    (tmp_path / "plain.txt").write_text("just text")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.html").write_text("<b>guide</b>")
    return tmp_path


@pytest.fixture
def config(site_dir: Path) -> ServerConfig:
    """Test configuration serving site_dir."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        base_dir=str(site_dir),
        server_name="TestServer/1.0",
        poll_interval=0.01,
        linger=0.01,
    )


@pytest.fixture
def socket_pair() -> Generator[tuple[socket.socket, socket.socket], None, None]:
    """(server side, client side) of a connected socket pair."""
    server_sock, client_sock = socket.socketpair()
    yield server_sock, client_sock
    for s in (server_sock, client_sock):
        try:
            s.close()
        except OSError:
            pass


def make_connection(sock: socket.socket, config: ServerConfig) -> Connection:
    return Connection(
        socket=sock,
        address=("127.0.0.1", 0),
        buffer_size=config.buffer_size,
        poll_interval=config.poll_interval,
        idle_timeout=config.idle_timeout,
        max_line_size=config.max_line_size,
        linger=config.linger,
    )


@pytest.fixture
def make_conn(config: ServerConfig) -> Callable[..., Connection]:
    """Factory wrapping a socket in a Connection configured like the server."""
    def _make(sock: socket.socket, cfg: Optional[ServerConfig] = None) -> Connection:
        return make_connection(sock, cfg or config)
    return _make


@pytest.fixture
def exchange(
    socket_pair, config: ServerConfig, fixed_clock
) -> Callable[..., bytes]:
    """
    Run one worker against raw request bytes and return what it sent.

    Pass shutdown_client=True to close the client's sending side after the
    request, simulating a peer that stops mid-request.
    """
    server_sock, client_sock = socket_pair

    def _exchange(
        request: bytes,
        shutdown_client: bool = False,
        cfg: Optional[ServerConfig] = None,
    ) -> bytes:
        if request:
            client_sock.sendall(request)
        if shutdown_client:
            client_sock.shutdown(socket.SHUT_WR)

        conn = make_connection(server_sock, cfg or config)
        WebWorker(conn, cfg or config, clock=fixed_clock).run()
        return recv_all(client_sock)

    return _exchange


class RunningServer:
    """Test server helper that runs WebServer in a background thread."""

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> tuple[str, int]:
        return self.server.address

    def start(self):
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.ready.wait(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        with socket.create_connection(self.address, timeout=2.0) as client:
            client.sendall(raw)
            return recv_all(client)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[RunningServer, None, None]:
    """A WebServer listening on an ephemeral port."""
    srv = RunningServer(WebServer(config))
    srv.start()

    yield srv

    srv.stop()
