"""
Unit tests for Connection line reading, sending and closing.
"""

import socket
import threading
import time

import pytest

from webworker.core.connection import Connection, ConnectionState


def _conn(sock: socket.socket, **kwargs) -> Connection:
    kwargs.setdefault("poll_interval", 0.01)
    kwargs.setdefault("linger", 0.01)
    return Connection(socket=sock, address=("127.0.0.1", 5555), **kwargs)


class TestReadLine:
    """Tests for Connection.read_line()."""

    def test_reads_lines_in_order(self, socket_pair):
        server, client = socket_pair
        client.sendall(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n")
        conn = _conn(server)

        assert conn.read_line() == "GET / HTTP/1.1"
        assert conn.read_line() == "Host: x"
        assert conn.read_line() == ""
        assert conn.state is ConnectionState.READING

    def test_bare_newlines(self, socket_pair):
        server, client = socket_pair
        client.sendall(b"one\ntwo\n")
        conn = _conn(server)

        assert conn.read_line() == "one"
        assert conn.read_line() == "two"

    def test_line_split_across_sends(self, socket_pair):
        server, client = socket_pair
        conn = _conn(server)

        def send_slowly():
            for piece in (b"GET /pa", b"ge.html HT", b"TP/1.1\r\n"):
                client.sendall(piece)
                time.sleep(0.02)

        sender = threading.Thread(target=send_slowly)
        sender.start()
        try:
            assert conn.read_line() == "GET /page.html HTTP/1.1"
        finally:
            sender.join()

    def test_waits_for_late_data(self, socket_pair):
        """Test that a slow client is waited for rather than failed."""
        server, client = socket_pair
        conn = _conn(server)

        timer = threading.Timer(0.1, client.sendall, args=(b"late\n",))
        timer.start()
        try:
            assert conn.read_line() == "late"
        finally:
            timer.cancel()

    def test_end_of_stream(self, socket_pair):
        server, client = socket_pair
        client.shutdown(socket.SHUT_WR)

        assert _conn(server).read_line() is None

    def test_partial_line_at_end_of_stream_is_dropped(self, socket_pair):
        server, client = socket_pair
        client.sendall(b"GET / HT")
        client.shutdown(socket.SHUT_WR)

        assert _conn(server).read_line() is None

    def test_idle_timeout(self, socket_pair):
        server, _client = socket_pair
        conn = _conn(server, idle_timeout=0.05)

        with pytest.raises(TimeoutError):
            conn.read_line()

    def test_line_too_long(self, socket_pair):
        server, client = socket_pair
        client.sendall(b"x" * 200)
        conn = _conn(server, max_line_size=100, buffer_size=64)

        with pytest.raises(ValueError, match="too long"):
            conn.read_line()

    def test_invalid_utf8_is_replaced(self, socket_pair):
        server, client = socket_pair
        client.sendall(b"GET /caf\xe9 HTTP/1.1\n")

        assert _conn(server).read_line() == "GET /caf� HTTP/1.1"


class TestSendAndClose:
    """Tests for Connection.send() and close()."""

    def test_send(self, socket_pair, read_all):
        server, client = socket_pair
        conn = _conn(server)

        assert conn.send(b"hello ")
        assert conn.send(b"world")
        conn.close()

        assert read_all(client) == b"hello world"
        assert conn.state is ConnectionState.CLOSED

    def test_send_to_closed_peer(self, socket_pair, caplog):
        server, client = socket_pair
        client.close()
        conn = _conn(server)

        assert conn.send(b"x" * 65536) is False
        assert "Send failed" in caplog.text

    def test_close_is_idempotent(self, socket_pair):
        server, _client = socket_pair
        conn = _conn(server)

        conn.close()
        conn.close()

        assert conn.state is ConnectionState.CLOSED

    def test_context_manager_closes(self, socket_pair, read_all):
        server, client = socket_pair

        with _conn(server) as conn:
            conn.send(b"bye")

        assert conn.state is ConnectionState.CLOSED
        assert read_all(client) == b"bye"

    def test_client_ip(self, socket_pair):
        server, _client = socket_pair
        assert _conn(server).client_ip == "127.0.0.1"

    def test_close_bounded_while_peer_keeps_sending(self, socket_pair):
        """Test that the drain on close stops after linger even if data keeps coming."""
        server, client = socket_pair
        stop = threading.Event()

        def chatter():
            while not stop.is_set():
                try:
                    client.sendall(b"x" * 512)
                except OSError:
                    return
                time.sleep(0.001)

        sender = threading.Thread(target=chatter, daemon=True)
        sender.start()
        conn = _conn(server, linger=0.2)

        started = time.monotonic()
        conn.close()
        elapsed = time.monotonic() - started
        stop.set()
        sender.join(timeout=2.0)

        assert conn.state is ConnectionState.CLOSED
        assert elapsed < 1.0
