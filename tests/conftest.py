"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Callable, Generator, Optional, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig
from minihttp.storage import MemoryStorage


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/hello HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request uploading a file."""
    body = b"hello, file"
    return (
        b"POST /files/note.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Empty in-memory file storage."""
    return MemoryStorage()


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def exchange(
    address: Tuple[str, int],
    data: bytes,
    close_write: bool = True,
    timeout: float = 5.0,
) -> bytes:
    """
    Send raw bytes and read until the server closes the connection.

    With close_write the client half-closes after sending, so a server
    waiting for more bytes sees end of stream.
    """
    with socket.create_connection(address, timeout=timeout) as s:
        s.sendall(data)
        if close_write:
            s.shutdown(socket.SHUT_WR)

        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class, despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.address

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_listening(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, data: bytes, close_write: bool = True) -> bytes:
        return exchange(self.address, data, close_write=close_write)


@pytest.fixture
def test_server(memory_storage: MemoryStorage) -> Generator[TestServer, None, None]:
    """A live server on an ephemeral port, files kept in memory."""
    server = HTTPServer(
        ServerConfig(host="127.0.0.1", port=0, log_level="WARNING"),
        storage=memory_storage,
    )

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def server_factory() -> Generator[Callable[..., TestServer], None, None]:
    """Start servers with custom settings; all are stopped at teardown."""
    started = []

    def start(config: ServerConfig, storage=None) -> TestServer:
        test_srv = TestServer(HTTPServer(config, storage=storage))
        test_srv.start()
        started.append(test_srv)
        return test_srv

    yield start

    for test_srv in started:
        test_srv.stop()
