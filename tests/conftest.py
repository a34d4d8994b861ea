"""
pytest configuration and fixtures.
"""

import socket
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Generator, Tuple

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webworker import ServerConfig, WebServer, WebWorker


FIXED_IDENTITY = "alice on web01/10.0.0.7"
FIXED_NOW = datetime(2026, 1, 15, 12, 30, 45)

HOME_TEMPLATE = "<html>{{cs371date}} {{cs371server}}</html>"
NOT_FOUND_PAGE = "<h1>404</h1>"


@pytest.fixture
def fixed_now() -> datetime:
    """Clock value the test worker stamps on the home page."""
    return FIXED_NOW


@pytest.fixture
def fixed_identity() -> str:
    """Identity the test worker puts in the server placeholder."""
    return FIXED_IDENTITY


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """Document root with the default file layout and one ordinary file."""
    root = tmp_path / "site"
    root.mkdir()
    (root / "TestBase.html").write_text(HOME_TEMPLATE)
    (root / "notFound.html").write_text(NOT_FOUND_PAGE)
    (root / "real.txt").write_bytes(b"real file contents\n")
    return root


@pytest.fixture
def config(doc_root: Path) -> ServerConfig:
    """Config pointing at the test document root."""
    return ServerConfig(doc_root=str(doc_root), port=0, timeout=5.0)


@pytest.fixture
def worker(config: ServerConfig) -> WebWorker:
    """Worker with a fixed clock and identity."""
    return WebWorker(config, clock=lambda: FIXED_NOW, identity=FIXED_IDENTITY)


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request for an existing file."""
    return (
        b"GET /real.txt HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def home_request() -> bytes:
    """Sample HTTP GET request for the home page."""
    return b"GET / HTTP/1.1\r\nHost: localhost:8080\r\n\r\n"


@pytest.fixture
def parse_response() -> Callable[[bytes], Tuple[str, Dict[str, str], bytes]]:
    """Split raw response bytes into (status line, headers, body)."""
    def parse(raw: bytes) -> Tuple[str, Dict[str, str], bytes]:
        head, separator, body = raw.partition(b"\n\n")
        assert separator, "response has no blank line after the header block"
        lines = head.decode("utf-8").split("\n")
        headers = {}
        for line in lines[1:]:
            name, _, value = line.partition(": ")
            headers[name] = value
        return lines[0], headers, body
    return parse


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send a raw request and read the response until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as client:
            client.sendall(raw)
            chunks = []
            while True:
                chunk = client.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig, free_port: int) -> Generator[TestServer, None, None]:
    """A running WebServer serving the test document root."""
    config.port = free_port
    worker = WebWorker(config, clock=lambda: FIXED_NOW, identity=FIXED_IDENTITY)
    test_srv = TestServer(WebServer(config, worker=worker))
    test_srv.start()

    yield test_srv

    test_srv.stop()
