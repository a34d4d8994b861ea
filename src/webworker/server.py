"""
=============================================================================
WEB SERVER
=============================================================================

Ties the socket server to the web worker: one thread per connection, one
request per thread.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │         │                                                            │
    │         ├──► Thread ──► WebWorker.handle(conn) ──► close             │
    │         ├──► Thread ──► WebWorker.handle(conn) ──► close             │
    │         └──► Thread ──► WebWorker.handle(conn) ──► close             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Threads share one WebWorker. It keeps no per-request state, and the only
thing requests share on disk is the materialized home page, which is
replaced atomically.

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
    Thread-per-connection server around a WebWorker.

    Usage:
        server = WebServer(ServerConfig(doc_root="./site", port=8080))
        server.run()  # Blocks until Ctrl+C / SIGTERM
    """

    def __init__(self, config: Optional[ServerConfig] = None, worker: Optional[WebWorker] = None):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.
            worker: Worker to dispatch to. Built from config if omitted.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self.worker = worker or WebWorker(self.config)
        self._socket_server = SocketServer(self.config)

    @property
    def address(self):
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        """True while the accept loop is running."""
        return self._socket_server.is_running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, setup_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            setup_logging: Configure the root logger from config. Pass
                False when embedding, so the host application keeps its own.
        """
        if setup_logging:
            self._setup_logging()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}, "
            f"serving {self.config.root_path}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight requests finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webworker").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Start a thread for the connection and return to accept()."""
        thread = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"webworker-{conn.id}",
            daemon=True,
        )
        thread.start()

    def _process_connection(self, conn: Connection):
        """Serve one request on ``conn`` (runs in its own thread)."""
        logger.debug(f"[{conn.id}] Handling connection from {conn.client_ip}")
        with conn:  # Context manager ensures connection is closed
            try:
                self.worker.handle(conn.reader, conn.writer, conn.address, conn.id)
            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")
        logger.debug(f"[{conn.id}] Done handling connection")
