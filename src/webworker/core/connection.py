"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps an accepted client socket as the pair of binary streams the worker
reads from and writes to.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

Every response carries "Connection: close", so the lifecycle is short:

    NEW ──────► READING ──────► WRITING ──────► CLOSING ──────► CLOSED
                   │                                ▲
                   └────────────────────────────────┘
                      (client gone / timeout)

There is no keep-alive state. After one response the socket is shut down.

=============================================================================
STREAMS
=============================================================================

    socket.makefile("rb")  → buffered reader  (conn.reader)
    socket.makefile("wb")  → buffered writer  (conn.writer)

Both are created lazily and share the socket's timeout. A read on a quiet
client blocks until data arrives, the client closes, or the timeout fires,
and the timeout surfaces as an OSError the request reader already handles.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging."""
    NEW = "new"            # Just accepted
    READING = "reading"    # Worker is reading the request
    WRITING = "writing"    # Worker is writing the response
    CLOSING = "closing"    # Shutdown sequence in progress
    CLOSED = "closed"      # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    timeout: Optional[float] = 30.0
    buffer_size: int = 8192

    # Internal state (not shown in repr for cleaner logs)
    _reader: Optional[BinaryIO] = field(default=None, repr=False)
    _writer: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        """Configure the socket once the dataclass is built."""
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def reader(self) -> BinaryIO:
        """Buffered binary stream reading from the client."""
        if self._reader is None:
            self._reader = self.socket.makefile("rb", buffering=self.buffer_size)
            self.state = ConnectionState.READING
        return self._reader

    @property
    def writer(self) -> BinaryIO:
        """Buffered binary stream writing to the client."""
        if self._writer is None:
            self._writer = self.socket.makefile("wb", buffering=self.buffer_size)
            self.state = ConnectionState.WRITING
        return self._writer

    # =========================================================================
    # CLOSING: Properly terminate the connection
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. Flush anything still buffered in the writer
        2. shutdown(SHUT_WR): send FIN so the client sees end of body
        3. Drain what the client still sends, briefly
        4. Close the stream files and the socket

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return  # Already closed

        self.state = ConnectionState.CLOSING

        if self._writer is not None:
            try:
                self._writer.flush()
            except (OSError, ValueError) as e:
                logger.debug(f"[{self.id}] Flush on close failed: {e}")

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected, that's fine

        try:
            # Discard leftovers so the kernel does not answer them with RST
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout, we're closing anyway

        for stream in (self._reader, self._writer):
            if stream is not None:
                try:
                    stream.close()
                except (OSError, ValueError):
                    pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Allows ``with conn:`` for automatic cleanup:

            with conn:
                worker.handle(conn.reader, conn.writer, conn.address)
            # Connection closed here, even on error
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
