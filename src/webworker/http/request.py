"""
=============================================================================
REQUEST READER
=============================================================================

Pulls the request line off the client stream and throws the headers away.

=============================================================================
WHAT WE ACTUALLY READ
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │  GET /index.html HTTP/1.1\r\n      ← kept (the request line)      │
    │  Host: localhost:8080\r\n          ← read and discarded           │
    │  User-Agent: curl/8.5.0\r\n        ← read and discarded           │
    │  Accept: */*\r\n                   ← read and discarded           │
    │  \r\n                              ← blank line, stop here        │
    └─────────────────────────────────────────────────────────────────┘

Only the first line means anything to the worker. The rest still has to be
consumed up to the blank line, otherwise closing the socket with unread
data in the kernel buffer can turn into a connection reset on the client.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

A read can return half a line, three lines, or a line and a half:

    read() → b"GET /ind"
    read() → b"ex.html HTTP/1.1\r\nHost: loc"
    read() → b"alhost\r\n\r\n"

So we keep our own buffer and cut it at b"\n". Both "\r\n" and bare "\n"
terminators are accepted. A final line with no terminator before EOF still
counts as a line.

Reads block until data arrives, the client closes, or the socket timeout
fires. There is no polling loop.

=============================================================================
"""

import logging
from typing import BinaryIO, Optional

from ..errors import StreamReadError


logger = logging.getLogger(__name__)


class LineBuffer:
    """
    Splits a byte stream into lines.

    Uses read1() when the stream has it (buffered socket files, BytesIO),
    so a read returns whatever is available instead of waiting for a full
    buffer_size worth of bytes.
    """

    def __init__(
        self,
        stream: BinaryIO,
        buffer_size: int = 8192,
        max_line_length: int = 64 * 1024,
    ):
        self._stream = stream
        self._read = getattr(stream, "read1", None) or stream.read
        self.buffer_size = buffer_size
        self.max_line_length = max_line_length
        self._buffer = b""
        self._eof = False

    def readline(self) -> Optional[bytes]:
        """
        Return the next line without its terminator.

        Returns:
            The line bytes, or None once the stream is exhausted.

        Raises:
            StreamReadError: If the stream fails or a line is too long.
        """
        while b"\n" not in self._buffer and not self._eof:
            if len(self._buffer) > self.max_line_length:
                raise StreamReadError(f"Line exceeds {self.max_line_length} bytes")

            try:
                chunk = self._read(self.buffer_size)
            except (OSError, ValueError) as e:
                # OSError covers resets and socket timeouts,
                # ValueError a stream that was already closed
                raise StreamReadError(f"{type(e).__name__}: {e}") from e

            if not chunk:
                self._eof = True
            else:
                self._buffer += chunk

        if b"\n" in self._buffer:
            line, _, self._buffer = self._buffer.partition(b"\n")
        elif self._buffer:
            line, self._buffer = self._buffer, b""
        else:
            return None

        if len(line) > self.max_line_length:
            raise StreamReadError(f"Line exceeds {self.max_line_length} bytes")

        if line.endswith(b"\r"):
            line = line[:-1]
        return line


class RequestReader:
    """
    Reads the request line and drains the header block.

    Usage:
        reader = RequestReader()
        request_line = reader.read_request(conn.reader)
        # "GET /index.html HTTP/1.1", or None if nothing usable arrived
    """

    def __init__(self, buffer_size: int = 8192, max_line_length: int = 64 * 1024):
        self.buffer_size = buffer_size
        self.max_line_length = max_line_length

    def read_request(self, stream: BinaryIO) -> Optional[str]:
        """
        Read one request from the stream.

        Never raises. If the stream errors or closes before the first line
        is available the request is absent and None is returned; the
        resolver maps that to a 404.

        Args:
            stream: Readable binary stream positioned at the request.

        Returns:
            The request line as text, or None.
        """
        lines = LineBuffer(stream, self.buffer_size, self.max_line_length)

        # ─────────────────────────────────────────────────────────────────
        # REQUEST LINE
        # ─────────────────────────────────────────────────────────────────
        try:
            raw = lines.readline()
        except StreamReadError as e:
            logger.warning(f"Request error: {e}")
            return None

        if raw is None:
            logger.info("Client closed the connection before sending a request")
            return None

        request_line = raw.decode("utf-8", errors="replace")
        logger.info(f"Request line: ({request_line})")

        # A blank first line is already the end of the header block, and
        # there is no request in it
        if not request_line:
            logger.info("Blank request line")
            return None

        # ─────────────────────────────────────────────────────────────────
        # HEADERS: read up to the blank line, keep nothing
        # ─────────────────────────────────────────────────────────────────
        while True:
            try:
                raw = lines.readline()
            except StreamReadError as e:
                logger.warning(f"Request error: {e}")
                break

            if not raw:
                # Blank line (end of headers) or EOF
                break

            logger.debug(f"Header line: ({raw.decode('utf-8', errors='replace')})")

        return request_line
