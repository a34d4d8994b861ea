"""
=============================================================================
RESPONSE HEADER
=============================================================================

Builds and writes the header block that starts every response.

=============================================================================
WIRE FORMAT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\n                      ← status line               │
    │  Date: Thu, 15 Jan 2026 12:30:45 GMT\n  ← always GMT                │
    │  Server: WebWorker/1.0\n                                            │
    │  Connection: close\n                    ← one request per socket    │
    │  Content-Type: text/html\n              ← same for every response   │
    │  \n                                     ← blank line, body follows  │
    │  <body bytes ...>                                                   │
    └─────────────────────────────────────────────────────────────────────┘

Lines end in a bare "\n". Every mainstream client accepts it.

There is no Content-Length. The body is streamed and its end is marked by
closing the connection, which "Connection: close" announces.

=============================================================================
ORDERING
=============================================================================

The header is written and FLUSHED before the first body byte. Once it is
on the wire the status can no longer change, which is why a file that
fails halfway through still goes out as a 200 with an error fragment
appended, not as an error status.

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import BinaryIO, Optional

from .resolver import ResolvedResource
from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"
LINE_END = "\n"


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Thu, 15 Jan 2026 12:30:45 GMT

    Aware datetimes are converted to UTC first. Naive ones are assumed to
    already be UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Weekday names (0=Monday in Python's datetime)
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

    # Month names (1-indexed, so we subtract 1)
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


@dataclass(frozen=True)
class ResponseHeader:
    """
    The header block of one response.

    Frozen: once built, the fields cannot change.
    """

    status: HTTPStatus
    date: str
    server: str
    content_type: str = "text/html"
    connection: str = "close"
    version: str = HTTP_VERSION

    @classmethod
    def for_resource(
        cls,
        resource: ResolvedResource,
        server_name: str,
        content_type: str = "text/html",
        now: Optional[datetime] = None,
    ) -> "ResponseHeader":
        """
        Build the header for a resolved resource.

        HOME and FILE get 200, MISSING gets 404.
        """
        status = HTTPStatus.OK if resource.is_found else HTTPStatus.NOT_FOUND
        now = now or datetime.now(timezone.utc)
        return cls(
            status=status,
            date=format_http_date(now),
            server=server_name,
            content_type=content_type,
        )

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 404 Not Found"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def to_bytes(self) -> bytes:
        """Serialize the header block, including the terminating blank line."""
        lines = [
            self.status_line,
            f"Date: {self.date}",
            f"Server: {self.server}",
            f"Connection: {self.connection}",
            f"Content-Type: {self.content_type}",
            "",  # Empty line separates headers from body
        ]
        return (LINE_END.join(lines) + LINE_END).encode("utf-8")


def write_header(output: BinaryIO, header: ResponseHeader) -> int:
    """
    Write the header block and flush it.

    Returns:
        Number of bytes written.
    """
    data = header.to_bytes()
    output.write(data)
    output.flush()
    return len(data)
