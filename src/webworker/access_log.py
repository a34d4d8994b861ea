"""
=============================================================================
ACCESS LOG
=============================================================================

One record per handled connection, on its own logger:

    logging.getLogger("webworker.access")

so it can be routed to a separate file without touching the diagnostic
logs.

TEXT FORMAT (Apache-like):
    127.0.0.1 - - [15/Jan/2026:12:30:45 +0000] "GET / HTTP/1.1" 200 512 1.84ms

JSON FORMAT:
    {"connection_id": "1f3a9c2e", "client_ip": "127.0.0.1", ...}

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple


logger = logging.getLogger("webworker.access")


@dataclass
class AccessRecord:
    """
    Structured log entry for one connection.

    request_line:   First line of the request, "-" if none arrived
    resource:       home / file / missing
    status_code:    Status that went out in the header (0 if none did)
    body_bytes:     Body bytes written
    duration_ms:    Time from first read to final flush
    """

    connection_id: str
    client_ip: str
    request_line: str
    resource: str
    status_code: int
    body_bytes: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "connection_id": self.connection_id,
            "client_ip": self.client_ip,
            "request_line": self.request_line,
            "resource": self.resource,
            "status_code": self.status_code,
            "body_bytes": self.body_bytes,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.request_line}" {self.status_code} '
            f'{self.body_bytes} {self.duration_ms:.2f}ms'
        )


def new_record(
    connection_id: str,
    client_address: Optional[Tuple[str, int]],
    request_line: Optional[str],
    resource: str,
    status_code: int,
    body_bytes: int,
    started: float,
) -> AccessRecord:
    """Build a record, computing the duration from ``started`` (time.time())."""
    return AccessRecord(
        connection_id=connection_id,
        client_ip=client_address[0] if client_address else "-",
        request_line=request_line or "-",
        resource=resource,
        status_code=status_code,
        body_bytes=body_bytes,
        duration_ms=(time.time() - started) * 1000,
        timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
    )


def emit(record: AccessRecord, log_format: str = "text", level: int = logging.INFO) -> None:
    """Write a record to the access logger."""
    if log_format == "json":
        logger.log(level, json.dumps(record.to_dict()))
    else:
        logger.log(level, record.to_text())
