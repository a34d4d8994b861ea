"""
=============================================================================
WEB WORKER
=============================================================================

Handles exactly one request on one connection, then returns.

=============================================================================
PIPELINE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      WebWorker.handle()                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   rfile                                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   RequestReader.read_request()    "GET /a.html HTTP/1.1" or None     │
    │        │                                                             │
    │        ▼                                                             │
    │   ResourceResolver.resolve()      HOME / FILE / MISSING              │
    │        │                                                             │
    │        ▼                                                             │
    │   write_header()                  status + headers, flushed          │
    │        │                                                             │
    │        ▼                                                             │
    │   ContentWriter.write()           body bytes                         │
    │        │                                                             │
    │        ▼                                                             │
    │   wfile.flush()                                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The worker works on any pair of binary streams. It never touches a
socket, so tests drive it with io.BytesIO.

=============================================================================
ERRORS NEVER ESCAPE
=============================================================================

handle() does not raise. Whatever goes wrong is logged and the worker
finishes as well as it can, always attempting the final flush. The caller
only has to close the connection afterwards.

Each invocation is independent. The worker holds configuration but no
per-request state, so one instance can serve many threads at once.

=============================================================================
"""

import logging
import time
import uuid
from datetime import datetime
from typing import BinaryIO, Callable, Optional, Tuple

from . import access_log
from .access_log import AccessRecord
from .config import ServerConfig
from .handlers.content import ContentWriter
from .http.request import RequestReader
from .http.resolver import ResourceResolver
from .http.response import ResponseHeader, write_header


logger = logging.getLogger(__name__)


class WebWorker:
    """
    Per-connection request handler.

    Usage:
        worker = WebWorker(ServerConfig(doc_root="./site"))
        worker.handle(conn.reader, conn.writer, conn.address)
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        identity: Optional[str] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults are used if omitted.
            clock: Local-time source for the home page date.
            identity: Fixed value for the server placeholder. Looked up
                from the OS if omitted.
        """
        self.config = config or ServerConfig()
        self.reader = RequestReader(
            buffer_size=self.config.buffer_size,
            max_line_length=self.config.max_line_length,
        )
        self.resolver = ResourceResolver(
            self.config.doc_root,
            confine=self.config.confine_to_root,
        )
        self.content = ContentWriter.from_config(self.config, identity=identity, clock=clock)

    def handle(
        self,
        rfile: BinaryIO,
        wfile: BinaryIO,
        client_address: Optional[Tuple[str, int]] = None,
        connection_id: Optional[str] = None,
    ) -> AccessRecord:
        """
        Serve one request from ``rfile`` to ``wfile``.

        Args:
            rfile: Readable binary stream with the request.
            wfile: Writable binary stream for the response.
            client_address: (ip, port) of the client, for the access log.
            connection_id: Identifier for log lines. Generated if omitted.

        Returns:
            The access record that was logged.
        """
        connection_id = connection_id or str(uuid.uuid4())[:8]
        started = time.time()

        request_line = None
        resource_kind = "missing"
        status_code = 0
        body_bytes = 0

        try:
            # ─────────────────────────────────────────────────────────────
            # READ
            # ─────────────────────────────────────────────────────────────
            request_line = self.reader.read_request(rfile)

            # ─────────────────────────────────────────────────────────────
            # RESOLVE
            # ─────────────────────────────────────────────────────────────
            resource = self.resolver.resolve(request_line)
            resource_kind = resource.kind.value

            # ─────────────────────────────────────────────────────────────
            # HEADER (flushed before any body byte)
            # ─────────────────────────────────────────────────────────────
            header = ResponseHeader.for_resource(
                resource,
                server_name=self.config.server_name,
                content_type=self.config.content_type,
            )
            write_header(wfile, header)
            status_code = int(header.status)

            # ─────────────────────────────────────────────────────────────
            # BODY
            # ─────────────────────────────────────────────────────────────
            body_bytes = self.content.write(wfile, resource)
        except Exception as e:
            # Usually the client hanging up mid-response
            logger.exception(f"[{connection_id}] Output error: {e}")
        finally:
            try:
                wfile.flush()
            except (OSError, ValueError) as e:
                logger.warning(f"[{connection_id}] Final flush failed: {e}")

        record = access_log.new_record(
            connection_id,
            client_address,
            request_line,
            resource_kind,
            status_code,
            body_bytes,
            started,
        )
        access_log.emit(record, self.config.log_format)
        return record
