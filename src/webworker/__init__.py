"""
=============================================================================
WEBWORKER - One Request, One Connection, One Thread
=============================================================================

A minimal HTTP/1.1 server built on raw sockets. Each connection is read
for a single GET request and answered with one of three things:

    GET /              → the home page template with {{cs371date}} and
                         {{cs371server}} filled in
    GET /<file>        → the file's bytes, verbatim
    anything else      → notFound.html with a 404 status

then the connection is closed.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webworker/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webworker)
    ├── server.py            # WebServer: thread per connection
    ├── worker.py            # WebWorker: read → resolve → respond
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # Pipeline exception types
    ├── access_log.py        # Per-request access records
    ├── core/
    │   ├── socket_server.py # TCP accept loop
    │   └── connection.py    # Socket as reader/writer streams
    ├── http/
    │   ├── request.py       # Request line reader
    │   ├── resolver.py      # HOME / FILE / MISSING
    │   ├── response.py      # Header block
    │   └── status_codes.py  # 200 and 404
    └── handlers/
        ├── content.py       # Body writer
        └── template.py      # Placeholder substitution

=============================================================================
QUICK START
=============================================================================

    from webworker import WebServer, ServerConfig

    WebServer(ServerConfig(doc_root="./site", port=8080)).run()

Or drive the worker directly on any pair of streams:

    import io
    from webworker import WebWorker, ServerConfig

    out = io.BytesIO()
    WebWorker(ServerConfig(doc_root="./site")).handle(
        io.BytesIO(b"GET / HTTP/1.1\\r\\n\\r\\n"), out
    )

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import WebServer
from .worker import WebWorker

__all__ = ["WebServer", "WebWorker", "ServerConfig", "__version__"]
