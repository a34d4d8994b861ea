"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web worker and the server around it.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m webworker --root ./site                         │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── WEBWORKER_ROOT=./site python -m webworker                 │
    │                                                                      │
    │   3. Defaults in this dataclass                                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE DOCUMENT ROOT
=============================================================================

Every filename the worker touches is relative to doc_root:

    doc_root/
    ├── TestBase.html    template for the home page  (read per request)
    ├── Test.html        materialized home page      (written per request)
    ├── notFound.html    404 body                    (read per 404)
    └── ...              anything a client asks for  (read only)

The root is passed explicitly instead of relying on the process working
directory, so tests can point each worker at its own temporary folder.

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """
    Configuration for the web worker.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    DOCUMENT ROOT
    - doc_root, template_file, output_file, not_found_file

    RESPONSE
    - server_name, content_type, date_token, server_token, chunk_size

    SAFETY
    - max_line_length, confine_to_root, materialize_home

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """
    The port number to listen on. 0 lets the OS pick a free port.
    """

    backlog: int = 128
    """Maximum number of queued connections."""

    buffer_size: int = 8192
    """Bytes pulled from the socket per read while looking for line breaks."""

    timeout: Optional[float] = 30.0
    """
    Socket timeout in seconds for each client connection.
    A client that stops sending mid-request is dropped after this long.
    None = block forever.
    """

    # ─────────────────────────────────────────────────────────────────────
    # DOCUMENT ROOT
    # ─────────────────────────────────────────────────────────────────────

    doc_root: str = "."
    """Directory that request paths are resolved against."""

    template_file: str = "TestBase.html"
    """Home page template, relative to doc_root."""

    output_file: str = "Test.html"
    """Where the substituted home page is materialized, relative to doc_root."""

    not_found_file: str = "notFound.html"
    """Body served with every 404, relative to doc_root."""

    # ─────────────────────────────────────────────────────────────────────
    # RESPONSE
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "WebWorker/1.0"
    """Value of the Server header."""

    content_type: str = "text/html"
    """
    Content-Type sent with every response, whatever the file really is.
    There is deliberately no per-file MIME detection.
    """

    date_token: str = "{{cs371date}}"
    """Template placeholder replaced with the current local time."""

    server_token: str = "{{cs371server}}"
    """Template placeholder replaced with "<user> on <host>"."""

    chunk_size: int = 8192
    """Bytes copied per read when streaming a file body."""

    # ─────────────────────────────────────────────────────────────────────
    # SAFETY
    # ─────────────────────────────────────────────────────────────────────

    max_line_length: int = 64 * 1024
    """Longest request or header line accepted before giving up on the stream."""

    confine_to_root: bool = True
    """
    Refuse paths that escape doc_root (../, absolute paths, symlinks out).
    Turning this off joins the path onto doc_root unchecked.
    """

    materialize_home: bool = True
    """Write the substituted home page to output_file on every home request."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """
    Access log format: 'json' or 'text'.
    JSON is better for log aggregators, text for humans.
    """

    @property
    def root_path(self) -> Path:
        """The document root as an absolute path."""
        return Path(self.doc_root).resolve()

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBWORKER_HOST         Server host (default: 127.0.0.1)
        WEBWORKER_PORT         Server port (default: 8080)
        WEBWORKER_TIMEOUT      Client socket timeout in seconds (default: 30)
        WEBWORKER_ROOT         Document root (default: .)
        WEBWORKER_SERVER_NAME  Server header value
        WEBWORKER_CONFINE      Confine paths to the root (default: true)
        WEBWORKER_MATERIALIZE  Write Test.html on home requests (default: true)
        WEBWORKER_LOG_LEVEL    Logging level (default: INFO)
        WEBWORKER_LOG_FORMAT   Access log format (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("WEBWORKER_HOST", "127.0.0.1"),
            port=int(os.getenv("WEBWORKER_PORT", "8080")),
            timeout=float(os.getenv("WEBWORKER_TIMEOUT", "30")),
            doc_root=os.getenv("WEBWORKER_ROOT", "."),
            server_name=os.getenv("WEBWORKER_SERVER_NAME", "WebWorker/1.0"),
            confine_to_root=_env_flag("WEBWORKER_CONFINE", True),
            materialize_home=_env_flag("WEBWORKER_MATERIALIZE", True),
            log_level=os.getenv("WEBWORKER_LOG_LEVEL", "INFO"),
            log_format=os.getenv("WEBWORKER_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so a bad value fails immediately instead of on
        the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if self.max_line_length < 1:
            raise ValueError("max_line_length must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not self.root_path.is_dir():
            raise ValueError(f"Document root does not exist: {self.doc_root}")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json', got {self.log_format!r}")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Type-safe configuration with a dataclass
# 2. Environment variable support (WEBWORKER_*)
# 3. Validation at startup (fail-fast)
# 4. Defaults for the TestBase.html / Test.html / notFound.html layout
# =============================================================================
