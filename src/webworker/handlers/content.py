"""
=============================================================================
RESPONSE BODY
=============================================================================

Writes the body that follows the header block. What gets written depends
only on how the request resolved:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         BODY SOURCES                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HOME     TestBase.html ──► substitute ──► output                   │
    │                                   │                                  │
    │                                   └──► Test.html (side copy)         │
    │                                                                      │
    │   FILE     requested file ─────────────► output (raw bytes)          │
    │                                                                      │
    │   MISSING  notFound.html ──────────────► output                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE HOME PAGE IS SERVED FROM MEMORY
=============================================================================

The substituted page goes to the client straight from memory. Test.html
is still written for anyone who looks at the document root, but the
response never reads it back. Two concurrent home requests therefore
cannot hand each other's page (or half of it) to their clients.

The side copy is written to a temp file and swapped in with os.replace(),
so a reader of Test.html sees either the old page or the new one, never a
torn mix.

=============================================================================
FAILURES
=============================================================================

The header has already been flushed when we get here, so the status is
fixed. Failures are handled per source:

    template unreadable     → inline "Bad request" fragment
    Test.html unwritable    → logged, page still served
    file fails mid-copy     → partial body + inline "Bad request" fragment
    notFound.html missing   → logged, empty body

Nothing is retried. Errors writing to the OUTPUT (client hung up) are not
handled here and propagate to the worker.

=============================================================================
"""

import contextlib
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from ..config import ServerConfig
from ..errors import FileReadError, TemplateWriteError
from ..http.resolver import ResolvedResource, ResourceKind
from .template import TemplatePage


logger = logging.getLogger(__name__)


ERROR_FRAGMENT = b"<html><head>Bad request</head></html>"

# Round-trip bytes that are not valid UTF-8 instead of failing on them
_TEXT_ERRORS = "surrogateescape"


class ContentWriter:
    """
    Writes response bodies for resolved resources.

    =========================================================================
    USAGE
    =========================================================================

        writer = ContentWriter("/var/www")
        write_header(output, header)          # header first, always
        sent = writer.write(output, resource)

    =========================================================================
    """

    def __init__(
        self,
        doc_root: Union[str, Path],
        template_file: str = "TestBase.html",
        output_file: str = "Test.html",
        not_found_file: str = "notFound.html",
        page: Optional[TemplatePage] = None,
        chunk_size: int = 8192,
        materialize: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            doc_root: Directory holding the template and 404 page.
            template_file: Home page template name.
            output_file: Name of the materialized home page.
            not_found_file: 404 page name.
            page: Template renderer. Built with default tokens if omitted.
            chunk_size: Bytes copied per read when streaming files.
            materialize: Write the substituted home page to output_file.
            clock: Returns the time used in the page. Defaults to local now.
        """
        self.doc_root = Path(doc_root).resolve()
        self.template_path = self.doc_root / template_file
        self.output_path = self.doc_root / output_file
        self.not_found_path = self.doc_root / not_found_file
        self.page = page or TemplatePage()
        self.chunk_size = chunk_size
        self.materialize = materialize
        self._clock = clock or datetime.now

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        identity: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "ContentWriter":
        """Build a writer from server configuration."""
        page = TemplatePage(
            date_token=config.date_token,
            server_token=config.server_token,
            identity=identity,
        )
        return cls(
            config.doc_root,
            template_file=config.template_file,
            output_file=config.output_file,
            not_found_file=config.not_found_file,
            page=page,
            chunk_size=config.chunk_size,
            materialize=config.materialize_home,
            clock=clock,
        )

    def write(self, output: BinaryIO, resource: ResolvedResource) -> int:
        """
        Write the body for ``resource``.

        Must only be called after the header has been written.

        Returns:
            Number of body bytes written.
        """
        if resource.kind is ResourceKind.HOME:
            return self._write_home(output)
        if resource.kind is ResourceKind.FILE:
            return self._write_file(output, resource.path)
        return self._write_not_found(output)

    # =========================================================================
    # HOME
    # =========================================================================

    def render_home(self) -> str:
        """
        Load and substitute the home page template.

        Raises:
            FileReadError: If the template cannot be read.
        """
        try:
            text = self.template_path.read_text(encoding="utf-8", errors=_TEXT_ERRORS)
        except OSError as e:
            raise FileReadError(
                f"Cannot read template {self.template_path}: {e}", self.template_path
            ) from e
        return self.page.render(text, self._clock())

    def materialize_page(self, page: str) -> None:
        """
        Atomically replace output_file with ``page``.

        Raises:
            TemplateWriteError: If the file cannot be written.
        """
        target = self.output_path
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
            with os.fdopen(fd, "w", encoding="utf-8", errors=_TEXT_ERRORS) as f:
                f.write(page)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise TemplateWriteError(f"Cannot write {target}: {e}", target) from e

    def _write_home(self, output: BinaryIO) -> int:
        try:
            page = self.render_home()
        except FileReadError as e:
            logger.error(str(e))
            output.write(ERROR_FRAGMENT)
            return len(ERROR_FRAGMENT)

        if self.materialize:
            try:
                self.materialize_page(page)
            except TemplateWriteError as e:
                logger.error(str(e))

        data = page.encode("utf-8", errors=_TEXT_ERRORS)
        output.write(data)
        return len(data)

    # =========================================================================
    # FILES
    # =========================================================================

    def _copy_file(self, path: Path, output: BinaryIO) -> int:
        """
        Stream ``path`` into ``output`` chunk by chunk.

        Raises:
            FileReadError: On open or read failure. ``written`` on the
                exception says how much was sent before it.
        """
        written = 0
        try:
            source = open(path, "rb")
        except OSError as e:
            raise FileReadError(f"Cannot open {path}: {e}", path, written) from e

        with source:
            while True:
                try:
                    chunk = source.read(self.chunk_size)
                except OSError as e:
                    raise FileReadError(f"Read failed on {path}: {e}", path, written) from e
                if not chunk:
                    break
                output.write(chunk)
                written += len(chunk)

        return written

    def _write_file(self, output: BinaryIO, path: Path) -> int:
        try:
            return self._copy_file(path, output)
        except FileReadError as e:
            logger.error(str(e))
            output.write(ERROR_FRAGMENT)
            return e.written + len(ERROR_FRAGMENT)

    def _write_not_found(self, output: BinaryIO) -> int:
        try:
            return self._copy_file(self.not_found_path, output)
        except FileReadError as e:
            # Best effort: the 404 status is already out
            logger.error(str(e))
            return e.written


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. HOME: template substituted in memory, side copy written atomically
# 2. FILE: raw bytes streamed in chunks
# 3. MISSING: notFound.html streamed, failures swallowed
#
# The Content-Type is whatever the header said. A .png is still sent as
# text/html; see ServerConfig.content_type.
# =============================================================================
