"""
=============================================================================
RESOURCE RESOLVER
=============================================================================

Turns a request line into one of three outcomes:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         RESOLUTION                                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   "GET / HTTP/1.1"            path ""            → HOME              │
    │   "GET /page.html HTTP/1.1"   regular file       → FILE(page.html)   │
    │   "GET /nope HTTP/1.1"        nothing there      → MISSING           │
    │   "GET /docs HTTP/1.1"        a directory        → MISSING           │
    │   "garbage"                   no path token      → MISSING           │
    │   None                        nothing was read   → MISSING           │
    │   "/page.html"                bare path          → FILE(page.html)   │
    │   ""                          bare empty path    → HOME              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULE
=============================================================================

The path token starts right after the FIRST "/" in the line and ends at
the first space after it:

    GET /css/site.css HTTP/1.1
        ▲            ▲
        │            └── first space after the slash
        └── first slash

    token = "css/site.css"

Method and version are not checked. The token is used literally: no
percent-decoding, no query string stripping.

=============================================================================
PATH TRAVERSAL
=============================================================================

A literal join of root and token lets a client walk out of the root:

    GET /../../etc/passwd HTTP/1.1    → root/../../etc/passwd
    GET //etc/passwd HTTP/1.1         → /etc/passwd (absolute wins)

With confinement on (the default) the candidate is canonicalized with
Path.resolve(), which collapses ".." and follows symlinks, and must still
sit inside the canonical root. Anything outside resolves to MISSING.

=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..errors import MalformedRequest


logger = logging.getLogger(__name__)


class ResourceKind(Enum):
    """What a request resolved to."""
    HOME = "home"        # Empty path: serve the templated page
    FILE = "file"        # A regular file under the document root
    MISSING = "missing"  # Everything else


@dataclass(frozen=True)
class ResolvedResource:
    """
    Result of resolving a request.

    Attributes:
        kind: HOME, FILE, or MISSING.
        path: Absolute filesystem path, only set for FILE.
        target: The parsed path token, or None if the line was malformed.
    """

    kind: ResourceKind
    path: Optional[Path] = None
    target: Optional[str] = None

    @classmethod
    def home(cls) -> "ResolvedResource":
        return cls(ResourceKind.HOME, target="")

    @classmethod
    def file(cls, path: Path, target: str) -> "ResolvedResource":
        return cls(ResourceKind.FILE, path=path, target=target)

    @classmethod
    def missing(cls, target: Optional[str] = None) -> "ResolvedResource":
        return cls(ResourceKind.MISSING, target=target)

    @property
    def is_found(self) -> bool:
        """True when the response is a 200."""
        return self.kind is not ResourceKind.MISSING


def parse_request_path(request_line: Optional[str]) -> str:
    """
    Extract the path token from a request line.

        >>> parse_request_path("GET /index.html HTTP/1.1")
        'index.html'
        >>> parse_request_path("GET / HTTP/1.1")
        ''

    Raises:
        MalformedRequest: No "/" in the line, or no space after it.
    """
    if not request_line:
        raise MalformedRequest("Empty request line", request_line)

    slash = request_line.find("/")
    if slash < 0:
        raise MalformedRequest(f"No path in request line: {request_line!r}", request_line)

    start = slash + 1
    end = request_line.find(" ", start)
    if end < 0:
        raise MalformedRequest(f"Unterminated path in request line: {request_line!r}", request_line)

    return request_line[start:end]


class ResourceResolver:
    """
    Classifies request lines against a document root.

    Resolution looks at the filesystem every time. Nothing is cached, so a
    file that appears or disappears between two requests is picked up.

    Usage:
        resolver = ResourceResolver("/var/www")
        resource = resolver.resolve("GET /about.html HTTP/1.1")
        if resource.kind is ResourceKind.FILE:
            ...
    """

    def __init__(self, doc_root: Union[str, Path], confine: bool = True):
        """
        Args:
            doc_root: Directory that request paths are relative to.
            confine: Reject paths that canonicalize outside doc_root.
        """
        # Resolve once up front so the containment check compares like with like
        self.doc_root = Path(doc_root).resolve()
        self.confine = confine

    def resolve(self, request: Optional[str]) -> ResolvedResource:
        """
        Resolve a request line or a bare path. Never raises for bad input.

            "GET /real.txt HTTP/1.1"   → parsed, then classified
            "/real.txt" or ""          → classified as is
            None                       → MISSING (nothing was read)

        Args:
            request: The first line of the request, a path, or None.

        Returns:
            The resolved resource.
        """
        if request is not None and (request == "" or (request.startswith("/") and " " not in request)):
            return self.resolve_path(request)

        try:
            target = parse_request_path(request)
        except MalformedRequest as e:
            logger.warning(f"Malformed request: {e}")
            return ResolvedResource.missing()

        return self._classify(target)

    def resolve_path(self, path: str) -> ResolvedResource:
        """
        Classify a path token against the document root.

        One leading "/" is optional, so "real.txt" and "/real.txt" are the
        same resource and both "" and "/" are HOME.
        """
        return self._classify(path[1:] if path.startswith("/") else path)

    def _classify(self, target: str) -> ResolvedResource:
        if target == "":
            return ResolvedResource.home()

        candidate = self._locate(target)
        if candidate is None:
            return ResolvedResource.missing(target)

        try:
            is_file = candidate.is_file()
        except (OSError, ValueError) as e:
            # e.g. name too long, permission denied on a parent directory
            logger.warning(f"Cannot stat {candidate}: {e}")
            is_file = False

        if is_file:
            return ResolvedResource.file(candidate, target)
        return ResolvedResource.missing(target)

    def _locate(self, target: str) -> Optional[Path]:
        """Map a path token to a filesystem path, or None if it is refused."""
        candidate = self.doc_root / target

        if not self.confine:
            return candidate

        try:
            candidate = candidate.resolve()
        except (OSError, RuntimeError) as e:
            # RuntimeError: symlink loop on older Pythons
            logger.warning(f"Cannot resolve {target!r}: {e}")
            return None
        except ValueError as e:
            # Embedded NUL byte
            logger.warning(f"Invalid path {target!r}: {e}")
            return None

        try:
            candidate.relative_to(self.doc_root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {target}")
            return None

        return candidate
