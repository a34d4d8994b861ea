"""
=============================================================================
WORKER ERRORS
=============================================================================

Exception types raised inside the request pipeline.

None of these ever reach the code that hands us a connection. Each one is
caught where it happens, logged, and turned into a best-effort response:

    ┌──────────────────────┬──────────────────────────────────────────────┐
    │  Exception           │  What the client sees                         │
    ├──────────────────────┼──────────────────────────────────────────────┤
    │  StreamReadError     │  404 Not Found (request treated as absent)    │
    │  MalformedRequest    │  404 Not Found                                │
    │  FileReadError       │  200 OK + inline "Bad request" fragment       │
    │  TemplateWriteError  │  nothing, the page is still served            │
    └──────────────────────┴──────────────────────────────────────────────┘

Carrying the offending line or path on the exception keeps the log
messages useful without threading extra arguments through every call.

=============================================================================
"""

from pathlib import Path
from typing import Optional


class WorkerError(Exception):
    """Base class for all request pipeline errors."""


class StreamReadError(WorkerError):
    """
    Raised when the request stream fails or ends before a line is available.
    """


class MalformedRequest(WorkerError):
    """
    Raised when a request line has no path token.

    A path token starts after the first "/" and ends at the next space.
    """

    def __init__(self, message: str, line: Optional[str] = None):
        super().__init__(message)
        self.line = line  # The raw request line, for logging


class FileReadError(WorkerError):
    """
    Raised when a body source file cannot be read.

    ``written`` is how many bytes of the file reached the output before the
    failure, so the caller knows whether the body was partial.
    """

    def __init__(self, message: str, path: Optional[Path] = None, written: int = 0):
        super().__init__(message)
        self.path = path
        self.written = written


class TemplateWriteError(WorkerError):
    """Raised when the materialized home page cannot be written."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path
