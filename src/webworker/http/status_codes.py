"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The worker only ever answers with two statuses:

    200 OK          home page or an existing file
    404 Not Found   everything else (missing, malformed, unreadable request)

There are no 400s or 500s on purpose: a request we cannot understand gets
the same 404 page as a request for a file we do not have.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the worker.

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200           # Home page or file found
    NOT_FOUND = 404    # Missing, malformed, or outside the document root

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        """True for 2xx codes."""
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        """True for 4xx codes."""
        return 400 <= self < 500


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
}
