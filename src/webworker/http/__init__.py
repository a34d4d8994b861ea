"""
=============================================================================
HTTP MODULE
=============================================================================

The three request-facing pieces of the worker, in the order they run:

    request.py      RequestReader     stream → request line
    resolver.py     ResourceResolver  request line → HOME / FILE / MISSING
    response.py     ResponseHeader    resource → status + header block

The body itself is written by handlers.content.ContentWriter.

=============================================================================
"""

from .request import RequestReader, LineBuffer
from .resolver import (
    ResourceResolver,
    ResolvedResource,
    ResourceKind,
    parse_request_path,
)
from .response import ResponseHeader, write_header, format_http_date
from .status_codes import HTTPStatus

# Public API - what you get when you do:
# from webworker.http import *
__all__ = [
    # Request reading
    "RequestReader",
    "LineBuffer",

    # Resolution
    "ResourceResolver",
    "ResolvedResource",
    "ResourceKind",
    "parse_request_path",

    # Response header
    "ResponseHeader",
    "write_header",
    "format_http_date",

    # Status codes
    "HTTPStatus",
]
