"""
Unit tests for the response header block.
"""

import io
from datetime import datetime, timezone, timedelta
from pathlib import Path

import pytest

from webworker.http.resolver import ResolvedResource
from webworker.http.response import ResponseHeader, format_http_date, write_header
from webworker.http.status_codes import HTTPStatus


NOW = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)


class FlushRecorder(io.BytesIO):
    """BytesIO that remembers what had been written at each flush."""

    def __init__(self):
        super().__init__()
        self.flushed = []

    def flush(self):
        self.flushed.append(self.getvalue())
        super().flush()


class TestResponseHeader:
    """Tests for ResponseHeader."""

    @pytest.mark.parametrize("resource", [
        ResolvedResource.home(),
        ResolvedResource.file(Path("/srv/a.txt"), "a.txt"),
    ])
    def test_found_is_200(self, resource: ResolvedResource):
        """Test that HOME and FILE get 200 OK."""
        header = ResponseHeader.for_resource(resource, "Test/1.0", now=NOW)

        assert header.status == HTTPStatus.OK
        assert header.status_line == "HTTP/1.1 200 OK"

    def test_missing_is_404(self):
        """Test that MISSING gets 404 Not Found."""
        header = ResponseHeader.for_resource(ResolvedResource.missing(), "Test/1.0", now=NOW)

        assert header.status_line == "HTTP/1.1 404 Not Found"

    def test_to_bytes_exact(self):
        """Test the full wire format."""
        header = ResponseHeader.for_resource(ResolvedResource.home(), "Test/1.0", now=NOW)

        assert header.to_bytes() == (
            b"HTTP/1.1 200 OK\n"
            b"Date: Thu, 15 Jan 2026 12:30:45 GMT\n"
            b"Server: Test/1.0\n"
            b"Connection: close\n"
            b"Content-Type: text/html\n"
            b"\n"
        )

    @pytest.mark.parametrize("resource", [
        ResolvedResource.home(),
        ResolvedResource.file(Path("/srv/a.txt"), "a.txt"),
        ResolvedResource.missing(),
    ])
    def test_ends_with_exactly_one_blank_line(self, resource: ResolvedResource):
        """Test that the block ends with one blank line for every outcome."""
        data = ResponseHeader.for_resource(resource, "Test/1.0", now=NOW).to_bytes()

        assert data.endswith(b"\n\n")
        assert not data.endswith(b"\n\n\n")
        assert data.count(b"\n\n") == 1

    def test_content_type_is_fixed(self):
        """Test that the configured type is used regardless of the file."""
        resource = ResolvedResource.file(Path("/srv/logo.png"), "logo.png")
        header = ResponseHeader.for_resource(resource, "Test/1.0", content_type="text/html", now=NOW)

        assert b"Content-Type: text/html\n" in header.to_bytes()

    def test_frozen(self):
        """Test that a built header cannot be modified."""
        header = ResponseHeader.for_resource(ResolvedResource.home(), "Test/1.0", now=NOW)

        with pytest.raises(AttributeError):
            header.status = HTTPStatus.NOT_FOUND

    def test_default_date_is_now(self):
        """Test that the Date header defaults to the current time."""
        header = ResponseHeader.for_resource(ResolvedResource.home(), "Test/1.0")

        assert header.date.endswith(" GMT")


class TestWriteHeader:
    """Tests for writing the header to a stream."""

    def test_writes_and_flushes(self):
        """Test that the header is flushed before returning."""
        header = ResponseHeader.for_resource(ResolvedResource.missing(), "Test/1.0", now=NOW)
        output = FlushRecorder()

        written = write_header(output, header)

        assert written == len(header.to_bytes())
        assert output.flushed == [header.to_bytes()]


class TestFormatHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        """Test HTTP date format."""
        assert format_http_date(NOW) == "Thu, 15 Jan 2026 12:30:45 GMT"

    def test_converts_to_gmt(self):
        """Test that aware datetimes in other zones are converted."""
        local = NOW.astimezone(timezone(timedelta(hours=2)))

        assert format_http_date(local) == "Thu, 15 Jan 2026 12:30:45 GMT"


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_phrases(self):
        """Test reason phrases."""
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"

    def test_categories(self):
        """Test status category helpers."""
        assert HTTPStatus.OK.is_success
        assert HTTPStatus.NOT_FOUND.is_client_error
        assert not HTTPStatus.NOT_FOUND.is_success
