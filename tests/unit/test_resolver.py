"""
Unit tests for request path parsing and resource resolution.
"""

import os
from pathlib import Path

import pytest

from webworker.errors import MalformedRequest
from webworker.http.resolver import (
    ResourceResolver,
    ResolvedResource,
    ResourceKind,
    parse_request_path,
)
from webworker.http.response import ResponseHeader


class TestParseRequestPath:
    """Tests for extracting the path token."""

    @pytest.mark.parametrize("path", [
        "",
        "index.html",
        "real.txt",
        "css/site.css",
        "a/b/c/d.png",
        "search?q=1",
        "..%2Fsecret",
    ])
    def test_extracts_path(self, path: str):
        """Test that GET /<path> HTTP/1.1 yields exactly <path>."""
        assert parse_request_path(f"GET /{path} HTTP/1.1") == path

    def test_method_and_version_not_checked(self):
        """Test that any method and version are accepted."""
        assert parse_request_path("BREW /pot HTTP/9.9") == "pot"

    def test_only_first_space_after_slash_ends_token(self):
        """Test that the token stops at the first space after the slash."""
        assert parse_request_path("GET /a b HTTP/1.1") == "a"

    @pytest.mark.parametrize("line", [
        "",
        None,
        "GET",
        "GET index.html HTTP/1.1",
        "GET /index.html",
    ])
    def test_malformed(self, line):
        """Test that lines without a terminated path token are rejected."""
        with pytest.raises(MalformedRequest):
            parse_request_path(line)

    def test_malformed_carries_line(self):
        """Test that the exception keeps the offending line."""
        with pytest.raises(MalformedRequest) as exc_info:
            parse_request_path("garbage")
        assert exc_info.value.line == "garbage"


class TestResourceResolver:
    """Tests for classifying requests against the document root."""

    def test_home(self, doc_root: Path):
        """Test that an empty path resolves to HOME."""
        resource = ResourceResolver(doc_root).resolve("GET / HTTP/1.1")

        assert resource.kind is ResourceKind.HOME
        assert resource.is_found

    def test_existing_file(self, doc_root: Path):
        """Test that a regular file resolves to FILE."""
        resource = ResourceResolver(doc_root).resolve("GET /real.txt HTTP/1.1")

        assert resource.kind is ResourceKind.FILE
        assert resource.path == (doc_root / "real.txt").resolve()
        assert resource.target == "real.txt"

    def test_nested_file(self, doc_root: Path):
        """Test files in subdirectories."""
        (doc_root / "css").mkdir()
        (doc_root / "css" / "site.css").write_text("body {}")

        resource = ResourceResolver(doc_root).resolve("GET /css/site.css HTTP/1.1")

        assert resource.kind is ResourceKind.FILE

    def test_missing_file(self, doc_root: Path):
        """Test that a nonexistent path resolves to MISSING."""
        resource = ResourceResolver(doc_root).resolve("GET /missing.html HTTP/1.1")

        assert resource.kind is ResourceKind.MISSING
        assert not resource.is_found
        assert resource.target == "missing.html"

    def test_directory_is_missing(self, doc_root: Path):
        """Test that directories are not served."""
        (doc_root / "docs").mkdir()

        resource = ResourceResolver(doc_root).resolve("GET /docs HTTP/1.1")

        assert resource.kind is ResourceKind.MISSING

    @pytest.mark.parametrize("line", [None, "garbage", "GET /no-version"])
    def test_malformed_is_missing(self, doc_root: Path, line):
        """Test that bad request lines resolve to MISSING instead of raising."""
        resource = ResourceResolver(doc_root).resolve(line)

        assert resource == ResolvedResource.missing()

    def test_no_caching(self, doc_root: Path):
        """Test that each resolution looks at the filesystem again."""
        resolver = ResourceResolver(doc_root)
        line = "GET /late.html HTTP/1.1"

        assert resolver.resolve(line).kind is ResourceKind.MISSING
        (doc_root / "late.html").write_text("now here")
        assert resolver.resolve(line).kind is ResourceKind.FILE

    def test_accepts_str_root(self, doc_root: Path):
        """Test that the root can be given as a string."""
        resolver = ResourceResolver(str(doc_root))

        assert resolver.resolve("GET /real.txt HTTP/1.1").kind is ResourceKind.FILE


class TestBarePaths:
    """Tests for resolving a path without method and version."""

    def test_empty_path_is_home(self, doc_root: Path):
        """Test that resolve("") gives HOME."""
        assert ResourceResolver(doc_root).resolve("").kind is ResourceKind.HOME

    def test_slash_is_home(self, doc_root: Path):
        """Test that a lone slash gives HOME."""
        assert ResourceResolver(doc_root).resolve("/").kind is ResourceKind.HOME

    def test_existing_file(self, doc_root: Path):
        """Test that resolve("/real.txt") gives FILE."""
        resource = ResourceResolver(doc_root).resolve("/real.txt")

        assert resource.kind is ResourceKind.FILE
        assert resource.path.read_bytes() == (doc_root / "real.txt").read_bytes()

    def test_missing_file(self, doc_root: Path):
        """Test that resolve("/missing.html") gives MISSING and a 404 status line."""
        resource = ResourceResolver(doc_root).resolve("/missing.html")

        assert resource.kind is ResourceKind.MISSING
        assert ResponseHeader.for_resource(resource, "WebWorker/1.0").status_line == "HTTP/1.1 404 Not Found"

    def test_existing_file_status_line(self, doc_root: Path):
        """Test that a found path gets a 200 status line."""
        resource = ResourceResolver(doc_root).resolve("/real.txt")

        assert ResponseHeader.for_resource(resource, "WebWorker/1.0").status_line == "HTTP/1.1 200 OK"

    @pytest.mark.parametrize("path", ["real.txt", "/real.txt"])
    def test_resolve_path_leading_slash_optional(self, doc_root: Path, path: str):
        """Test that resolve_path accepts the token with or without its slash."""
        resource = ResourceResolver(doc_root).resolve_path(path)

        assert resource.kind is ResourceKind.FILE
        assert resource.target == "real.txt"

    def test_same_result_as_request_line(self, doc_root: Path):
        """Test that the bare path and the full line agree."""
        resolver = ResourceResolver(doc_root)

        assert resolver.resolve("/real.txt") == resolver.resolve("GET /real.txt HTTP/1.1")

    def test_bare_traversal_is_refused(self, doc_root: Path):
        """Test that confinement applies to bare paths too."""
        (doc_root.parent / "secret.txt").write_text("do not serve")

        assert ResourceResolver(doc_root).resolve("/../secret.txt").kind is ResourceKind.MISSING


class TestPathConfinement:
    """Tests for keeping resolution inside the document root."""

    @pytest.fixture
    def secret(self, doc_root: Path) -> Path:
        path = doc_root.parent / "secret.txt"
        path.write_text("do not serve")
        return path

    def test_dot_dot_is_refused(self, doc_root: Path, secret: Path):
        """Test that ../ cannot reach a file next to the root."""
        resource = ResourceResolver(doc_root).resolve("GET /../secret.txt HTTP/1.1")

        assert resource.kind is ResourceKind.MISSING

    def test_nested_dot_dot_is_refused(self, doc_root: Path, secret: Path):
        """Test that climbing through a subdirectory is also refused."""
        (doc_root / "sub").mkdir()

        resource = ResourceResolver(doc_root).resolve("GET /sub/../../secret.txt HTTP/1.1")

        assert resource.kind is ResourceKind.MISSING

    def test_dot_dot_inside_root_is_allowed(self, doc_root: Path):
        """Test that .. which stays inside the root still works."""
        (doc_root / "sub").mkdir()

        resource = ResourceResolver(doc_root).resolve("GET /sub/../real.txt HTTP/1.1")

        assert resource.kind is ResourceKind.FILE

    def test_absolute_path_is_refused(self, doc_root: Path, secret: Path):
        """Test that a second slash cannot make the path absolute."""
        resource = ResourceResolver(doc_root).resolve(f"GET /{secret} HTTP/1.1")

        assert resource.kind is ResourceKind.MISSING

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlink_out_of_root_is_refused(self, doc_root: Path, secret: Path):
        """Test that a symlink pointing outside the root is not followed."""
        (doc_root / "link.txt").symlink_to(secret)

        resource = ResourceResolver(doc_root).resolve("GET /link.txt HTTP/1.1")

        assert resource.kind is ResourceKind.MISSING

    def test_unconfined_uses_unchecked_join(self, doc_root: Path, secret: Path):
        """Test that confine=False restores the unchecked join."""
        resource = ResourceResolver(doc_root, confine=False).resolve("GET /../secret.txt HTTP/1.1")

        assert resource.kind is ResourceKind.FILE

    def test_traversal_is_logged(self, doc_root: Path, secret: Path, caplog):
        """Test that refused traversal leaves a warning."""
        with caplog.at_level("WARNING", logger="webworker.http.resolver"):
            ResourceResolver(doc_root).resolve("GET /../secret.txt HTTP/1.1")

        assert "Path traversal attempt" in caplog.text
