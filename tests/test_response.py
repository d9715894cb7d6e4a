"""Tests for perch.http.response — Response chaining and coercion."""

import pytest

from perch.errors import ConfigurationError
from perch.http.response import Response, ensure_response, redirect, to_response
from perch.http.status import reason_phrase


class TestResponse:
    def test_defaults(self) -> None:
        r = Response()
        assert r.body == ""
        assert r.status == 200
        assert r.content_type == "text/plain; charset=utf-8"
        assert r.headers == ()

    def test_chaining(self) -> None:
        r = Response("x").with_status(201).with_header("X-A", "1").with_headers({"X-B": "2"})
        assert r.status == 201
        assert r.headers == (("X-A", "1"), ("X-B", "2"))

    def test_immutable_chaining(self) -> None:
        original = Response("x")
        original.with_status(500)
        assert original.status == 200

    def test_content_type(self) -> None:
        assert Response().with_content_type("text/html").content_type == "text/html"

    def test_header_lookup_case_insensitive(self) -> None:
        r = Response().with_header("Location", "/x")
        assert r.header("location") == "/x"
        assert r.location == "/x"
        assert r.header("missing", "d") == "d"

    def test_body_conversions(self) -> None:
        assert Response("é").body_bytes == "é".encode()
        assert Response(b"abc").text == "abc"


class TestRedirect:
    def test_default_301(self) -> None:
        r = redirect("http://h/x")
        assert r.status == 301
        assert r.location == "http://h/x"
        assert r.body == b""

    def test_custom_status(self) -> None:
        assert redirect("/x", status=307).status == 307


class TestToResponse:
    def test_none(self) -> None:
        assert to_response(None) is None

    def test_response_passthrough(self) -> None:
        r = Response("x")
        assert to_response(r) is r

    @pytest.mark.parametrize("value", ["text", b"bytes"])
    def test_bodies(self, value: str | bytes) -> None:
        r = to_response(value)
        assert r is not None
        assert r.status == 200
        assert r.body == value

    def test_invalid(self) -> None:
        with pytest.raises(TypeError, match="int"):
            to_response(42)


class TestEnsureResponse:
    def test_wraps_with_status(self) -> None:
        assert ensure_response("gone", status=410).status == 410

    def test_response_kept(self) -> None:
        r = Response("x", status=404)
        assert ensure_response(r, status=500) is r

    def test_invalid(self) -> None:
        with pytest.raises(ConfigurationError, match="error page"):
            ensure_response(object(), what="error page")


class TestReasonPhrase:
    def test_known(self) -> None:
        assert reason_phrase(404) == "Not Found"
        assert reason_phrase(500) == "Internal Server Error"

    def test_unknown(self) -> None:
        assert reason_phrase(799) == "Unknown Status"
