"""Tests for perch.routing.pattern — mask normalization and matchers."""

import re

import pytest

from perch.errors import ConfigurationError
from perch.routing.pattern import AnyOf, Exact, Regex, Template, compile_mask
from perch.routing.route import MatchTarget
from perch.routing.urls import split_url


def _target(url: str, *, host_url: str = "http://localhost", path: str | None = None) -> MatchTarget:
    parts = split_url(url)
    if path is None:
        path = parts.pathname.strip("/")
    return MatchTarget(url=url, host_url=host_url, path=path, parts=parts)


class TestCompileMask:
    def test_plain_string_is_exact(self) -> None:
        pattern = compile_mask("/users/")
        assert pattern == Exact("users")

    def test_empty_string_is_root(self) -> None:
        assert compile_mask("/") == Exact("")

    def test_placeholder_string_is_template(self) -> None:
        assert isinstance(compile_mask("users/:id"), Template)
        assert isinstance(compile_mask("users/{id:int}"), Template)
        assert isinstance(compile_mask("static/*"), Template)

    def test_host_token_string_is_template(self) -> None:
        pattern = compile_mask("%host%/x")
        assert isinstance(pattern, Template)
        assert pattern.mask == "%host%/x"

    def test_custom_host_token(self) -> None:
        pattern = compile_mask("@@/x", "@@")
        assert isinstance(pattern, Template)
        assert compile_mask("%host%/x", "@@") == Exact("%host%/x")

    def test_regex(self) -> None:
        rx = re.compile(r"^posts/(?P<slug>[a-z-]+)$")
        assert compile_mask(rx) == Regex(rx)

    def test_sequence_is_any_of(self) -> None:
        pattern = compile_mask(["a", "b/:id"])
        assert isinstance(pattern, AnyOf)
        assert pattern.patterns[0] == Exact("a")
        assert isinstance(pattern.patterns[1], Template)

    def test_pattern_passes_through(self) -> None:
        exact = Exact("a")
        assert compile_mask(exact) is exact

    @pytest.mark.parametrize("mask", [42, None, b"bytes", object(), 3.5])
    def test_unsupported(self, mask: object) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported route mask"):
            compile_mask(mask)

    def test_empty_any_of(self) -> None:
        with pytest.raises(ConfigurationError):
            compile_mask([])

    def test_malformed_template_fails_at_compile(self) -> None:
        with pytest.raises(ConfigurationError):
            compile_mask("users/{id:uuid}")


class TestExact:
    def test_matches_normalized_path(self) -> None:
        assert Exact("/demo/").match(_target("http://localhost/demo")) == {}

    def test_no_prefix_match(self) -> None:
        assert Exact("demo").match(_target("http://localhost/demo/more")) is None

    def test_outside_web_root_never_matches(self) -> None:
        target = MatchTarget(
            url="http://localhost/other",
            host_url="http://localhost/app",
            path=None,
            parts=split_url("http://localhost/other"),
        )
        assert Exact("other").match(target) is None


class TestRegex:
    def test_search_semantics(self) -> None:
        pattern = Regex(re.compile(r"\d+"))
        assert pattern.test(_target("http://localhost/users/42"))
        assert not pattern.test(_target("http://localhost/users/ada"))

    def test_named_groups_become_captures(self) -> None:
        pattern = Regex(re.compile(r"^users/(?P<id>\d+)(?:/(?P<tab>\w+))?$"))
        assert pattern.match(_target("http://localhost/users/42")) == {"id": "42"}
        assert pattern.match(_target("http://localhost/users/42/posts")) == {
            "id": "42",
            "tab": "posts",
        }

    def test_outside_web_root_never_matches(self) -> None:
        target = MatchTarget(
            url="http://localhost/x",
            host_url="http://localhost/app",
            path=None,
            parts=split_url("http://localhost/x"),
        )
        assert Regex(re.compile(".*")).match(target) is None


class TestTemplate:
    def test_appended_to_host_url(self) -> None:
        pattern = Template("users/:id")
        assert pattern.resolve("http://localhost:8080/app").source == (
            "http://localhost:8080/app/users/:id"
        )

    def test_empty_mask_is_host_url(self) -> None:
        assert Template("").resolve("http://localhost").source == "http://localhost"

    def test_host_token_replaced(self) -> None:
        pattern = Template("%host%/a/%host%")
        assert pattern.resolve("http://h").source == "http://h/a/http://h"

    def test_match_uses_target_host_url(self) -> None:
        pattern = Template("users/:id")
        target = _target("http://localhost:8080/app/users/42", host_url="http://localhost:8080/app")
        assert pattern.match(target) == {"id": "42"}

    def test_host_token_prefix(self) -> None:
        pattern = Template("%host%/api/:version")
        target = _target("http://example.com/api/v2", host_url="http://example.com")
        assert pattern.match(target) == {"version": "v2"}

    def test_invalid_at_construction(self) -> None:
        with pytest.raises(ConfigurationError):
            Template("files/{name")


class TestAnyOf:
    def test_first_child_wins(self) -> None:
        pattern = AnyOf((Regex(re.compile(r"(?P<a>x)")), Regex(re.compile(r"(?P<b>x)"))))
        assert pattern.match(_target("http://localhost/x")) == {"a": "x"}

    def test_no_child_matches(self) -> None:
        pattern = AnyOf((Exact("a"), Exact("b")))
        assert pattern.match(_target("http://localhost/c")) is None

    def test_nested(self) -> None:
        pattern = compile_mask(["a", ["b", "c"]])
        assert pattern.test(_target("http://localhost/c"))
