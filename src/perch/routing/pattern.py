"""Route patterns — the closed set of matchers a mask normalizes into.

``compile_mask()`` resolves a caller-supplied mask once, at registration:

- ``RoutePattern`` instance → used as is
- ``re.Pattern``            → ``Regex``
- ``str``                   → ``Exact``, or ``Template`` if it has
  placeholder syntax or the host token
- ``list`` / ``tuple``      → ``AnyOf``

Anything else raises ``ConfigurationError``.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from perch.errors import ConfigurationError
from perch.routing.template import URLTemplate, compile_template
from perch.routing.urls import normalize_path

if TYPE_CHECKING:
    from perch.routing.route import MatchTarget

DEFAULT_HOST_TOKEN = "%host%"

# Characters that turn a plain string mask into a URL template
_TEMPLATE_CHARS = frozenset(":{*(?#\\")

# Host URL used to validate templates at registration time
_PROBE_HOST_URL = "http://localhost"


class RoutePattern:
    """Base class for route matchers.

    Subclasses implement ``match()``, returning the captured arguments on
    success and ``None`` otherwise.
    """

    __slots__ = ()

    def match(self, target: MatchTarget) -> dict[str, str] | None:
        raise NotImplementedError

    def test(self, target: MatchTarget) -> bool:
        """Return True if *target* matches."""
        return self.match(target) is not None


@dataclass(frozen=True, slots=True)
class Exact(RoutePattern):
    """Equality against the normalized client path."""

    path: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_path(self.path))

    def match(self, target: MatchTarget) -> dict[str, str] | None:
        if target.path is not None and target.path == self.path:
            return {}
        return None


@dataclass(frozen=True, slots=True)
class Regex(RoutePattern):
    """``pattern.search()`` against the normalized client path.

    Named groups that took part in the match become captures.
    """

    pattern: re.Pattern[str]

    def match(self, target: MatchTarget) -> dict[str, str] | None:
        if target.path is None:
            return None
        m = self.pattern.search(target.path)
        if m is None:
            return None
        return {name: value for name, value in m.groupdict().items() if value is not None}


@dataclass(frozen=True, slots=True)
class Template(RoutePattern):
    """A URL template resolved against the request's host URL.

    If the mask contains the host token, each occurrence is replaced by
    the host URL. Otherwise a non-empty mask is appended to the host URL,
    and an empty mask is the host URL itself (the site root).
    """

    mask: str
    host_token: str = DEFAULT_HOST_TOKEN

    def __post_init__(self) -> None:
        # Surface syntax errors at registration, not on the first request
        self.resolve(_PROBE_HOST_URL)

    def resolve(self, host_url: str) -> URLTemplate:
        """Return the compiled template for *host_url*."""
        if self.host_token and self.host_token in self.mask:
            source = self.mask.replace(self.host_token, host_url)
        elif self.mask:
            source = f"{host_url}/{self.mask}"
        else:
            source = host_url
        return compile_template(source)

    def match(self, target: MatchTarget) -> dict[str, str] | None:
        return self.resolve(target.host_url).match(target.parts)


@dataclass(frozen=True, slots=True)
class AnyOf(RoutePattern):
    """Logical OR over child patterns, evaluated left to right."""

    patterns: tuple[RoutePattern, ...]

    def __post_init__(self) -> None:
        if not self.patterns:
            msg = "AnyOf requires at least one pattern."
            raise ConfigurationError(msg)

    def match(self, target: MatchTarget) -> dict[str, str] | None:
        for pattern in self.patterns:
            captures = pattern.match(target)
            if captures is not None:
                return captures
        return None


def compile_mask(mask: Any, host_token: str = DEFAULT_HOST_TOKEN) -> RoutePattern:
    """Normalize a caller-supplied mask into a RoutePattern.

    Raises ``ConfigurationError`` for unsupported mask types or malformed
    templates.
    """
    if isinstance(mask, RoutePattern):
        return mask
    if isinstance(mask, re.Pattern):
        return Regex(mask)
    if isinstance(mask, str):
        path = normalize_path(mask)
        if (host_token and host_token in path) or not _TEMPLATE_CHARS.isdisjoint(path):
            return Template(path, host_token)
        return Exact(path)
    if isinstance(mask, Sequence) and not isinstance(mask, (bytes, bytearray)):
        return AnyOf(tuple(compile_mask(m, host_token) for m in mask))
    msg = f"Unsupported route mask {mask!r} of type {type(mask).__name__!r}."
    raise ConfigurationError(msg)
