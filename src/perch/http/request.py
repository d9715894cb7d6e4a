"""Immutable HTTP request.

Frozen metadata with async body access. Routing only ever looks at the
absolute ``url``; everything else is passed through to handlers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from perch._internal.asgi import Receive, Scope
from perch.http.headers import Headers
from perch.routing.urls import DEFAULT_PORTS


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``url`` is the full absolute URL the client used, rebuilt from the
    ASGI scope so that scheme and authority reflect the actual virtual
    host. The body is read on demand via ``.body()`` / ``.text()``.
    """

    method: str
    url: str
    path: str
    query_string: str
    headers: Headers
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body access
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache for the body
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks: list[bytes] = []
        if self._receive is not None:
            while True:
                message = await self._receive()
                chunks.append(message.get("body", b""))
                if not message.get("more_body", False):
                    break
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive | None = None) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(scope.get("headers", ()))
        server = scope.get("server")
        client = scope.get("client")
        query_string = scope.get("query_string", b"").decode("latin-1")
        return cls(
            method=scope.get("method", "GET"),
            url=absolute_url(scope, headers, query_string),
            path=scope["path"],
            query_string=query_string,
            headers=headers,
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )


def absolute_url(scope: Scope, headers: Headers, query_string: str = "") -> str:
    """Rebuild the absolute request URL from an ASGI scope.

    The authority comes from the ``Host`` header, falling back to the
    ``server`` address. The path is taken from ``raw_path`` when the server
    provides it so percent-encoding survives untouched.
    """
    scheme = scope.get("scheme", "http")
    authority = headers.get("host")
    if not authority:
        server = scope.get("server")
        if server:
            host, port = server[0], server[1]
            if port is None or DEFAULT_PORTS.get(scheme) == port:
                authority = host
            else:
                authority = f"{host}:{port}"
        else:
            authority = "localhost"

    raw_path = scope.get("raw_path")
    if raw_path:
        path = raw_path.decode("latin-1")
    else:
        path = quote(scope.get("path", "/"), safe="/:@!$&'()*+,;=-._~%")
    if not path.startswith("/"):
        path = "/" + path

    url = f"{scheme}://{authority}{path}"
    if query_string:
        url = f"{url}?{query_string}"
    return url
