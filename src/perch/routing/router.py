"""Ordered route table with first-match-wins lookup.

The router owns the registered routes, the optional fallback route and
the per-status error response overrides. It is also the single authority
on host URL and client path canonicalization. It does no I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from perch.errors import ConfigurationError
from perch.http.response import Response, ensure_response
from perch.http.status import reason_phrase
from perch.routing.pattern import DEFAULT_HOST_TOKEN, compile_mask
from perch.routing.route import MatchTarget, Route, RouteMatch
from perch.routing.urls import URLParts, normalize_path, split_url

if TYPE_CHECKING:
    from perch._internal.types import Handler, Mask, ResponseSpec
    from perch.config import ServerConfig

logger = logging.getLogger("perch.routing")


class Router:
    """Ordered route table.

    Usage::

        router = Router(web_root="app")
        router.add_route("/", "Homepage")
        router.add_route("users/:id", show_user)
        router.set_fallback_route("*", lambda ctx: router.get_error_response(404))
        match = router.match("http://localhost:8000/app/users/42")
        match.captures  # {"id": "42"}

    Registration is expected to finish before serving starts; the
    dispatcher works from a snapshot of ``get_routes()``.
    """

    __slots__ = ("_error_responses", "_fallback", "_host_token", "_routes", "_web_root")

    def __init__(self, web_root: str = "", *, host_token: str = DEFAULT_HOST_TOKEN) -> None:
        self._web_root = normalize_path(web_root)
        self._host_token = host_token
        self._routes: list[Route] = []
        self._fallback: Route | None = None
        self._error_responses: dict[int, Response] = {}

    @classmethod
    def from_config(cls, config: ServerConfig) -> Router:
        """Create a router using the web root and host token from *config*."""
        return cls(config.web_root, host_token=config.host_token)

    @property
    def web_root(self) -> str:
        """The normalized web root (no leading or trailing slash)."""
        return self._web_root

    @property
    def host_token(self) -> str:
        """The placeholder replaced by the host URL in template masks."""
        return self._host_token

    # -- Registration --

    def add_route(self, mask: Mask | Sequence[Mask], response: ResponseSpec) -> None:
        """Register one route per mask, all bound to *response*.

        A top-level list or tuple registers each element as its own route
        (in order); a nested list inside it becomes a single ``AnyOf``.

        Raises ``ConfigurationError`` for unsupported masks or responses.
        """
        masks = list(mask) if isinstance(mask, (list, tuple)) else [mask]
        handler = _normalize_response(response)
        routes = [self._create_route(m, handler) for m in masks]
        self._routes.extend(routes)

    def set_fallback_route(self, mask: Mask, response: ResponseSpec) -> None:
        """Replace the fallback route, which is always tried last."""
        self._fallback = self._create_route(mask, _normalize_response(response))

    def remove_fallback_route(self) -> None:
        """Remove the fallback route, if any."""
        self._fallback = None

    def add_static_route(self, mask: Mask | Sequence[Mask], directory: str | Path) -> None:
        """Serve files from *directory* for requests matching *mask*.

        The file is looked up at ``directory / client_path``. Missing files
        answer with ``get_error_response(404)``.
        """
        from perch.server.static import StaticFiles

        self.add_route(mask, StaticFiles(directory, self))

    def add_error_response(self, status: int, response: Response | str | bytes) -> None:
        """Install (or replace) the response sent for *status*."""
        value = ensure_response(response, status=status, what=f"error response for {status}")
        self._error_responses.pop(status, None)
        self._error_responses[status] = value

    def has_error_response(self, status: int) -> bool:
        """Return True if an override is registered for *status*."""
        return status in self._error_responses

    def get_error_response(self, status: int) -> Response:
        """Return the override for *status*, or a plain-text default.

        The default body is ``"{status}\\n{reason phrase}"``. Never raises.
        """
        override = self._error_responses.get(status)
        if override is not None:
            return override
        return Response(
            body=f"{status}\n{reason_phrase(status)}",
            status=status,
            content_type="text/plain; charset=utf-8",
        )

    def get_routes(self) -> list[Route]:
        """Return a copy of the ordered routes with the fallback appended."""
        routes = list(self._routes)
        if self._fallback is not None:
            routes.append(self._fallback)
        return routes

    # -- Canonicalization --

    @staticmethod
    def normalize_path(path: str) -> str:
        """See ``perch.routing.urls.normalize_path``."""
        return normalize_path(path)

    def compute_host_url(self, url: str) -> str:
        """Return the host URL (origin plus web root) for an absolute URL.

        ``compute_host_url("http://h:8080/app/x?q=1")`` is
        ``"http://h:8080/app"`` with web root ``"app"``.
        """
        return self._host_url(split_url(url))

    def compute_client_url(self, url: str) -> str:
        """Return the request path relative to the web root, with a leading ``/``.

        A URL outside the web root yields its own normalized path.
        """
        parts = split_url(url)
        path = self._client_path(parts)
        if path is None:
            path = normalize_path(parts.pathname)
        return f"/{path}"

    def target(self, url: str) -> MatchTarget:
        """Compute everything patterns test against for *url*.

        Raises ``ValueError`` if *url* is not a valid absolute URL.
        """
        parts = split_url(url)
        return MatchTarget(
            url=url,
            host_url=self._host_url(parts),
            path=self._client_path(parts),
            parts=parts,
        )

    # -- Lookup --

    def match(self, url: str, routes: Sequence[Route] | None = None) -> RouteMatch | None:
        """Return the first route matching *url*, or ``None``."""
        return self.match_target(self.target(url), routes)

    def match_target(
        self,
        target: MatchTarget,
        routes: Sequence[Route] | None = None,
    ) -> RouteMatch | None:
        """Linear first-match-wins scan over *routes* (default: ``get_routes()``)."""
        for route in self.get_routes() if routes is None else routes:
            captures = route.pattern.match(target)
            if captures is not None:
                return RouteMatch(route=route, captures=captures, target=target)
        return None

    # -- Internal --

    def _create_route(self, mask: Mask, handler: Handler) -> Route:
        pattern = compile_mask(mask, self._host_token)
        logger.debug("Registered route %r as %r", mask, pattern)
        return Route(mask=mask, pattern=pattern, handler=handler)

    def _host_url(self, parts: URLParts) -> str:
        if self._web_root:
            return f"{parts.origin}/{self._web_root}"
        return parts.origin

    def _client_path(self, parts: URLParts) -> str | None:
        pathname = parts.pathname
        if not self._web_root:
            return normalize_path(pathname)
        prefix = f"/{self._web_root}"
        if pathname == prefix or pathname.startswith(f"{prefix}/"):
            return normalize_path(pathname[len(prefix) :])
        return None


def _normalize_response(response: Any) -> Handler:
    """Turn the response side of a route into a handler.

    Constant bodies (``Response``, ``str``, ``bytes``) become handlers
    that always return them.
    """
    if isinstance(response, (Response, str, bytes)):
        constant = response

        def constant_response(_ctx: Any) -> Any:
            return constant

        return constant_response
    if callable(response):
        return response
    msg = f"Unsupported route response {response!r}. Expected a callable, Response, str or bytes."
    raise ConfigurationError(msg)
