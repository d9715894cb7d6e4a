"""Route, MatchTarget, RouteMatch and RouteContext frozen dataclasses."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from perch._internal.types import Handler
from perch.routing.urls import URLParts

if TYPE_CHECKING:
    from perch.http.request import Request
    from perch.http.response import Response
    from perch.routing.pattern import RoutePattern


@dataclass(frozen=True, slots=True)
class MatchTarget:
    """Everything a pattern may test against, computed once per request.

    ``path`` is the normalized client path relative to the web root, or
    ``None`` when the request lies outside the web root.
    """

    url: str
    host_url: str
    path: str | None
    parts: URLParts


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen (pattern, handler) pair.

    ``mask`` keeps the caller's original specification for introspection.
    """

    mask: Any
    pattern: RoutePattern
    handler: Handler


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route lookup."""

    route: Route
    captures: dict[str, str]
    target: MatchTarget


@dataclass(frozen=True, slots=True)
class RouteContext:
    """The single argument every route handler receives.

    Handlers use what they need and ignore the rest::

        def user(ctx: RouteContext) -> str:
            return f"user {ctx.captures['id']}"
    """

    url: str
    path: str | None
    host_url: str
    pattern: RoutePattern
    captures: dict[str, str]
    request: Request | None = None
    _respond: Callable[[Response], Awaitable[bool]] | None = field(
        default=None, repr=False, compare=False
    )

    async def respond(self, response: Response) -> bool:
        """Send *response* now, for handlers that return ``None``.

        Returns False if a response was already sent for this request.
        """
        if self._respond is None:
            return False
        return await self._respond(response)
