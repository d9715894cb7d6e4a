"""ASGI handler — resolves each HTTP request to exactly one outcome.

The pipeline, in order:

1. Rebuild the absolute request URL from the ASGI scope.
2. Redirect ``/path/`` to ``/path`` (301) and stop.
3. Find the first matching route in the snapshot.
4. Invoke its handler with a ``RouteContext``, or answer 404.

Every error path goes through ``Router.get_error_response``.
"""

import logging
from collections.abc import Sequence

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response, redirect, to_response
from perch.routing.route import MatchTarget, Route, RouteContext
from perch.routing.router import Router
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.sender import Responder

logger = logging.getLogger("perch.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    routes: Sequence[Route],
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    responder = Responder(send)

    try:
        target = router.target(request.url)
    except ValueError:
        logger.debug("400 %s %s: unparsable URL", request.method, request.url)
        await responder.respond(router.get_error_response(400))
        return

    redirect_response = canonical_redirect(target)
    if redirect_response is not None:
        logger.debug("301 %s -> %s", request.url, redirect_response.location)
        await responder.respond(redirect_response)
        return

    match = router.match_target(target, routes)
    if match is None:
        logger.debug("404 %s %s", request.method, request.url)
        await responder.respond(router.get_error_response(404))
        return

    ctx = RouteContext(
        url=target.url,
        path=target.path,
        host_url=target.host_url,
        pattern=match.route.pattern,
        captures=match.captures,
        request=request,
        _respond=responder.respond,
    )

    response: Response | None
    try:
        response = to_response(await invoke(match.route.handler, ctx))
    except HTTPError as exc:
        response = handle_http_error(exc, request, router)
    except Exception as exc:
        response = handle_internal_error(exc, request, router)

    if response is None:
        # The handler chose not to answer (or answered via ctx.respond).
        if not responder.sent:
            logger.debug("Handler for %s returned no response", request.url)
        return

    await responder.respond(response)


def canonical_redirect(target: MatchTarget) -> Response | None:
    """Return a 301 to the slash-stripped URL, or None if already canonical.

    The bare root and the host URL itself (``/<web_root>/``) are left alone.
    The query string is carried over to the new location.
    """
    parts = target.parts
    pathname = parts.pathname
    if pathname == "/" or not pathname.endswith("/"):
        return None

    location = f"{parts.origin}{pathname[:-1]}"
    if location == target.host_url:
        return None
    if parts.search:
        location = f"{location}?{parts.search}"
    return redirect(location, status=301)
