"""Static file route handler.

Serves ``directory / client_path`` for requests routed to it. File reads
run in a worker thread through anyio so a slow disk never blocks the
event loop.
"""

import logging
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING

import anyio

from perch.http.response import Response
from perch.routing.route import RouteContext

if TYPE_CHECKING:
    from perch.routing.router import Router

logger = logging.getLogger("perch.server")


class StaticFiles:
    """Route handler that serves files from a directory.

    Usage::

        router.add_route("static/*", StaticFiles("./public", router))

    Security: resolves symlinks and verifies the final path is within the
    configured directory to prevent path traversal (answered with 403).
    Missing files answer with the router's 404 error response.
    """

    __slots__ = ("_directory", "_router")

    def __init__(self, directory: str | Path, router: "Router") -> None:
        self._directory = Path(directory).resolve()
        self._router = router

    @property
    def directory(self) -> Path:
        return self._directory

    async def __call__(self, ctx: RouteContext) -> Response:
        """Read and serve the file addressed by the request path."""
        if not ctx.path:
            return self._router.get_error_response(404)

        file_path = anyio.Path(self._directory / ctx.path)
        try:
            resolved = await file_path.resolve()
        except OSError:
            return self._router.get_error_response(404)
        if not Path(resolved).is_relative_to(self._directory):
            logger.debug("403 %s: outside %s", ctx.url, self._directory)
            return self._router.get_error_response(403)

        try:
            body = await resolved.read_bytes()
        except OSError:
            logger.debug("404 %s: no file at %s", ctx.url, resolved)
            return self._router.get_error_response(404)

        content_type, _ = mimetypes.guess_type(str(resolved))
        return Response(body=body, content_type=content_type or "application/octet-stream")
