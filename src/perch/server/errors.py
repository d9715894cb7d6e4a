"""Error handling pipeline for perch requests.

Maps HTTPError exceptions and unexpected failures to Responses through
``Router.get_error_response`` so registered overrides apply uniformly.
"""

import logging

from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.routing.router import Router

logger = logging.getLogger("perch.server")


def handle_http_error(exc: HTTPError, request: Request, router: Router) -> Response:
    """Map an HTTPError raised by a handler to its error response.

    Headers carried by the exception (e.g. ``Allow``) are added to the
    default response; a registered override is sent untouched.
    """
    logger.debug("%d %s %s: %s", exc.status, request.method, request.url, exc.detail)
    response = router.get_error_response(exc.status)
    if router.has_error_response(exc.status):
        return response
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request, router: Router) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.url, exc_info=exc)
    return router.get_error_response(500)
