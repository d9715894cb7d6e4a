"""Perch — URL routing engine for HTTP servers.

Routes are matched by URL in registration order (first match wins),
with an optional fallback route, per-status error responses and
canonical trailing-slash redirects.

Basic usage::

    from perch import App

    app = App()
    app.add_route("/", "Homepage")

    @app.route("users/:id")
    def user(ctx):
        return f"user {ctx.captures['id']}"

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "AnyOf",
    "App",
    "ConfigurationError",
    "Dispatcher",
    "Exact",
    "HTTPError",
    "NotFound",
    "PerchError",
    "Regex",
    "Request",
    "Response",
    "RouteContext",
    "Router",
    "ServerConfig",
    "ServerError",
    "StaticFiles",
    "Template",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast and free of uvicorn until a server starts.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "ServerConfig":
        from perch.config import ServerConfig

        return ServerConfig

    if name == "Router":
        from perch.routing.router import Router

        return Router

    if name == "RouteContext":
        from perch.routing.route import RouteContext

        return RouteContext

    if name in ("AnyOf", "Exact", "Regex", "Template"):
        from perch.routing import pattern as _pattern

        return getattr(_pattern, name)

    if name == "Dispatcher":
        from perch.server.dispatcher import Dispatcher

        return Dispatcher

    if name == "StaticFiles":
        from perch.server.static import StaticFiles

        return StaticFiles

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name in ("ConfigurationError", "HTTPError", "NotFound", "PerchError", "ServerError"):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
