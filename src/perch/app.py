"""Perch application class.

Wires a ServerConfig, a Router and a Dispatcher together and offers
decorator-style registration on top of the router's API.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.types import Handler, Mask, ResponseSpec
from perch.config import ServerConfig
from perch.http.response import Response
from perch.routing.route import Route
from perch.routing.router import Router
from perch.server.dispatcher import Dispatcher


class App:
    """The perch application.

    Register routes during setup, then ``run()`` (blocking) or
    ``await start()``. Routes added after serving starts are picked up on
    the next ``start()`` only.

    Usage::

        app = App(ServerConfig(port=8080))

        @app.route("users/:id")
        def user(ctx):
            return f"user {ctx.captures['id']}"

        app.add_route("/", "Homepage")
        app.run()
    """

    __slots__ = ("config", "dispatcher", "router")

    def __init__(self, config: ServerConfig | None = None) -> None:
        self.config: ServerConfig = config or ServerConfig()
        self.router = Router.from_config(self.config)
        self.dispatcher = Dispatcher(self.router, self.config)

    # -- Route registration --

    def route(self, mask: Mask | Sequence[Mask]) -> Callable[[Handler], Handler]:
        """Register the decorated function as the handler for *mask*."""

        def decorator(func: Handler) -> Handler:
            self.router.add_route(mask, func)
            return func

        return decorator

    def fallback(self, mask: Mask = "*") -> Callable[[Handler], Handler]:
        """Register the decorated function as the fallback route."""

        def decorator(func: Handler) -> Handler:
            self.router.set_fallback_route(mask, func)
            return func

        return decorator

    def add_route(self, mask: Mask | Sequence[Mask], response: ResponseSpec) -> None:
        self.router.add_route(mask, response)

    def set_fallback_route(self, mask: Mask, response: ResponseSpec) -> None:
        self.router.set_fallback_route(mask, response)

    def remove_fallback_route(self) -> None:
        self.router.remove_fallback_route()

    def add_static_route(self, mask: Mask | Sequence[Mask], directory: str | Path) -> None:
        self.router.add_static_route(mask, directory)

    def add_error_response(self, status: int, response: Response | str | bytes) -> None:
        self.router.add_error_response(status, response)

    def get_error_response(self, status: int) -> Response:
        return self.router.get_error_response(status)

    def get_routes(self) -> list[Route]:
        return self.router.get_routes()

    def compute_host_url(self, url: str) -> str:
        return self.router.compute_host_url(url)

    # -- Server --

    async def start(self) -> None:
        await self.dispatcher.start()

    async def stop(self) -> None:
        await self.dispatcher.stop()

    def run(self) -> None:
        """Serve until interrupted."""
        self.dispatcher.run()

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.dispatcher(scope, receive, send)
