"""Request dispatcher — ASGI callable with a Stopped/Running lifecycle.

The dispatcher holds a reference to a Router and serves from a snapshot
of its routes taken when serving starts. Connection handling (accepting,
HTTP parsing, one task per connection) is delegated to uvicorn.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import TYPE_CHECKING

from perch._internal.asgi import Receive, Scope, Send
from perch.config import ServerConfig
from perch.errors import ServerError
from perch.routing.route import Route
from perch.routing.router import Router
from perch.server.handler import handle_request

if TYPE_CHECKING:
    import uvicorn

logger = logging.getLogger("perch.server")

_STARTUP_POLL_INTERVAL = 0.01


class Dispatcher:
    """Dispatches requests to the routes of a Router.

    Usable directly as an ASGI application (``uvicorn module:dispatcher``)
    or started in-process::

        dispatcher = Dispatcher(router, ServerConfig(port=8080))
        await dispatcher.start()
        ...
        await dispatcher.stop()

    Thread safety:
        Routes are snapshotted once per serving session under a lock with
        a double check, so concurrent first requests agree on one table.
        Routes registered after that are not visible until the next
        ``start()``.
    """

    __slots__ = ("_lock", "_routes", "_server", "_task", "config", "router")

    def __init__(self, router: Router, config: ServerConfig | None = None) -> None:
        self.router = router
        self.config: ServerConfig = config or ServerConfig()
        self._lock = threading.Lock()
        self._routes: tuple[Route, ...] | None = None
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task[None] | None = None

    # -- State --

    @property
    def running(self) -> bool:
        """True between ``start()`` and ``stop()``."""
        return self._task is not None

    @property
    def port(self) -> int | None:
        """The bound port while running (useful with ``port=0``)."""
        servers = getattr(self._server, "servers", None)
        if not servers:
            return None
        for server in servers:
            for sock in server.sockets:
                return sock.getsockname()[1]
        return None

    @property
    def url(self) -> str | None:
        """Base URL of the running listener, including the web root."""
        port = self.port
        if port is None:
            return None
        base = f"http://{self.config.host}:{port}"
        if self.router.web_root:
            return f"{base}/{self.router.web_root}"
        return base

    # -- Lifecycle --

    async def start(self) -> None:
        """Bind the listener and start serving. No-op when running.

        Returns once the listener accepts connections.
        Raises ``ServerError`` if the listener cannot be started.
        """
        if self._task is not None:
            return

        import uvicorn

        self._snapshot(refresh=True)
        config = uvicorn.Config(
            self,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level,
            log_config=None,
            access_log=self.config.access_log,
            proxy_headers=self.config.proxy_headers,
            timeout_graceful_shutdown=self.config.graceful_timeout,
            lifespan="off",
        )
        server = uvicorn.Server(config)
        task = asyncio.create_task(self._serve(server))
        self._server, self._task = server, task

        while not server.started:
            if task.done():
                self._reset()
                task.result()
                msg = f"Listener on {self.config.host}:{self.config.port} exited during startup."
                raise ServerError(msg)
            await asyncio.sleep(_STARTUP_POLL_INTERVAL)

        logger.info("Serving %d routes on %s", len(self._routes or ()), self.url)

    async def stop(self) -> None:
        """Close the listener and wait for in-flight requests. No-op when stopped."""
        server, task = self._server, self._task
        if server is None or task is None:
            return

        server.should_exit = True
        try:
            await task
        finally:
            self._reset()
        logger.info("Stopped listener on %s:%s", self.config.host, self.config.port)

    async def serve(self) -> None:
        """Start and block until the listener exits (e.g. on SIGINT)."""
        await self.start()
        task = self._task
        try:
            if task is not None:
                await task
        finally:
            self._reset()

    def run(self) -> None:
        """Blocking entry point: serve until interrupted."""
        asyncio.run(self.serve())

    async def _serve(self, server: uvicorn.Server) -> None:
        try:
            await server.serve()
        except SystemExit as exc:
            # uvicorn exits the process when it cannot bind
            msg = f"Could not listen on {self.config.host}:{self.config.port}."
            raise ServerError(msg) from exc

    def _reset(self) -> None:
        self._server = None
        self._task = None
        with self._lock:
            self._routes = None

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        await handle_request(
            scope,
            receive,
            send,
            router=self.router,
            routes=self._snapshot(),
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Take the route snapshot at startup when run under an external server."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self._snapshot()
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    def _snapshot(self, *, refresh: bool = False) -> tuple[Route, ...]:
        """Return the route snapshot, taking it on first use."""
        routes = self._routes
        if routes is not None and not refresh:
            return routes
        with self._lock:
            if self._routes is None or refresh:
                self._routes = tuple(self.router.get_routes())
            return self._routes
