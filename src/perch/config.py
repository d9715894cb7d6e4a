"""Server configuration.

ServerConfig is a frozen dataclass: immutable after creation and
autocompletable, with no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Server configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(port=8080, web_root="app/v1")
    """

    # Listener (opaque to the router)
    host: str = "127.0.0.1"
    port: int = 8000  # 0 = pick a free port, see Dispatcher.port

    # Mount point within the authority, e.g. "app" serves under http://host/app
    web_root: str = ""

    # Placeholder in route masks that is replaced with the host URL
    host_token: str = "%host%"

    # Transport
    log_level: str = "info"
    access_log: bool = False
    proxy_headers: bool = False
    graceful_timeout: float | None = None  # None = wait for in-flight requests
