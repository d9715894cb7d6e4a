"""Perch exception hierarchy.

Shared across Router, Dispatcher and handlers so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when a route or server configuration is invalid.

    Route masks and responses are validated during registration, so a
    malformed route aborts startup instead of failing at request time.
    """


class ServerError(PerchError):
    """Raised when the listener cannot be started."""


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Handlers raise these to short-circuit. The dispatcher catches them and
    answers with ``Router.get_error_response(status)`` so registered
    overrides apply.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """No route matched the request URL."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
