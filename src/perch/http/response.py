"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace

from perch.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status and headers. Each call returns a new ``Response``.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> Response:
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    # -- Accessors --

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value of header *name* (case-insensitive)."""
        name_lower = name.lower()
        for key, value in self.headers:
            if key.lower() == name_lower:
                return value
        return default

    @property
    def location(self) -> str | None:
        """The ``Location`` header, if any."""
        return self.header("location")

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


def redirect(location: str, status: int = 301) -> Response:
    """Build an empty-bodied redirect to *location*."""
    return Response(body=b"", status=status).with_header("location", location)


def to_response(value: object) -> Response | None:
    """Coerce a handler return value into a Response.

    ``None`` stays ``None`` (the handler chose not to answer). Strings and
    bytes become a 200 body. Anything else is a programming error.
    """
    if value is None or isinstance(value, Response):
        return value
    if isinstance(value, (str, bytes)):
        return Response(body=value)
    msg = f"Handler returned {type(value).__name__!r}; expected Response, str, bytes or None."
    raise TypeError(msg)


def ensure_response(value: object, *, status: int = 200, what: str = "response") -> Response:
    """Validate a registration-time response value.

    Used for error overrides, where only a concrete response makes sense.
    Bare bodies are wrapped with *status*; Response objects are kept as is.
    """
    if isinstance(value, Response):
        return value
    if isinstance(value, (str, bytes)):
        return Response(body=value, status=status)
    msg = f"Invalid {what}: {value!r}. Expected Response, str or bytes."
    raise ConfigurationError(msg)
