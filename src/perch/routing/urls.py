"""URL canonicalization helpers.

Pure functions shared by the router and the URL template matcher:
splitting an absolute URL into its components, eliding default ports,
and normalizing server-relative paths.
"""

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443, "ws": 80, "wss": 443}

# Registered names and IPv4 addresses; IPv6 literals only inside brackets
_HOSTNAME = re.compile(r"[a-z0-9_-]+(?:\.[a-z0-9_-]+)*\.?")
_IPV6_HOSTNAME = re.compile(r"[0-9a-f:.]+")


@dataclass(frozen=True, slots=True)
class URLParts:
    """The structural components of an absolute URL.

    ``port`` is empty when it equals the scheme's default. ``pathname``
    always starts with ``/``. ``search`` and ``hash`` exclude their
    ``?`` / ``#`` delimiters.
    """

    protocol: str
    username: str
    password: str
    hostname: str
    port: str
    pathname: str
    search: str
    hash: str

    @property
    def origin(self) -> str:
        """``scheme://host[:port]`` with default ports omitted."""
        host = f"[{self.hostname}]" if ":" in self.hostname else self.hostname
        if self.port:
            return f"{self.protocol}://{host}:{self.port}"
        return f"{self.protocol}://{host}"


def split_url(url: str) -> URLParts:
    """Split an absolute URL into normalized components.

    Scheme and hostname are lowercased and a default port is dropped, so
    ``http://Example.com:80/a`` and ``http://example.com/a`` split equal.

    Raises ``ValueError`` if *url* is not absolute, or has a bad port or a
    hostname with characters outside letters, digits, ``.``, ``-`` and
    ``_`` (bracketed IPv6 literals aside). The host ends up inside URL
    templates, so it must never carry placeholder syntax.
    """
    parts = urlsplit(url.strip())
    if not parts.scheme or not parts.netloc:
        msg = f"Not an absolute URL: {url!r}"
        raise ValueError(msg)

    hostname = (parts.hostname or "").lower()
    valid = _IPV6_HOSTNAME if "[" in parts.netloc else _HOSTNAME
    if not valid.fullmatch(hostname):
        msg = f"Invalid hostname in URL: {url!r}"
        raise ValueError(msg)

    protocol = parts.scheme.lower()
    port = parts.port  # raises ValueError on garbage
    port_text = "" if port is None or DEFAULT_PORTS.get(protocol) == port else str(port)

    return URLParts(
        protocol=protocol,
        username=parts.username or "",
        password=parts.password or "",
        hostname=hostname,
        port=port_text,
        pathname=parts.path or "/",
        search=parts.query,
        hash=parts.fragment,
    )


def origin_of(url: str) -> str:
    """Return the origin (``scheme://authority``) of an absolute URL."""
    return split_url(url).origin


def _normalize_once(path: str) -> str:
    path = path.strip()
    # "//host/x" is scheme-relative; only a single leading slash is dropped.
    if path.startswith("/") and not path.startswith("//"):
        path = path[1:]
    if path.endswith("/"):
        path = path[:-1]
    return path


def normalize_path(path: str) -> str:
    """Normalize a server-relative path.

    Trims whitespace, strips one leading ``/`` (never when the path starts
    with ``//``) and strips one trailing ``/``. Applied until stable, which
    makes it idempotent even for inputs like ``"//"`` or ``"a//"``::

        normalize_path("/users/42/")  # "users/42"
        normalize_path("//cdn/x")     # "//cdn/x"
    """
    while True:
        normalized = _normalize_once(path)
        if normalized == path:
            return normalized
        path = normalized


def strip_trailing_slash(pathname: str) -> str:
    """Drop one trailing ``/`` from *pathname*, keeping the bare root."""
    if len(pathname) > 1 and pathname.endswith("/"):
        return pathname[:-1]
    return pathname
