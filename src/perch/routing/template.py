"""URL templates with named placeholders.

A template is an absolute URL whose components may contain placeholders::

    http://example.com/users/:id
    http://example.com/files/{path:path}
    http://:tenant.example.com/*

Each structural component (protocol, username, password, hostname, port,
pathname, search, hash) is compiled to its own regex and matched in full.
Components the template leaves out (credentials, query, fragment) match
anything. Captures from all components are merged into one flat mapping,
later components overwriting earlier ones.

Placeholder syntax:

- ``:name``           one segment (``[^/]+`` in the path, ``[^.]+`` in the host)
- ``:name(regex)``    custom regex
- ``:name?``          optional; in the path the preceding ``/`` is optional too
- ``{name}``          same as ``:name``
- ``{name:type}``     typed, see ``perch.routing.params.CONVERTERS``
- ``*`` / ``(regex)`` unnamed, captured as ``"0"``, ``"1"``, ...
- ``\\x``             literal ``x``
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache

from perch.errors import ConfigurationError
from perch.routing.params import converter_pattern
from perch.routing.urls import DEFAULT_PORTS, URLParts, split_url, strip_trailing_slash

# Evaluation (and capture merge) order
COMPONENTS: tuple[str, ...] = (
    "protocol",
    "username",
    "password",
    "hostname",
    "port",
    "pathname",
    "search",
    "hash",
)

_SEGMENT = {
    "pathname": r"[^/]+",
    "hostname": r"[^.]+",
}
_DEFAULT_SEGMENT = r".+?"
_CASE_INSENSITIVE = frozenset({"protocol", "hostname"})
_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_HOST_PORT = re.compile(r"(?P<host>.*?):(?P<port>\d*|\*)")


@dataclass(frozen=True, slots=True)
class _Component:
    """One compiled URL component."""

    regex: re.Pattern[str]
    # regex group name -> capture key, for unnamed groups ("_w0" -> "0")
    aliases: dict[str, str] = field(default_factory=dict)

    def match(self, value: str) -> dict[str, str] | None:
        m = self.regex.fullmatch(value)
        if m is None:
            return None
        return {
            self.aliases.get(name, name): captured
            for name, captured in m.groupdict().items()
            if captured is not None
        }


@dataclass(frozen=True, slots=True)
class URLTemplate:
    """A compiled URL template. Build with ``compile_template()``."""

    source: str
    # One entry per COMPONENTS name; None = wildcard
    components: tuple[_Component | None, ...]

    def match(self, url: str | URLParts) -> dict[str, str] | None:
        """Match *url*, returning merged captures or ``None``.

        A trailing ``/`` on the request path is ignored, matching the
        router's canonical form.
        """
        parts = split_url(url) if isinstance(url, str) else url
        captures: dict[str, str] = {}
        for name, component in zip(COMPONENTS, self.components, strict=True):
            if component is None:
                continue
            value = getattr(parts, name)
            if name == "pathname":
                value = strip_trailing_slash(value)
            groups = component.match(value)
            if groups is None:
                return None
            captures.update(groups)
        return captures

    def test(self, url: str | URLParts) -> bool:
        """Return True if *url* matches."""
        return self.match(url) is not None


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


@lru_cache(maxsize=512)
def compile_template(source: str) -> URLTemplate:
    """Compile an absolute URL template.

    Results are cached by source string: a route's template is re-resolved
    for every host URL it sees, and host URLs repeat.

    Raises ``ConfigurationError`` on malformed templates.
    """
    raw = _split_template(source)
    counter = [0]
    compiled = tuple(
        None if raw[name] is None else _compile_component(raw[name], name, source, counter)
        for name in COMPONENTS
    )
    return URLTemplate(source=source, components=compiled)


def _split_template(source: str) -> dict[str, str | None]:
    """Split a template string into raw per-component sources."""
    scheme_end = source.find("://")
    if scheme_end <= 0:
        msg = f"URL template {source!r} must be absolute (scheme://host/...)."
        raise ConfigurationError(msg)

    protocol = source[:scheme_end]
    rest = source[scheme_end + 3 :]

    authority, rest = _split_at(rest, "/?#", source)
    pathname, rest = _split_at(rest, "?#", source)
    search: str | None = None
    hash_: str | None = None
    if rest.startswith("?"):
        search, rest = _split_at(rest[1:], "#", source)
    if rest.startswith("#"):
        hash_ = rest[1:]

    username: str | None = None
    password: str | None = None
    if "@" in authority:
        userinfo, authority = authority.rsplit("@", 1)
        username, sep, pw = userinfo.partition(":")
        password = pw if sep else None

    hostname, port = authority, ""
    if authority.startswith("["):
        close = authority.find("]")
        if close < 0:
            msg = f"Unbalanced '[' in URL template {source!r}."
            raise ConfigurationError(msg)
        # IPv6 literals are never placeholders
        hostname = "".join("\\" + char for char in authority[1:close])
        tail = authority[close + 1 :]
        if tail.startswith(":"):
            port = tail[1:]
    else:
        m = _HOST_PORT.fullmatch(authority)
        if m is not None and m.group("host"):
            hostname, port = m.group("host"), m.group("port")

    if port and DEFAULT_PORTS.get(protocol.lower()) == _as_int(port):
        port = ""

    return {
        "protocol": protocol,
        "username": username,
        "password": password,
        "hostname": hostname,
        "port": port,
        "pathname": pathname or "/",
        "search": search,
        "hash": hash_,
    }


def _as_int(text: str) -> int | None:
    return int(text) if text.isdigit() else None


def _split_at(text: str, delimiters: str, source: str) -> tuple[str, str]:
    """Split *text* at the first top-level delimiter.

    Delimiters inside ``(...)`` or ``{...}`` groups or after a backslash do
    not count, nor does a ``?`` directly after a placeholder (the optional
    modifier). The delimiter stays at the start of the remainder.
    """
    depth = 0
    # True right after a placeholder, where "?" is a modifier
    after_placeholder = False
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\":
            after_placeholder = False
            i += 2
            continue
        if char == "?" and after_placeholder:
            after_placeholder = False
            i += 1
            continue
        after_placeholder = False
        if depth == 0 and char == ":" and (m := _NAME.match(text, i + 1)) is not None:
            after_placeholder = True
            i = m.end()
            continue
        if char in "({":
            depth += 1
        elif char in ")}":
            depth -= 1
            if depth < 0:
                msg = f"Unbalanced {char!r} in URL template {source!r}."
                raise ConfigurationError(msg)
            after_placeholder = depth == 0
        elif depth == 0 and char == "*":
            after_placeholder = True
        elif depth == 0 and char in delimiters:
            return text[:i], text[i:]
        i += 1
    return text, ""


def _read_group(text: str, start: int, open_char: str, close_char: str, source: str) -> int:
    """Return the index just past the group opened at *start*."""
    depth = 0
    i = start
    while i < len(text):
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    msg = f"Unbalanced {open_char!r} in URL template {source!r}."
    raise ConfigurationError(msg)


def _compile_component(text: str, kind: str, source: str, counter: list[int]) -> _Component:
    """Translate one component's template text into a regex."""
    pieces: list[str] = []
    aliases: dict[str, str] = {}
    segment = _SEGMENT.get(kind, _DEFAULT_SEGMENT)

    def unnamed(pattern: str) -> str:
        group = f"_w{counter[0]}"
        aliases[group] = str(counter[0])
        counter[0] += 1
        return f"(?P<{group}>{pattern})"

    def named(name: str, pattern: str, end: int) -> int:
        optional = end < len(text) and text[end] == "?"
        group = f"(?P<{name}>{pattern})"
        if optional:
            if kind == "pathname" and pieces and pieces[-1] == "/":
                pieces.pop()
                pieces.append(f"(?:/{group})?")
            else:
                pieces.append(f"{group}?")
            return end + 1
        pieces.append(group)
        return end

    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text):
            pieces.append(re.escape(text[i + 1]))
            i += 2
        elif char == ":" and (m := _NAME.match(text, i + 1)) is not None:
            end = m.end()
            pattern = segment
            if end < len(text) and text[end] == "(":
                close = _read_group(text, end, "(", ")", source)
                pattern = text[end + 1 : close - 1]
                end = close
            i = named(m.group(), pattern, end)
        elif char == "{":
            close = _read_group(text, i, "{", "}", source)
            inner = text[i + 1 : close - 1]
            name, _, param_type = inner.partition(":")
            if not name.isidentifier():
                msg = f"Invalid placeholder {{{inner}}} in URL template {source!r}."
                raise ConfigurationError(msg)
            pattern = converter_pattern(param_type) if param_type else segment
            i = named(name, pattern, close)
        elif char == "*":
            pieces.append(unnamed(".*"))
            i += 1
        elif char == "(":
            close = _read_group(text, i, "(", ")", source)
            pieces.append(unnamed(text[i + 1 : close - 1]))
            i = close
        else:
            pieces.append(re.escape(char))
            i += 1

    flags = re.IGNORECASE if kind in _CASE_INSENSITIVE else 0
    try:
        regex = re.compile("".join(pieces), flags)
    except re.error as exc:
        msg = f"Invalid {kind} in URL template {source!r}: {exc}"
        raise ConfigurationError(msg) from exc
    return _Component(regex=regex, aliases=aliases)
