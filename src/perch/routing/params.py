"""Placeholder converters for URL templates.

Built-in converters for typed placeholders like ``{id:int}``. Captures
are always delivered as strings; the converter only constrains what a
placeholder accepts.
"""

from perch.errors import ConfigurationError

# regex pattern for each supported converter
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}


def converter_pattern(param_type: str) -> str:
    """Return the regex for *param_type*.

    Raises ``ConfigurationError`` for an unknown converter so that typos in
    route masks surface at registration.
    """
    try:
        return CONVERTERS[param_type]
    except KeyError:
        known = ", ".join(sorted(CONVERTERS))
        msg = f"Unknown placeholder type {param_type!r}. Known types: {known}."
        raise ConfigurationError(msg) from None
