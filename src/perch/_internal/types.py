"""Shared type aliases used across perch modules."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from perch.http.response import Response
    from perch.routing.pattern import RoutePattern

# Route handler, called with a single RouteContext, sync or async
Handler: TypeAlias = Callable[..., Any]

# Caller-supplied pattern specification, normalized into a RoutePattern
Mask: TypeAlias = "str | re.Pattern[str] | RoutePattern | Sequence[Mask]"

# Response side of a route: a handler or a constant body
ResponseSpec: TypeAlias = "Handler | Response | str | bytes"
