"""Invoke helpers — call sync or async handlers uniformly.

Route handlers can be ``def`` or ``async def``. The dispatcher and the
static-file helper both call user code, so the sync/async check lives
here in exactly one place::

    result = await invoke(route.handler, ctx)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result if it is awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
