"""ASGI response sending — translates perch Responses to ASGI messages.

``Responder`` enforces the at-most-once contract: a request is answered
by the dispatcher, or by the handler through ``RouteContext.respond``,
never both.
"""

import logging

from perch._internal.asgi import Send
from perch.http.response import Response

logger = logging.getLogger("perch.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send) -> None:
    """Translate a perch Response into ASGI send() calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    body = response.body_bytes if _body_allowed(response.status) else b""

    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )


class Responder:
    """Sends at most one response for a request."""

    __slots__ = ("_send", "sent")

    def __init__(self, send: Send) -> None:
        self._send = send
        self.sent = False

    async def respond(self, response: Response) -> bool:
        """Send *response*; return False (and send nothing) if already answered."""
        if self.sent:
            logger.warning("Ignoring second response (status %d) for one request", response.status)
            return False
        self.sent = True
        await send_response(response, self._send)
        return True
