"""Reason phrases for HTTP status codes."""

from http import HTTPStatus

UNKNOWN_REASON = "Unknown Status"


def reason_phrase(status: int) -> str:
    """Return the standard reason phrase for *status*.

    Never raises: unregistered codes get ``"Unknown Status"``.
    """
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return UNKNOWN_REASON
