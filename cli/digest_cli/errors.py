"""
Client-side error taxonomy.

Every failed request surfaces as an ApiError subclass:
  ValidationError   400 / 422, or a position checked locally before sending
  ConflictError     404 / 409, the digest or block moved on or disappeared
  NetworkError      transport failures and any other status
"""

from __future__ import annotations

import httpx

GENERIC_MESSAGE = "Something went wrong. Please try again."


class ApiError(Exception):
    """Base class for failures talking to the digest API."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class ValidationError(ApiError):
    pass


class ConflictError(ApiError):
    pass


class NetworkError(ApiError):
    pass


def _server_error(res: httpx.Response) -> tuple[str | None, str | None]:
    """The {"error", "code"} pair from an error body, if there is one."""
    try:
        body = res.json()
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None
    error = body.get("error")
    return (error if isinstance(error, str) and error else None), body.get("code")


def error_from_response(res: httpx.Response) -> ApiError:
    """
    Map an error response to an ApiError.

    The message is the server's `error` text, else the HTTP reason phrase,
    else a generic message.
    """
    server_message, code = _server_error(res)
    message = server_message or res.reason_phrase or GENERIC_MESSAGE

    if res.status_code in (400, 422):
        return ValidationError(message, res.status_code, code)
    if res.status_code in (404, 409):
        return ConflictError(message, res.status_code, code)
    return NetworkError(message, res.status_code, code)


def error_from_transport(exc: httpx.TransportError) -> NetworkError:
    """Wrap a transport failure; there is no response to read a message from."""
    return NetworkError(str(exc) or GENERIC_MESSAGE)
