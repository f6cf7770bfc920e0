"""
Domain errors for the digest service.

Repositories raise these; backend.main renders them as {"error": message}
with the status code carried on the class.
"""

from __future__ import annotations

from fastapi import status


class DigestError(Exception):
    """Base exception for digest and block operations."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(DigestError):
    """Position or reference out of the allowed range. Nothing was written."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConflictError(DigestError):
    """Target digest or block disappeared, or the digest version moved on."""

    status_code = status.HTTP_409_CONFLICT


class NotFoundError(DigestError):
    """Resource does not exist for this team."""

    status_code = status.HTTP_404_NOT_FOUND
