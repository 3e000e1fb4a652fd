"""Error taxonomy shared by services and the HTTP layer.

Each kind carries the HTTP status it maps to; ``videohost.main`` renders any
``VideoHostError`` as a problem-detail response with that status.
"""

from __future__ import annotations

from fastapi import status


class VideoHostError(Exception):
    """Base class for every error raised by the service layer."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(VideoHostError):
    """A video or user does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidArgumentError(VideoHostError):
    """Malformed identifier, missing required field or unacceptable upload."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthenticatedError(VideoHostError):
    """Bearer token missing, invalid, expired or issued for someone else."""

    status_code = status.HTTP_401_UNAUTHORIZED


class PersistenceError(VideoHostError):
    """The document store rejected or failed a read or write."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StoreUnavailableError(PersistenceError):
    """The document store could not be reached or did not answer in time."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class UploadError(VideoHostError):
    """The object store failed to accept a file."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


__all__ = [
    "VideoHostError",
    "NotFoundError",
    "InvalidArgumentError",
    "UnauthenticatedError",
    "PersistenceError",
    "StoreUnavailableError",
    "UploadError",
]
