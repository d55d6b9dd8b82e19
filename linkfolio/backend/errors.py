"""
Error taxonomy shared by the storage layer, services and HTTP handlers.

Every error carries the HTTP status code the handlers report and a message
that is safe to show to the caller.
"""

from __future__ import annotations

from typing import Iterable, Optional


class ServiceError(Exception):
    """Base class for errors that are translated into the response envelope."""

    status_code: int = 500
    default_message = (
        "An error occurred while processing your request. Please try again later."
    )

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Invalid request."

    def __init__(self, message: Optional[str] = None, errors: Iterable[str] = ()):
        self.errors = list(errors)
        if message is None and self.errors:
            message = "Validation error: " + "; ".join(self.errors)
        super().__init__(message)


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Not found."


class ConflictError(ServiceError):
    status_code = 400
    default_message = "A record with the same unique value already exists."


class UpstreamError(ServiceError):
    """A call to the text-generation API, profile source or database failed."""

    status_code = 500


class EnhancementError(UpstreamError):
    default_message = "Failed to enhance profile content. Please try again later."


class EnhancementTimeoutError(EnhancementError):
    default_message = "The content enhancement service timed out. Please try again later."


class NetworkError(UpstreamError):
    default_message = "Failed to fetch the profile. Please try again later."


class FetchTimeoutError(NetworkError):
    default_message = "Fetching the profile timed out. Please try again later."


class StorageUnavailableError(UpstreamError):
    default_message = "The database is unavailable. Please try again later."


class FormatError(ServiceError):
    status_code = 500
    default_message = (
        "Invalid profile data format. Expected a LinkedIn URL or valid JSON."
    )


class ParseError(FormatError):
    default_message = "Received a malformed response. Please try again later."
