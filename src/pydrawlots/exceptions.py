"""Library exceptions."""

from __future__ import annotations


class DrawLotsError(Exception):
    """Base exception for the library."""

    error_type = "unknown"
    default_error_code: str | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        detail: str | None = None,
        user_message: str | None = None,
    ) -> None:
        text = message if message is not None else detail
        super().__init__(text or "")
        self.error_code = error_code if error_code is not None else self.default_error_code
        self.detail = detail if detail is not None else text
        self.user_message = user_message


class ValidationError(DrawLotsError):
    """Raised when inputs fail validation."""

    error_type = "validation"
    default_error_code = "validation_error"


class NetworkError(DrawLotsError):
    """Raised when the remote service cannot be reached or times out."""

    error_type = "network"
    default_error_code = "network_error"


class RemoteError(DrawLotsError):
    """Base for failures reported by, or decoded from, the remote service."""

    error_type = "remote"
    default_error_code = "remote_error"


class RemoteRejectedError(RemoteError):
    """Raised when the remote service answers with a non-2xx status."""

    default_error_code = "remote_rejected"

    def __init__(self, message: str | None = None, *, status: int | None = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.status = status


class RemoteDataError(RemoteError):
    """Raised when a response body is not valid JSON or has the wrong shape."""

    default_error_code = "remote_data"


class StorageError(DrawLotsError):
    """Raised when a local document cannot be written."""

    error_type = "storage"
    default_error_code = "storage_error"


class MalformedLocalDataError(StorageError):
    """Reported when a local document is missing or corrupt and was reset."""

    default_error_code = "malformed_local_data"
