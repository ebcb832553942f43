from __future__ import annotations
from typing import Any, Optional


class VivialConnectError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(VivialConnectError):
    """Credentials or settings are missing or invalid."""


class ApiConnectionError(VivialConnectError):
    """The API could not be reached (DNS, refused connection, timeout)."""


class NoContentError(VivialConnectError):
    """
    The API answered 204 No Content.

    Deletes treat this as success; everywhere else it propagates.
    """

    def __init__(self, method: str, path: str):
        super().__init__(f"{method} {path} returned no content")
        self.method = method
        self.path = path


class ApiError(VivialConnectError):
    def __init__(self, status: int, message: str, body: Optional[Any] = None):
        super().__init__(f"API error {status}: {message}")
        self.status = status
        self.message = message
        self.body = body


class AuthenticationError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class NumberTypeError(VivialConnectError, ValueError):
    """A local-number operation was attempted on a number that is not local."""


class InvalidResponseError(ApiError):
    """A successful reply whose body does not match the resource's fields."""

    def __init__(self, message: str, body: Optional[Any] = None):
        VivialConnectError.__init__(self, f"invalid API response: {message}")
        self.status = None
        self.message = message
        self.body = body
