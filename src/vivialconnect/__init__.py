"""Python client for the Vivial Connect messaging API."""
from __future__ import annotations

from vivialconnect.client import SDK_VERSION, ApiClient, get_default_client, init, set_default_client
from vivialconnect.errors import (
    ApiConnectionError,
    ApiError,
    AuthenticationError,
    ConfigurationError,
    InvalidResponseError,
    NoContentError,
    NotFoundError,
    NumberTypeError,
    VivialConnectError,
)
from vivialconnect.models import (
    Account,
    Attachment,
    Callback,
    Capabilities,
    Carrier,
    Connector,
    Contact,
    Message,
    Number,
    NumberInfo,
    PhoneNumber,
)

__version__ = SDK_VERSION

__all__ = [
    "Account",
    "ApiClient",
    "ApiConnectionError",
    "ApiError",
    "Attachment",
    "AuthenticationError",
    "Callback",
    "Capabilities",
    "Carrier",
    "ConfigurationError",
    "Connector",
    "Contact",
    "InvalidResponseError",
    "Message",
    "NoContentError",
    "NotFoundError",
    "Number",
    "NumberInfo",
    "NumberTypeError",
    "PhoneNumber",
    "VivialConnectError",
    "get_default_client",
    "init",
    "set_default_client",
]
