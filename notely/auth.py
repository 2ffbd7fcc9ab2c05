"""Extraction of API keys from request headers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class AuthError(Exception):
    """Base class for authorization header problems."""


class NoAuthHeaderIncludedError(AuthError):
    """Raised when the request carries no Authorization header."""

    def __init__(self) -> None:
        super().__init__("no authorization header included")


class MalformedAuthHeaderError(AuthError):
    """Raised when the Authorization header is not of the form 'ApiKey <key>'."""

    def __init__(self) -> None:
        super().__init__("malformed authorization header")


def _header_value(headers: Mapping[str, Any], name: str) -> str:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() != wanted:
            continue
        if isinstance(value, (list, tuple)):
            return value[0] if value else ""
        return value
    return ""


def get_api_key(headers: Mapping[str, Any]) -> str:
    """Return the API key from an 'Authorization: ApiKey <key>' header."""
    auth_header = _header_value(headers, "Authorization")
    if not auth_header:
        raise NoAuthHeaderIncludedError()
    parts = auth_header.split(" ")
    if len(parts) < 2 or parts[0] != "ApiKey":
        raise MalformedAuthHeaderError()
    return parts[1]