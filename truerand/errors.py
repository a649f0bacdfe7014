"""Typed error taxonomy for the randomness provider.

Every failure the provider surfaces is a :class:`ProviderError` carrying an
explicit :class:`ErrorKind`, so callers can branch on ``err.kind`` instead of
on the exception class when that reads better.
"""

from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    NOT_INITIALIZED = "not_initialized"
    ADDRESS_RESOLUTION = "address_resolution"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    PARSE = "parse"


class ProviderError(Exception):
    """Base class for every error raised by :mod:`truerand`."""

    kind: ErrorKind = ErrorKind.TRANSPORT
    retryable: bool = False


class NotInitializedError(ProviderError):
    kind = ErrorKind.NOT_INITIALIZED

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Provider not initialized; call RandomnessProvider.ensure_ready() "
            "before requesting numbers."
        )


class AddressResolutionError(ProviderError):
    kind = ErrorKind.ADDRESS_RESOLUTION

    def __init__(self, message: str = "No IPv4 address found among local addresses.") -> None:
        super().__init__(message)


class TransportError(ProviderError):
    """Network-layer failure talking to the randomness service."""

    kind = ErrorKind.TRANSPORT
    retryable = True

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class TransportTimeoutError(TransportError, TimeoutError):
    """The underlying request exceeded its timeout."""

    kind = ErrorKind.TIMEOUT


class ParseError(ProviderError, ValueError):
    """The service answered with a body we could not interpret."""

    kind = ErrorKind.PARSE

    def __init__(self, message: str, *, body: str | None = None) -> None:
        super().__init__(message)
        self.body = body
