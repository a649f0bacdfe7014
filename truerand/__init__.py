"""
truerand: true random integers with a quota-aware local fallback.

Draws integers from random.org's plain HTTP API and quietly switches to a
local PRNG while the daily quota runs thin or calls come too fast.
"""

__version__ = "0.3.0"

from truerand.errors import (
    AddressResolutionError,
    ErrorKind,
    NotInitializedError,
    ParseError,
    ProviderError,
    TransportError,
    TransportTimeoutError,
)
from truerand.provider import BatchResult, RandomnessProvider, Source

__all__ = [
    "AddressResolutionError",
    "BatchResult",
    "ErrorKind",
    "NotInitializedError",
    "ParseError",
    "ProviderError",
    "RandomnessProvider",
    "Source",
    "TransportError",
    "TransportTimeoutError",
    "__version__",
]
