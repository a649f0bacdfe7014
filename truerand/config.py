"""Provider configuration and the service's published limits."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

# Hard limits of the integer generator.
ABS_MIN = -1_000_000_000
ABS_MAX = 1_000_000_000
MAX_BATCH = 10_000
SUPPORTED_BASES = (2, 8, 10, 16)

# Minimum spacing between integer requests, and between quota checks while
# the quota is negative.
CALL_COOLDOWN_MS = 10
QUOTA_COOLDOWN_MS = 60_000

DEFAULT_HOST = "www.random.org"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class ProviderConfig:
    """Knobs for :class:`~truerand.provider.RandomnessProvider`.

    Parameters
    ----------
    host:
        Hostname of the randomness service.
    quota_scheme, integers_scheme:
        URL schemes for the quota and integer endpoints.
    timeout:
        Per-request network timeout in seconds, ``None`` for no limit.
    call_cooldown_ms:
        Minimum gap after a remote integer call before another one is made.
    quota_cooldown_ms:
        Minimum gap between quota checks while the quota is negative.
    quota_max_age:
        If set, quota readings older than this many seconds are refreshed
        before a routing decision.
    user_agent:
        Sent with every request; the service asks clients to identify
        themselves.
    """

    host: str = DEFAULT_HOST
    quota_scheme: str = "https"
    integers_scheme: str = "http"
    timeout: float | None = DEFAULT_TIMEOUT
    call_cooldown_ms: int = CALL_COOLDOWN_MS
    quota_cooldown_ms: int = QUOTA_COOLDOWN_MS
    quota_max_age: float | None = None
    user_agent: str = "truerand"

    @property
    def quota_endpoint(self) -> str:
        return f"{self.quota_scheme}://{self.host}/quota/"

    @property
    def integers_endpoint(self) -> str:
        return f"{self.integers_scheme}://{self.host}/integers/"

    def with_overrides(self, **changes) -> ProviderConfig:
        """Return a copy with the non-``None`` entries of *changes* applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ProviderConfig:
        """Build a config from ``TRUERAND_*`` environment variables."""
        env = os.environ if environ is None else environ
        changes: dict = {}
        if env.get("TRUERAND_HOST"):
            changes["host"] = env["TRUERAND_HOST"]
        if env.get("TRUERAND_TIMEOUT"):
            changes["timeout"] = float(env["TRUERAND_TIMEOUT"])
        if env.get("TRUERAND_QUOTA_MAX_AGE"):
            changes["quota_max_age"] = float(env["TRUERAND_QUOTA_MAX_AGE"])
        if env.get("TRUERAND_USER_AGENT"):
            changes["user_agent"] = env["TRUERAND_USER_AGENT"]
        return cls(**changes)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(int(value), high))
