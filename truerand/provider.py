"""Quota-aware randomness provider.

Architecture:
1. Resolve this machine's IPv4 address (the service keys quota by it)
2. Fetch the remaining quota once before serving anything
3. For every request, snapshot the state and pick a path:
   local PRNG when the quota is thin or the last remote call was too
   recent, otherwise one remote request
4. Record outcomes (timestamps, quota) under a short-lived lock
5. Surface every failure except the anticipated quota/cooldown case

Thread-safe for concurrent access. Network calls never hold the state
lock, so one slow request does not stall its neighbours.
"""

from __future__ import annotations

import enum
import ipaddress
import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Callable
from urllib.parse import urlencode

from truerand.config import (
    ABS_MAX,
    ABS_MIN,
    MAX_BATCH,
    SUPPORTED_BASES,
    ProviderConfig,
    clamp,
)
from truerand.errors import NotInitializedError, ParseError, ProviderError
from truerand.local import LocalPRNG, NumpyLocalPRNG
from truerand.parsing import parse_integers, parse_quota
from truerand.resolver import AddressResolver, HostnameResolver, first_ipv4
from truerand.transport import RequestsTransport, Transport

log = logging.getLogger(__name__)


class Source(enum.Enum):
    REMOTE = "remote"
    LOCAL = "local"


@dataclass
class ProviderState:
    """Mutable state shared by every caller of one provider."""

    remote_quota: int = 0
    last_quota_check: float | None = None
    last_remote_call: float | None = None
    public_address: ipaddress.IPv4Address | None = None
    ready: bool = False
    remote_calls: int = 0
    local_calls: int = 0
    quota_checks: int = 0
    quota_checks_skipped: int = 0


@dataclass(frozen=True)
class BatchResult:
    """Outcome of :meth:`RandomnessProvider.try_next_batch`.

    Exactly one of ``source`` and ``error`` is set.
    """

    values: list[int] = field(default_factory=list)
    source: Source | None = None
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RandomnessProvider:
    """Integers from the remote service, with a local fallback.

    Usage::

        provider = RandomnessProvider()
        provider.ensure_ready()
        provider.next(1, 6)
        provider.next_batch(0, 99, n=20)
    """

    def __init__(
        self,
        transport: Transport | None = None,
        resolver: AddressResolver | None = None,
        local: LocalPRNG | None = None,
        config: ProviderConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or ProviderConfig()
        self._transport = transport or RequestsTransport(user_agent=self.config.user_agent)
        self._resolver = resolver or HostnameResolver()
        self._local = local or NumpyLocalPRNG()
        self._clock = clock
        self._state = ProviderState()
        self._lock = threading.Lock()
        self._init_lock = threading.Lock()

    @classmethod
    def from_env(cls, **kwargs) -> RandomnessProvider:
        """Create a provider configured from ``TRUERAND_*`` variables."""
        return cls(config=ProviderConfig.from_env(), **kwargs)

    # ── read-only views ──

    @property
    def ready(self) -> bool:
        with self._lock:
            return self._state.ready

    @property
    def quota(self) -> int:
        with self._lock:
            return self._state.remote_quota

    @property
    def public_address(self) -> ipaddress.IPv4Address | None:
        with self._lock:
            return self._state.public_address

    @property
    def state(self) -> ProviderState:
        """A copy of the current state."""
        with self._lock:
            return replace(self._state)

    # ── initialization ──

    def ensure_ready(self) -> None:
        """Resolve the public address and fetch the initial quota.

        Safe to call repeatedly and from several threads; only the first
        successful call does any work. On failure the provider stays
        uninitialized and the error propagates, so the call may be retried.
        """
        if self.ready:
            return
        with self._init_lock:
            if self.ready:
                return
            address = first_ipv4(self._resolver.resolve_local_addresses())
            with self._lock:
                self._state.public_address = address
            quota = self._refresh_quota()
            with self._lock:
                self._state.ready = True
            log.info("provider ready: address=%s quota=%d", address, quota)

    # ── quota ──

    def refresh_quota(self) -> int:
        """Re-read the remaining quota from the service.

        While the last reading was negative, checks within the quota
        cooldown return the cached value without touching the network.
        """
        self._require_ready()
        return self._refresh_quota()

    def _refresh_quota(self) -> int:
        now = self._clock()
        with self._lock:
            st = self._state
            if st.remote_quota < 0 and self._elapsed_ms(st.last_quota_check, now) < self.config.quota_cooldown_ms:
                st.quota_checks_skipped += 1
                log.debug("quota check skipped: quota=%d still cooling down", st.remote_quota)
                return st.remote_quota
            address = st.public_address

        url = f"{self.config.quota_endpoint}?{address}&format=plain"
        body = self._transport.fetch_text(url, timeout=self.config.timeout)
        quota = parse_quota(body)

        with self._lock:
            previous = self._state.remote_quota
            self._state.remote_quota = quota
            self._state.last_quota_check = self._clock()
            self._state.quota_checks += 1
        if quota < 0 <= previous:
            log.warning("remote quota exhausted (%d); serving from local PRNG", quota)
        else:
            log.debug("quota refreshed: %d", quota)
        return quota

    # ── generation ──

    def next_batch(self, min: int = ABS_MIN, max: int = ABS_MAX, n: int = 10, base: int = 10) -> list[int]:
        """Return *n* integers in ``[min, max]``.

        Bounds are clamped into the service limits, *n* into
        ``[1, MAX_BATCH]``. Transport and parse failures propagate; only a
        thin quota or the call cooldown routes to the local PRNG.
        """
        _, values = self._generate(min, max, n, base)
        return values

    def next(self, min: int = ABS_MIN, max: int = ABS_MAX) -> int:
        """Return one integer in ``[min, max]``.

        When the local path is chosen a fresh value is drawn here instead
        of taking the first element of the local batch.
        """
        source, values = self._generate(min, max, 1, 10)
        if source is Source.REMOTE:
            return values[0]
        # The one-element local batch is discarded on purpose; the single
        # value path always re-samples.
        low, high = self._bounds(min, max)
        return self._local.uniform_int(low, high)

    def try_next_batch(self, min: int = ABS_MIN, max: int = ABS_MAX, n: int = 10, base: int = 10) -> BatchResult:
        """Like :meth:`next_batch` but returns provider errors instead of raising.

        Caller mistakes (``min > max``, an unsupported base) still raise
        ``ValueError``.
        """
        try:
            source, values = self._generate(min, max, n, base)
        except ProviderError as e:
            return BatchResult(error=e)
        return BatchResult(values=values, source=source)

    def _generate(self, min: int, max: int, n: int, base: int) -> tuple[Source, list[int]]:
        self._require_ready()
        low, high = self._bounds(min, max)
        n = clamp(n, 1, MAX_BATCH)
        if base not in SUPPORTED_BASES:
            raise ValueError(f"base must be one of {SUPPORTED_BASES}, got {base}")

        if self._quota_is_stale():
            self._refresh_quota()

        source = self._route(n)
        if source is Source.LOCAL:
            return source, self._local.uniform_ints(low, high, n)
        return source, self._fetch_remote(low, high, n, base)

    def _route(self, n: int) -> Source:
        now = self._clock()
        with self._lock:
            st = self._state
            if st.remote_quota <= 2 * n:
                reason = "quota"
            elif self._elapsed_ms(st.last_remote_call, now) < self.config.call_cooldown_ms:
                reason = "cooldown"
            else:
                return Source.REMOTE
            st.local_calls += 1
            quota = st.remote_quota
        log.debug("local path (%s): n=%d quota=%d", reason, n, quota)
        return Source.LOCAL

    def _fetch_remote(self, low: int, high: int, n: int, base: int) -> list[int]:
        query = urlencode({
            "num": n,
            "min": low,
            "max": high,
            "col": 1,
            "base": base,
            "format": "plain",
            "rnd": "new",
        })
        body = self._transport.fetch_text(f"{self.config.integers_endpoint}?{query}", timeout=self.config.timeout)

        with self._lock:
            self._state.last_remote_call = self._clock()
            self._state.remote_calls += 1

        values = parse_integers(body, base)
        if len(values) != n:
            raise ParseError(f"expected {n} integers, got {len(values)}", body=body)
        for v in values:
            if not low <= v <= high:
                raise ParseError(f"value {v} outside [{low}, {high}]", body=body)
        return values

    # ── helpers ──

    def _require_ready(self) -> None:
        if not self.ready:
            raise NotInitializedError()

    def _quota_is_stale(self) -> bool:
        max_age = self.config.quota_max_age
        if max_age is None:
            return False
        with self._lock:
            last = self._state.last_quota_check
        return self._elapsed_ms(last, self._clock()) >= max_age * 1000

    @staticmethod
    def _bounds(min: int, max: int) -> tuple[int, int]:
        low = clamp(min, ABS_MIN, ABS_MAX)
        high = clamp(max, ABS_MIN, ABS_MAX)
        if low > high:
            raise ValueError(f"min ({low}) must not exceed max ({high})")
        return low, high

    @staticmethod
    def _elapsed_ms(since: float | None, now: float) -> float:
        if since is None:
            return float("inf")
        return (now - since) * 1000.0

    # ── status ──

    def status(self) -> dict:
        now = self._clock()
        st = self.state
        return {
            "ready": st.ready,
            "quota": st.remote_quota,
            "public_address": str(st.public_address) if st.public_address else None,
            "quota_age": None if st.last_quota_check is None else round(now - st.last_quota_check, 3),
            "last_remote_call_age": None if st.last_remote_call is None else round(now - st.last_remote_call, 3),
            "remote_calls": st.remote_calls,
            "local_calls": st.local_calls,
            "quota_checks": st.quota_checks,
            "quota_checks_skipped": st.quota_checks_skipped,
        }

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> RandomnessProvider:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        st = self.state
        return f"<{self.__class__.__name__} ready={st.ready} quota={st.remote_quota}>"
