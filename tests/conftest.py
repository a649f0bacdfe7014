"""Shared fakes for provider tests. Nothing here touches the network."""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest

from truerand.config import ProviderConfig
from truerand.local import LocalPRNG
from truerand.provider import RandomnessProvider
from truerand.resolver import StaticResolver
from truerand.transport import Transport

_FORMATS = {2: "b", 8: "o", 10: "d", 16: "x"}


def sequential_integers(url: str) -> str:
    """Answer an integer request with min, min+1, ... in the requested base."""
    q = parse_qs(urlparse(url).query)
    num, low, high = int(q["num"][0]), int(q["min"][0]), int(q["max"][0])
    fmt = _FORMATS[int(q["base"][0])]
    span = high - low + 1
    return "".join(format(low + i % span, fmt) + "\n" for i in range(num))


def forbidden(url: str) -> str:
    pytest.fail(f"transport should not have been called: {url}")


class FakeTransport(Transport):
    """Serves canned bodies and records every URL it was asked for.

    ``quota`` and ``integers`` may be a string body, a callable taking the
    URL, or an exception instance to raise.
    """

    def __init__(self, quota="1000", integers=sequential_integers) -> None:
        self.quota = quota
        self.integers = integers
        self.calls: list[str] = []
        self.closed = False

    def fetch_text(self, url: str, timeout: float | None = None) -> str:
        self.calls.append(url)
        answer = self.quota if "/quota/" in url else self.integers
        if isinstance(answer, BaseException):
            raise answer
        if callable(answer):
            return answer(url)
        return answer

    def close(self) -> None:
        self.closed = True

    @property
    def quota_calls(self) -> list[str]:
        return [u for u in self.calls if "/quota/" in u]

    @property
    def integer_calls(self) -> list[str]:
        return [u for u in self.calls if "/integers/" in u]


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


class CountingResolver(StaticResolver):
    def __init__(self, addresses) -> None:
        super().__init__(addresses)
        self.calls = 0

    def resolve_local_addresses(self):
        self.calls += 1
        return super().resolve_local_addresses()


class RecordingPRNG(LocalPRNG):
    """Deterministic stand-in: single draws give *high*, batches give *low*."""

    def __init__(self) -> None:
        self.single_draws = 0
        self.batch_draws = 0

    def uniform_int(self, low: int, high: int) -> int:
        self.single_draws += 1
        return high

    def uniform_ints(self, low: int, high: int, n: int) -> list[int]:
        self.batch_draws += 1
        return [low] * n


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def make_provider(clock):
    """Factory for providers wired to fakes."""

    def _make(transport=None, addresses=("203.0.113.7",), local=None, config=None):
        return RandomnessProvider(
            transport=transport or FakeTransport(),
            resolver=CountingResolver(addresses),
            local=local,
            config=config or ProviderConfig(),
            clock=clock,
        )

    return _make


@pytest.fixture
def ready_provider(make_provider, transport):
    p = make_provider(transport=transport)
    p.ensure_ready()
    return p
