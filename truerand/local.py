"""Local pseudo-random fallback generators.

Usage::

    from truerand.local import NumpyLocalPRNG
    prng = NumpyLocalPRNG(seed=1234)
    prng.uniform_int(1, 6)
    prng.uniform_ints(-10, 10, 100)
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

import numpy as np


class LocalPRNG(ABC):
    """Source of uniformly distributed integers that needs no network."""

    @abstractmethod
    def uniform_int(self, low: int, high: int) -> int:
        """Return one integer in ``[low, high]``, both ends inclusive."""
        ...

    def uniform_ints(self, low: int, high: int, n: int) -> list[int]:
        """Return *n* independent integers in ``[low, high]``."""
        return [self.uniform_int(low, high) for _ in range(n)]


class NumpyLocalPRNG(LocalPRNG):
    """NumPy ``Generator`` over PCG64.

    ``numpy.random.Generator`` is not safe to share between threads, so
    draws are serialised on a private lock.

    Parameters
    ----------
    seed : int or None
        Fixed seed for reproducible output. ``None`` seeds from the OS.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = np.random.Generator(np.random.PCG64(seed))
        self._lock = threading.Lock()

    def uniform_int(self, low: int, high: int) -> int:
        with self._lock:
            return int(self._rng.integers(low, high, endpoint=True, dtype=np.int64))

    def uniform_ints(self, low: int, high: int, n: int) -> list[int]:
        with self._lock:
            vals = self._rng.integers(low, high, size=n, endpoint=True, dtype=np.int64)
        return vals.tolist()

    @property
    def state(self) -> dict:
        return {"bit_generator": "PCG64", "state": self._rng.bit_generator.state}
