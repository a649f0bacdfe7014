"""HTTP transports used to reach the randomness service."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import requests

from truerand.errors import TransportError, TransportTimeoutError

log = logging.getLogger(__name__)


class Transport(ABC):
    """Fetches a URL and returns the response body as text.

    Implementations raise :class:`TransportTimeoutError` when the request
    times out and :class:`TransportError` for every other network-layer
    failure, including non-2xx responses.
    """

    @abstractmethod
    def fetch_text(self, url: str, timeout: float | None = None) -> str:
        ...

    def close(self) -> None:
        """Release any pooled connections."""


class RequestsTransport(Transport):
    """:class:`Transport` backed by a shared :class:`requests.Session`."""

    def __init__(self, session: requests.Session | None = None, user_agent: str | None = None) -> None:
        self._session = session or requests.Session()
        if user_agent:
            self._session.headers["User-Agent"] = user_agent

    def fetch_text(self, url: str, timeout: float | None = None) -> str:
        log.debug("GET %s (timeout=%s)", url, timeout)
        try:
            r = self._session.get(url, timeout=timeout)
        except requests.Timeout as e:
            raise TransportTimeoutError(f"request timed out: {url}", url=url) from e
        except requests.RequestException as e:
            raise TransportError(f"request failed: {url}: {e}", url=url) from e

        if not r.ok:
            # The service explains refusals (bad params, banned IP) in the body.
            raise TransportError(
                f"HTTP {r.status_code} from {url}: {r.text.strip()[:200]}",
                url=url,
                status_code=r.status_code,
            )
        return r.text

    def close(self) -> None:
        self._session.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
