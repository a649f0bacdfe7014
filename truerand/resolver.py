"""Local address discovery.

The quota endpoint is keyed by the caller's IPv4 address, so the provider
needs one before it can do anything else.
"""

from __future__ import annotations

import ipaddress
import socket
from abc import ABC, abstractmethod
from typing import Iterable

from truerand.errors import AddressResolutionError

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


class AddressResolver(ABC):
    """Lists the addresses of this machine."""

    @abstractmethod
    def resolve_local_addresses(self) -> list[IPAddress]:
        ...


class HostnameResolver(AddressResolver):
    """Resolve the machine's own hostname, like ``hostname -i``."""

    def __init__(self, hostname: str | None = None) -> None:
        self.hostname = hostname

    def resolve_local_addresses(self) -> list[IPAddress]:
        host = self.hostname or socket.gethostname()
        try:
            infos = socket.getaddrinfo(host, None)
        except OSError as e:
            raise AddressResolutionError(f"Failed to resolve {host!r}: {e}") from e

        seen: list[IPAddress] = []
        for _family, _type, _proto, _canon, sockaddr in infos:
            # IPv6 sockaddrs may carry a scope suffix ("fe80::1%eth0").
            addr = ipaddress.ip_address(sockaddr[0].split("%", 1)[0])
            if addr not in seen:
                seen.append(addr)
        return seen


class StaticResolver(AddressResolver):
    """Always returns the given addresses. Handy behind NAT or in tests."""

    def __init__(self, addresses: Iterable[str | IPAddress]) -> None:
        self._addresses = [ipaddress.ip_address(a) for a in addresses]

    def resolve_local_addresses(self) -> list[IPAddress]:
        return list(self._addresses)


def first_ipv4(addresses: Iterable[IPAddress]) -> ipaddress.IPv4Address:
    """Return the first IPv4 entry of *addresses*."""
    for addr in addresses:
        if isinstance(addr, ipaddress.IPv4Address):
            return addr
    raise AddressResolutionError()
