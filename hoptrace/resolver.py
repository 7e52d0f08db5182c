"""
Forward address resolution for the local host and the trace target
"""

import socket
from dataclasses import dataclass, field
from typing import Optional

from .logging import get_logger
from .models import Target


logger = get_logger("resolver")


class ResolutionError(Exception):
    """Hostname could not be resolved to any address"""


@dataclass
class ResolvedHost:
    """A hostname and the addresses it resolved to, in resolver order"""
    hostname: str
    addresses: list[Target] = field(default_factory=list)

    def address(self, version: int) -> Optional[Target]:
        """Last resolved address of the given IP version, if any"""
        found = None
        for target in self.addresses:
            if target.version == version:
                found = target
        return found

    @property
    def ipv4(self) -> Optional[Target]:
        return self.address(4)

    @property
    def ipv6(self) -> Optional[Target]:
        return self.address(6)

    def pair(self) -> tuple[Optional[Target], Optional[Target]]:
        return self.ipv4, self.ipv6


def resolve(hostname: str) -> ResolvedHost:
    """
    Resolve a hostname (or address literal) to its IPv4/IPv6 addresses.

    Raises:
        ResolutionError: if the name does not resolve at all
    """
    try:
        infos = socket.getaddrinfo(hostname, None)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionError(f"Cannot resolve hostname '{hostname}': {e}")

    addresses: list[Target] = []
    for family, _, _, _, sockaddr in infos:
        if family not in (socket.AF_INET, socket.AF_INET6):
            continue
        target = Target.parse(sockaddr[0])
        if target not in addresses:
            addresses.append(target)

    if not addresses:
        raise ResolutionError(f"No IPv4 or IPv6 address for '{hostname}'")

    logger.debug("Resolved %s -> %s", hostname, [str(a) for a in addresses])
    return ResolvedHost(hostname=hostname, addresses=addresses)


def resolve_local() -> ResolvedHost:
    """Resolve this machine's own hostname; an unresolvable name yields no addresses"""
    hostname = socket.gethostname()
    try:
        return resolve(hostname)
    except ResolutionError as e:
        logger.warning("%s", e)
        return ResolvedHost(hostname=hostname)
