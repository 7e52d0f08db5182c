"""
Data models for hoptrace
"""

import ipaddress
import socket
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True)
class Target:
    """Final destination of a probing run (IPv4 or IPv6)"""
    address: IPAddress

    @classmethod
    def parse(cls, value: str) -> 'Target':
        # getaddrinfo may hand back scoped link-local addresses (fe80::1%eth0)
        return cls(ipaddress.ip_address(value.split('%', 1)[0]))

    @property
    def version(self) -> int:
        return self.address.version

    @property
    def label(self) -> str:
        return f"IPv{self.version}"

    @property
    def family(self) -> int:
        return socket.AF_INET if self.version == 4 else socket.AF_INET6

    def __str__(self) -> str:
        return str(self.address)


class ProbeStatus(Enum):
    """Outcome of a single probe as reported by the transport"""
    TTL_EXPIRED = "ttl_expired"    # hop limit exhausted at an intermediate node
    REACHED = "reached"            # echo reply from the target itself
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"


@dataclass
class ProbeResult:
    """Result of a single probe"""
    status: ProbeStatus = ProbeStatus.TIMEOUT
    responder_ip: Optional[str] = None
    rtt_ms: Optional[float] = None

    @property
    def replied(self) -> bool:
        return self.status in (ProbeStatus.TTL_EXPIRED, ProbeStatus.REACHED)

    @property
    def reached_target(self) -> bool:
        return self.status is ProbeStatus.REACHED


@dataclass
class HopResult:
    """Result of probing a single hop (multiple probes)"""
    hop: int
    ip: Optional[str] = None
    name: Optional[str] = None
    rtts: list[Optional[float]] = field(default_factory=list)
    reached_target: bool = False

    @property
    def timed_out(self) -> bool:
        return all(r is None for r in self.rtts)

    @property
    def rtt_min(self) -> Optional[float]:
        valid = [r for r in self.rtts if r is not None]
        return min(valid) if valid else None

    @property
    def rtt_avg(self) -> Optional[float]:
        valid = [r for r in self.rtts if r is not None]
        return sum(valid) / len(valid) if valid else None

    @property
    def rtt_max(self) -> Optional[float]:
        valid = [r for r in self.rtts if r is not None]
        return max(valid) if valid else None


class SessionStatus(Enum):
    """Lifecycle of a probe session"""
    PROBING = "probing"
    SUCCESS = "success"
    ABORTED = "aborted"
    EXHAUSTED = "exhausted"

    @property
    def terminal(self) -> bool:
        return self is not SessionStatus.PROBING


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a probe session after its last completed hop"""
    status: SessionStatus = SessionStatus.PROBING
    hop: int = 0
    consecutive_timeouts: int = 0


@dataclass
class TraceResult:
    """Complete trace result for one address family"""
    hostname: str
    target: Target
    status: SessionStatus
    timestamp: datetime = field(default_factory=datetime.now)
    hops: list[HopResult] = field(default_factory=list)

    @property
    def reachable(self) -> bool:
        return self.status is SessionStatus.SUCCESS

    @property
    def total_hops(self) -> int:
        return len(self.hops)
