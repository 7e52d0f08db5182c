"""
Raw-socket ICMP echo probes for IPv4 and IPv6

All address-family specific behaviour (socket options, message types,
reply framing) lives here so the hop prober can stay family agnostic.
Raw sockets require root on Linux/macOS.
"""

import math
import os
import socket
import struct
import time
from abc import abstractmethod
from typing import Optional

from ..config import PAYLOAD_SIZE, PROBE_TIMEOUT
from ..logging import get_logger
from ..models import ProbeResult, ProbeStatus, Target
from .base import BaseProbe


logger = get_logger("icmp")


def checksum(data: bytes) -> int:
    """Calculate ICMP checksum (RFC 1071)"""
    if len(data) % 2:
        data += b'\x00'

    s = 0
    for i in range(0, len(data), 2):
        w = (data[i] << 8) + data[i + 1]
        s += w

    s = (s >> 16) + (s & 0xFFFF)
    s += s >> 16
    return ~s & 0xFFFF


def create_icmp_probe(version: int, timeout: float = PROBE_TIMEOUT,
                      payload_size: int = PAYLOAD_SIZE) -> 'RawICMPProbe':
    """Factory function to create the probe for an address family"""
    if version == 4:
        return ICMPv4Probe(timeout, payload_size)
    if version == 6:
        return ICMPv6Probe(timeout, payload_size)
    raise ValueError(f"Unsupported IP version: {version}")


class RawICMPProbe(BaseProbe):
    """
    ICMP echo probe over a raw socket.

    Subclasses supply the socket family, the hop-limit socket option and
    the ICMP message numbers for their protocol version.
    """

    FAMILY: int
    PROTOCOL: int
    ECHO_REQUEST: int
    ECHO_REPLY: int
    TIME_EXCEEDED: int
    DEST_UNREACHABLE: int

    def __init__(self, timeout: float = PROBE_TIMEOUT,
                 payload_size: int = PAYLOAD_SIZE):
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError(f"Probe timeout must be a positive number of seconds, got {timeout}")
        super().__init__(timeout, payload_size)
        self.identifier = os.getpid() & 0xFFFF
        self.sequence = 0
        self._sock = self._open_socket()

    def _open_socket(self) -> socket.socket:
        try:
            return socket.socket(self.FAMILY, socket.SOCK_RAW, self.PROTOCOL)
        except PermissionError:
            raise PermissionError(
                "Root privileges required. Please run with sudo."
            )

    @abstractmethod
    def _set_hop_limit(self, ttl: int):
        pass

    @abstractmethod
    def _checksum(self, packet: bytes) -> int:
        pass

    def _icmp_message(self, data: bytes) -> bytes:
        """Strip any network header the kernel hands us"""
        return data

    @abstractmethod
    def _embedded_echo(self, icmp_data: bytes) -> Optional[bytes]:
        """Return the ICMP header of the datagram quoted in an error message"""
        pass

    def build_packet(self, sequence: int) -> bytes:
        """Build an echo request carrying ``payload_size`` zero bytes"""
        payload = bytes(self.payload_size)
        header = struct.pack(
            '!BBHHH', self.ECHO_REQUEST, 0, 0, self.identifier, sequence
        )
        cs = self._checksum(header + payload)
        header = struct.pack(
            '!BBHHH', self.ECHO_REQUEST, 0, cs, self.identifier, sequence
        )
        return header + payload

    def parse_response(self, data: bytes,
                       expected_seq: int) -> Optional[ProbeStatus]:
        """
        Classify a received datagram.

        Returns:
            ProbeStatus for a reply to our probe, None for unrelated traffic
        """
        icmp_data = self._icmp_message(data)
        if len(icmp_data) < 8:
            return None

        icmp_type = icmp_data[0]

        if icmp_type == self.ECHO_REPLY:
            if self._matches(icmp_data[:8], self.ECHO_REPLY, expected_seq):
                return ProbeStatus.REACHED
            return None

        if icmp_type in (self.TIME_EXCEEDED, self.DEST_UNREACHABLE):
            inner = self._embedded_echo(icmp_data)
            if inner is None or not self._matches(inner, self.ECHO_REQUEST,
                                                  expected_seq):
                return None
            if icmp_type == self.TIME_EXCEEDED:
                return ProbeStatus.TTL_EXPIRED
            return ProbeStatus.UNREACHABLE

        return None

    def _matches(self, header: bytes, icmp_type: int, expected_seq: int) -> bool:
        if len(header) < 8 or header[0] != icmp_type:
            return False
        ident, seq = struct.unpack('!HH', header[4:8])
        return ident == self.identifier and seq == expected_seq

    def probe(self, target: Target, ttl: int) -> ProbeResult:
        """Send ICMP echo request with given hop limit"""
        self.sequence = (self.sequence + 1) & 0xFFFF
        current_seq = self.sequence
        packet = self.build_packet(current_seq)

        try:
            self._set_hop_limit(ttl)
            send_time = time.perf_counter()
            self._sock.sendto(packet, (str(target), 0))
        except OSError as e:
            logger.debug("Send to %s (ttl=%d) failed: %s", target, ttl, e)
            return ProbeResult()

        deadline = send_time + self.timeout

        while True:
            remaining = deadline - time.perf_counter()
            if remaining <= 0:
                return ProbeResult()

            self._sock.settimeout(remaining)

            try:
                data, addr = self._sock.recvfrom(2048)
                recv_time = time.perf_counter()
            except socket.timeout:
                return ProbeResult()
            except OSError as e:
                logger.debug("Receive from %s failed: %s", target, e)
                return ProbeResult()

            status = self.parse_response(data, current_seq)
            if status is None:
                continue

            rtt_ms = (recv_time - send_time) * 1000
            return ProbeResult(
                status=status,
                responder_ip=addr[0].split('%', 1)[0],
                rtt_ms=round(rtt_ms, 2)
            )

    def close(self):
        """Close raw socket"""
        if self._sock is not None:
            self._sock.close()
            self._sock = None


class ICMPv4Probe(RawICMPProbe):
    """ICMP echo over IPv4. Raw IPv4 sockets deliver the IP header too."""

    FAMILY = socket.AF_INET
    PROTOCOL = socket.IPPROTO_ICMP
    ECHO_REQUEST = 8
    ECHO_REPLY = 0
    TIME_EXCEEDED = 11
    DEST_UNREACHABLE = 3

    def _set_hop_limit(self, ttl: int):
        self._sock.setsockopt(socket.IPPROTO_IP, socket.IP_TTL, ttl)

    def _checksum(self, packet: bytes) -> int:
        return checksum(packet)

    def _icmp_message(self, data: bytes) -> bytes:
        if len(data) < 20:
            return b''
        ip_header_len = (data[0] & 0x0F) * 4
        return data[ip_header_len:]

    def _embedded_echo(self, icmp_data: bytes) -> Optional[bytes]:
        # 8-byte ICMP error header, then the original IP header
        if len(icmp_data) < 36:
            return None
        inner_ip_header_len = (icmp_data[8] & 0x0F) * 4
        start = 8 + inner_ip_header_len
        if len(icmp_data) < start + 8:
            return None
        return icmp_data[start:start + 8]


class ICMPv6Probe(RawICMPProbe):
    """
    ICMPv6 echo over IPv6.

    The kernel fills in the ICMPv6 checksum (it covers a pseudo-header we
    cannot see) and strips the IPv6 header before delivery.
    """

    FAMILY = socket.AF_INET6
    PROTOCOL = socket.IPPROTO_ICMPV6
    ECHO_REQUEST = 128
    ECHO_REPLY = 129
    TIME_EXCEEDED = 3
    DEST_UNREACHABLE = 1

    IPV6_HEADER_LEN = 40
    NEXT_HEADER_ICMPV6 = 58

    def _set_hop_limit(self, ttl: int):
        self._sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_UNICAST_HOPS, ttl)

    def _checksum(self, packet: bytes) -> int:
        return 0

    def _embedded_echo(self, icmp_data: bytes) -> Optional[bytes]:
        start = 8 + self.IPV6_HEADER_LEN
        if len(icmp_data) < start + 8:
            return None
        # Next Header of the quoted IPv6 header; extension headers are not followed
        if icmp_data[8 + 6] != self.NEXT_HEADER_ICMPV6:
            return None
        return icmp_data[start:start + 8]
