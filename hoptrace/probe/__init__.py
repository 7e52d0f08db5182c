"""
Probe engines for hoptrace
"""

from .base import BaseProbe
from .icmp import ICMPv4Probe, ICMPv6Probe, create_icmp_probe
from .prober import HopProber, ProbeSession

__all__ = [
    'BaseProbe', 'ICMPv4Probe', 'ICMPv6Probe', 'create_icmp_probe',
    'HopProber', 'ProbeSession',
]
