"""
Run settings for hoptrace
"""

from dataclasses import dataclass


MAX_HOPS = 30
PROBES_PER_HOP = 3
PROBE_TIMEOUT = 6.0  # seconds
MAX_TIMEOUT = 3600.0  # seconds
PAYLOAD_SIZE = 52  # bytes
MAX_CONSECUTIVE_TIMEOUTS = 3


@dataclass
class Settings:
    """Tunables for a probing run. Defaults match classic traceroute behaviour."""
    max_hops: int = MAX_HOPS
    probes_per_hop: int = PROBES_PER_HOP
    timeout: float = PROBE_TIMEOUT
    payload_size: int = PAYLOAD_SIZE
    max_consecutive_timeouts: int = MAX_CONSECUTIVE_TIMEOUTS
    resolve_names: bool = True
