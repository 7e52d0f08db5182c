"""
Abstract base class for probe implementations
"""

from abc import ABC, abstractmethod
from ..config import PAYLOAD_SIZE, PROBE_TIMEOUT
from ..models import ProbeResult, Target


class BaseProbe(ABC):
    """Abstract base class for network probes"""

    def __init__(self, timeout: float = PROBE_TIMEOUT,
                 payload_size: int = PAYLOAD_SIZE):
        self.timeout = timeout
        self.payload_size = payload_size

    @abstractmethod
    def probe(self, target: Target, ttl: int) -> ProbeResult:
        """
        Send a probe with given hop limit and return result.

        Args:
            target: Target address (already resolved)
            ttl: Hop limit written to the outgoing packet

        Returns:
            ProbeResult with status, responder IP and transport RTT
        """
        pass

    @abstractmethod
    def close(self):
        """Clean up resources"""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
