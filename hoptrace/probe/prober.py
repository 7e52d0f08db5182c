"""
Hop prober: drives a probe session against one target
"""

import time
from typing import Callable, Iterator, Optional

from ..config import Settings
from ..logging import get_logger
from ..models import HopResult, ProbeResult, SessionState, SessionStatus, Target
from ..session import next_state
from .base import BaseProbe


logger = get_logger("prober")

NameLookup = Callable[[str], Optional[str]]


class ProbeSession:
    """
    One hop-by-hop run against a single target.

    Iterating the session probes hops lazily; ``state`` is updated before
    each hop is yielded, so callers can inspect why the run stopped.
    """

    def __init__(self, prober: 'HopProber', target: Target):
        self.prober = prober
        self.target = target
        self.state = SessionState()
        self.hops: list[HopResult] = []

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    def __iter__(self) -> Iterator[HopResult]:
        settings = self.prober.settings

        while not self.state.status.terminal:
            hop = self.prober.probe_hop(self.target, self.state.hop + 1)
            self.state = next_state(
                self.state,
                hop,
                max_hops=settings.max_hops,
                max_consecutive_timeouts=settings.max_consecutive_timeouts
            )
            self.hops.append(hop)
            yield hop

        logger.info(
            "Trace to %s finished: %s after %d hops",
            self.target, self.state.status.value, self.state.hop
        )


class HopProber:
    """
    Traceroute engine.

    Sends a fixed number of probes per hop limit through the given probe
    transport, times each one locally and hands the aggregated hop to the
    session state machine. Knows nothing about address families.
    """

    def __init__(
        self,
        probe: BaseProbe,
        settings: Optional[Settings] = None,
        name_lookup: Optional[NameLookup] = None,
        clock: Callable[[], float] = time.perf_counter
    ):
        self.probe_transport = probe
        self.settings = settings or Settings()
        self.name_lookup = name_lookup
        self._clock = clock

    def session(self, target: Target) -> ProbeSession:
        return ProbeSession(self, target)

    def probe(self, target: Target) -> Iterator[HopResult]:
        """Lazily probe ``target`` hop by hop until the session stops"""
        return iter(self.session(target))

    def probe_hop(self, target: Target, ttl: int) -> HopResult:
        """
        Send all attempts for one hop limit.

        Args:
            target: Destination address
            ttl: Hop limit for every attempt of this hop

        Returns:
            HopResult with one latency (or None) per attempt
        """
        hop = HopResult(hop=ttl)

        for attempt in range(1, self.settings.probes_per_hop + 1):
            result, elapsed_ms = self._attempt(target, ttl)
            logger.debug(
                "ttl=%d attempt=%d status=%s from=%s elapsed=%.2fms",
                ttl, attempt, result.status.value, result.responder_ip,
                elapsed_ms
            )

            if not result.replied:
                hop.rtts.append(None)
                continue

            hop.rtts.append(elapsed_ms)
            if hop.ip is None:
                hop.ip = result.responder_ip
            if result.reached_target:
                hop.reached_target = True

        if not hop.timed_out and hop.ip and self.settings.resolve_names:
            hop.name = self._lookup_name(hop.ip)

        return hop

    def _attempt(self, target: Target, ttl: int) -> tuple[ProbeResult, float]:
        # Intermediate replies carry no usable RTT from the transport, so
        # every attempt is timed here.
        start = self._clock()
        try:
            result = self.probe_transport.probe(target, ttl)
        except OSError as e:
            logger.debug("Probe to %s (ttl=%d) failed: %s", target, ttl, e)
            result = ProbeResult()
        elapsed_ms = max((self._clock() - start) * 1000, 0.0)
        return result, elapsed_ms

    def _lookup_name(self, ip: str) -> Optional[str]:
        if self.name_lookup is None:
            return None
        return self.name_lookup(ip)
