"""
Probe session state machine

The session moves PROBING -> {SUCCESS, ABORTED, EXHAUSTED} one hop at a
time. ``next_state`` is pure so the stop policy can be exercised with
synthetic hop results, without touching the network.
"""

from dataclasses import replace

from .config import MAX_HOPS, MAX_CONSECUTIVE_TIMEOUTS
from .models import HopResult, SessionState, SessionStatus


def next_state(
    state: SessionState,
    hop: HopResult,
    max_hops: int = MAX_HOPS,
    max_consecutive_timeouts: int = MAX_CONSECUTIVE_TIMEOUTS
) -> SessionState:
    """
    Fold one completed hop into the session state.

    Args:
        state: State after the previous hop
        hop: Result of the hop that just finished
        max_hops: Hop ceiling for the session
        max_consecutive_timeouts: Fully timed-out hops in a row before giving up

    Returns:
        New SessionState (terminal states are returned unchanged)
    """
    if state.status.terminal:
        return state

    if hop.hop != state.hop + 1:
        raise ValueError(
            f"Hop {hop.hop} out of order, expected hop {state.hop + 1}"
        )

    if hop.timed_out:
        timeouts = state.consecutive_timeouts + 1
        if timeouts >= max_consecutive_timeouts:
            return SessionState(SessionStatus.ABORTED, hop.hop, timeouts)
        state = replace(state, hop=hop.hop, consecutive_timeouts=timeouts)
    else:
        if hop.reached_target:
            return SessionState(SessionStatus.SUCCESS, hop.hop, 0)
        state = replace(state, hop=hop.hop, consecutive_timeouts=0)

    if hop.hop >= max_hops:
        return replace(state, status=SessionStatus.EXHAUSTED)

    return state
