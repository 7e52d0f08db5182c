"""Tests for the probe session state machine."""

import pytest

from hoptrace.models import HopResult, SessionState, SessionStatus
from hoptrace.session import next_state


def replied(hop, reached=False):
    return HopResult(hop=hop, ip="10.0.0.1", rtts=[5.0, None, 6.0],
                     reached_target=reached)


def timed_out(hop):
    return HopResult(hop=hop, rtts=[None, None, None])


def run(hops, **kwargs):
    state = SessionState()
    states = []
    for hop in hops:
        state = next_state(state, hop, **kwargs)
        states.append(state)
    return states


class TestNextState:
    """Tests for next_state transitions."""

    def test_initial_state(self):
        state = SessionState()
        assert state.status is SessionStatus.PROBING
        assert state.hop == 0
        assert state.consecutive_timeouts == 0

    def test_reply_keeps_probing(self):
        state = next_state(SessionState(), replied(1))
        assert state == SessionState(SessionStatus.PROBING, 1, 0)

    def test_target_reached_is_success(self):
        state = next_state(SessionState(), replied(1, reached=True))
        assert state.status is SessionStatus.SUCCESS
        assert state.hop == 1

    def test_timeout_increments_counter(self):
        state = next_state(SessionState(), timed_out(1))
        assert state.status is SessionStatus.PROBING
        assert state.consecutive_timeouts == 1

    def test_three_consecutive_timeouts_abort(self):
        states = run([timed_out(1), timed_out(2), timed_out(3)])
        assert [s.consecutive_timeouts for s in states] == [1, 2, 3]
        assert states[-1].status is SessionStatus.ABORTED
        assert states[-1].hop == 3

    def test_reply_resets_counter(self):
        states = run([timed_out(1), timed_out(2), replied(3), timed_out(4),
                      timed_out(5)])
        assert [s.consecutive_timeouts for s in states] == [1, 2, 0, 1, 2]
        assert states[-1].status is SessionStatus.PROBING

    def test_timeout_then_success(self):
        states = run([replied(1), replied(2), timed_out(3),
                      replied(4, reached=True)])
        assert states[2].consecutive_timeouts == 1
        assert states[-1] == SessionState(SessionStatus.SUCCESS, 4, 0)

    def test_exhausted_at_max_hops(self):
        states = run([replied(i) for i in range(1, 31)])
        assert all(s.status is SessionStatus.PROBING for s in states[:-1])
        assert states[-1].status is SessionStatus.EXHAUSTED
        assert states[-1].hop == 30

    def test_success_at_last_hop_is_not_exhausted(self):
        hops = [replied(i) for i in range(1, 30)] + [replied(30, reached=True)]
        assert run(hops)[-1].status is SessionStatus.SUCCESS

    def test_abort_at_last_hop_wins_over_exhausted(self):
        hops = [replied(i) for i in range(1, 28)]
        hops += [timed_out(28), timed_out(29), timed_out(30)]
        assert run(hops)[-1].status is SessionStatus.ABORTED

    def test_custom_limits(self):
        states = run([timed_out(1), timed_out(2)], max_consecutive_timeouts=2)
        assert states[-1].status is SessionStatus.ABORTED

        states = run([replied(1), replied(2)], max_hops=2)
        assert states[-1].status is SessionStatus.EXHAUSTED

    def test_terminal_state_unchanged(self):
        done = SessionState(SessionStatus.SUCCESS, 4, 0)
        assert next_state(done, replied(5)) is done

    def test_out_of_order_hop_rejected(self):
        with pytest.raises(ValueError):
            next_state(SessionState(), replied(2))
