"""
Unit tests for the simulated connection lifecycle.
"""

import random
from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from sqllog_synth.core.fingerprint import connection_hash
from sqllog_synth.core.session import ConnectionSession
from sqllog_synth.models import ConnectionEndpoint, RolloverPolicy, SessionLimits

NOW = datetime(2024, 6, 1, 12, 0, 0)

ENDPOINT_A = ConnectionEndpoint("192.168.0.1", "10.0.0.1", "ERP")
ENDPOINT_B = ConnectionEndpoint("192.168.0.2", "10.0.0.2", "Toad")


class MutableClock:
    """Wall clock whose current time tests can move."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _session(limits=None, seed: int = 1, clock=None) -> ConnectionSession:
    return ConnectionSession(
        random.Random(seed), ENDPOINT_A, limits, clock=clock or MutableClock(NOW)
    )


class TestSessionCreation:
    """Tests for the initial session state."""

    def test_initial_state(self):
        session = _session()

        assert session.connection_identity == connection_hash(*ENDPOINT_A)
        assert session.statement_sequence == 1
        assert session.execution_sequence == 0
        assert session.rows_emitted == 0
        assert session.rollovers == 0
        assert NOW - timedelta(days=7) <= session.simulated_clock <= NOW - timedelta(days=3)

    def test_fixed_policy_cap(self):
        limits = SessionLimits(rollover_policy=RolloverPolicy.FIXED)

        assert _session(limits).statement_cap == 800_000

    def test_resampled_policy_cap_in_range(self):
        limits = SessionLimits(min_statement_cap=30, max_statement_cap=3000)
        for seed in range(50):
            assert 30 <= _session(limits, seed=seed).statement_cap <= 3000


class TestAdvance:
    """Tests for ConnectionSession.advance()."""

    def test_first_row_is_first_execution(self):
        session = _session()

        assert session.advance(ENDPOINT_B) is False
        assert (session.statement_sequence, session.execution_sequence) == (1, 1)
        assert session.rows_emitted == 1

    def test_execution_rolls_into_next_statement(self):
        limits = SessionLimits(
            max_executions_per_statement=3, rollover_policy=RolloverPolicy.FIXED
        )
        session = _session(limits)

        pairs = []
        for _ in range(7):
            session.advance(ENDPOINT_B)
            pairs.append((session.statement_sequence, session.execution_sequence))

        assert pairs == [(1, 1), (1, 2), (1, 3), (2, 1), (2, 2), (2, 3), (3, 1)]

    def test_statement_cap_triggers_rollover(self):
        limits = SessionLimits(
            max_executions_per_statement=1,
            rollover_policy=RolloverPolicy.FIXED,
            fixed_statement_cap=2,
        )
        session = _session(limits)

        assert session.advance(ENDPOINT_A) is False
        assert session.advance(ENDPOINT_A) is False
        assert session.statement_sequence == 2

        assert session.advance(ENDPOINT_B) is True
        assert session.connection_identity == connection_hash(*ENDPOINT_B)
        assert (session.statement_sequence, session.execution_sequence) == (1, 1)
        assert session.rollovers == 1

    def test_clock_catching_up_triggers_rollover(self):
        clock = MutableClock(NOW)
        session = _session(clock=clock)
        clock.now = session.simulated_clock + timedelta(seconds=1)

        assert session.advance(ENDPOINT_B) is True
        assert session.connection_identity == connection_hash(*ENDPOINT_B)
        assert (session.statement_sequence, session.execution_sequence) == (1, 1)
        assert clock.now - timedelta(days=7) < session.simulated_clock < clock.now

    def test_clock_advances_on_every_row(self):
        session = _session()
        previous = session.simulated_clock
        for _ in range(100):
            session.advance(ENDPOINT_B)
            delta = session.simulated_clock - previous

            assert timedelta(seconds=1) <= delta <= timedelta(seconds=360)
            previous = session.simulated_clock

    def test_rollover_row_still_advances_clock(self):
        clock = MutableClock(NOW)
        limits = SessionLimits(rollover_min_age_days=1, rollover_max_age_days=1)
        session = _session(limits, clock=clock)
        clock.now = session.simulated_clock

        session.advance(ENDPOINT_B)

        assert session.simulated_clock > clock.now - timedelta(days=1)

    def test_long_run_lifecycle_invariants(self):
        """Sequence, cap and clock invariants hold across many rollovers."""
        limits = SessionLimits(min_statement_cap=2, max_statement_cap=6)
        session = _session(limits, seed=9)

        previous = None
        rollovers = 0
        for _ in range(5000):
            rolled_over = session.advance(ENDPOINT_B)
            current = (
                session.statement_sequence,
                session.execution_sequence,
                session.simulated_clock,
            )

            assert session.statement_sequence <= session.statement_cap
            assert session.execution_sequence <= 3
            assert session.simulated_clock < NOW

            if rolled_over:
                rollovers += 1
                assert current[:2] == (1, 1)
            elif previous is not None:
                stmt, exec_, clock_time = previous
                if current[0] == stmt:
                    assert current[1] == exec_ + 1
                else:
                    assert current[0] == stmt + 1
                    assert current[1] == 1
                    assert exec_ == 3
                assert current[2] >= clock_time
            previous = current

        assert rollovers == session.rollovers
        assert rollovers > 0

    def test_clock_only_rollover_with_fixed_cap(self):
        """With a huge cap, identities retire only when the clock catches up."""
        limits = SessionLimits(rollover_policy=RolloverPolicy.FIXED)
        session = _session(limits, seed=11)

        for _ in range(20000):
            session.advance(ENDPOINT_B)
            assert session.simulated_clock < NOW

        assert session.rollovers > 0


class TestSessionLimitsValidation:
    """Tests for SessionLimits validation."""

    def test_inverted_cap_range_rejected(self):
        with pytest.raises(ValidationError):
            SessionLimits(min_statement_cap=100, max_statement_cap=10)

    def test_increment_longer_than_reopen_age_rejected(self):
        with pytest.raises(ValidationError):
            SessionLimits(max_clock_increment_seconds=2 * 86400)

    def test_zero_execution_cap_rejected(self):
        with pytest.raises(ValidationError):
            SessionLimits(max_executions_per_statement=0)
