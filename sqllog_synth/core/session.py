"""
Simulated database connection lifecycle.

A ConnectionSession ages the way a pooled connection does: each emitted row
is one execution of the current statement, statements roll over after a few
executions, and the whole connection is retired (new identity, reset
counters, clock reopened in the past) once it has run enough statements or
its simulated clock catches up with real time.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import Callable

from sqllog_synth.core.fingerprint import connection_hash
from sqllog_synth.models.generator_config import RolloverPolicy, SessionLimits
from sqllog_synth.models.sql_record import ConnectionEndpoint

logger = logging.getLogger(__name__)


class ConnectionSession:
    """
    Mutable lifecycle state for one simulated connection.

    Owned by exactly one worker thread; never shared.
    """

    def __init__(
        self,
        rng: random.Random,
        endpoint: ConnectionEndpoint,
        limits: SessionLimits | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Open a session whose clock starts a few days in the past.

        Args:
            rng: Random source owned by the worker.
            endpoint: Endpoint the initial identity is derived from.
            limits: Lifecycle limits (defaults when omitted).
            clock: Wall-clock source, injectable for tests.
        """
        self.random = rng
        self.limits = limits or SessionLimits()
        self.clock = clock

        self.connection_identity = connection_hash(*endpoint)
        self.statement_sequence = 1
        # No execution yet: the first advance() yields (1, 1).
        self.execution_sequence = 0
        self.simulated_clock = self.clock() - timedelta(
            days=self.random.randint(
                self.limits.initial_min_age_days, self.limits.initial_max_age_days
            )
        )
        self.statement_cap = self._draw_statement_cap()
        self.rows_emitted = 0
        self.rollovers = 0

    def advance(self, endpoint: ConnectionEndpoint) -> bool:
        """
        Move the session forward by one execution.

        Order matters: execution rollover, then statement-cap / clock
        rollover, then the clock advance (always last, including on a
        rollover row).

        Args:
            endpoint: The current row's endpoint; becomes the new identity
                source if this row retires the connection.

        Returns:
            True if the connection identity was regenerated.
        """
        limits = self.limits
        increment = timedelta(
            seconds=self.random.randint(
                limits.min_clock_increment_seconds,
                limits.max_clock_increment_seconds,
            )
        )

        self.execution_sequence += 1
        if self.execution_sequence > limits.max_executions_per_statement:
            self.statement_sequence += 1
            self.execution_sequence = 1

        now = self.clock()
        rolled_over = (
            self.statement_sequence > self.statement_cap
            or self.simulated_clock + increment >= now
        )
        if rolled_over:
            self._rollover(endpoint, now)

        self.simulated_clock += increment
        self.rows_emitted += 1
        return rolled_over

    def _rollover(self, endpoint: ConnectionEndpoint, now: datetime) -> None:
        """Retire the current identity and reopen the connection in the past."""
        previous = self.connection_identity
        self.connection_identity = connection_hash(*endpoint)
        self.statement_sequence = 1
        self.execution_sequence = 1
        self.simulated_clock = now - timedelta(
            days=self.random.randint(
                self.limits.rollover_min_age_days, self.limits.rollover_max_age_days
            )
        )
        self.statement_cap = self._draw_statement_cap()
        self.rollovers += 1
        logger.debug(
            "Connection rollover: %s -> %s (rows_emitted=%d)",
            previous,
            self.connection_identity,
            self.rows_emitted,
        )

    def _draw_statement_cap(self) -> int:
        if self.limits.rollover_policy == RolloverPolicy.FIXED:
            return self.limits.fixed_statement_cap
        return self.random.randint(
            self.limits.min_statement_cap, self.limits.max_statement_cap
        )
