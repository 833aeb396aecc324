"""
Generation worker: one simulated connection producing a fixed quota of rows.
"""

import logging
import random
from datetime import datetime
from typing import Callable, Optional

from sqllog_synth.core.bind_variables import extract_bind_values
from sqllog_synth.core.fingerprint import sql_hash
from sqllog_synth.core.record_sink import RecordSink
from sqllog_synth.core.session import ConnectionSession
from sqllog_synth.core.sql_synthesizer import SqlTextSynthesizer
from sqllog_synth.models.generator_config import SessionLimits
from sqllog_synth.models.sql_record import ConnectionEndpoint, SyntheticSqlRecord

logger = logging.getLogger(__name__)

EXECUTION_STATUSES = ["SUCCESS", "FAILURE"]

CLIENT_HOSTS = [
    "ERP_USER_HOST101",
    "ERP_USER_HOST102",
    "ERP_USER_HOST103",
    "ERP_USER_HOST104",
    "ERP_USER_HOST105",
]

# Relative weights out of 100
APP_NAME_WEIGHTS = {
    "ERP": 51,
    "WEB App": 30,
    "SQL Developer": 5,
    "Toad": 5,
    "PL/SQL Developer": 5,
    "SQL*Plus": 4,
}

DB_USERS = [
    "SYS",
    "SYSTEM",
    "HR",
    "SCOTT",
    "OE",
    "SH",
    "PM",
    "IX",
    "APEX_040000",
    "ANONYMOUS",
]


class GenerationWorker:
    """
    Drives one ConnectionSession through a fixed row quota.

    Each worker owns its random source, synthesizer and session; the sink is
    the only object it shares with other workers.
    """

    def __init__(
        self,
        worker_id: int,
        quota: int,
        sink: RecordSink,
        limits: Optional[SessionLimits] = None,
        *,
        seed: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.worker_id = worker_id
        self.quota = quota
        self.sink = sink
        self.random = random.Random(seed)
        self.clock = clock

        self.synthesizer = SqlTextSynthesizer(self.random, clock=clock)
        self.session = ConnectionSession(
            self.random, self.sample_endpoint(), limits, clock=clock
        )

    def sample_endpoint(self) -> ConnectionEndpoint:
        """Sample a database IP, client IP and application name"""
        rng = self.random
        return ConnectionEndpoint(
            db_ip=f"192.168.{rng.randrange(255)}.{rng.randrange(255)}",
            client_ip=f"10.0.{rng.randrange(255)}.{rng.randrange(255)}",
            app_name=rng.choices(
                list(APP_NAME_WEIGHTS), weights=list(APP_NAME_WEIGHTS.values())
            )[0],
        )

    def next_record(self) -> SyntheticSqlRecord:
        """Advance the session by one execution and build its record."""
        endpoint = self.sample_endpoint()
        client_host = self.random.choice(CLIENT_HOSTS)
        db_user = self.random.choice(DB_USERS)

        self.session.advance(endpoint)

        statement = self.synthesizer.generate_statement()
        exe_status = self.random.choice(EXECUTION_STATUSES)

        return SyntheticSqlRecord(
            conn_hash=self.session.connection_identity,
            stmt_id=self.session.statement_sequence,
            exec_id=self.session.execution_sequence,
            exec_time=self.session.simulated_clock,
            sql_type=statement.sql_type,
            exe_status=exe_status,
            db_ip=endpoint.db_ip,
            client_ip=endpoint.client_ip,
            client_host=client_host,
            app_name=endpoint.app_name,
            db_user=db_user,
            sql_hash=sql_hash(statement.text),
            from_tbs=statement.table,
            select_cols=statement.select_cols,
            sql_stmt=statement.text,
            stmt_bind_vars=extract_bind_values(statement.text),
        )

    def run(self) -> int:
        """
        Emit records until the quota is reached.

        Returns:
            Number of rows submitted to the sink.
        """
        while self.session.rows_emitted < self.quota:
            self.sink.append(self.next_record())

        logger.debug(
            "Worker %d finished: rows=%d, rollovers=%d",
            self.worker_id,
            self.session.rows_emitted,
            self.session.rollovers,
        )
        return self.session.rows_emitted
