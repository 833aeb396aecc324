"""
Record types shared by the synthesizer, workers and sinks.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple

# Output column order. Sinks write exactly these columns, in this order.
COLUMNS: tuple[str, ...] = (
    "conn_hash",
    "stmt_id",
    "exec_id",
    "exec_time",
    "sql_type",
    "exe_status",
    "db_ip",
    "client_ip",
    "client_host",
    "app_name",
    "db_user",
    "sql_hash",
    "from_tbs",
    "select_cols",
    "sql_stmt",
    "stmt_bind_vars",
)

EXEC_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# select_cols value for every statement kind other than SELECT
NOT_APPLICABLE = "N/A"


class ConnectionEndpoint(NamedTuple):
    """The (db_ip, client_ip, app_name) triple a connection hash is derived from."""

    db_ip: str
    client_ip: str
    app_name: str


@dataclass(frozen=True)
class SqlStatement:
    """A synthesized statement and the parts it was built from."""

    sql_type: str
    table: str
    select_cols: str
    text: str


@dataclass(frozen=True, slots=True)
class SyntheticSqlRecord:
    """One audit log row."""

    conn_hash: str
    stmt_id: int
    exec_id: int
    exec_time: datetime
    sql_type: str
    exe_status: str
    db_ip: str
    client_ip: str
    client_host: str
    app_name: str
    db_user: str
    sql_hash: str
    from_tbs: str
    select_cols: str
    sql_stmt: str
    stmt_bind_vars: str
