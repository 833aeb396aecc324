"""
Data models for sqllog-synth.

This package contains:
- Run configuration (Pydantic)
- Record types produced by the generator
"""

from sqllog_synth.models.generator_config import (
    OutputFormat,
    RolloverPolicy,
    SessionLimits,
    GeneratorConfig,
)

from sqllog_synth.models.sql_record import (
    COLUMNS,
    EXEC_TIME_FORMAT,
    NOT_APPLICABLE,
    ConnectionEndpoint,
    SqlStatement,
    SyntheticSqlRecord,
)

__all__ = [
    # generator_config
    "OutputFormat",
    "RolloverPolicy",
    "SessionLimits",
    "GeneratorConfig",
    # sql_record
    "COLUMNS",
    "EXEC_TIME_FORMAT",
    "NOT_APPLICABLE",
    "ConnectionEndpoint",
    "SqlStatement",
    "SyntheticSqlRecord",
]
