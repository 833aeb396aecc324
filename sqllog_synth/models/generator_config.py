"""
Generator Configuration Models

Defines Pydantic models for a generation run:
- Output target (path, format)
- Worker fan-out and quota partitioning
- Connection lifecycle limits (execution/statement caps, clock increments)
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class OutputFormat(str, Enum):
    """Supported output file formats."""

    TSV = "tsv"
    PARQUET = "parquet"


class RolloverPolicy(str, Enum):
    """How the per-connection statement cap is chosen."""

    FIXED = "fixed"  # one large constant cap for every identity
    RESAMPLED = "resampled"  # fresh cap drawn per identity


class SessionLimits(BaseModel):
    """
    Lifecycle limits applied to every simulated connection.
    """

    max_executions_per_statement: int = Field(
        3, ge=1, description="Executions before moving to the next statement"
    )
    rollover_policy: RolloverPolicy = Field(
        RolloverPolicy.RESAMPLED, description="Statement cap policy"
    )
    fixed_statement_cap: int = Field(
        800_000, ge=1, description="Statement cap under the FIXED policy"
    )
    min_statement_cap: int = Field(
        30, ge=1, description="Lower bound of the RESAMPLED cap"
    )
    max_statement_cap: int = Field(
        3000, ge=1, description="Upper bound of the RESAMPLED cap"
    )
    min_clock_increment_seconds: int = Field(
        1, ge=0, description="Smallest per-row clock advance"
    )
    max_clock_increment_seconds: int = Field(
        360, ge=1, description="Largest per-row clock advance"
    )
    initial_min_age_days: int = Field(
        3, ge=1, description="Minimum age of a worker's first connection"
    )
    initial_max_age_days: int = Field(
        7, ge=1, description="Maximum age of a worker's first connection"
    )
    rollover_min_age_days: int = Field(
        1, ge=1, description="Minimum age of a reopened connection"
    )
    rollover_max_age_days: int = Field(
        7, ge=1, description="Maximum age of a reopened connection"
    )

    @model_validator(mode="after")
    def validate_ranges(self):
        """Validate that every min/max pair is ordered."""
        pairs = [
            ("min_statement_cap", "max_statement_cap"),
            ("min_clock_increment_seconds", "max_clock_increment_seconds"),
            ("initial_min_age_days", "initial_max_age_days"),
            ("rollover_min_age_days", "rollover_max_age_days"),
        ]
        for low, high in pairs:
            if getattr(self, low) > getattr(self, high):
                raise ValueError(f"{low} must be <= {high}")

        # A reopened connection must still be in the past after its first row.
        if self.max_clock_increment_seconds >= self.rollover_min_age_days * 86400:
            raise ValueError(
                "max_clock_increment_seconds must be shorter than rollover_min_age_days"
            )
        return self

    class Config:
        use_enum_values = True


class GeneratorConfig(BaseModel):
    """
    Configuration for one generation run.
    """

    total_rows: int = Field(100_000, ge=0, description="Requested row count")
    output_path: str = Field("sql_logs.tsv", description="Output file path")
    output_format: OutputFormat = Field(
        OutputFormat.TSV, description="Output file format"
    )

    # Concurrency settings
    workers: Optional[int] = Field(
        None, ge=1, description="Fixed worker count (None=sample from range)"
    )
    min_workers: int = Field(10, ge=1, description="Lower bound of worker count")
    max_workers: int = Field(50, ge=1, description="Upper bound of worker count")
    distribute_remainder: bool = Field(
        False,
        description="Hand total % workers extra rows to the first workers",
    )

    limits: SessionLimits = Field(
        default_factory=SessionLimits, description="Connection lifecycle limits"
    )

    buffer_size: int = Field(
        50_000, ge=1, description="Rows buffered before a background flush"
    )
    seed: Optional[int] = Field(
        None, description="Base seed for worker RNGs (None=unseeded run)"
    )

    @model_validator(mode="after")
    def validate_worker_range(self):
        """Validate max >= min worker count."""
        if self.min_workers > self.max_workers:
            raise ValueError("max_workers must be >= min_workers")
        return self

    class Config:
        use_enum_values = True
