"""
Top-level driver for a generation run.

Picks the worker count, partitions the requested row total into per-worker
quotas, runs one GenerationWorker per simulated connection on its own
thread and closes the shared sink once every worker has finished.
"""

from __future__ import annotations

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from sqllog_synth.core.record_sink import RecordSink, create_record_sink
from sqllog_synth.core.worker import GenerationWorker
from sqllog_synth.models.generator_config import GeneratorConfig, OutputFormat

logger = logging.getLogger(__name__)


@dataclass
class GenerationSummary:
    """Outcome of a completed generation run."""

    output_path: str
    output_format: str
    workers: int
    rows_per_worker: int
    rows_requested: int
    rows_written: int
    rollovers: int
    elapsed_seconds: float


def choose_worker_count(config: GeneratorConfig, rng: random.Random) -> int:
    """Return the fixed worker count, or sample one from the configured range."""
    if config.workers is not None:
        return config.workers
    return rng.randint(config.min_workers, config.max_workers)


def plan_quotas(total_rows: int, workers: int, *, distribute_remainder: bool = False) -> list[int]:
    """
    Partition the requested total into per-worker quotas.

    By default every worker gets ``total_rows // workers`` and the remainder
    is dropped, so at most ``workers - 1`` rows go missing. With
    ``distribute_remainder`` the first ``total_rows % workers`` workers get
    one extra row each and the total is exact.
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    base, remainder = divmod(total_rows, workers)
    if not distribute_remainder:
        return [base] * workers
    return [base + (1 if i < remainder else 0) for i in range(workers)]


def run_workers(
    config: GeneratorConfig,
    sink: RecordSink,
    *,
    clock: Callable[[], datetime] = datetime.now,
) -> tuple[list[GenerationWorker], int]:
    """
    Run all workers against an open sink and wait for them to finish.

    Worker exceptions (including sink I/O errors) are re-raised here.

    Returns:
        The finished workers and the total number of rows they emitted.
    """
    driver_rng = random.Random(config.seed)
    worker_count = choose_worker_count(config, driver_rng)
    quotas = plan_quotas(
        config.total_rows,
        worker_count,
        distribute_remainder=config.distribute_remainder,
    )

    workers = [
        GenerationWorker(
            worker_id=i,
            quota=quota,
            sink=sink,
            limits=config.limits,
            seed=None if config.seed is None else driver_rng.getrandbits(64),
            clock=clock,
        )
        for i, quota in enumerate(quotas)
    ]

    logger.info(
        "Starting %d workers: rows_requested=%d, rows_per_worker=%d",
        worker_count,
        config.total_rows,
        quotas[0],
    )

    with ThreadPoolExecutor(
        max_workers=worker_count, thread_name_prefix="sqllog_worker"
    ) as executor:
        futures = [executor.submit(worker.run) for worker in workers]
        rows_emitted = sum(future.result() for future in futures)

    return workers, rows_emitted


def generate_sql_logs(
    config: GeneratorConfig,
    *,
    clock: Callable[[], datetime] = datetime.now,
) -> GenerationSummary:
    """
    Generate a complete audit log file.

    Args:
        config: Run configuration.
        clock: Wall-clock source, injectable for tests.

    Returns:
        GenerationSummary for the finished run.

    Raises:
        OSError: If the output file cannot be created or written. The output
            handle is released before the error propagates.
    """
    start_time = time.perf_counter()
    sink = create_record_sink(
        config.output_format, config.output_path, buffer_size=config.buffer_size
    )

    try:
        workers, rows_emitted = run_workers(config, sink, clock=clock)
        stats = sink.close()
    except BaseException:
        sink.close_on_error()
        raise

    elapsed = time.perf_counter() - start_time
    summary = GenerationSummary(
        output_path=str(sink.path),
        output_format=OutputFormat(config.output_format).value,
        workers=len(workers),
        rows_per_worker=workers[0].quota,
        rows_requested=config.total_rows,
        rows_written=stats["total_rows"],
        rollovers=sum(w.session.rollovers for w in workers),
        elapsed_seconds=elapsed,
    )

    logger.info(
        "Generation complete: %d/%d rows from %d workers in %.2fs (%d rollovers)",
        summary.rows_written,
        summary.rows_requested,
        summary.workers,
        summary.elapsed_seconds,
        summary.rollovers,
    )
    if rows_emitted != summary.rows_written:
        logger.warning(
            "Workers emitted %d rows but sink recorded %d",
            rows_emitted,
            summary.rows_written,
        )
    return summary
