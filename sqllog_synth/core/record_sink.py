"""
Shared, buffered record sinks for generated audit rows.

This module provides RecordSink, an abstract base class that handles:
- Lock-guarded in-memory buffering shared by every worker thread
- Background thread disk writes (decouples I/O from row generation)
- Arrow table conversion with PyArrow

Concrete sinks:
- TsvRecordSink: tab-separated text with a header row
- ParquetRecordSink: Parquet file with the same columns

Subclasses must implement:
- _build_schema(): Define the PyArrow schema for the output
- _transform_record(): Convert a SyntheticSqlRecord to a schema-compatible dict
- _open_writer() / _close_writer(): Manage the underlying file writer
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any

import pyarrow as pa
import pyarrow.csv as pacsv
import pyarrow.parquet as pq

from sqllog_synth.models.generator_config import OutputFormat
from sqllog_synth.models.sql_record import (
    COLUMNS,
    EXEC_TIME_FORMAT,
    SyntheticSqlRecord,
)

logger = logging.getLogger(__name__)

SEQUENCE_COLUMNS = ("stmt_id", "exec_id")


class RecordSink(ABC):
    """
    Append-only target shared by all generation workers.

    append() is the only synchronization point between workers: records are
    transformed outside the lock, and the lock only guards the buffer. Full
    buffers are handed to a single background writer thread, so rows reach
    disk in flush order.
    """

    DEFAULT_BUFFER_SIZE = 50_000

    def __init__(self, path: str | Path, *, buffer_size: int | None = None) -> None:
        """
        Open the output file.

        Args:
            path: Output file path (created or truncated).
            buffer_size: Rows to buffer before flushing to disk.

        Raises:
            OSError: If the output file cannot be created.
        """
        self.path = Path(path)
        self._buffer_size = buffer_size or self.DEFAULT_BUFFER_SIZE

        self._buffer: list[dict[str, Any]] = []
        self._buffer_lock = threading.Lock()
        self._total_rows = 0
        self._flushes = 0
        self._closed = False

        self._schema = self._build_schema()

        # Single background writer keeps flushes strictly ordered
        self._write_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"{self.__class__.__name__}_writer"
        )
        self._pending_write: Future | None = None
        self._write_lock = threading.Lock()

        try:
            self._open_writer()
        except BaseException:
            self._write_executor.shutdown(wait=False)
            raise
        self._writer_open = True

        logger.info(
            "%s opened: path=%s, buffer_size=%d",
            self.__class__.__name__,
            self.path,
            self._buffer_size,
        )

    # -------------------------------------------------------------------------
    # Abstract methods - subclasses MUST implement
    # -------------------------------------------------------------------------

    @abstractmethod
    def _build_schema(self) -> pa.Schema:
        """Build PyArrow schema for the output columns."""
        ...

    @abstractmethod
    def _transform_record(self, record: SyntheticSqlRecord) -> dict[str, Any]:
        """Transform a record to a schema-compatible dict."""
        ...

    @abstractmethod
    def _open_writer(self) -> None:
        """Create the output file and its writer."""
        ...

    @abstractmethod
    def _write_table(self, table: pa.Table) -> None:
        """Write one table to the open writer (background thread, under lock)."""
        ...

    @abstractmethod
    def _close_writer(self) -> None:
        """Finish the output file and release its handle."""
        ...

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    @property
    def stats(self) -> dict[str, Any]:
        """Return current sink statistics."""
        with self._buffer_lock:
            return {
                "total_rows": self._total_rows,
                "buffered_rows": len(self._buffer),
                "flushes": self._flushes,
            }

    def append(self, record: SyntheticSqlRecord) -> None:
        """
        Add a record to the shared buffer.

        Safe to call from any number of threads. Disk writes only occur on
        the background thread when the buffer reaches its threshold.

        Raises:
            RuntimeError: If the sink has been closed.
            OSError: If an earlier background write failed.
        """
        row = self._transform_record(record)

        with self._buffer_lock:
            if self._closed:
                raise RuntimeError(f"{self.__class__.__name__} is closed")
            self._buffer.append(row)
            self._total_rows += 1
            full = len(self._buffer) >= self._buffer_size

        if full:
            self._flush_buffer()

    def wait_for_pending_writes(self) -> None:
        """Wait for the most recent background write to complete."""
        with self._buffer_lock:
            pending, self._pending_write = self._pending_write, None
        if pending is not None:
            pending.result()

    def close(self) -> dict[str, Any]:
        """
        Flush remaining rows, wait for the writer thread and close the file.

        Returns:
            Final sink statistics.
        """
        try:
            self._flush_buffer()
            self.wait_for_pending_writes()
        finally:
            with self._buffer_lock:
                self._closed = True
            self._write_executor.shutdown(wait=True)
            with self._write_lock:
                self._release_writer()

        stats = self.stats
        logger.info(
            "%s closed: path=%s, rows=%d, flushes=%d",
            self.__class__.__name__,
            self.path,
            stats["total_rows"],
            stats["flushes"],
        )
        return stats

    def close_on_error(self) -> None:
        """
        Release the output handle without flushing buffered rows.

        Call this in exception handlers where close() won't be called.
        """
        with self._buffer_lock:
            self._closed = True
            self._buffer = []
        self._write_executor.shutdown(wait=True, cancel_futures=True)
        with self._write_lock:
            try:
                self._release_writer()
            except (OSError, pa.ArrowException) as e:
                logger.warning("Failed to close %s: %s", self.path, e)

    # -------------------------------------------------------------------------
    # Internal methods
    # -------------------------------------------------------------------------

    def _flush_buffer(self) -> None:
        """Hand the current buffer to the background writer."""
        with self._buffer_lock:
            if not self._buffer:
                return
            rows, self._buffer = self._buffer, []
            previous = self._pending_write
            self._pending_write = self._write_executor.submit(self._write_rows, rows)
            self._flushes += 1

        # Backpressure: at most one outstanding write per flushing thread.
        # result() also re-raises I/O errors from the writer thread.
        if previous is not None:
            previous.result()

    def _release_writer(self) -> None:
        """Close the writer once; later calls are no-ops. Caller holds _write_lock."""
        if not self._writer_open:
            return
        self._writer_open = False
        self._close_writer()

    def _write_rows(self, rows: list[dict[str, Any]]) -> None:
        """Convert rows to an Arrow table and write it (runs in background thread)."""
        start_time = time.perf_counter()

        table = pa.Table.from_pylist(rows, schema=self._schema)
        with self._write_lock:
            self._write_table(table)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Background flush: %d rows to %s in %.2fms",
            len(rows),
            self.path.name,
            elapsed_ms,
        )


class TsvRecordSink(RecordSink):
    """
    Tab-separated output with a header row.

    Values are written unquoted; the generated text never contains tabs or
    newlines.
    """

    FILE_BUFFER_BYTES = 1024 * 1024

    def _build_schema(self) -> pa.Schema:
        return pa.schema(
            [
                (name, pa.int64() if name in SEQUENCE_COLUMNS else pa.string())
                for name in COLUMNS
            ]
        )

    def _transform_record(self, record: SyntheticSqlRecord) -> dict[str, Any]:
        row = {name: getattr(record, name) for name in COLUMNS}
        row["exec_time"] = record.exec_time.strftime(EXEC_TIME_FORMAT)
        return row

    def _open_writer(self) -> None:
        self._file = open(self.path, "wb", buffering=self.FILE_BUFFER_BYTES)
        self._file.write(("\t".join(COLUMNS) + "\n").encode("utf-8"))
        self._writer = pacsv.CSVWriter(
            self._file,
            self._schema,
            write_options=pacsv.WriteOptions(
                include_header=False,
                delimiter="\t",
                quoting_style="none",
            ),
        )

    def _write_table(self, table: pa.Table) -> None:
        self._writer.write_table(table)

    def _close_writer(self) -> None:
        try:
            self._writer.close()
        finally:
            self._file.close()


class ParquetRecordSink(RecordSink):
    """
    Parquet output.

    exec_time is stored as a millisecond timestamp; Parquet has no seconds unit.
    """

    def _build_schema(self) -> pa.Schema:
        fields = []
        for name in COLUMNS:
            if name in SEQUENCE_COLUMNS:
                fields.append((name, pa.int64()))
            elif name == "exec_time":
                fields.append((name, pa.timestamp("ms")))
            else:
                fields.append((name, pa.string()))
        return pa.schema(fields)

    def _transform_record(self, record: SyntheticSqlRecord) -> dict[str, Any]:
        return {name: getattr(record, name) for name in COLUMNS}

    def _open_writer(self) -> None:
        self._writer = pq.ParquetWriter(self.path, self._schema, compression="snappy")

    def _write_table(self, table: pa.Table) -> None:
        self._writer.write_table(table)

    def _close_writer(self) -> None:
        self._writer.close()


def create_record_sink(
    output_format: OutputFormat | str,
    path: str | Path,
    *,
    buffer_size: int | None = None,
) -> RecordSink:
    """
    Factory function to create the sink for an output format.

    Raises:
        ValueError: For an unknown output format.
        OSError: If the output file cannot be created.
    """
    output_format = OutputFormat(output_format)
    if output_format == OutputFormat.TSV:
        return TsvRecordSink(path, buffer_size=buffer_size)
    elif output_format == OutputFormat.PARQUET:
        return ParquetRecordSink(path, buffer_size=buffer_size)
    else:
        raise ValueError(f"Unknown output format: {output_format}")
