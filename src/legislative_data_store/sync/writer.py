"""
Batch writer with retry and conflict escalation.

Records are written in fixed-size sub-batches, strictly one after another,
with a fixed pause between sub-batches. Each sub-batch write is retried with
exponential backoff; a cardinality violation (two rows of one upsert hitting
the same target row) abandons batch semantics and writes the sub-batch one
record at a time. No sub-batch failure escapes: everything is folded into a
``BatchOperationResult``.
"""

from __future__ import annotations

import asyncio
import math
from typing import Optional, Sequence

from loguru import logger

from lds_client.errors import CardinalityViolation, ConflictViolation, classify
from lds_client.utils import chunked

from ..metrics.registry import BATCH_RETRIES_TOTAL, CONFLICT_ESCALATIONS_TOTAL
from .policy import INTER_BATCH_DELAY_MS, RetryPolicy, clamp_batch_size
from .types import (
    BatchOperationResult,
    BatchProgress,
    BatchProgressCallback,
    Record,
    RecordStore,
    Sleep,
)

DEFAULT_BATCH_SIZE = 25


class BatchWriter:
    def __init__(
        self,
        store: RecordStore,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._store = store
        self.batch_size = batch_size
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    # ---------- tuning ----------

    def set_batch_size(self, size: int) -> None:
        self.batch_size = clamp_batch_size(size)
        logger.info(f"Batch size set to {self.batch_size}")

    def set_retry_settings(self, attempts: int, delay_ms: int) -> None:
        self.retry_policy = RetryPolicy.clamped(attempts, delay_ms)
        logger.info(
            f"Retry settings: {self.retry_policy.max_attempts} attempts, "
            f"{self.retry_policy.base_delay_ms}ms delay"
        )

    # ---------- public API ----------

    async def insert(
        self,
        table: str,
        records: Sequence[Record],
        *,
        conflict_columns: Sequence[str] = (),
        update_on_conflict: bool = False,
        batch_size: Optional[int] = None,
        retry_policy: Optional[RetryPolicy] = None,
        on_progress: Optional[BatchProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BatchOperationResult:
        """Write ``records`` in sub-batches; always returns an aggregate result."""
        size = self.batch_size if batch_size is None else batch_size
        if size < 1:
            raise ValueError("batch_size must be >= 1")
        policy = retry_policy or self.retry_policy
        total = len(records)
        total_batches = math.ceil(total / size)
        result = BatchOperationResult()

        logger.info(f"Starting batch insert for {table}: {total} records")

        for n, batch in enumerate(chunked(records, size), start=1):
            if cancel_event is not None and cancel_event.is_set():
                remaining = list(records[result.total_processed :])
                result.total_processed += len(remaining)
                result.failed += len(remaining)
                result.failed_records.extend(remaining)
                result.errors.append(
                    f"Cancelled before batch {n}/{total_batches}: "
                    f"{len(remaining)} records not attempted"
                )
                result.cancelled = True
                logger.warning(f"Batch insert for {table} cancelled at batch {n}/{total_batches}")
                break

            logger.info(f"Processing batch {n}/{total_batches} ({len(batch)} items)")
            try:
                batch_result = await self._write_with_retry(
                    table, batch, conflict_columns, update_on_conflict, policy
                )
            except Exception as e:
                logger.exception(f"Batch {n} failed unexpectedly")
                batch_result = BatchOperationResult(
                    total_processed=len(batch),
                    failed=len(batch),
                    errors=[f"Batch {n}: {e}"],
                    failed_records=list(batch),
                )
            result.absorb(batch_result)

            if on_progress is not None:
                try:
                    on_progress(
                        BatchProgress(
                            processed=result.total_processed,
                            total=total,
                            conflicts=result.conflicts_resolved,
                        )
                    )
                except Exception:
                    logger.exception("Progress callback failed")

            stopping = cancel_event is not None and cancel_event.is_set()
            if result.total_processed < total and not stopping:
                await self._sleep(INTER_BATCH_DELAY_MS / 1000)

        logger.info(
            f"Batch operation complete: {result.successful} successful, "
            f"{result.failed} failed, {result.conflicts_resolved} conflicts resolved"
        )
        return result

    async def insert_individually(
        self,
        table: str,
        records: Sequence[Record],
        *,
        conflict_columns: Sequence[str] = (),
        update_on_conflict: bool = False,
    ) -> BatchOperationResult:
        """Write each record on its own; every record is attempted."""
        logger.info(f"Processing {len(records)} items individually to resolve conflicts")
        result = BatchOperationResult(total_processed=len(records))

        for record in records:
            try:
                await self._write(table, [record], conflict_columns, update_on_conflict)
            except ConflictViolation:
                # a row for this entity already exists
                result.conflicts_resolved += 1
                result.successful += 1
            except Exception as e:
                logger.warning(f"Individual insert into {table} failed: {e}")
                result.failed += 1
                result.errors.append(f"Individual insert failed: {e}")
                result.failed_records.append(record)
            else:
                result.successful += 1

        logger.info(
            f"Individual processing complete: {result.successful} successful, "
            f"{result.failed} failed, {result.conflicts_resolved} conflicts"
        )
        return result

    # ---------- internals ----------

    async def _write(
        self,
        table: str,
        rows: Sequence[Record],
        conflict_columns: Sequence[str],
        update_on_conflict: bool,
    ) -> None:
        if conflict_columns:
            await self._store.upsert(
                table, rows, list(conflict_columns), ignore_duplicates=not update_on_conflict
            )
        else:
            await self._store.insert(table, rows)

    async def _write_with_retry(
        self,
        table: str,
        batch: Sequence[Record],
        conflict_columns: Sequence[str],
        update_on_conflict: bool,
        policy: RetryPolicy,
    ) -> BatchOperationResult:
        result = BatchOperationResult(total_processed=len(batch))
        last_error: Optional[Exception] = None

        for attempt in range(1, policy.max_attempts + 1):
            if attempt > 1:
                delay_ms = policy.next_backoff_ms(attempt - 1)
                logger.info(f"Waiting {delay_ms}ms before retry...")
                await self._sleep(delay_ms / 1000)

            try:
                await self._write(table, batch, conflict_columns, update_on_conflict)
            except CardinalityViolation:
                logger.warning(
                    f"Conflict detected on {table} batch of {len(batch)}, "
                    f"attempting individual inserts..."
                )
                CONFLICT_ESCALATIONS_TOTAL.labels(table=table).inc()
                escalated = await self.insert_individually(
                    table,
                    batch,
                    conflict_columns=conflict_columns,
                    update_on_conflict=update_on_conflict,
                )
                escalated.retries = result.retries
                return escalated
            except Exception as e:
                last_error = e
                outcome = classify(e).value
                logger.warning(f"Attempt {attempt}/{policy.max_attempts} failed ({outcome}): {e}")
                if attempt < policy.max_attempts:
                    result.retries += 1
                    BATCH_RETRIES_TOTAL.labels(table=table, outcome=outcome).inc()
                continue

            result.successful = len(batch)
            return result

        logger.error(f"All {policy.max_attempts} attempts failed for {table} batch of {len(batch)}")
        result.failed = len(batch)
        result.failed_records = list(batch)
        result.errors.append(f"All {policy.max_attempts} attempts failed: {last_error}")
        return result
