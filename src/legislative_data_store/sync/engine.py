"""
Resilient sync engine: duplicate filter -> batch writer -> stats.

One ``SyncEngine`` owns its duplicate cache and cumulative statistics; build
it once at startup and pass it to whatever schedules syncs. Endpoint runs
may be awaited concurrently on one event loop, but each run processes its
sub-batches strictly in order.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from loguru import logger
from pydantic import ValidationError

from ..metrics.registry import SYNC_DURATION_SECONDS, SYNC_RECORDS_TOTAL
from .dedup import DuplicateFilter
from .endpoints import coerce_record, get_endpoint
from .monitor import DEFAULT_PROBE_TABLE, StatsMonitor
from .policy import RetryPolicy
from .types import (
    BatchProgress,
    HealthStatus,
    ProcessingStats,
    Record,
    RecordStore,
    Sleep,
    SyncProgress,
    SyncProgressCallback,
    SyncResult,
)
from .writer import BatchWriter


@dataclass
class SyncOptions:
    """Per-call options. ``None`` falls back to the engine's writer settings."""

    batch_size: Optional[int] = None
    max_retries: Optional[int] = None
    enable_duplicate_filtering: bool = True
    update_on_conflict: bool = False
    validate_records: bool = False
    on_progress: Optional[SyncProgressCallback] = None
    cancel_event: Optional[asyncio.Event] = None

    def __post_init__(self):
        if self.batch_size is not None and self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.max_retries is not None and self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")


class SyncEngine:
    def __init__(
        self,
        store: RecordStore,
        *,
        writer: Optional[BatchWriter] = None,
        probe_table: str = DEFAULT_PROBE_TABLE,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.store = store
        self.dedup = DuplicateFilter(store)
        self.writer = writer or BatchWriter(store, sleep=sleep)
        self.monitor = StatsMonitor(store, self.dedup, probe_table=probe_table, clock=clock)
        self._clock = clock

    @classmethod
    def from_settings(cls, settings=None, store: Optional[RecordStore] = None) -> "SyncEngine":
        """Engine over an ``ALDS`` pool configured from environment settings."""
        from datastore.config import get_settings
        from lds_client.aclient import ALDS

        s = settings or get_settings()
        if store is None:
            cfg = {"dsn": s.database_url, "app_name": s.APP_NAME, "pool_max": s.POOL_MAX}
            if s.STATEMENT_TIMEOUT_MS:
                cfg["statement_timeout_ms"] = s.STATEMENT_TIMEOUT_MS
            store = ALDS(cfg)
        writer = BatchWriter(
            store,
            batch_size=s.SYNC_BATCH_SIZE,
            retry_policy=RetryPolicy(
                max_attempts=s.SYNC_MAX_RETRIES, base_delay_ms=s.SYNC_RETRY_DELAY_MS
            ),
        )
        return cls(store, writer=writer, probe_table=s.HEALTH_PROBE_TABLE)

    # ---------- sync ----------

    async def sync_endpoint_data(
        self,
        endpoint: str,
        records: Sequence[Record],
        options: Optional[SyncOptions] = None,
    ) -> SyncResult:
        """Filter, write and account for one endpoint batch. Never raises."""
        options = options or SyncOptions()
        t0 = self._clock()
        result = SyncResult()
        spec = get_endpoint(endpoint)

        try:
            batch = list(records)
            logger.info(f"Starting sync for {endpoint}: {len(batch)} records")
            invalid = 0
            if options.validate_records:
                batch, invalid = self._validate(endpoint, batch, result)

            if options.enable_duplicate_filtering:
                filtered = await self.dedup.filter_records(endpoint, batch)
                batch = filtered.records
                result.duplicates_filtered = filtered.dropped
                result.degraded = filtered.degraded
                SYNC_RECORDS_TOTAL.labels(endpoint=endpoint, outcome="duplicate").inc(
                    filtered.dropped
                )
                logger.info(f"Filtered {filtered.dropped} duplicates for {endpoint}")

            if not batch:
                logger.info(f"No new data to sync for {endpoint}")
                result.success = invalid == 0
            else:
                try:
                    db = await self.writer.insert(
                        spec.table,
                        batch,
                        conflict_columns=spec.conflict_columns,
                        update_on_conflict=options.update_on_conflict,
                        batch_size=options.batch_size,
                        retry_policy=self._retry_policy(options),
                        on_progress=self._progress_adapter(options.on_progress, result),
                        cancel_event=options.cancel_event,
                    )
                except BaseException:
                    # outcome unknown; the next prefetch re-seeds keys that did land
                    self.dedup.discard(endpoint, batch)
                    raise
                result.processed = db.successful
                result.duplicates_filtered += db.conflicts_resolved
                result.errors.extend(db.errors)
                result.retry_count = db.retries
                result.cancelled = db.cancelled
                result.success = db.failed == 0 and invalid == 0
                if db.failed_records:
                    self.dedup.discard(endpoint, db.failed_records)

                SYNC_RECORDS_TOTAL.labels(endpoint=endpoint, outcome="written").inc(
                    db.successful - db.conflicts_resolved
                )
                SYNC_RECORDS_TOTAL.labels(endpoint=endpoint, outcome="conflict").inc(
                    db.conflicts_resolved
                )
                SYNC_RECORDS_TOTAL.labels(endpoint=endpoint, outcome="failed").inc(db.failed)

            result.processing_time = (self._clock() - t0) * 1000.0
            self.monitor.update_processing_stats(result)
            logger.info(
                f"Sync completed for {endpoint}: {result.processed} processed, "
                f"{result.duplicates_filtered} duplicates, {len(result.errors)} errors"
            )
        except Exception as e:
            logger.exception(f"Sync failed for {endpoint}")
            result.errors.append(str(e) or e.__class__.__name__)
            result.success = False
        finally:
            result.processing_time = (self._clock() - t0) * 1000.0
            SYNC_DURATION_SECONDS.labels(endpoint=endpoint).observe(result.processing_time / 1000)

        return result

    def _retry_policy(self, options: SyncOptions) -> RetryPolicy:
        base = self.writer.retry_policy
        if options.max_retries is None:
            return base
        return RetryPolicy(max_attempts=options.max_retries, base_delay_ms=base.base_delay_ms)

    @staticmethod
    def _progress_adapter(
        callback: Optional[SyncProgressCallback], result: SyncResult
    ) -> Optional[Callable[[BatchProgress], None]]:
        if callback is None:
            return None

        def _forward(p: BatchProgress) -> None:
            callback(
                SyncProgress(
                    processed=p.processed,
                    total=p.total,
                    duplicates=result.duplicates_filtered + p.conflicts,
                )
            )

        return _forward

    @staticmethod
    def _validate(
        endpoint: str, batch: list[Record], result: SyncResult
    ) -> tuple[list[Record], int]:
        valid: list[Record] = []
        invalid = 0
        for i, raw in enumerate(batch):
            try:
                valid.append(coerce_record(endpoint, raw))
            except ValidationError as e:
                invalid += 1
                result.errors.append(f"Invalid {endpoint} record #{i}: {e.error_count()} errors")
        if invalid:
            logger.warning(f"Dropped {invalid} invalid {endpoint} records")
            SYNC_RECORDS_TOTAL.labels(endpoint=endpoint, outcome="failed").inc(invalid)
        return valid, invalid

    # ---------- stats / health ----------

    async def perform_health_check(self) -> HealthStatus:
        return await self.monitor.perform_health_check()

    def get_processing_stats(self) -> ProcessingStats:
        return self.monitor.get_processing_stats()

    def reset_stats(self) -> None:
        self.monitor.reset_stats()

    def clear_cache(self, endpoint: Optional[str] = None) -> None:
        self.dedup.clear(endpoint)
