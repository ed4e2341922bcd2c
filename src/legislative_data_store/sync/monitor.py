from __future__ import annotations

import time
from dataclasses import replace
from typing import Callable

from loguru import logger

from ..metrics.registry import HEALTH_DB_UP
from .dedup import DuplicateFilter
from .types import HealthStatus, ProcessingStats, RecordStore, SyncResult

DEFAULT_PROBE_TABLE = "member_data"


class StatsMonitor:
    """Cumulative processing statistics and store connectivity probe.

    Counters only grow between ``reset_stats`` calls. Updates are plain
    synchronous mutations, so runs interleaved on one event loop cannot tear
    them.
    """

    def __init__(
        self,
        store: RecordStore,
        dedup: DuplicateFilter,
        *,
        probe_table: str = DEFAULT_PROBE_TABLE,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._store = store
        self._dedup = dedup
        self._probe_table = probe_table
        self._clock = clock
        self._stats = ProcessingStats()

    def update_processing_stats(self, result: SyncResult) -> None:
        s = self._stats
        s.total_processed += result.processed
        s.total_duplicates += result.duplicates_filtered
        s.total_errors += len(result.errors)

        n = s.total_processed + s.total_errors
        if n > 0:
            s.avg_processing_time = (s.avg_processing_time * (n - 1) + result.processing_time) / n

    def get_processing_stats(self) -> ProcessingStats:
        return replace(self._stats)

    def reset_stats(self) -> None:
        self._stats = ProcessingStats()
        logger.info("Reset processing statistics")

    def error_rate(self) -> float:
        total_ops = self._stats.total_processed + self._stats.total_errors
        if total_ops == 0:
            return 0.0
        return round(self._stats.total_errors / total_ops * 100, 2)

    async def perform_health_check(self) -> HealthStatus:
        try:
            t0 = self._clock()
            await self._store.probe(self._probe_table)
            response_ms = (self._clock() - t0) * 1000.0
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            HEALTH_DB_UP.set(0)
            return HealthStatus(
                cache_status="Error",
                db_connection=False,
                avg_response_time=-1,
                error_rate=100,
            )

        HEALTH_DB_UP.set(1)
        return HealthStatus(
            cache_status=f"{self._dedup.cached_endpoints} endpoints cached",
            db_connection=True,
            avg_response_time=round(response_ms, 2),
            error_rate=self.error_rate(),
        )
