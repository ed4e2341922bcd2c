"""
Result envelopes and the store protocol used by the sync engine.

Every public entry point of the engine returns one of these envelopes instead
of raising, so partial success is always reported itemized.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable, Protocol, Sequence, runtime_checkable

Record = dict[str, Any]


@runtime_checkable
class RecordStore(Protocol):
    """Keyed, upsert-capable store (see ``lds_client.ALDS``).

    Writes raise ``lds_client.errors`` exceptions; a ``CardinalityViolation``
    from a multi-row upsert triggers per-record escalation.
    """

    async def select_column(self, table: str, column: str) -> list[Any]: ...

    async def insert(self, table: str, rows: Sequence[Record]) -> int: ...

    async def upsert(
        self,
        table: str,
        rows: Sequence[Record],
        conflict_columns: Sequence[str],
        *,
        ignore_duplicates: bool = True,
    ) -> int: ...

    async def probe(self, table: str) -> None: ...


@dataclass
class BatchOperationResult:
    """Outcome of one batch-writer call, escalated sub-batches folded in.

    Invariant once complete: ``successful + failed == total_processed``.
    ``conflicts_resolved`` is a subset of ``successful``.
    """

    total_processed: int = 0
    successful: int = 0
    failed: int = 0
    conflicts_resolved: int = 0
    errors: list[str] = field(default_factory=list)
    retries: int = 0
    cancelled: bool = False
    failed_records: list[Record] = field(default_factory=list, repr=False)

    def absorb(self, other: "BatchOperationResult") -> None:
        self.total_processed += other.total_processed
        self.successful += other.successful
        self.failed += other.failed
        self.conflicts_resolved += other.conflicts_resolved
        self.errors.extend(other.errors)
        self.retries += other.retries
        self.failed_records.extend(other.failed_records)


@dataclass
class SyncResult:
    """Outcome of one ``sync_endpoint_data`` call.

    Attributes:
        success: True only when no record ended up failed
        processed: records written (fresh inserts + resolved conflicts)
        duplicates_filtered: records skipped by the filter + conflicts resolved
        errors: one message per unrecovered failure
        processing_time: wall time in milliseconds
        retry_count: failed sub-batch attempts that were retried
        degraded: existing-key prefetch failed, batch went through unfiltered
        cancelled: stopped at a sub-batch boundary by the caller
    """

    success: bool = False
    processed: int = 0
    duplicates_filtered: int = 0
    errors: list[str] = field(default_factory=list)
    processing_time: float = 0.0
    retry_count: int = 0
    degraded: bool = False
    cancelled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ProcessingStats:
    """Cumulative, process-wide counters; reset only on request."""

    total_processed: int = 0
    total_duplicates: int = 0
    total_errors: int = 0
    avg_processing_time: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HealthStatus:
    cache_status: str
    db_connection: bool
    avg_response_time: float  # ms, -1 when the probe failed
    error_rate: float  # percent, two decimals

    def to_dict(self) -> dict[str, Any]:
        return {
            "cacheStatus": self.cache_status,
            "dbConnection": self.db_connection,
            "avgResponseTime": self.avg_response_time,
            "errorRate": self.error_rate,
        }


@dataclass(frozen=True)
class BatchProgress:
    """Cumulative counts after a sub-batch (writer level)."""

    processed: int
    total: int
    conflicts: int


@dataclass(frozen=True)
class SyncProgress:
    """Cumulative counts after a sub-batch (engine level)."""

    processed: int
    total: int
    duplicates: int


BatchProgressCallback = Callable[[BatchProgress], None]
SyncProgressCallback = Callable[[SyncProgress], None]
Sleep = Callable[[float], Awaitable[None]]
