"""Resilient endpoint sync engine.

Duplicate filter -> batch writer (retry + conflict escalation) -> stats:
- DuplicateFilter: per-endpoint key cache seeded from the store, fails open
- BatchWriter: sequential sub-batches, fixed inter-batch pause
- RetryPolicy: bounded exponential backoff
- StatsMonitor: cumulative stats and store health probe
- SyncEngine: the facade callers hold on to
"""

from .types import (
    BatchOperationResult,
    BatchProgress,
    HealthStatus,
    ProcessingStats,
    Record,
    RecordStore,
    SyncProgress,
    SyncResult,
)
from .endpoints import ENDPOINTS, EndpointSpec, coerce_record, get_endpoint
from .policy import INTER_BATCH_DELAY_MS, RetryPolicy
from .dedup import DuplicateFilter, FilterResult
from .writer import DEFAULT_BATCH_SIZE, BatchWriter
from .monitor import StatsMonitor
from .engine import SyncEngine, SyncOptions

__all__ = [
    # types
    "BatchOperationResult",
    "BatchProgress",
    "HealthStatus",
    "ProcessingStats",
    "Record",
    "RecordStore",
    "SyncProgress",
    "SyncResult",
    # registry
    "ENDPOINTS",
    "EndpointSpec",
    "coerce_record",
    "get_endpoint",
    # policies
    "INTER_BATCH_DELAY_MS",
    "RetryPolicy",
    # runtime
    "DEFAULT_BATCH_SIZE",
    "BatchWriter",
    "DuplicateFilter",
    "FilterResult",
    "StatsMonitor",
    "SyncEngine",
    "SyncOptions",
]
