"""
Legislative Data Store

Resilient ingestion of legislative API record batches into PostgreSQL.

Usage:
    from legislative_data_store import SyncEngine, SyncOptions
    from lds_client import ALDS

    async with ALDS({"dsn": "postgresql://..."}) as store:
        engine = SyncEngine(store)
        result = await engine.sync_endpoint_data("member_data", records)
"""

from .sync import (
    BatchOperationResult,
    BatchWriter,
    DuplicateFilter,
    HealthStatus,
    ProcessingStats,
    RetryPolicy,
    SyncEngine,
    SyncOptions,
    SyncProgress,
    SyncResult,
)

__version__ = "0.1.0"
__all__ = [
    "BatchOperationResult",
    "BatchWriter",
    "DuplicateFilter",
    "HealthStatus",
    "ProcessingStats",
    "RetryPolicy",
    "SyncEngine",
    "SyncOptions",
    "SyncProgress",
    "SyncResult",
]
