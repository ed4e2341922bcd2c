from .registry import (
    BATCH_RETRIES_TOTAL,
    CONFLICT_ESCALATIONS_TOTAL,
    HEALTH_DB_UP,
    SYNC_DURATION_SECONDS,
    SYNC_RECORDS_TOTAL,
    MetricsRegistry,
    metrics_registry,
)

__all__ = [
    "BATCH_RETRIES_TOTAL",
    "CONFLICT_ESCALATIONS_TOTAL",
    "HEALTH_DB_UP",
    "SYNC_DURATION_SECONDS",
    "SYNC_RECORDS_TOTAL",
    "MetricsRegistry",
    "metrics_registry",
]
