"""
Sync engine metrics, registered in the Prometheus global REGISTRY on import.
"""

from prometheus_client import Counter, Gauge, Histogram

SYNC_RECORDS_TOTAL = Counter(
    "lds_sync_records_total",
    "Records seen by the sync engine, by outcome",
    ["endpoint", "outcome"],  # written | duplicate | conflict | failed
)

SYNC_DURATION_SECONDS = Histogram(
    "lds_sync_duration_seconds",
    "Wall time of one sync_endpoint_data call",
    ["endpoint"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30, 60, 120],
)

BATCH_RETRIES_TOTAL = Counter(
    "lds_batch_retries_total",
    "Sub-batch write attempts that failed and were retried",
    ["table", "outcome"],  # outcome: transient_error | fatal_error | conflict_violation
)

CONFLICT_ESCALATIONS_TOTAL = Counter(
    "lds_conflict_escalations_total",
    "Sub-batches escalated to per-record writes after a cardinality violation",
    ["table"],
)

HEALTH_DB_UP = Gauge(
    "lds_health_db_up",
    "1 if the last health probe reached the store, else 0",
)


class MetricsRegistry:
    """Centralized access to sync engine metrics."""

    sync_records_total = SYNC_RECORDS_TOTAL
    sync_duration_seconds = SYNC_DURATION_SECONDS
    batch_retries_total = BATCH_RETRIES_TOTAL
    conflict_escalations_total = CONFLICT_ESCALATIONS_TOTAL
    health_db_up = HEALTH_DB_UP


# Singleton instance
metrics_registry = MetricsRegistry()
