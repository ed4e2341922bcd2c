"""
Unit tests for BatchWriter: sub-batching, retry/backoff and conflict escalation.
"""

import asyncio

import pytest

from lds_client.errors import (
    CardinalityViolation,
    ConflictViolation,
    LDSOperationalError,
    RetryableError,
)
from legislative_data_store.sync import BatchWriter, RetryPolicy

KEY = ("member_id",)


@pytest.mark.asyncio
async def test_sub_batches_in_order_with_fixed_pause(store, sleeper, member_records):
    """60 records at size 25 -> 25/25/10, pause only between sub-batches."""
    writer = BatchWriter(store, sleep=sleeper)
    progress = []

    result = await writer.insert(
        "member_data", member_records(60), conflict_columns=KEY, on_progress=progress.append
    )

    assert [c[2] for c in store.write_calls()] == [25, 25, 10]
    assert sleeper.delays == [0.5, 0.5]
    assert [(p.processed, p.total) for p in progress] == [(25, 60), (50, 60), (60, 60)]
    assert result.successful == 60
    assert result.failed == 0
    assert [r["member_id"] for r in store.rows("member_data")] == [
        f"M{i:03d}" for i in range(60)
    ]


@pytest.mark.asyncio
async def test_single_batch_has_no_pause(store, sleeper, member_records):
    writer = BatchWriter(store, sleep=sleeper)
    await writer.insert("member_data", member_records(10), conflict_columns=KEY)
    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_empty_input(store, sleeper):
    writer = BatchWriter(store, sleep=sleeper)
    result = await writer.insert("member_data", [], conflict_columns=KEY)
    assert result.total_processed == 0
    assert store.write_calls() == []


@pytest.mark.asyncio
async def test_retry_backoff_then_success(store, sleeper, member_records):
    """Two transient failures: delays 1s then 2s, then the batch lands."""
    store.write_errors = [RetryableError("timeout"), RetryableError("timeout")]
    writer = BatchWriter(store, sleep=sleeper)

    result = await writer.insert("member_data", member_records(5), conflict_columns=KEY)

    assert sleeper.delays == [1.0, 2.0]
    assert result.successful == 5
    assert result.retries == 2
    assert result.errors == []


@pytest.mark.asyncio
async def test_retries_exhausted_fail_whole_sub_batch(store, sleeper, member_records):
    store.write_errors = [LDSOperationalError("boom")] * 3
    writer = BatchWriter(store, sleep=sleeper)
    batch = member_records(5)

    result = await writer.insert("member_data", batch, conflict_columns=KEY)

    assert result.failed == 5
    assert result.successful == 0
    assert result.retries == 2
    assert result.errors == ["All 3 attempts failed: boom"]
    assert result.failed_records == batch
    assert len(store.write_calls()) == 3


@pytest.mark.asyncio
async def test_failed_sub_batch_does_not_stop_the_rest(store, sleeper, member_records):
    store.write_errors = [RetryableError("x")]
    writer = BatchWriter(store, sleep=sleeper)

    result = await writer.insert(
        "member_data",
        member_records(4),
        conflict_columns=KEY,
        batch_size=2,
        retry_policy=RetryPolicy(max_attempts=1),
    )

    assert result.total_processed == 4
    assert result.failed == 2
    assert result.successful == 2
    assert result.successful + result.failed == result.total_processed


@pytest.mark.asyncio
async def test_cardinality_violation_escalates_per_record(store, sleeper, member_records):
    """Batch conflict -> individual writes; existing rows count as resolved."""
    batch = member_records(5)
    store.write_errors = [CardinalityViolation("cannot affect row a second time")]
    store.record_errors = {
        "M001": ConflictViolation("dup"),
        "M003": ConflictViolation("dup"),
    }
    writer = BatchWriter(store, sleep=sleeper)

    result = await writer.insert("member_data", batch, conflict_columns=KEY)

    assert result.total_processed == 5
    assert result.successful == 5
    assert result.conflicts_resolved == 2
    assert result.failed == 0
    assert [c[2] for c in store.write_calls()] == [5, 1, 1, 1, 1, 1]
    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_escalation_keeps_real_failures(store, sleeper, member_records):
    store.write_errors = [CardinalityViolation("c")]
    store.record_errors = {"M002": LDSOperationalError("bad value")}
    writer = BatchWriter(store, sleep=sleeper)

    result = await writer.insert("member_data", member_records(3), conflict_columns=KEY)

    assert result.successful == 2
    assert result.failed == 1
    assert result.errors == ["Individual insert failed: bad value"]
    assert [r["member_id"] for r in result.failed_records] == ["M002"]


@pytest.mark.asyncio
async def test_cancel_stops_at_sub_batch_boundary(store, sleeper, member_records):
    cancel = asyncio.Event()
    writer = BatchWriter(store, sleep=sleeper)

    def on_progress(p):
        cancel.set()

    result = await writer.insert(
        "member_data",
        member_records(60),
        conflict_columns=KEY,
        on_progress=on_progress,
        cancel_event=cancel,
    )

    assert result.cancelled is True
    assert result.successful == 25
    assert result.failed == 35
    assert result.total_processed == 60
    assert len(store.write_calls()) == 1
    assert "Cancelled before batch 2/3" in result.errors[0]
    # cancellation is noticed before the inter-batch pause
    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_progress_callback_errors_are_swallowed(store, sleeper, member_records):
    writer = BatchWriter(store, sleep=sleeper)

    def bad(_):
        raise RuntimeError("ui gone")

    result = await writer.insert(
        "member_data", member_records(30), conflict_columns=KEY, on_progress=bad
    )
    assert result.successful == 30


@pytest.mark.asyncio
async def test_conflict_mode_is_forwarded(store, sleeper):
    store.tables["member_data"] = [{"member_id": "M1", "party": "S"}]
    writer = BatchWriter(store, sleep=sleeper)

    await writer.insert("member_data", [{"member_id": "M1", "party": "M"}], conflict_columns=KEY)
    assert store.rows("member_data")[0]["party"] == "S"

    await writer.insert(
        "member_data",
        [{"member_id": "M1", "party": "M"}],
        conflict_columns=KEY,
        update_on_conflict=True,
    )
    assert store.rows("member_data")[0]["party"] == "M"


@pytest.mark.asyncio
async def test_no_conflict_columns_uses_plain_insert(store, sleeper):
    writer = BatchWriter(store, sleep=sleeper)
    await writer.insert("committee_data", [{"x": 1}])
    assert store.write_calls() == [("insert", "committee_data", 1)]


def test_tuning_is_clamped(store):
    writer = BatchWriter(store)
    writer.set_batch_size(1000)
    assert writer.batch_size == 100
    writer.set_batch_size(0)
    assert writer.batch_size == 1
    writer.set_retry_settings(20, 50)
    assert writer.retry_policy == RetryPolicy(max_attempts=10, base_delay_ms=100)


def test_rejects_invalid_batch_size(store):
    with pytest.raises(ValueError):
        BatchWriter(store, batch_size=0)


@pytest.mark.asyncio
async def test_explicit_zero_batch_size_rejected(store, sleeper, member_records):
    writer = BatchWriter(store, sleep=sleeper)
    with pytest.raises(ValueError):
        await writer.insert("member_data", member_records(3), conflict_columns=KEY, batch_size=0)
    assert store.write_calls() == []
