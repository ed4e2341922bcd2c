"""
Unit tests for sync engine Prometheus metrics (delta checks on the global registry).
"""

import pytest
from prometheus_client import REGISTRY

from lds_client.errors import CardinalityViolation, RetryableError


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_record_outcomes_counted(engine, store, member_records):
    store.tables["vote_data"] = [{"vote_id": "V0"}]
    votes = [{"vote_id": f"V{i}"} for i in range(4)]
    before = {
        o: _sample("lds_sync_records_total", endpoint="vote_data", outcome=o)
        for o in ("written", "duplicate")
    }

    await engine.sync_endpoint_data("vote_data", votes)

    assert _sample("lds_sync_records_total", endpoint="vote_data", outcome="written") - before[
        "written"
    ] == 3
    assert _sample(
        "lds_sync_records_total", endpoint="vote_data", outcome="duplicate"
    ) - before["duplicate"] == 1


@pytest.mark.asyncio
async def test_retries_and_escalations_counted(engine, store):
    retries0 = _sample("lds_batch_retries_total", table="speech_data", outcome="transient_error")
    esc0 = _sample("lds_conflict_escalations_total", table="speech_data")
    store.write_errors = [RetryableError("t"), CardinalityViolation("c")]

    result = await engine.sync_endpoint_data(
        "speech_data", [{"speech_id": "S1"}, {"speech_id": "S2"}]
    )

    assert result.success is True
    assert result.retry_count == 1
    assert (
        _sample("lds_batch_retries_total", table="speech_data", outcome="transient_error")
        - retries0
        == 1
    )
    assert _sample("lds_conflict_escalations_total", table="speech_data") - esc0 == 1


@pytest.mark.asyncio
async def test_duration_observed(engine, member_records):
    count0 = _sample("lds_sync_duration_seconds_count", endpoint="party_data")
    await engine.sync_endpoint_data("party_data", [{"party_code": "s"}])
    assert _sample("lds_sync_duration_seconds_count", endpoint="party_data") - count0 == 1


@pytest.mark.asyncio
async def test_retry_outcome_label_follows_error_class(engine, store):
    from lds_client.errors import LDSOperationalError

    fatal0 = _sample("lds_batch_retries_total", table="document_data", outcome="fatal_error")
    store.write_errors = [LDSOperationalError("permission denied")]

    result = await engine.sync_endpoint_data("document_data", [{"document_id": "H901FiU1"}])

    assert result.success is True
    assert (
        _sample("lds_batch_retries_total", table="document_data", outcome="fatal_error") - fatal0
        == 1
    )
