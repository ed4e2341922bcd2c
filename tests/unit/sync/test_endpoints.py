"""
Unit tests for the endpoint registry.
"""

import pytest
from pydantic import ValidationError

from legislative_data_store.sync import ENDPOINTS, coerce_record, get_endpoint


def test_registry_covers_all_domains():
    assert {name: s.unique_field for name, s in ENDPOINTS.items()} == {
        "member_data": "member_id",
        "calendar_data": "event_id",
        "document_data": "document_id",
        "speech_data": "speech_id",
        "vote_data": "vote_id",
        "party_data": "party_code",
    }
    for s in ENDPOINTS.values():
        assert s.table == s.name
        assert s.conflict_columns == (s.unique_field,)
        assert s.schema is not None


def test_unknown_endpoint_has_no_key():
    spec = get_endpoint("committee_data")
    assert spec.table == "committee_data"
    assert spec.unique_field is None
    assert spec.conflict_columns == ()


def test_coerce_record_normalizes():
    out = coerce_record("member_data", {"member_id": " 0123 ", "party": "s", "extra": 1})
    assert out == {"member_id": "0123", "party": "S", "extra": 1}


def test_coerce_record_requires_key():
    with pytest.raises(ValidationError):
        coerce_record("vote_data", {"rm": "2023/24"})


def test_coerce_record_without_schema_copies():
    raw = {"a": 1}
    out = coerce_record("committee_data", raw)
    assert out == raw and out is not raw
