from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Type

from pydantic import BaseModel

from lds_client.models import CalendarEvent, Document, Member, Party, Speech, Vote


@dataclass(frozen=True)
class EndpointSpec:
    """Static mapping of one upstream data domain to its table."""

    name: str
    table: str
    unique_field: Optional[str]
    conflict_columns: tuple[str, ...] = field(default_factory=tuple)
    schema: Optional[Type[BaseModel]] = None


def _spec(name: str, unique_field: str, schema: Type[BaseModel]) -> EndpointSpec:
    return EndpointSpec(
        name=name,
        table=name,
        unique_field=unique_field,
        conflict_columns=(unique_field,),
        schema=schema,
    )


ENDPOINTS: dict[str, EndpointSpec] = {
    s.name: s
    for s in (
        _spec("member_data", "member_id", Member),
        _spec("calendar_data", "event_id", CalendarEvent),
        _spec("document_data", "document_id", Document),
        _spec("speech_data", "speech_id", Speech),
        _spec("vote_data", "vote_id", Vote),
        _spec("party_data", "party_code", Party),
    )
}


def get_endpoint(name: str) -> EndpointSpec:
    """Registry lookup; unknown names map to a same-named table with no key."""
    spec = ENDPOINTS.get(name)
    if spec is not None:
        return spec
    return EndpointSpec(name=name, table=name, unique_field=None)


def coerce_record(endpoint: str, raw: dict) -> dict:
    """Validate ``raw`` against the endpoint schema; passthrough when there is none."""
    spec = get_endpoint(endpoint)
    if spec.schema is None:
        return dict(raw)
    return spec.schema.model_validate(raw).model_dump(exclude_none=True)
