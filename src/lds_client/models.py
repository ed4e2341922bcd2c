"""
Pydantic data models for Legislative Data Store Client.

One schema per endpoint. Upstream payloads are loosely typed, so every model
accepts unknown fields and only insists on its unique-key field.
"""

from datetime import datetime
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class _Record(BaseModel):
    model_config = ConfigDict(extra="allow")

    key_field: ClassVar[str] = ""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _strip_key(cls, data):
        if isinstance(data, dict) and data.get(cls.key_field) is not None:
            key = str(data[cls.key_field]).strip()
            if not key:
                raise ValueError(f"{cls.key_field} must not be empty")
            data = {**data, cls.key_field: key}
        return data

    @property
    def key(self) -> str:
        return getattr(self, self.key_field)


class Member(_Record):
    """Member of parliament."""

    key_field: ClassVar[str] = "member_id"

    member_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    party: Optional[str] = None
    constituency: Optional[str] = None
    gender: Optional[str] = None
    birth_year: Optional[int] = None
    is_active: Optional[bool] = None
    riksdag_status: Optional[str] = None
    current_committees: Optional[list[str]] = None
    assignments: Optional[Any] = None
    image_urls: Optional[Any] = None

    @field_validator("party")
    @classmethod
    def _upcase_party(cls, v):
        return v.upper() if v is not None else v


class CalendarEvent(_Record):
    """Chamber/committee calendar entry."""

    key_field: ClassVar[str] = "event_id"

    event_id: str
    datum: Optional[str] = None
    tid: Optional[str] = None
    typ: Optional[str] = None
    organ: Optional[str] = None
    aktivitet: Optional[str] = None
    plats: Optional[str] = None
    summary: Optional[str] = None
    url: Optional[str] = None
    metadata: Optional[dict] = None


class Document(_Record):
    """Parliamentary document (motion, report, proposition...)."""

    key_field: ClassVar[str] = "document_id"

    document_id: str
    titel: Optional[str] = None
    beteckning: Optional[str] = None
    datum: Optional[str] = None
    typ: Optional[str] = None
    organ: Optional[str] = None
    rm: Optional[str] = None
    dokumentstatus: Optional[str] = None
    document_url_html: Optional[str] = None
    document_url_text: Optional[str] = None
    metadata: Optional[dict] = None


class Speech(_Record):
    """Chamber speech (anforande)."""

    key_field: ClassVar[str] = "speech_id"

    speech_id: str
    anforande_id: Optional[str] = None
    anforandedatum: Optional[str] = None
    anforandetext: Optional[str] = None
    talare: Optional[str] = None
    party: Optional[str] = None
    intressent_id: Optional[str] = None
    rel_dok_id: Optional[str] = None
    word_count: Optional[int] = None


class Vote(_Record):
    """Roll-call vote (votering) with breakdowns."""

    key_field: ClassVar[str] = "vote_id"

    vote_id: str
    rm: Optional[str] = None
    beteckning: Optional[str] = None
    punkt: Optional[str] = None
    dok_id: Optional[str] = None
    avser: Optional[str] = None
    systemdatum: Optional[str] = None
    vote_results: Optional[Any] = None
    party_breakdown: Optional[Any] = None
    vote_statistics: Optional[Any] = None


class Party(_Record):
    """Party roll-up."""

    key_field: ClassVar[str] = "party_code"

    party_code: str
    party_name: Optional[str] = None
    total_members: Optional[int] = None
    active_members: Optional[int] = None
    gender_distribution: Optional[Any] = None
    age_distribution: Optional[Any] = None
    member_list: Optional[Any] = None

    @field_validator("party_code")
    @classmethod
    def _upcase(cls, v):
        return v.upper()
