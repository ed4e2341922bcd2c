"""Initial schema for legislative-data-store

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-16

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _id_col():
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    ]


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "member_data",
        _id_col(),
        sa.Column("member_id", sa.Text, nullable=False, unique=True),
        sa.Column("first_name", sa.Text),
        sa.Column("last_name", sa.Text),
        sa.Column("party", sa.Text),
        sa.Column("constituency", sa.Text),
        sa.Column("gender", sa.Text),
        sa.Column("birth_year", sa.Integer),
        sa.Column("is_active", sa.Boolean, server_default=sa.text("true")),
        sa.Column("riksdag_status", sa.Text),
        sa.Column("current_committees", postgresql.ARRAY(sa.Text)),
        sa.Column("assignments", postgresql.JSONB),
        sa.Column("committee_assignments", postgresql.JSONB),
        sa.Column("activity_data", postgresql.JSONB),
        sa.Column("image_urls", postgresql.JSONB),
        *_timestamps(),
    )

    op.create_table(
        "calendar_data",
        _id_col(),
        sa.Column("event_id", sa.Text, nullable=False, unique=True),
        sa.Column("datum", sa.Text),
        sa.Column("tid", sa.Text),
        sa.Column("typ", sa.Text),
        sa.Column("organ", sa.Text),
        sa.Column("aktivitet", sa.Text),
        sa.Column("plats", sa.Text),
        sa.Column("status", sa.Text),
        sa.Column("sekretess", sa.Text),
        sa.Column("summary", sa.Text),
        sa.Column("description", sa.Text),
        sa.Column("url", sa.Text),
        sa.Column("participants", postgresql.JSONB),
        sa.Column("related_documents", postgresql.JSONB),
        sa.Column("metadata", postgresql.JSONB),
        *_timestamps(),
    )

    op.create_table(
        "document_data",
        _id_col(),
        sa.Column("document_id", sa.Text, nullable=False, unique=True),
        sa.Column("titel", sa.Text),
        sa.Column("beteckning", sa.Text),
        sa.Column("datum", sa.Text),
        sa.Column("publicerad", sa.Text),
        sa.Column("typ", sa.Text),
        sa.Column("organ", sa.Text),
        sa.Column("rm", sa.Text),
        sa.Column("party", sa.Text),
        sa.Column("dokumentstatus", sa.Text),
        sa.Column("hangar_id", sa.Text),
        sa.Column("intressent_id", sa.Text),
        sa.Column("document_url_html", sa.Text),
        sa.Column("document_url_text", sa.Text),
        sa.Column("content_preview", sa.Text),
        sa.Column("summary", sa.Text),
        sa.Column("metadata", postgresql.JSONB),
        *_timestamps(),
    )

    op.create_table(
        "speech_data",
        _id_col(),
        sa.Column("speech_id", sa.Text, nullable=False, unique=True),
        sa.Column("anforande_id", sa.Text),
        sa.Column("anforande_nummer", sa.Text),
        sa.Column("anforandedatum", sa.Text),
        sa.Column("anforandetyp", sa.Text),
        sa.Column("anforandetext", sa.Text),
        sa.Column("anf_klockslag", sa.Text),
        sa.Column("anforande_url_html", sa.Text),
        sa.Column("kammaraktivitet", sa.Text),
        sa.Column("talare", sa.Text),
        sa.Column("namn", sa.Text),
        sa.Column("party", sa.Text),
        sa.Column("intressent_id", sa.Text),
        sa.Column("rel_dok_id", sa.Text),
        sa.Column("rel_dok_titel", sa.Text),
        sa.Column("rel_dok_beteckning", sa.Text),
        sa.Column("content_summary", sa.Text),
        sa.Column("word_count", sa.Integer),
        sa.Column("metadata", postgresql.JSONB),
        *_timestamps(),
    )

    op.create_table(
        "vote_data",
        _id_col(),
        sa.Column("vote_id", sa.Text, nullable=False, unique=True),
        sa.Column("rm", sa.Text),
        sa.Column("beteckning", sa.Text),
        sa.Column("punkt", sa.Text),
        sa.Column("votering", sa.Text),
        sa.Column("avser", sa.Text),
        sa.Column("dok_id", sa.Text),
        sa.Column("hangar_id", sa.Text),
        sa.Column("systemdatum", sa.Text),
        sa.Column("vote_results", postgresql.JSONB),
        sa.Column("party_breakdown", postgresql.JSONB),
        sa.Column("constituency_breakdown", postgresql.JSONB),
        sa.Column("vote_statistics", postgresql.JSONB),
        *_timestamps(),
    )

    op.create_table(
        "party_data",
        _id_col(),
        sa.Column("party_code", sa.Text, nullable=False, unique=True),
        sa.Column("party_name", sa.Text),
        sa.Column("total_members", sa.Integer, server_default="0"),
        sa.Column("active_members", sa.Integer, server_default="0"),
        sa.Column("gender_distribution", postgresql.JSONB),
        sa.Column("age_distribution", postgresql.JSONB),
        sa.Column("committee_distribution", postgresql.JSONB),
        sa.Column("committee_members", postgresql.JSONB),
        sa.Column("activity_stats", postgresql.JSONB),
        sa.Column("member_list", postgresql.JSONB),
        *_timestamps(),
    )


def downgrade() -> None:
    for table in (
        "party_data",
        "vote_data",
        "speech_data",
        "document_data",
        "calendar_data",
        "member_data",
    ):
        op.drop_table(table)
