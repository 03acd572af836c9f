"""reflection engine schema

Revision ID: 20261016_0001
Revises:
Create Date: 2026-10-16 00:00:01
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261016_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "raw_conversations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("raw_text", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_raw_conversations_user_id", "raw_conversations", ["user_id"], unique=False)

    op.create_table(
        "conversation_segments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("conversation_id", sa.Integer(), nullable=False),
        sa.Column("segment_index", sa.Integer(), nullable=False),
        sa.Column("segment_text", sa.Text(), nullable=False),
        sa.Column("message_count", sa.Integer(), nullable=False),
        sa.Column("extraction_status", sa.String(length=32), nullable=False),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["conversation_id"], ["raw_conversations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_conversation_segments_user_id", "conversation_segments", ["user_id"], unique=False)
    op.create_index(
        "ix_conversation_segments_conversation_id", "conversation_segments", ["conversation_id"], unique=False
    )

    op.create_table(
        "conversation_maps",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("conversation_id", sa.Integer(), nullable=False),
        sa.Column("extraction_run_id", sa.Integer(), nullable=True),
        sa.Column("map_data_json", sa.JSON(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["conversation_id"], ["raw_conversations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("conversation_id"),
    )
    op.create_index("ix_conversation_maps_user_id", "conversation_maps", ["user_id"], unique=False)

    op.create_table(
        "calendar_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("attendees_json", sa.JSON(), nullable=False),
        sa.Column("extraction_status", sa.String(length=32), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_calendar_events_user_id", "calendar_events", ["user_id"], unique=False)
    op.create_index("ix_calendar_events_starts_at", "calendar_events", ["starts_at"], unique=False)

    op.create_table(
        "event_contexts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("context_type", sa.String(length=32), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["event_id"], ["calendar_events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_event_contexts_user_id", "event_contexts", ["user_id"], unique=False)
    op.create_index("ix_event_contexts_event_id", "event_contexts", ["event_id"], unique=False)

    op.create_table(
        "extraction_runs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("conversation_id", sa.Integer(), nullable=True),
        sa.Column("segment_id", sa.Integer(), nullable=True),
        sa.Column("event_id", sa.Integer(), nullable=True),
        sa.Column("model_name", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("error_type", sa.String(length=64), nullable=True),
        sa.Column("error_details", sa.Text(), nullable=True),
        sa.Column("raw_output_json", sa.JSON(), nullable=False),
        sa.Column("candidates_generated", sa.Integer(), nullable=False),
        sa.Column("execution_time_ms", sa.Float(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_extraction_runs_user_id", "extraction_runs", ["user_id"], unique=False)
    op.create_index("ix_extraction_runs_conversation_id", "extraction_runs", ["conversation_id"], unique=False)
    op.create_index("ix_extraction_runs_segment_id", "extraction_runs", ["segment_id"], unique=False)
    op.create_index("ix_extraction_runs_event_id", "extraction_runs", ["event_id"], unique=False)

    op.create_table(
        "signal_candidates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("signal_type", sa.String(length=32), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("confidence_level", sa.String(length=16), nullable=False),
        sa.Column("risk_of_misinterpretation", sa.String(length=16), nullable=False),
        sa.Column("source_excerpt", sa.Text(), nullable=False),
        sa.Column("excerpt_location", sa.String(length=255), nullable=True),
        sa.Column("constraint_type", sa.String(length=32), nullable=False),
        sa.Column("trust_evidence", sa.Text(), nullable=True),
        sa.Column("action_suggested", sa.Boolean(), nullable=False),
        sa.Column("related_themes_json", sa.JSON(), nullable=True),
        sa.Column("temporal_context", sa.String(length=255), nullable=True),
        sa.Column("suggested_links_json", sa.JSON(), nullable=True),
        sa.Column("why_surfaced", sa.Text(), nullable=True),
        sa.Column("ambiguity_note", sa.Text(), nullable=True),
        sa.Column("source_conversation_id", sa.Integer(), nullable=True),
        sa.Column("segment_id", sa.Integer(), nullable=True),
        sa.Column("source_event_id", sa.Integer(), nullable=True),
        sa.Column("extraction_run_id", sa.Integer(), nullable=True),
        sa.Column("review_status", sa.String(length=16), nullable=False),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(length=64), nullable=True),
        sa.Column("deferred_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("promotion_status", sa.String(length=16), nullable=False),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_signal_candidates_user_id", "signal_candidates", ["user_id"], unique=False)
    op.create_index(
        "ix_signal_candidates_source_conversation_id", "signal_candidates", ["source_conversation_id"], unique=False
    )
    op.create_index("ix_signal_candidates_segment_id", "signal_candidates", ["segment_id"], unique=False)
    op.create_index("ix_signal_candidates_source_event_id", "signal_candidates", ["source_event_id"], unique=False)
    op.create_index(
        "ix_signal_candidates_extraction_run_id", "signal_candidates", ["extraction_run_id"], unique=False
    )
    op.create_index("ix_signal_candidates_review_status", "signal_candidates", ["review_status"], unique=False)

    op.create_table(
        "candidate_weights",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("candidate_id", sa.Integer(), nullable=False),
        sa.Column("relevance", sa.Integer(), nullable=True),
        sa.Column("importance", sa.Integer(), nullable=True),
        sa.Column("energy_impact", sa.Integer(), nullable=True),
        sa.Column("confidence", sa.String(length=8), nullable=True),
        sa.Column("action_timing", sa.String(length=8), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["candidate_id"], ["signal_candidates.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("candidate_id"),
    )
    op.create_index("ix_candidate_weights_user_id", "candidate_weights", ["user_id"], unique=False)

    op.create_table(
        "signals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("signal_type", sa.String(length=32), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("confidence_level", sa.String(length=16), nullable=True),
        sa.Column("risk_of_misinterpretation", sa.String(length=16), nullable=True),
        sa.Column("constraint_type", sa.String(length=32), nullable=False),
        sa.Column("trust_evidence", sa.Text(), nullable=True),
        sa.Column("action_required", sa.Boolean(), nullable=False),
        sa.Column("user_notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("extraction_method", sa.String(length=64), nullable=False),
        sa.Column("extracted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("weights_json", sa.JSON(), nullable=True),
        sa.Column("reflection_data_json", sa.JSON(), nullable=True),
        sa.Column("source_conversation_id", sa.Integer(), nullable=True),
        sa.Column("source_segment_id", sa.Integer(), nullable=True),
        sa.Column("source_event_id", sa.Integer(), nullable=True),
        sa.Column("source_excerpt", sa.Text(), nullable=True),
        sa.Column("extraction_run_id", sa.Integer(), nullable=True),
        sa.Column("approved_from_candidate_id", sa.Integer(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("approved_from_candidate_id"),
    )
    op.create_index("ix_signals_user_id", "signals", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_signals_user_id", table_name="signals")
    op.drop_table("signals")
    op.drop_index("ix_candidate_weights_user_id", table_name="candidate_weights")
    op.drop_table("candidate_weights")
    for index_name in (
        "ix_signal_candidates_review_status",
        "ix_signal_candidates_extraction_run_id",
        "ix_signal_candidates_source_event_id",
        "ix_signal_candidates_segment_id",
        "ix_signal_candidates_source_conversation_id",
        "ix_signal_candidates_user_id",
    ):
        op.drop_index(index_name, table_name="signal_candidates")
    op.drop_table("signal_candidates")
    for index_name in (
        "ix_extraction_runs_event_id",
        "ix_extraction_runs_segment_id",
        "ix_extraction_runs_conversation_id",
        "ix_extraction_runs_user_id",
    ):
        op.drop_index(index_name, table_name="extraction_runs")
    op.drop_table("extraction_runs")
    op.drop_index("ix_event_contexts_event_id", table_name="event_contexts")
    op.drop_index("ix_event_contexts_user_id", table_name="event_contexts")
    op.drop_table("event_contexts")
    op.drop_index("ix_calendar_events_starts_at", table_name="calendar_events")
    op.drop_index("ix_calendar_events_user_id", table_name="calendar_events")
    op.drop_table("calendar_events")
    op.drop_index("ix_conversation_maps_user_id", table_name="conversation_maps")
    op.drop_table("conversation_maps")
    op.drop_index("ix_conversation_segments_conversation_id", table_name="conversation_segments")
    op.drop_index("ix_conversation_segments_user_id", table_name="conversation_segments")
    op.drop_table("conversation_segments")
    op.drop_index("ix_raw_conversations_user_id", table_name="raw_conversations")
    op.drop_table("raw_conversations")
