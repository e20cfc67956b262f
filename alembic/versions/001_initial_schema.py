"""Initial schema: exercises, routines, sessions, sets, rate limits and AI generation ledger.

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "exercises",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column("muscle_group", sa.String(length=100), nullable=True),
        sa.Column("equipment", sa.String(length=50), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_exercises_name"), "exercises", ["name"], unique=False)
    op.create_index(op.f("ix_exercises_muscle_group"), "exercises", ["muscle_group"], unique=False)

    op.create_table(
        "workout_routines",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("estimated_duration", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_workout_routines_user_created", "workout_routines", ["user_id", "created_at"], unique=False
    )

    op.create_table(
        "routine_exercises",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("routine_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
        sa.Column("sets", sa.Integer(), nullable=False),
        sa.Column("min_reps", sa.Integer(), nullable=True),
        sa.Column("max_reps", sa.Integer(), nullable=True),
        sa.Column("target_weight", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("rest_time", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["routine_id"], ["workout_routines.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_routine_exercises_routine_id"), "routine_exercises", ["routine_id"], unique=False)

    op.create_table(
        "workout_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("routine_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("total_volume", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["routine_id"], ["workout_routines.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_workout_sessions_user_started", "workout_sessions", ["user_id", "started_at"], unique=False
    )

    op.execute("CREATE TYPE prtype AS ENUM ('WEIGHT', 'VOLUME')")
    op.create_table(
        "exercise_sets",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("set_order", sa.Integer(), nullable=True),
        sa.Column("weight", sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("is_pr", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "pr_type",
            postgresql.ENUM("WEIGHT", "VOLUME", name="prtype", create_type=False),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["session_id"], ["workout_sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_exercise_sets_session_id", "exercise_sets", ["session_id"], unique=False)
    op.create_index("ix_exercise_sets_exercise_id", "exercise_sets", ["exercise_id"], unique=False)

    op.create_table(
        "rate_limits",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("identifier", sa.String(length=255), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rate_limits_identifier_created", "rate_limits", ["identifier", "created_at"], unique=False)
    op.create_index("ix_rate_limits_identifier_action", "rate_limits", ["identifier", "action"], unique=False)

    op.create_table(
        "ai_workout_blueprints",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("spec_hash", sa.String(length=64), nullable=False),
        sa.Column("routine_data", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("spec_hash", name=op.f("uq_ai_workout_blueprints_spec_hash")),
    )
    op.create_index("ix_ai_workout_blueprints_last_used", "ai_workout_blueprints", ["last_used_at"], unique=False)

    op.create_table(
        "ai_generation_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("idempotency_key", sa.String(length=255), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("spec_hash", sa.String(length=64), nullable=True),
        sa.Column("request_data", sa.Text(), nullable=True),
        sa.Column("blueprint_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("result", sa.Text(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["blueprint_id"], ["ai_workout_blueprints.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("idempotency_key", name=op.f("uq_ai_generation_requests_idempotency_key")),
    )
    op.create_index(
        "ix_ai_generation_requests_user_created", "ai_generation_requests", ["user_id", "created_at"], unique=False
    )
    op.create_index("ix_ai_generation_requests_status", "ai_generation_requests", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_ai_generation_requests_status", table_name="ai_generation_requests")
    op.drop_index("ix_ai_generation_requests_user_created", table_name="ai_generation_requests")
    op.drop_table("ai_generation_requests")
    op.drop_index("ix_ai_workout_blueprints_last_used", table_name="ai_workout_blueprints")
    op.drop_table("ai_workout_blueprints")
    op.drop_index("ix_rate_limits_identifier_action", table_name="rate_limits")
    op.drop_index("ix_rate_limits_identifier_created", table_name="rate_limits")
    op.drop_table("rate_limits")
    op.drop_index("ix_exercise_sets_exercise_id", table_name="exercise_sets")
    op.drop_index("ix_exercise_sets_session_id", table_name="exercise_sets")
    op.drop_table("exercise_sets")
    op.execute("DROP TYPE IF EXISTS prtype")
    op.drop_index("ix_workout_sessions_user_started", table_name="workout_sessions")
    op.drop_table("workout_sessions")
    op.drop_index(op.f("ix_routine_exercises_routine_id"), table_name="routine_exercises")
    op.drop_table("routine_exercises")
    op.drop_index("ix_workout_routines_user_created", table_name="workout_routines")
    op.drop_table("workout_routines")
    op.drop_index(op.f("ix_exercises_muscle_group"), table_name="exercises")
    op.drop_index(op.f("ix_exercises_name"), table_name="exercises")
    op.drop_table("exercises")
