"""Initial baseline: users, signals, convictions, challenges, credibility history."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


# Revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("handle", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("credibility_score", sa.Float(), nullable=False),
        sa.Column("daily_points", sa.Integer(), nullable=False),
        sa.Column("accuracy", sa.Float(), nullable=False),
        sa.Column("streak", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("handle", name="uq_users_handle"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_credibility_score", "users", ["credibility_score"])

    op.create_table(
        "signals",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", name="fk_signals_user_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("topic", sa.String(length=100), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("timeframe", sa.String(length=50), nullable=True),
        sa.Column("consensus", sa.Float(), nullable=False, server_default=sa.text("50")),
        sa.Column("momentum", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("participant_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_value", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("consensus >= 0 AND consensus <= 100", name="ck_signals_consensus_range"),
        sa.CheckConstraint("momentum >= 0", name="ck_signals_momentum_non_negative"),
        sa.CheckConstraint("participant_count >= 0", name="ck_signals_participant_count_non_negative"),
    )
    op.create_index("ix_signals_user_id", "signals", ["user_id"])
    op.create_index("ix_signals_category_created_at", "signals", ["category", "created_at"])
    op.create_index("ix_signals_momentum", "signals", ["momentum"])

    op.create_table(
        "convictions",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", name="fk_convictions_user_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "signal_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("signals.id", name="fk_convictions_signal_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "signal_id", name="uq_convictions_user_signal"),
        sa.CheckConstraint("value >= -100 AND value <= 100", name="ck_convictions_value_range"),
        sa.CheckConstraint("weight > 0", name="ck_convictions_weight_positive"),
    )
    op.create_index("ix_convictions_user_id", "convictions", ["user_id"])
    op.create_index("ix_convictions_signal_created_at", "convictions", ["signal_id", "created_at"])

    op.create_table(
        "challenges",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "signal_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("signals.id", name="fk_challenges_signal_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "challenger_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", name="fk_challenges_challenger_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "target_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", name="fk_challenges_target_id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column(
            "winner_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", name="fk_challenges_winner_id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("stake_amount", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "ACCEPTED", "RESOLVED", name="challenge_status"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("stake_amount >= 1 AND stake_amount <= 100", name="ck_challenges_stake_range"),
        sa.CheckConstraint("target_id IS NULL OR target_id <> challenger_id", name="ck_challenges_not_self"),
    )
    op.create_index("ix_challenges_signal_id", "challenges", ["signal_id"])
    op.create_index("ix_challenges_challenger_id", "challenges", ["challenger_id"])
    op.create_index("ix_challenges_target_id", "challenges", ["target_id"])
    op.create_index("ix_challenges_status", "challenges", ["status"])

    op.create_table(
        "credibility_history",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", name="fk_credibility_history_user_id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("change", sa.Float(), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(
        "ix_credibility_history_user_created_at", "credibility_history", ["user_id", "created_at"]
    )


def downgrade() -> None:
    # Strict reverse dependency order.
    op.drop_index("ix_credibility_history_user_created_at", table_name="credibility_history")
    op.drop_table("credibility_history")

    op.drop_index("ix_challenges_status", table_name="challenges")
    op.drop_index("ix_challenges_target_id", table_name="challenges")
    op.drop_index("ix_challenges_challenger_id", table_name="challenges")
    op.drop_index("ix_challenges_signal_id", table_name="challenges")
    op.drop_table("challenges")
    sa.Enum(name="challenge_status").drop(op.get_bind(), checkfirst=True)

    op.drop_index("ix_convictions_signal_created_at", table_name="convictions")
    op.drop_index("ix_convictions_user_id", table_name="convictions")
    op.drop_table("convictions")

    op.drop_index("ix_signals_momentum", table_name="signals")
    op.drop_index("ix_signals_category_created_at", table_name="signals")
    op.drop_index("ix_signals_user_id", table_name="signals")
    op.drop_table("signals")

    op.drop_index("ix_users_credibility_score", table_name="users")
    op.drop_table("users")
