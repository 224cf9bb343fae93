"""core_schema

Revision ID: 5c1e2a7b9d40
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "5c1e2a7b9d40"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "quizzes",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    op.create_table(
        "questions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("quiz_id", sa.BigInteger(), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("difficulty", sa.String(16), nullable=False, server_default=sa.text("'MEDIUM'")),
        sa.Column("time_limit_seconds", sa.Integer(), nullable=False, server_default=sa.text("15")),
        sa.CheckConstraint("difficulty IN ('EASY','MEDIUM','HARD')", name="ck_questions_difficulty"),
        sa.CheckConstraint("time_limit_seconds > 0", name="ck_questions_time_limit_positive"),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"]),
        sa.UniqueConstraint("quiz_id", "order", name="uq_questions_quiz_order"),
    )

    op.create_table(
        "answer_options",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("question_id", sa.BigInteger(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"]),
    )
    op.create_index("idx_answer_options_question", "answer_options", ["question_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("telegram_user_id", sa.BigInteger(), nullable=False),
        sa.Column("username", sa.Text(), nullable=True),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("xp", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("bonus_energy", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("bonus_energy_used", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("bonus_energy_earned", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("current_quiz_id", sa.BigInteger(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default=sa.text("'IDLE'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('IDLE','PLAYING','BLOCKED')", name="ck_users_status"),
        sa.CheckConstraint("xp >= 0", name="ck_users_xp_non_negative"),
        sa.CheckConstraint("bonus_energy >= 0", name="ck_users_bonus_energy_non_negative"),
        sa.ForeignKeyConstraint(["current_quiz_id"], ["quizzes.id"]),
        sa.UniqueConstraint("telegram_user_id", name="users_telegram_user_id_key"),
    )
    op.create_index("idx_users_username", "users", ["username"])
    op.create_index("idx_users_xp", "users", ["xp"])

    op.create_table(
        "quiz_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("quiz_id", sa.BigInteger(), nullable=False),
        sa.Column("attempt_number", sa.Integer(), nullable=False),
        sa.Column("current_question_index", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("current_question_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("max_streak", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("energy_exempt", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("used_bonus_energy", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finish_result", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.CheckConstraint("attempt_number >= 1", name="ck_quiz_sessions_attempt_positive"),
        sa.CheckConstraint("current_question_index >= 0", name="ck_quiz_sessions_question_index_non_negative"),
        sa.CheckConstraint("total_score >= 0", name="ck_quiz_sessions_total_score_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"]),
    )
    op.create_index("idx_sessions_user_started", "quiz_sessions", ["user_id", "started_at"])
    op.create_index(
        "idx_sessions_user_quiz_finished",
        "quiz_sessions",
        ["user_id", "quiz_id", "finished_at"],
    )
    op.create_index(
        "uq_sessions_live_user_quiz",
        "quiz_sessions",
        ["user_id", "quiz_id"],
        unique=True,
        postgresql_where=sa.text("finished_at IS NULL"),
    )

    op.create_table(
        "quiz_answers",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("question_id", sa.BigInteger(), nullable=False),
        sa.Column("option_id", sa.BigInteger(), nullable=True),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("time_spent_ms", sa.Integer(), nullable=False),
        sa.Column("score_delta", sa.Integer(), nullable=False),
        sa.Column("answered_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("time_spent_ms >= 0", name="ck_quiz_answers_time_spent_non_negative"),
        sa.CheckConstraint(
            "option_id IS NOT NULL OR (is_correct = false AND score_delta = 0)",
            name="ck_quiz_answers_timeout_shape",
        ),
        sa.ForeignKeyConstraint(["session_id"], ["quiz_sessions.id"]),
        sa.ForeignKeyConstraint(["question_id"], ["questions.id"]),
        sa.ForeignKeyConstraint(["option_id"], ["answer_options.id"]),
        sa.UniqueConstraint("session_id", "question_id", name="uq_quiz_answers_session_question"),
    )

    op.create_table(
        "leaderboard_entries",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("quiz_id", sa.BigInteger(), nullable=False),
        sa.Column("period_type", sa.String(16), nullable=False),
        sa.Column("best_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("period_type IN ('ALL_TIME')", name="ck_leaderboard_entries_period_type"),
        sa.CheckConstraint("best_score >= 0", name="ck_leaderboard_entries_best_non_negative"),
        sa.CheckConstraint("attempts >= 0", name="ck_leaderboard_entries_attempts_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"]),
        sa.UniqueConstraint(
            "user_id",
            "quiz_id",
            "period_type",
            name="uq_leaderboard_entries_user_quiz_period",
        ),
    )
    op.create_index(
        "idx_leaderboard_entries_quiz_period",
        "leaderboard_entries",
        ["quiz_id", "period_type"],
    )

    op.create_table(
        "weekly_scores",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("week_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("best_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("quizzes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("best_score >= 0", name="ck_weekly_scores_best_non_negative"),
        sa.CheckConstraint("quizzes >= 0", name="ck_weekly_scores_quizzes_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.UniqueConstraint("user_id", "week_start", name="uq_weekly_scores_user_week"),
    )
    op.create_index("idx_weekly_scores_week", "weekly_scores", ["week_start"])

    op.create_table(
        "tournaments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("slug", sa.String(64), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("entry_fee_xp", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "status IN ('UPCOMING','ACTIVE','FINISHED','CANCELLED')",
            name="ck_tournaments_status",
        ),
        sa.CheckConstraint("entry_fee_xp >= 0", name="ck_tournaments_entry_fee_non_negative"),
        sa.CheckConstraint(
            "max_participants IS NULL OR max_participants >= 1",
            name="ck_tournaments_max_participants_positive",
        ),
        sa.CheckConstraint("ends_at > starts_at", name="ck_tournaments_window_order"),
        sa.UniqueConstraint("slug", name="tournaments_slug_key"),
    )
    op.create_index("idx_tournaments_status_starts_at", "tournaments", ["status", "starts_at"])
    op.create_index("idx_tournaments_status_ends_at", "tournaments", ["status", "ends_at"])

    op.create_table(
        "tournament_stages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("tournament_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("quiz_id", sa.BigInteger(), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("score_multiplier", sa.Numeric(6, 2), nullable=False, server_default=sa.text("1")),
        sa.Column("min_score", sa.Integer(), nullable=True),
        sa.Column("top_n", sa.Integer(), nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('"order" >= 1', name="ck_tournament_stages_order_positive"),
        sa.CheckConstraint("score_multiplier > 0", name="ck_tournament_stages_multiplier_positive"),
        sa.CheckConstraint(
            "min_score IS NULL OR min_score >= 0",
            name="ck_tournament_stages_min_score_non_negative",
        ),
        sa.CheckConstraint("top_n IS NULL OR top_n >= 1", name="ck_tournament_stages_top_n_positive"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"]),
        sa.ForeignKeyConstraint(["quiz_id"], ["quizzes.id"]),
        sa.UniqueConstraint("tournament_id", "order", name="uq_tournament_stages_tournament_order"),
    )
    op.create_index("idx_tournament_stages_quiz", "tournament_stages", ["quiz_id"])

    op.create_table(
        "tournament_participants",
        sa.Column("tournament_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("total_score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("rank", sa.Integer(), nullable=True),
        sa.Column("current_stage", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('REGISTERED','ACTIVE','FINISHED')",
            name="ck_tournament_participants_status",
        ),
        sa.CheckConstraint(
            "total_score >= 0",
            name="ck_tournament_participants_total_score_non_negative",
        ),
        sa.CheckConstraint(
            "current_stage >= 1",
            name="ck_tournament_participants_current_stage_positive",
        ),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("tournament_id", "user_id"),
    )
    op.create_index(
        "idx_tournament_participants_tournament_score",
        "tournament_participants",
        ["tournament_id", "total_score"],
    )
    op.create_index("idx_tournament_participants_user", "tournament_participants", ["user_id"])

    op.create_table(
        "tournament_stage_results",
        sa.Column("stage_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("rank", sa.Integer(), nullable=True),
        sa.Column("passed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("score >= 0", name="ck_tournament_stage_results_score_non_negative"),
        sa.CheckConstraint("rank IS NULL OR rank >= 1", name="ck_tournament_stage_results_rank_positive"),
        sa.ForeignKeyConstraint(["stage_id"], ["tournament_stages.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("stage_id", "user_id"),
    )

    op.create_table(
        "tournament_prizes",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("tournament_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("place", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("winner_user_id", sa.BigInteger(), nullable=True),
        sa.Column("awarded_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("type IN ('XP','BADGE')", name="ck_tournament_prizes_type"),
        sa.CheckConstraint("place >= 1", name="ck_tournament_prizes_place_positive"),
        sa.CheckConstraint("value >= 0", name="ck_tournament_prizes_value_non_negative"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournaments.id"]),
        sa.ForeignKeyConstraint(["winner_user_id"], ["users.id"]),
        sa.UniqueConstraint("tournament_id", "place", name="uq_tournament_prizes_tournament_place"),
    )

    op.create_table(
        "user_achievements",
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("achievement_key", sa.String(64), nullable=False),
        sa.Column("unlocked_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("user_id", "achievement_key"),
    )


def downgrade() -> None:
    op.drop_table("user_achievements")
    op.drop_table("tournament_prizes")
    op.drop_table("tournament_stage_results")
    op.drop_index("idx_tournament_participants_user", table_name="tournament_participants")
    op.drop_index("idx_tournament_participants_tournament_score", table_name="tournament_participants")
    op.drop_table("tournament_participants")
    op.drop_index("idx_tournament_stages_quiz", table_name="tournament_stages")
    op.drop_table("tournament_stages")
    op.drop_index("idx_tournaments_status_ends_at", table_name="tournaments")
    op.drop_index("idx_tournaments_status_starts_at", table_name="tournaments")
    op.drop_table("tournaments")
    op.drop_index("idx_weekly_scores_week", table_name="weekly_scores")
    op.drop_table("weekly_scores")
    op.drop_index("idx_leaderboard_entries_quiz_period", table_name="leaderboard_entries")
    op.drop_table("leaderboard_entries")
    op.drop_table("quiz_answers")
    op.drop_index("uq_sessions_live_user_quiz", table_name="quiz_sessions")
    op.drop_index("idx_sessions_user_quiz_finished", table_name="quiz_sessions")
    op.drop_index("idx_sessions_user_started", table_name="quiz_sessions")
    op.drop_table("quiz_sessions")
    op.drop_index("idx_users_xp", table_name="users")
    op.drop_index("idx_users_username", table_name="users")
    op.drop_table("users")
    op.drop_index("idx_answer_options_question", table_name="answer_options")
    op.drop_table("answer_options")
    op.drop_table("questions")
    op.drop_table("quizzes")
