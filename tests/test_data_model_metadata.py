from __future__ import annotations

from sqlalchemy import CheckConstraint, UniqueConstraint

from app.db.models import (  # noqa: F401
    AnswerOption,
    LeaderboardEntry,
    Question,
    Quiz,
    QuizAnswer,
    QuizSession,
    Tournament,
    TournamentParticipant,
    TournamentPrize,
    TournamentStage,
    TournamentStageResult,
    User,
    UserAchievement,
    WeeklyScore,
)
from app.db.models.base import Base


def _check_names(table_name: str) -> set[str | None]:
    table = Base.metadata.tables[table_name]
    return {constraint.name for constraint in table.constraints if isinstance(constraint, CheckConstraint)}


def _unique_names(table_name: str) -> set[str | None]:
    table = Base.metadata.tables[table_name]
    return {constraint.name for constraint in table.constraints if isinstance(constraint, UniqueConstraint)}


def _index_names(table_name: str) -> set[str | None]:
    return {index.name for index in Base.metadata.tables[table_name].indexes}


def test_all_tables_registered() -> None:
    assert set(Base.metadata.tables) == {
        "quizzes",
        "questions",
        "answer_options",
        "users",
        "quiz_sessions",
        "quiz_answers",
        "leaderboard_entries",
        "weekly_scores",
        "tournaments",
        "tournament_stages",
        "tournament_participants",
        "tournament_stage_results",
        "tournament_prizes",
        "user_achievements",
    }


def test_one_live_session_per_user_and_quiz() -> None:
    live_index = next(
        index
        for index in Base.metadata.tables["quiz_sessions"].indexes
        if index.name == "uq_sessions_live_user_quiz"
    )

    assert live_index.unique is True
    assert [column.name for column in live_index.columns] == ["user_id", "quiz_id"]
    assert str(live_index.dialect_options["postgresql"]["where"]) == "finished_at IS NULL"


def test_answer_and_score_uniqueness() -> None:
    assert "uq_quiz_answers_session_question" in _unique_names("quiz_answers")
    assert "uq_leaderboard_entries_user_quiz_period" in _unique_names("leaderboard_entries")
    assert "uq_weekly_scores_user_week" in _unique_names("weekly_scores")
    assert "uq_tournament_stages_tournament_order" in _unique_names("tournament_stages")
    assert "uq_tournament_prizes_tournament_place" in _unique_names("tournament_prizes")


def test_composite_primary_keys() -> None:
    def primary_key(table_name: str) -> list[str]:
        return [column.name for column in Base.metadata.tables[table_name].primary_key.columns]

    assert primary_key("tournament_participants") == ["tournament_id", "user_id"]
    assert primary_key("tournament_stage_results") == ["stage_id", "user_id"]
    assert primary_key("user_achievements") == ["user_id", "achievement_key"]


def test_critical_constraints_present() -> None:
    assert {"ck_users_xp_non_negative", "ck_users_bonus_energy_non_negative"} <= _check_names("users")
    assert "ck_quiz_answers_timeout_shape" in _check_names("quiz_answers")
    assert "ck_tournaments_window_order" in _check_names("tournaments")
    assert "ck_tournament_stages_multiplier_positive" in _check_names("tournament_stages")
    assert "ck_tournament_participants_status" in _check_names("tournament_participants")
    assert "ck_tournament_prizes_type" in _check_names("tournament_prizes")

    assert "idx_sessions_user_started" in _index_names("quiz_sessions")
    assert "idx_tournament_participants_tournament_score" in _index_names("tournament_participants")
    assert "idx_tournaments_status_ends_at" in _index_names("tournaments")


def test_question_and_option_server_defaults() -> None:
    def server_default(table_name: str, column_name: str) -> str:
        return str(Base.metadata.tables[table_name].columns[column_name].server_default.arg)

    assert server_default("questions", "difficulty") == "'MEDIUM'"
    assert server_default("questions", "time_limit_seconds") == "15"
    assert server_default("answer_options", "is_correct") == "false"
    assert server_default("quizzes", "is_active") == "true"
    assert Question.__table__.columns["text"].nullable is False
    assert AnswerOption.__table__.columns["text"].nullable is False
