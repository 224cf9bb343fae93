from __future__ import annotations

from datetime import datetime
from typing import Any

from app.db.models.quiz_sessions import QuizSession
from app.economy.energy.types import EnergyGatePass, EnergyGateRejection
from app.game.leaderboard.types import LeaderboardUpdate, WeeklyUpdate
from app.game.progression.types import XpGrant
from app.game.questions.types import QuizContent
from app.game.tournaments.types import StageScore, TournamentQuizAccess


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def build_resumed_payload(
    *,
    quiz_session: QuizSession,
    content: QuizContent,
    questions: list[dict[str, Any]],
    skipped_questions: int,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "resumed": True,
        "sessionId": str(quiz_session.id),
        "quizId": content.quiz_id,
        "attemptNumber": quiz_session.attempt_number,
        "currentQuestionIndex": quiz_session.current_question_index,
        "totalQuestions": content.total_questions,
        "totalScore": quiz_session.total_score,
        "currentStreak": quiz_session.current_streak,
        "questions": questions,
        "questionStartedAt": _isoformat(quiz_session.current_question_started_at),
        "needsViewSignal": quiz_session.current_question_started_at is None,
    }
    if skipped_questions > 0:
        payload["skippedQuestions"] = skipped_questions
    return payload


def build_completed_payload(
    *,
    quiz_session: QuizSession,
    content: QuizContent,
    skipped_questions: int,
) -> dict[str, Any]:
    return {
        "completed": True,
        "sessionId": str(quiz_session.id),
        "quizId": content.quiz_id,
        "currentQuestionIndex": quiz_session.current_question_index,
        "totalQuestions": content.total_questions,
        "totalScore": quiz_session.total_score,
        "skippedQuestions": skipped_questions,
    }


def build_tournament_info(access: TournamentQuizAccess) -> dict[str, Any] | None:
    if not access.is_tournament_quiz:
        return None
    return {
        "tournamentId": str(access.tournament_id),
        "tournamentTitle": access.tournament_title,
        "stageId": str(access.stage_id),
        "stageOrder": access.stage_order,
        "stageTitle": access.stage_title,
    }


def build_created_payload(
    *,
    quiz_session: QuizSession,
    content: QuizContent,
    questions: list[dict[str, Any]],
    gate_pass: EnergyGatePass,
    access: TournamentQuizAccess,
) -> dict[str, Any]:
    used = gate_pass.used_attempts if gate_pass.energy_exempt else gate_pass.used_attempts + 1
    payload: dict[str, Any] = {
        "sessionId": str(quiz_session.id),
        "quizId": content.quiz_id,
        "attemptNumber": quiz_session.attempt_number,
        "remainingAttempts": gate_pass.remaining_attempts,
        "currentQuestionIndex": quiz_session.current_question_index,
        "totalQuestions": content.total_questions,
        "totalScore": quiz_session.total_score,
        "questions": questions,
        "questionStartedAt": None,
        "needsViewSignal": True,
        "energyInfo": {
            "used": min(used, gate_pass.max_attempts),
            "max": gate_pass.max_attempts,
            "bonusEnergy": gate_pass.bonus_energy,
            "usedBonusEnergy": gate_pass.used_bonus_energy,
            "isTournamentQuiz": gate_pass.is_tournament_quiz,
        },
    }
    tournament_info = build_tournament_info(access)
    if tournament_info is not None:
        payload["tournamentInfo"] = tournament_info
    return payload


def build_rejection_payload(rejection: EnergyGateRejection) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "error": rejection.code.value,
        "message": rejection.message,
    }
    if rejection.wait_ms is not None:
        payload["waitMs"] = rejection.wait_ms
    if rejection.wait_seconds is not None:
        payload["waitSeconds"] = rejection.wait_seconds
    return payload


def build_tournament_payload(scored: StageScore) -> dict[str, Any]:
    return {
        "tournamentId": str(scored.tournament_id),
        "tournamentTitle": scored.tournament_title,
        "stage": {
            "order": scored.stage_order,
            "totalStages": scored.total_stages,
            "scoreMultiplier": scored.score_multiplier,
        },
        "score": scored.score,
        "totalScore": scored.total_score,
        "rank": scored.rank,
        "passed": scored.passed,
        "isLastStage": scored.is_last_stage,
        "nextStageTitle": scored.next_stage_title,
    }


def build_finish_payload(
    *,
    quiz_session: QuizSession,
    leaderboard: LeaderboardUpdate,
    weekly: WeeklyUpdate | None,
    xp: XpGrant,
    achievements: list[str],
    tournament: StageScore | None,
) -> dict[str, Any]:
    xp_payload: dict[str, Any] = {
        "earned": xp.earned,
        "total": xp.total,
        "level": xp.level,
        "levelUp": xp.level_up,
    }
    if xp.new_level is not None:
        xp_payload["newLevel"] = xp.new_level

    return {
        "sessionId": str(quiz_session.id),
        "quizId": quiz_session.quiz_id,
        "gameScore": quiz_session.total_score,
        "maxStreak": quiz_session.max_streak,
        "finishedAt": _isoformat(quiz_session.finished_at),
        "leaderboard": {
            "bestScore": leaderboard.best_score,
            "attempts": leaderboard.attempts,
            "activityBonus": leaderboard.activity_bonus,
            "totalScore": leaderboard.total_score,
            "gamesUntilMaxBonus": leaderboard.games_until_max_bonus,
            "isNewBest": leaderboard.is_new_best,
        },
        "weekly": (
            {
                "weekStart": _isoformat(weekly.week_start),
                "bestScore": weekly.best_score,
                "quizzes": weekly.quizzes,
                "activityBonus": weekly.activity_bonus,
                "totalScore": weekly.total_score,
                "gamesUntilMaxBonus": weekly.games_until_max_bonus,
                "isNewBest": weekly.is_new_best,
            }
            if weekly is not None
            else None
        ),
        "xp": xp_payload,
        "achievements": achievements,
        "tournament": build_tournament_payload(tournament) if tournament is not None else None,
    }
