from __future__ import annotations

from app.game.leaderboard.constants import ACTIVITY_BONUS_PER_GAME, MAX_ACTIVITY_BONUS
from app.game.leaderboard.types import ScoreBreakdown


def max_games_for_bonus(
    *,
    per_game_bonus: int = ACTIVITY_BONUS_PER_GAME,
    max_bonus: int = MAX_ACTIVITY_BONUS,
) -> int:
    if per_game_bonus <= 0:
        return 0
    return max_bonus // per_game_bonus


def activity_bonus(
    games_played: int,
    *,
    per_game_bonus: int = ACTIVITY_BONUS_PER_GAME,
    max_bonus: int = MAX_ACTIVITY_BONUS,
) -> int:
    return min(max(0, games_played) * per_game_bonus, max_bonus)


def total_score(
    best_score: int,
    games_played: int,
    *,
    per_game_bonus: int = ACTIVITY_BONUS_PER_GAME,
    max_bonus: int = MAX_ACTIVITY_BONUS,
) -> int:
    """Best single game plus the capped activity bonus.

    Replaying cannot inflate the dominant term, and the bonus stops growing
    once ``max_games_for_bonus`` games were played.
    """
    return best_score + activity_bonus(
        games_played,
        per_game_bonus=per_game_bonus,
        max_bonus=max_bonus,
    )


def games_until_max_bonus(
    games_played: int,
    *,
    per_game_bonus: int = ACTIVITY_BONUS_PER_GAME,
    max_bonus: int = MAX_ACTIVITY_BONUS,
) -> int:
    cap = max_games_for_bonus(per_game_bonus=per_game_bonus, max_bonus=max_bonus)
    return max(0, cap - games_played)


def is_new_best(previous_best: int | None, game_score: int) -> bool:
    return previous_best is None or game_score > previous_best


def score_breakdown(
    best_score: int,
    games_played: int,
    *,
    per_game_bonus: int = ACTIVITY_BONUS_PER_GAME,
    max_bonus: int = MAX_ACTIVITY_BONUS,
) -> ScoreBreakdown:
    bonus = activity_bonus(games_played, per_game_bonus=per_game_bonus, max_bonus=max_bonus)
    return ScoreBreakdown(
        best_score=best_score,
        activity_bonus=bonus,
        total_score=best_score + bonus,
        games_played=games_played,
        games_until_max_bonus=games_until_max_bonus(
            games_played,
            per_game_bonus=per_game_bonus,
            max_bonus=max_bonus,
        ),
    )

