from app.db.repo.leaderboard_repo import LeaderboardRepo
from app.db.repo.quiz_answers_repo import QuizAnswersRepo
from app.db.repo.quiz_sessions_repo import QuizSessionsRepo
from app.db.repo.quizzes_repo import QuizzesRepo
from app.db.repo.tournament_participants_repo import TournamentParticipantsRepo
from app.db.repo.tournament_prizes_repo import TournamentPrizesRepo
from app.db.repo.tournament_stage_results_repo import TournamentStageResultsRepo
from app.db.repo.tournament_stages_repo import TournamentStagesRepo
from app.db.repo.tournaments_repo import TournamentsRepo
from app.db.repo.user_achievements_repo import UserAchievementsRepo
from app.db.repo.users_repo import UsersRepo
from app.db.repo.weekly_scores_repo import WeeklyScoresRepo

__all__ = [
    "LeaderboardRepo",
    "QuizAnswersRepo",
    "QuizSessionsRepo",
    "QuizzesRepo",
    "TournamentParticipantsRepo",
    "TournamentPrizesRepo",
    "TournamentStageResultsRepo",
    "TournamentStagesRepo",
    "TournamentsRepo",
    "UserAchievementsRepo",
    "UsersRepo",
    "WeeklyScoresRepo",
]
