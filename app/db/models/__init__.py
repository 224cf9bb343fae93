from app.db.models.leaderboard_entries import LeaderboardEntry
from app.db.models.quiz_answers import QuizAnswer
from app.db.models.quiz_sessions import QuizSession
from app.db.models.quizzes import AnswerOption, Question, Quiz
from app.db.models.tournament_participants import TournamentParticipant
from app.db.models.tournament_prizes import TournamentPrize
from app.db.models.tournament_stage_results import TournamentStageResult
from app.db.models.tournament_stages import TournamentStage
from app.db.models.tournaments import Tournament
from app.db.models.user_achievements import UserAchievement
from app.db.models.users import User
from app.db.models.weekly_scores import WeeklyScore

__all__ = [
    "AnswerOption",
    "LeaderboardEntry",
    "Question",
    "Quiz",
    "QuizAnswer",
    "QuizSession",
    "Tournament",
    "TournamentParticipant",
    "TournamentPrize",
    "TournamentStage",
    "TournamentStageResult",
    "User",
    "UserAchievement",
    "WeeklyScore",
]
