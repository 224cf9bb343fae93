from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import UUID, uuid4

from app.game.questions.types import OptionContent, QuestionContent, QuizContent

UTC = timezone.utc
NOW = datetime(2026, 3, 4, 12, 0, tzinfo=UTC)


class _Savepoint:
    def __init__(self, owner: FakeSession) -> None:
        self._owner = owner

    async def __aenter__(self) -> _Savepoint:
        self._owner.savepoints += 1
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:  # noqa: ANN001
        if exc_type is not None:
            self._owner.rolled_back_savepoints += 1
        return False


class FakeSession:
    def __init__(self) -> None:
        self.flushes = 0
        self.savepoints = 0
        self.rolled_back_savepoints = 0

    async def flush(self) -> None:
        self.flushes += 1

    def begin_nested(self) -> _Savepoint:
        return _Savepoint(self)


def make_content(
    *,
    quiz_id: int = 7,
    questions_total: int = 3,
    time_limit_seconds: int = 15,
) -> QuizContent:
    questions = []
    for index in range(questions_total):
        question_id = 100 + index
        questions.append(
            QuestionContent(
                question_id=question_id,
                order=index + 1,
                text=f"Question {index + 1}",
                difficulty="MEDIUM",
                time_limit_seconds=time_limit_seconds,
                options=(
                    OptionContent(option_id=question_id * 10 + 1, text="right", is_correct=True),
                    OptionContent(option_id=question_id * 10 + 2, text="wrong", is_correct=False),
                ),
            )
        )
    return QuizContent(quiz_id=quiz_id, title="Capitals", questions=tuple(questions))


def make_quiz_session(
    *,
    user_id: int = 1,
    quiz_id: int = 7,
    session_id: UUID | None = None,
    current_question_index: int = 0,
    current_question_started_at: datetime | None = None,
    current_streak: int = 0,
    total_score: int = 0,
    finished_at: datetime | None = None,
    finish_result: dict[str, object] | None = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        id=session_id or uuid4(),
        user_id=user_id,
        quiz_id=quiz_id,
        attempt_number=1,
        current_question_index=current_question_index,
        current_question_started_at=current_question_started_at,
        current_streak=current_streak,
        max_streak=0,
        total_score=total_score,
        energy_exempt=False,
        used_bonus_energy=False,
        started_at=NOW,
        finished_at=finished_at,
        finish_result=finish_result,
    )
