from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from time import monotonic
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.repo.quizzes_repo import QuizzesRepo
from app.game.questions.types import OptionContent, QuestionContent, QuizContent

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class _QuizCacheEntry:
    loaded_at_mono: float
    content: QuizContent


_QUIZ_CACHE: dict[int, _QuizCacheEntry] = {}
_QUIZ_CACHE_LOCK = asyncio.Lock()


def _clamp_cache_ttl_seconds(value: int) -> int:
    return max(1, min(3600, int(value)))


def clear_quiz_cache(quiz_id: int | None = None) -> None:
    if quiz_id is None:
        _QUIZ_CACHE.clear()
        return
    _QUIZ_CACHE.pop(quiz_id, None)


async def _load_quiz_content(session: AsyncSession, *, quiz_id: int) -> QuizContent | None:
    quiz = await QuizzesRepo.get_active(session, quiz_id)
    if quiz is None:
        return None

    questions = await QuizzesRepo.list_questions(session, quiz_id=quiz_id)
    options = await QuizzesRepo.list_options_for_questions(
        session,
        [question.id for question in questions],
    )
    options_by_question: dict[int, list[OptionContent]] = {}
    for option in options:
        options_by_question.setdefault(int(option.question_id), []).append(
            OptionContent(
                option_id=int(option.id),
                text=option.text,
                is_correct=bool(option.is_correct),
            )
        )

    return QuizContent(
        quiz_id=int(quiz.id),
        title=quiz.title,
        questions=tuple(
            QuestionContent(
                question_id=int(question.id),
                order=int(question.order),
                text=question.text,
                difficulty=question.difficulty,
                time_limit_seconds=int(question.time_limit_seconds),
                options=tuple(options_by_question.get(int(question.id), [])),
            )
            for question in questions
        ),
    )


async def get_quiz_content(session: AsyncSession, *, quiz_id: int) -> QuizContent | None:
    ttl_seconds = _clamp_cache_ttl_seconds(get_settings().quiz_cache_ttl_seconds)
    now_mono = monotonic()

    cached = _QUIZ_CACHE.get(quiz_id)
    if cached is not None and now_mono - cached.loaded_at_mono < ttl_seconds:
        return cached.content

    async with _QUIZ_CACHE_LOCK:
        cached = _QUIZ_CACHE.get(quiz_id)
        if cached is not None and monotonic() - cached.loaded_at_mono < ttl_seconds:
            return cached.content

        content = await _load_quiz_content(session, quiz_id=quiz_id)
        if content is None:
            _QUIZ_CACHE.pop(quiz_id, None)
            return None
        _QUIZ_CACHE[quiz_id] = _QuizCacheEntry(loaded_at_mono=monotonic(), content=content)
        logger.debug(
            "quiz_content_cached",
            quiz_id=quiz_id,
            questions_total=content.total_questions,
        )
        return content


def public_questions(
    content: QuizContent,
    *,
    rng: random.Random | None = None,
) -> list[dict[str, Any]]:
    """Client view of the questions; options shuffled, correctness stripped."""
    shuffler = rng or random.SystemRandom()
    payload: list[dict[str, Any]] = []
    for question in content.questions:
        options = [{"id": option.option_id, "text": option.text} for option in question.options]
        shuffler.shuffle(options)
        payload.append(
            {
                "id": question.question_id,
                "text": question.text,
                "order": question.order,
                "difficulty": question.difficulty,
                "timeLimitSeconds": question.time_limit_seconds,
                "options": options,
            }
        )
    return payload
