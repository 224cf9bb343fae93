from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from uuid import UUID

from fastapi import HTTPException, Request, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.users import User
from app.game.sessions.errors import (
    AlreadyAnsweredError,
    AnswerTimeoutError,
    GameSessionError,
    InvalidAnswerOptionError,
    QuestionNotFoundError,
    QuestionNotStartedError,
    QuizNotFoundError,
    SessionFinishedError,
    SessionNotFoundError,
    SessionOwnershipError,
    UserNotFoundError,
    WrongQuestionIndexError,
)
from app.game.sessions.types import PendingNotification
from app.services.telegram_auth import TelegramAuthError, authenticate_player
from app.workers.tasks.notifications import dispatch_notification

SESSION_ERROR_STATUS: dict[type[GameSessionError], tuple[int, str]] = {
    QuizNotFoundError: (status.HTTP_404_NOT_FOUND, "quiz_not_found"),
    UserNotFoundError: (status.HTTP_404_NOT_FOUND, "user_not_found"),
    SessionNotFoundError: (status.HTTP_404_NOT_FOUND, "session_not_found"),
    SessionOwnershipError: (status.HTTP_403_FORBIDDEN, "session_not_yours"),
    SessionFinishedError: (status.HTTP_400_BAD_REQUEST, "session_finished"),
    WrongQuestionIndexError: (status.HTTP_400_BAD_REQUEST, "wrong_question_index"),
    QuestionNotFoundError: (status.HTTP_400_BAD_REQUEST, "question_not_found"),
    InvalidAnswerOptionError: (status.HTTP_400_BAD_REQUEST, "invalid_option"),
    QuestionNotStartedError: (status.HTTP_400_BAD_REQUEST, "question_not_started"),
    AnswerTimeoutError: (status.HTTP_400_BAD_REQUEST, "answer_timeout"),
    AlreadyAnsweredError: (status.HTTP_409_CONFLICT, "already_answered"),
}


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def error(status_code: int, code: str, **extra: object) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"error": code, **extra})


def parse_quiz_id(raw_value: str) -> int:
    try:
        quiz_id = int(raw_value)
    except ValueError:
        raise error(status.HTTP_400_BAD_REQUEST, "invalid_quiz_id") from None
    if quiz_id <= 0:
        raise error(status.HTTP_400_BAD_REQUEST, "invalid_quiz_id")
    return quiz_id


def parse_session_id(raw_value: str | None) -> UUID:
    if not raw_value:
        raise error(status.HTTP_400_BAD_REQUEST, "session_required")
    try:
        return UUID(raw_value)
    except ValueError:
        raise error(status.HTTP_400_BAD_REQUEST, "invalid_session_id") from None


def session_error_as_http(exc: GameSessionError) -> HTTPException:
    status_code, code = SESSION_ERROR_STATUS.get(
        type(exc),
        (status.HTTP_400_BAD_REQUEST, "invalid_request"),
    )
    if isinstance(exc, WrongQuestionIndexError):
        return error(status_code, code, expected=exc.expected, received=exc.received)
    return error(status_code, code)


async def authenticate(request: Request, session: AsyncSession, *, now: datetime) -> User:
    try:
        return await authenticate_player(request, session, now_utc=now)
    except TelegramAuthError as exc:
        raise error(exc.status_code, exc.code) from exc


def dispatch_pending(notifications: Iterable[PendingNotification]) -> None:
    for notification in notifications:
        dispatch_notification(
            notification.notification_type,
            user_id=notification.user_id,
            payload=notification.payload,
            eta=notification.eta,
        )
