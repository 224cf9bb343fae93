from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.api.routes.player_helpers import (
    CamelModel,
    authenticate,
    dispatch_pending,
    now_utc,
    parse_quiz_id,
    parse_session_id,
    session_error_as_http,
)
from app.db.session import SessionLocal
from app.game.sessions.errors import GameSessionError
from app.game.sessions.service import (
    finish_quiz_session,
    record_timeout,
    signal_question_view,
    start_quiz_session,
    submit_answer,
)

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


class SessionRequest(CamelModel):
    session_id: str | None = None


class ViewRequest(SessionRequest):
    question_index: int


class AnswerRequest(SessionRequest):
    question_id: int
    option_id: int


class TimeoutRequest(SessionRequest):
    question_id: int


@router.post("/{quiz_id}/start")
async def start_quiz(quiz_id: str, request: Request) -> JSONResponse:
    resolved_quiz_id = parse_quiz_id(quiz_id)
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = await authenticate(request, session, now=now)
            result = await start_quiz_session(
                session,
                user_id=user.id,
                quiz_id=resolved_quiz_id,
                now_utc=now,
            )
    except GameSessionError as exc:
        raise session_error_as_http(exc) from exc

    dispatch_pending(result.notifications)
    if result.rejection is not None:
        return JSONResponse(status_code=status.HTTP_429_TOO_MANY_REQUESTS, content=result.payload)
    return JSONResponse(content=result.payload)


@router.post("/{quiz_id}/view")
async def view_question(quiz_id: str, body: ViewRequest, request: Request) -> dict[str, Any]:
    resolved_quiz_id = parse_quiz_id(quiz_id)
    session_id = parse_session_id(body.session_id)
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = await authenticate(request, session, now=now)
            result = await signal_question_view(
                session,
                user_id=user.id,
                quiz_id=resolved_quiz_id,
                session_id=session_id,
                question_index=body.question_index,
                now_utc=now,
            )
    except GameSessionError as exc:
        raise session_error_as_http(exc) from exc

    return {
        "success": True,
        "questionIndex": result.question_index,
        "serverTime": result.server_time.isoformat(),
        "questionStartedAt": result.question_started_at.isoformat(),
    }


@router.post("/{quiz_id}/answer")
async def answer_question(quiz_id: str, body: AnswerRequest, request: Request) -> dict[str, Any]:
    resolved_quiz_id = parse_quiz_id(quiz_id)
    session_id = parse_session_id(body.session_id)
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = await authenticate(request, session, now=now)
            result = await submit_answer(
                session,
                user_id=user.id,
                quiz_id=resolved_quiz_id,
                session_id=session_id,
                question_id=body.question_id,
                option_id=body.option_id,
                now_utc=now,
            )
    except GameSessionError as exc:
        raise session_error_as_http(exc) from exc

    return {
        "correct": result.correct,
        "correctOptionId": result.correct_option_id,
        "scoreDelta": result.score.total,
        "breakdown": {
            "base": result.score.base,
            "timeBonus": result.score.time_bonus,
            "streakBonus": result.score.streak_bonus,
        },
        "timeSpentMs": result.time_spent_ms,
        "totalScore": result.total_score,
        "streak": result.streak,
        "currentQuestionIndex": result.current_question_index,
        "isLastQuestion": result.is_last_question,
    }


@router.post("/{quiz_id}/timeout")
async def timeout_question(quiz_id: str, body: TimeoutRequest, request: Request) -> dict[str, Any]:
    resolved_quiz_id = parse_quiz_id(quiz_id)
    session_id = parse_session_id(body.session_id)
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = await authenticate(request, session, now=now)
            result = await record_timeout(
                session,
                user_id=user.id,
                quiz_id=resolved_quiz_id,
                session_id=session_id,
                question_id=body.question_id,
                now_utc=now,
            )
    except GameSessionError as exc:
        raise session_error_as_http(exc) from exc

    payload: dict[str, Any] = {
        "skipped": result.skipped,
        "currentQuestionIndex": result.current_question_index,
        "totalScore": result.total_score,
        "streak": result.streak,
        "isLastQuestion": result.is_last_question,
    }
    if result.message is not None:
        payload["message"] = result.message
    return payload


@router.post("/{quiz_id}/finish")
async def finish_quiz(quiz_id: str, body: SessionRequest, request: Request) -> dict[str, Any]:
    resolved_quiz_id = parse_quiz_id(quiz_id)
    session_id = parse_session_id(body.session_id)
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            user = await authenticate(request, session, now=now)
            result = await finish_quiz_session(
                session,
                user_id=user.id,
                quiz_id=resolved_quiz_id,
                session_id=session_id,
                now_utc=now,
            )
    except GameSessionError as exc:
        raise session_error_as_http(exc) from exc

    dispatch_pending(result.notifications)
    return result.payload
