from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class QuizAnswer(Base):
    __tablename__ = "quiz_answers"
    __table_args__ = (
        CheckConstraint("time_spent_ms >= 0", name="ck_quiz_answers_time_spent_non_negative"),
        CheckConstraint(
            "option_id IS NOT NULL OR (is_correct = false AND score_delta = 0)",
            name="ck_quiz_answers_timeout_shape",
        ),
        UniqueConstraint("session_id", "question_id", name="uq_quiz_answers_session_question"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    session_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("quiz_sessions.id"),
        nullable=False,
    )
    question_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("questions.id"),
        nullable=False,
    )
    option_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("answer_options.id"),
        nullable=True,
    )
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    time_spent_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    score_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    answered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
