from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class QuizSession(Base):
    __tablename__ = "quiz_sessions"
    __table_args__ = (
        CheckConstraint("attempt_number >= 1", name="ck_quiz_sessions_attempt_positive"),
        CheckConstraint(
            "current_question_index >= 0",
            name="ck_quiz_sessions_question_index_non_negative",
        ),
        CheckConstraint("total_score >= 0", name="ck_quiz_sessions_total_score_non_negative"),
        Index("idx_sessions_user_started", "user_id", "started_at"),
        Index("idx_sessions_user_quiz_finished", "user_id", "quiz_id", "finished_at"),
        Index(
            "uq_sessions_live_user_quiz",
            "user_id",
            "quiz_id",
            unique=True,
            postgresql_where=text("finished_at IS NULL"),
        ),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    quiz_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("quizzes.id"), nullable=False)
    attempt_number: Mapped[int] = mapped_column(Integer, nullable=False)
    current_question_index: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    current_question_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    max_streak: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    total_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    energy_exempt: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    used_bonus_energy: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    finish_result: Mapped[dict[str, object] | None] = mapped_column(JSONB, nullable=True)
