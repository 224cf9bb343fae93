from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class LeaderboardEntry(Base):
    __tablename__ = "leaderboard_entries"
    __table_args__ = (
        CheckConstraint("period_type IN ('ALL_TIME')", name="ck_leaderboard_entries_period_type"),
        CheckConstraint("best_score >= 0", name="ck_leaderboard_entries_best_non_negative"),
        CheckConstraint("attempts >= 0", name="ck_leaderboard_entries_attempts_non_negative"),
        UniqueConstraint(
            "user_id",
            "quiz_id",
            "period_type",
            name="uq_leaderboard_entries_user_quiz_period",
        ),
        Index("idx_leaderboard_entries_quiz_period", "quiz_id", "period_type"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    quiz_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("quizzes.id"), nullable=False)
    period_type: Mapped[str] = mapped_column(String(16), nullable=False)
    best_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
