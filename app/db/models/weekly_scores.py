from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class WeeklyScore(Base):
    __tablename__ = "weekly_scores"
    __table_args__ = (
        CheckConstraint("best_score >= 0", name="ck_weekly_scores_best_non_negative"),
        CheckConstraint("quizzes >= 0", name="ck_weekly_scores_quizzes_non_negative"),
        UniqueConstraint("user_id", "week_start", name="uq_weekly_scores_user_week"),
        Index("idx_weekly_scores_week", "week_start"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    week_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    best_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    quizzes: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
