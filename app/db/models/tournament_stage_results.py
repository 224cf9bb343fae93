from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, ForeignKey, Integer, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class TournamentStageResult(Base):
    __tablename__ = "tournament_stage_results"
    __table_args__ = (
        CheckConstraint("score >= 0", name="ck_tournament_stage_results_score_non_negative"),
        CheckConstraint(
            "rank IS NULL OR rank >= 1",
            name="ck_tournament_stage_results_rank_positive",
        ),
    )

    stage_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("tournament_stages.id"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), primary_key=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
