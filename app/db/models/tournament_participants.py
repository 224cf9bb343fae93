from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class TournamentParticipant(Base):
    __tablename__ = "tournament_participants"
    __table_args__ = (
        CheckConstraint(
            "status IN ('REGISTERED','ACTIVE','FINISHED')",
            name="ck_tournament_participants_status",
        ),
        CheckConstraint(
            "total_score >= 0",
            name="ck_tournament_participants_total_score_non_negative",
        ),
        CheckConstraint(
            "current_stage >= 1",
            name="ck_tournament_participants_current_stage_positive",
        ),
        Index(
            "idx_tournament_participants_tournament_score",
            "tournament_id",
            "total_score",
        ),
        Index("idx_tournament_participants_user", "user_id"),
    )

    tournament_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("tournaments.id"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), primary_key=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    total_score: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_stage: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
