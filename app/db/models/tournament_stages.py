from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class TournamentStage(Base):
    __tablename__ = "tournament_stages"
    __table_args__ = (
        CheckConstraint('"order" >= 1', name="ck_tournament_stages_order_positive"),
        CheckConstraint(
            "score_multiplier > 0",
            name="ck_tournament_stages_multiplier_positive",
        ),
        CheckConstraint(
            "min_score IS NULL OR min_score >= 0",
            name="ck_tournament_stages_min_score_non_negative",
        ),
        CheckConstraint("top_n IS NULL OR top_n >= 1", name="ck_tournament_stages_top_n_positive"),
        UniqueConstraint("tournament_id", "order", name="uq_tournament_stages_tournament_order"),
        Index("idx_tournament_stages_quiz", "quiz_id"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    tournament_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("tournaments.id"),
        nullable=False,
    )
    quiz_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("quizzes.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    score_multiplier: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), nullable=False, server_default=text("1")
    )
    min_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    top_n: Mapped[int | None] = mapped_column(Integer, nullable=True)
    starts_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
