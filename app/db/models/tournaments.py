from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class Tournament(Base):
    __tablename__ = "tournaments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('UPCOMING','ACTIVE','FINISHED','CANCELLED')",
            name="ck_tournaments_status",
        ),
        CheckConstraint("entry_fee_xp >= 0", name="ck_tournaments_entry_fee_non_negative"),
        CheckConstraint(
            "max_participants IS NULL OR max_participants >= 1",
            name="ck_tournaments_max_participants_positive",
        ),
        CheckConstraint("ends_at > starts_at", name="ck_tournaments_window_order"),
        Index("idx_tournaments_status_starts_at", "status", "starts_at"),
        Index("idx_tournaments_status_ends_at", "status", "ends_at"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    slug: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    entry_fee_xp: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    max_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
