from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "status IN ('IDLE','PLAYING','BLOCKED')",
            name="ck_users_status",
        ),
        CheckConstraint("xp >= 0", name="ck_users_xp_non_negative"),
        CheckConstraint("bonus_energy >= 0", name="ck_users_bonus_energy_non_negative"),
        Index("idx_users_username", "username"),
        Index("idx_users_xp", "xp"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    telegram_user_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    username: Mapped[str | None] = mapped_column(Text, nullable=True)
    first_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    xp: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    bonus_energy: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    bonus_energy_used: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    bonus_energy_earned: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    current_quiz_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("quizzes.id"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default=text("'IDLE'"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
