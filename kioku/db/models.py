"""
SQLAlchemy table models for the card store.

Every learner owns an independent collection: rows are keyed by
(learner_id, id) so one learner's writes never touch another's rows.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from kioku.core.card import UNASSIGNED_TOPIC


class UTCDateTime(TypeDecorator):
    """Stores aware datetimes as naive UTC and returns them UTC-aware."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class Base(DeclarativeBase):
    pass


class CardRow(Base):
    """A learner's flashcard with SM-2 state."""

    __tablename__ = "cards"

    learner_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    front: Mapped[str] = mapped_column(Text, nullable=False)
    back: Mapped[str] = mapped_column(Text, nullable=False)
    reading: Mapped[str | None] = mapped_column(Text)
    topic: Mapped[str] = mapped_column(String(200), default=UNASSIGNED_TOPIC, nullable=False)

    # SM-2 state
    repetitions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    easiness_factor: Mapped[float] = mapped_column(Float, default=2.5, nullable=False)
    interval_days: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    next_review_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    __table_args__ = (
        Index("idx_cards_learner_next_review", "learner_id", "next_review_at"),
        Index("idx_cards_learner_topic", "learner_id", "topic"),
    )
