"""
SQL Card Repository.

SQLAlchemy-backed CardRepository for one learner. Each operation runs in
its own transaction; update_card rewrites a single row, never the whole
collection.
"""

from __future__ import annotations

from sqlalchemy import Engine, delete, func, select

from loguru import logger

from kioku.core.card import Card
from kioku.core.errors import CardNotFound

from .database import make_session_factory, session_scope
from .models import CardRow
from .repository import CardFilter, StudyMode


def _to_card(row: CardRow) -> Card:
    return Card(
        id=row.id,
        front=row.front,
        back=row.back,
        reading=row.reading,
        topic=row.topic,
        repetitions=row.repetitions,
        easiness_factor=row.easiness_factor,
        interval_days=row.interval_days,
        next_review_at=row.next_review_at,
        created_at=row.created_at,
    )


class SqlCardRepository:
    """One learner's cards in a SQL database."""

    def __init__(self, engine: Engine, learner_id: str):
        """
        Initialize the repository.

        Args:
            engine: Engine with the card tables created (see create_db_engine)
            learner_id: Owner of the collection
        """
        self.engine = engine
        self.learner_id = learner_id
        self._factory = make_session_factory(engine)

    def _filtered(self, stmt, card_filter: CardFilter):
        stmt = stmt.where(CardRow.learner_id == self.learner_id)
        if card_filter.mode is StudyMode.DUE:
            stmt = stmt.where(CardRow.next_review_at <= card_filter.as_of)
        elif card_filter.mode is StudyMode.TOPIC:
            stmt = stmt.where(CardRow.topic == card_filter.topic)
        return stmt

    # =========================================================================
    # CardRepository
    # =========================================================================

    def get_card(self, card_id: str) -> Card | None:
        with session_scope(self._factory) as session:
            row = session.get(CardRow, (self.learner_id, card_id))
            return _to_card(row) if row is not None else None

    def update_card(self, card: Card) -> None:
        """
        Write back a card's scheduling state.

        Raises:
            CardNotFound: if the learner has no card with this id
        """
        with session_scope(self._factory) as session:
            row = session.get(CardRow, (self.learner_id, card.id), with_for_update=True)
            if row is None:
                raise CardNotFound(card.id)
            row.repetitions = card.repetitions
            row.easiness_factor = card.easiness_factor
            row.interval_days = card.interval_days
            row.next_review_at = card.next_review_at

    def list_cards(self, card_filter: CardFilter) -> list[str]:
        stmt = self._filtered(select(CardRow.id), card_filter)
        if card_filter.mode is StudyMode.DUE:
            stmt = stmt.order_by(
                CardRow.next_review_at.asc(), CardRow.interval_days.asc(), CardRow.id.asc()
            )
        else:
            stmt = stmt.order_by(CardRow.created_at.asc(), CardRow.id.asc())
        with session_scope(self._factory) as session:
            return list(session.scalars(stmt))

    def count_cards(self, card_filter: CardFilter) -> int:
        stmt = self._filtered(select(func.count()).select_from(CardRow), card_filter)
        with session_scope(self._factory) as session:
            return session.scalar(stmt) or 0

    # =========================================================================
    # Collection Management
    # =========================================================================

    def add_card(self, card: Card) -> Card:
        with session_scope(self._factory) as session:
            session.add(
                CardRow(
                    learner_id=self.learner_id,
                    id=card.id,
                    front=card.front,
                    back=card.back,
                    reading=card.reading,
                    topic=card.topic,
                    repetitions=card.repetitions,
                    easiness_factor=card.easiness_factor,
                    interval_days=card.interval_days,
                    next_review_at=card.next_review_at,
                    created_at=card.created_at,
                )
            )
        logger.debug(f"Added card {card.id} for learner {self.learner_id}")
        return card

    def delete_card(self, card_id: str) -> None:
        with session_scope(self._factory) as session:
            result = session.execute(
                delete(CardRow).where(
                    CardRow.learner_id == self.learner_id, CardRow.id == card_id
                )
            )
            if result.rowcount == 0:
                raise CardNotFound(card_id)
        logger.debug(f"Deleted card {card_id} for learner {self.learner_id}")

    def list_topics(self) -> dict[str, int]:
        stmt = (
            select(CardRow.topic, func.count())
            .where(CardRow.learner_id == self.learner_id)
            .group_by(CardRow.topic)
            .order_by(CardRow.topic)
        )
        with session_scope(self._factory) as session:
            return {topic: count for topic, count in session.execute(stmt)}

    def all_cards(self) -> list[Card]:
        stmt = (
            select(CardRow)
            .where(CardRow.learner_id == self.learner_id)
            .order_by(CardRow.created_at.asc(), CardRow.id.asc())
        )
        with session_scope(self._factory) as session:
            return [_to_card(row) for row in session.scalars(stmt)]
