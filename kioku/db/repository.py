"""
Card repositories.

The study core talks to storage only through the CardRepository protocol:
resolve an id, write back a rescheduled card, list ids for a filter.
InMemoryCardRepository is the reference implementation; the SQL-backed
one lives in sql_repository.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Protocol

from kioku.core.card import Card
from kioku.core.clock import to_utc
from kioku.core.errors import CardNotFound


class StudyMode(str, Enum):
    """Which cards a session is built from."""

    DUE = "due"
    TOPIC = "topic"
    ALL = "all"


@dataclass(frozen=True)
class CardFilter:
    """Selection criteria for list_cards / count_cards."""

    mode: StudyMode = StudyMode.ALL
    topic: str | None = None
    as_of: datetime | None = None  # Required for DUE

    def __post_init__(self) -> None:
        if self.mode is StudyMode.DUE and self.as_of is None:
            raise ValueError("A due filter needs an as_of timestamp")
        if self.mode is StudyMode.TOPIC and not self.topic:
            raise ValueError("A topic filter needs a topic")

    def matches(self, card: Card) -> bool:
        if self.mode is StudyMode.DUE:
            return card.is_due(self.as_of)
        if self.mode is StudyMode.TOPIC:
            return card.topic == self.topic
        return True


class CardRepository(Protocol):
    """One learner's card collection."""

    def get_card(self, card_id: str) -> Card | None: ...

    def update_card(self, card: Card) -> None: ...

    def list_cards(self, card_filter: CardFilter) -> list[str]: ...

    def count_cards(self, card_filter: CardFilter) -> int: ...

    def add_card(self, card: Card) -> Card: ...

    def delete_card(self, card_id: str) -> None: ...

    def list_topics(self) -> dict[str, int]: ...

    def all_cards(self) -> list[Card]: ...


def sort_for_filter(cards: list[Card], card_filter: CardFilter) -> list[Card]:
    """Due cards come most-overdue first; everything else in creation order."""
    if card_filter.mode is StudyMode.DUE:
        return sorted(cards, key=lambda c: (to_utc(c.next_review_at), c.interval_days, c.id))
    return sorted(cards, key=lambda c: (to_utc(c.created_at), c.id))


class InMemoryCardRepository:
    """Dict-backed repository. Stores copies so callers cannot mutate state in place."""

    def __init__(self, cards: list[Card] | None = None):
        self._cards: dict[str, Card] = {}
        for card in cards or []:
            self.add_card(card)

    def get_card(self, card_id: str) -> Card | None:
        card = self._cards.get(card_id)
        return replace(card) if card is not None else None

    def update_card(self, card: Card) -> None:
        if card.id not in self._cards:
            raise CardNotFound(card.id)
        self._cards[card.id] = replace(card)

    def list_cards(self, card_filter: CardFilter) -> list[str]:
        matching = [card for card in self._cards.values() if card_filter.matches(card)]
        return [card.id for card in sort_for_filter(matching, card_filter)]

    def count_cards(self, card_filter: CardFilter) -> int:
        return sum(1 for card in self._cards.values() if card_filter.matches(card))

    def add_card(self, card: Card) -> Card:
        if card.id in self._cards:
            raise ValueError(f"Duplicate card id: {card.id}")
        self._cards[card.id] = replace(card)
        return card

    def delete_card(self, card_id: str) -> None:
        if self._cards.pop(card_id, None) is None:
            raise CardNotFound(card_id)

    def list_topics(self) -> dict[str, int]:
        topics: dict[str, int] = {}
        for card in self._cards.values():
            topics[card.topic] = topics.get(card.topic, 0) + 1
        return dict(sorted(topics.items()))

    def all_cards(self) -> list[Card]:
        return [replace(card) for card in sort_for_filter(list(self._cards.values()), CardFilter())]

    def __len__(self) -> int:
        return len(self._cards)
