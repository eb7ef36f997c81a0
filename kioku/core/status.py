"""Learning status labels derived from a card's repetition count."""

from __future__ import annotations

from enum import Enum


class CardStatus(Enum):
    """How well a card is learned, in increasing order."""

    NEW = "new"
    LIGHTLY_LEARNED = "lightly learned"
    NEARLY_LEARNED = "nearly learned"
    LEARNED = "learned"

    @property
    def rank(self) -> int:
        return _ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CardStatus):
            return NotImplemented
        return self.rank < other.rank

    @property
    def label(self) -> str:
        return self.value


_ORDER = [
    CardStatus.NEW,
    CardStatus.LIGHTLY_LEARNED,
    CardStatus.NEARLY_LEARNED,
    CardStatus.LEARNED,
]


def classify_status(repetitions: int) -> CardStatus:
    """
    Map consecutive successful repetitions to a display status.

    0 is new, 1-2 lightly learned, 3-5 nearly learned, more than 5 learned.
    Display only: the status never feeds back into scheduling.
    """
    if repetitions <= 0:
        return CardStatus.NEW
    if repetitions <= 2:
        return CardStatus.LIGHTLY_LEARNED
    if repetitions <= 5:
        return CardStatus.NEARLY_LEARNED
    return CardStatus.LEARNED
