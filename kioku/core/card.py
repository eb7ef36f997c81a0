"""
Card: the unit of study material.

A card couples its content (front text, optional reading, back text,
topic) with SM-2 scheduling state. Cards are plain values: the scheduler
returns updated copies and repositories store them.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from .clock import Clock, SystemClock, to_utc
from .status import CardStatus, classify_status

UNASSIGNED_TOPIC = "unassigned"
INITIAL_EASINESS = 2.5


def new_card_id() -> str:
    """Generate an opaque card identifier."""
    return uuid.uuid4().hex


@dataclass
class Card:
    """A flashcard with its SM-2 scheduling state."""

    id: str
    front: str
    back: str
    reading: str | None = None
    topic: str = UNASSIGNED_TOPIC

    # SM-2 state
    repetitions: int = 0  # Consecutive passed reviews since last reset
    easiness_factor: float = INITIAL_EASINESS
    interval_days: int = 0  # 0 until first scheduled
    next_review_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def new(
        cls,
        front: str,
        back: str,
        reading: str | None = None,
        topic: str | None = None,
        clock: Clock | None = None,
        card_id: str | None = None,
    ) -> Card:
        """
        Create a fresh, immediately due card.

        Args:
            front: Front-language text
            back: Back-language text
            reading: Optional pronunciation aid
            topic: Optional topic label (defaults to the unassigned sentinel)
            clock: Clock used for the initial due timestamp
            card_id: Explicit identifier (generated when omitted)

        Returns:
            Card with repetitions=0, easiness_factor=2.5, interval_days=0
        """
        now = (clock or SystemClock()).now()
        return cls(
            id=card_id or new_card_id(),
            front=front.strip(),
            back=back.strip(),
            reading=(reading or "").strip() or None,
            topic=(topic or "").strip() or UNASSIGNED_TOPIC,
            next_review_at=now,
            created_at=now,
        )

    @property
    def status(self) -> CardStatus:
        return classify_status(self.repetitions)

    def is_due(self, now: datetime) -> bool:
        """Check if this card is due at the given moment."""
        # Same-zone datetimes compare by wall time and ignore fold
        return to_utc(self.next_review_at) <= to_utc(now)

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly record."""
        data = asdict(self)
        data["next_review_at"] = self.next_review_at.isoformat()
        data["created_at"] = self.created_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Card:
        """Create a Card from a plain record (as produced by to_dict)."""
        next_review_at = data.get("next_review_at")
        created_at = data.get("created_at")
        return cls(
            id=data["id"],
            front=data["front"],
            back=data["back"],
            reading=data.get("reading") or None,
            topic=data.get("topic") or UNASSIGNED_TOPIC,
            repetitions=int(data.get("repetitions", 0)),
            easiness_factor=float(data.get("easiness_factor", INITIAL_EASINESS)),
            interval_days=int(data.get("interval_days", 0)),
            next_review_at=_parse_datetime(next_review_at),
            created_at=_parse_datetime(created_at),
        )


def _parse_datetime(value: datetime | str | None) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value
