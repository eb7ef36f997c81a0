"""
SM-2 Spaced Repetition Scheduler.

Implements the SuperMemo-2 recurrence with:
- A one-day interval after any failed recall (no multi-day penalty)
- A capped maximum interval to bound the review backlog
- Calendar-day due dates in the learner's time zone

SM-2 Grade Scale:
0 - Complete blackout, wrong response
1 - Incorrect, but upon seeing answer remembered
2 - Incorrect, but answer seemed easy to recall
3 - Correct, but with significant difficulty
4 - Correct, with some hesitation
5 - Correct, with perfect recall
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from loguru import logger

from .card import Card
from .clock import Clock, SystemClock, add_calendar_days
from .errors import InvalidGrade

MIN_GRADE = 0
MAX_GRADE = 5


@dataclass(frozen=True)
class SM2Config:
    """Configuration for SM-2 algorithm."""

    minimum_easiness: float = 1.3
    first_interval: int = 1  # Days after the first passed review
    second_interval: int = 6  # Days after the second passed review
    max_interval_days: int = 365
    passing_grade: int = 3  # Grades below this reset the card


def validate_grade(quality: object) -> int:
    """
    Check that a grade is an integer on the 0-5 scale.

    Raises:
        InvalidGrade: for non-integers, booleans and out-of-range values
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidGrade(quality)
    if not MIN_GRADE <= quality <= MAX_GRADE:
        raise InvalidGrade(quality)
    return quality


def easiness_delta(quality: int) -> float:
    """EF' - EF for a passed grade: 0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)."""
    miss = MAX_GRADE - quality
    return 0.1 - miss * (0.08 + miss * 0.02)


class SM2Scheduler:
    """
    Applies the SM-2 algorithm to cards.

    Each card carries:
    - Easiness Factor (EF): How easy the item is (2.5 default, min 1.3)
    - Interval: Days until next review (1..365 once scheduled)
    - Repetitions: Consecutive passed recalls since the last failure
    """

    def __init__(self, config: SM2Config | None = None, clock: Clock | None = None):
        """
        Initialize SM-2 scheduler.

        Args:
            config: Custom configuration (uses defaults if None)
            clock: Source of the current time (system clock if None)
        """
        self.config = config or SM2Config()
        self.clock = clock or SystemClock()

    def update_card(self, card: Card, quality: int) -> Card:
        """
        Calculate the card's next review based on a recall grade.

        Args:
            card: Current card
            quality: User grade (0-5)

        Returns:
            A new Card with updated repetitions, easiness, interval and due date
        """
        quality = validate_grade(quality)
        cfg = self.config

        easiness = card.easiness_factor
        if quality < cfg.passing_grade:
            # Failed - back to the start, easiness untouched
            repetitions = 0
            interval = cfg.first_interval
        else:
            easiness = max(card.easiness_factor + easiness_delta(quality), cfg.minimum_easiness)

            # Branch on the count before this review
            if card.repetitions == 0:
                interval = cfg.first_interval
            elif card.repetitions == 1:
                interval = cfg.second_interval
            else:
                interval = round(card.interval_days * easiness)
            repetitions = card.repetitions + 1

        interval = max(1, min(interval, cfg.max_interval_days))
        next_review_at = add_calendar_days(self.clock.now(), interval)

        logger.debug(
            f"SM-2 update for {card.id}: q={quality}, reps {card.repetitions}->{repetitions}, "
            f"ef {card.easiness_factor:.2f}->{easiness:.2f}, interval={interval}d"
        )

        return replace(
            card,
            repetitions=repetitions,
            easiness_factor=easiness,
            interval_days=interval,
            next_review_at=next_review_at,
        )
