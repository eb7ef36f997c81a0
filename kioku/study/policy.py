"""
Review policy: what a grade does inside a running session.

Two separate concerns meet when a learner grades a card:

- reschedule: run the SM-2 update and persist the new due date
- requeue: put the card back at the end of this session's queue

The scheduler has its own pass/fail boundary (grade 3). The session has a
stricter retry boundary (grade 4 by default): a card graded below it comes
back later in the same session and is not rescheduled yet.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReviewDecision:
    """The explicit two-flag outcome of grading one card."""

    reschedule: bool
    requeue: bool


@dataclass(frozen=True)
class ReviewPolicy:
    """Maps a grade to a ReviewDecision."""

    requeue_below: int = 4

    def decide(self, quality: int) -> ReviewDecision:
        if quality < self.requeue_below:
            return ReviewDecision(reschedule=False, requeue=True)
        return ReviewDecision(reschedule=True, requeue=False)
