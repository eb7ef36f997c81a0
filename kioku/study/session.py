"""
Study Session: the queue state machine for one study run.

A session is an ordered queue of card ids plus a cursor. The manager
hands out the card at the cursor, takes a grade for exactly that card,
and then advances. Cards graded below the retry threshold are appended
to the end of the queue instead of being rescheduled.

States:
    IDLE -> ACTIVE -> (present card, await grade)* -> EXHAUSTED

EXHAUSTED is terminal; only start_session leaves it.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from kioku.core.card import Card
from kioku.core.errors import (
    EmptySelection,
    SessionDesync,
    SessionExhausted,
    StaleCardReference,
)
from kioku.core.scheduler import SM2Scheduler, validate_grade

from .policy import ReviewDecision, ReviewPolicy

if TYPE_CHECKING:
    from collections.abc import Iterable

    from kioku.db.repository import CardRepository


# =============================================================================
# Session Value
# =============================================================================


class SessionState(Enum):
    """Lifecycle of a SessionManager."""

    IDLE = "idle"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


@dataclass
class StudySession:
    """Serializable session queue and cursor."""

    queue: list[str]
    cursor: int = 0
    mode: str = "all"
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    started_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def is_exhausted(self) -> bool:
        return self.cursor >= len(self.queue)

    @property
    def remaining(self) -> int:
        return max(0, len(self.queue) - self.cursor)

    @property
    def current_id(self) -> str | None:
        if self.is_exhausted:
            return None
        return self.queue[self.cursor]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> StudySession:
        """Create from dictionary."""
        cursor = int(data.get("cursor", 0))
        if cursor < 0:
            raise ValueError(f"Session cursor must be non-negative, got {cursor}")
        return cls(
            queue=[str(card_id) for card_id in data["queue"]],
            cursor=cursor,
            mode=data.get("mode", "all"),
            session_id=data.get("session_id") or uuid.uuid4().hex[:12],
            started_at=data.get("started_at") or datetime.now(timezone.utc).isoformat(),
        )


@dataclass(frozen=True)
class GradeOutcome:
    """What happened to one graded card."""

    card_id: str
    quality: int
    decision: ReviewDecision
    updated_card: Card | None = None  # Set when the card was rescheduled
    stale: bool = False  # Card vanished before it could be rescheduled

    @property
    def rescheduled(self) -> bool:
        return self.updated_card is not None

    @property
    def requeued(self) -> bool:
        return self.decision.requeue


# =============================================================================
# Session Manager
# =============================================================================


class SessionManager:
    """
    Owns one learner's study run and mediates between queue and scheduler.

    Not thread-safe: callers serialize access per learner (see StudyService).
    """

    def __init__(
        self,
        repository: CardRepository,
        scheduler: SM2Scheduler | None = None,
        policy: ReviewPolicy | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the manager.

        Args:
            repository: Resolves card ids and stores rescheduled cards
            scheduler: SM-2 scheduler (creates default if None)
            policy: Grade -> reschedule/requeue mapping (default threshold 4)
            rng: Random source for shuffling (fresh Random if None)
        """
        self.repository = repository
        self.scheduler = scheduler or SM2Scheduler()
        self.policy = policy or ReviewPolicy()
        self.rng = rng or random.Random()
        self.session: StudySession | None = None
        self._state = SessionState.IDLE

    @property
    def state(self) -> SessionState:
        return self._state

    def start_session(
        self,
        candidate_ids: Iterable[str],
        shuffle: bool = True,
        mode: str = "all",
    ) -> StudySession:
        """
        Begin a new study run.

        Args:
            candidate_ids: Card ids selected by an external filter
            shuffle: Apply a uniform random permutation to the queue
            mode: Label of the selection that produced the candidates

        Returns:
            The new StudySession

        Raises:
            EmptySelection: if there are no candidates
        """
        queue = list(dict.fromkeys(candidate_ids))
        if not queue:
            raise EmptySelection()

        if shuffle:
            self.rng.shuffle(queue)

        self.session = StudySession(queue=queue, mode=mode)
        self._state = SessionState.ACTIVE

        logger.info(f"Session {self.session.session_id} started: {len(queue)} cards ({mode})")
        return self.session

    def resume(self, session: StudySession) -> StudySession:
        """Adopt a previously saved session."""
        if session.is_exhausted:
            raise SessionExhausted("Saved session has no cards left")
        self.session = session
        self._state = SessionState.ACTIVE
        logger.info(
            f"Session {session.session_id} resumed at {session.cursor}/{len(session.queue)}"
        )
        return session

    def current_card(self) -> str:
        """
        Get the id of the card to present now.

        Ids that no longer resolve are skipped.

        Raises:
            SessionExhausted: when the queue is consumed or no session is active
        """
        return self.current().id

    def current(self) -> Card:
        """Resolve the card to present now, skipping ids that no longer resolve."""
        session = self._require_session()

        while not session.is_exhausted:
            card_id = session.queue[session.cursor]
            try:
                return self._resolve(card_id)
            except StaleCardReference as exc:
                logger.debug(f"Skipping stale card in session {session.session_id}: {exc}")
                session.cursor += 1

        self._mark_exhausted()
        raise SessionExhausted()

    def grade(
        self,
        card_id: str,
        quality: int,
        *,
        reschedule: bool | None = None,
        requeue: bool | None = None,
    ) -> GradeOutcome:
        """
        Record a grade for the card at the cursor and advance.

        Args:
            card_id: Id of the card being graded (must match the cursor slot)
            quality: Grade 0-5
            reschedule: Override the policy's reschedule decision
            requeue: Override the policy's requeue decision

        Returns:
            GradeOutcome describing what was applied

        Raises:
            InvalidGrade: quality outside 0-5
            SessionDesync: card_id is not the card at the cursor (session aborted)
            SessionExhausted: the session has already been consumed
        """
        quality = validate_grade(quality)

        if self._state is SessionState.IDLE or self.session is None:
            logger.error(f"Grade for {card_id!r} received with no active session")
            raise SessionDesync(None, card_id)
        session = self.session
        if session.is_exhausted:
            self._mark_exhausted()
            raise SessionExhausted()

        expected = session.queue[session.cursor]
        if card_id != expected:
            logger.error(
                f"Session {session.session_id} desync at slot {session.cursor}: "
                f"expected {expected!r}, got {card_id!r}. Aborting session."
            )
            self.abandon()
            raise SessionDesync(expected, card_id)

        decision = self.policy.decide(quality)
        decision = ReviewDecision(
            reschedule=decision.reschedule if reschedule is None else reschedule,
            requeue=decision.requeue if requeue is None else requeue,
        )

        updated: Card | None = None
        stale = False
        if decision.reschedule:
            try:
                card = self._resolve(card_id)
            except StaleCardReference as exc:
                logger.debug(f"Not rescheduling: {exc}")
                stale = True
            else:
                updated = self.scheduler.update_card(card, quality)
                self.repository.update_card(updated)

        if decision.requeue:
            session.queue.append(card_id)

        session.cursor += 1

        logger.debug(
            f"Graded {card_id} q={quality}: reschedule={decision.reschedule}, "
            f"requeue={decision.requeue}, cursor={session.cursor}/{len(session.queue)}"
        )

        if session.is_exhausted:
            self._mark_exhausted()

        return GradeOutcome(
            card_id=card_id,
            quality=quality,
            decision=decision,
            updated_card=updated,
            stale=stale,
        )

    def is_exhausted(self) -> bool:
        """True iff a session exists and its cursor has passed the end of the queue."""
        return self.session is not None and self.session.is_exhausted

    def abandon(self) -> None:
        """Drop an active session. No-op when idle or exhausted."""
        if self._state is not SessionState.ACTIVE:
            return
        if self.session is not None:
            logger.info(f"Session {self.session.session_id} abandoned")
        self.session = None
        self._state = SessionState.IDLE

    # =========================================================================
    # Internals
    # =========================================================================

    def _require_session(self) -> StudySession:
        if self.session is None:
            raise SessionExhausted("No active session")
        return self.session

    def _resolve(self, card_id: str) -> Card:
        card = self.repository.get_card(card_id)
        if card is None:
            raise StaleCardReference(card_id)
        return card

    def _mark_exhausted(self) -> None:
        if self._state is not SessionState.EXHAUSTED and self.session is not None:
            logger.info(
                f"Session {self.session.session_id} exhausted after {self.session.cursor} slots"
            )
        self._state = SessionState.EXHAUSTED
