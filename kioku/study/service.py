"""
Study Service: per-learner entry point for hosts that serve many learners.

Each learner gets one SessionManager and one lock. Every operation on a
learner's session or collection runs under that learner's lock; learners
never contend with each other. A learner's slot is dropped once no
operation is using it and no session is active, so repository_factory
must hand back a view over durable storage.
"""

from __future__ import annotations

import random
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from loguru import logger

from kioku.core.card import Card
from kioku.core.clock import Clock, SystemClock
from kioku.core.scheduler import SM2Scheduler
from kioku.db.repository import CardFilter, CardRepository, StudyMode
from kioku.db.session_store import SessionStore

from .policy import ReviewPolicy
from .session import GradeOutcome, SessionManager, SessionState, StudySession


@dataclass
class _LearnerSlot:
    repository: CardRepository
    manager: SessionManager
    lock: threading.RLock = field(default_factory=threading.RLock)
    users: int = 0  # Operations holding or waiting for the lock


class StudyService:
    """
    Serializes study operations per learner.

    Persists the running session after every step when a SessionStore is
    configured, so an interrupted run can be resumed.
    """

    def __init__(
        self,
        repository_factory: Callable[[str], CardRepository],
        clock: Clock | None = None,
        scheduler: SM2Scheduler | None = None,
        policy: ReviewPolicy | None = None,
        session_store: SessionStore | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the service.

        Args:
            repository_factory: Builds the card repository for a learner id
            clock: Time source for due filtering and scheduling
            scheduler: SM-2 scheduler shared by all learners
            policy: In-session retry policy
            session_store: Optional persistence for running sessions
            rng: Random source for shuffling
        """
        self.repository_factory = repository_factory
        self.clock = clock or SystemClock()
        self.scheduler = scheduler or SM2Scheduler(clock=self.clock)
        self.policy = policy or ReviewPolicy()
        self.session_store = session_store
        self.rng = rng or random.Random()

        self._slots: dict[str, _LearnerSlot] = {}
        self._registry_lock = threading.Lock()

    @contextmanager
    def _locked(self, learner_id: str) -> Iterator[_LearnerSlot]:
        with self._registry_lock:
            slot = self._slots.get(learner_id)
            if slot is None:
                repository = self.repository_factory(learner_id)
                manager = SessionManager(
                    repository,
                    scheduler=self.scheduler,
                    policy=self.policy,
                    rng=self.rng,
                )
                slot = _LearnerSlot(repository=repository, manager=manager)
                self._slots[learner_id] = slot
            slot.users += 1
        try:
            with slot.lock:
                yield slot
        finally:
            with self._registry_lock:
                slot.users -= 1
                if slot.users == 0 and slot.manager.state is not SessionState.ACTIVE:
                    del self._slots[learner_id]

    def tracked_learners(self) -> list[str]:
        """Learners currently holding a manager (active session or operation in flight)."""
        with self._registry_lock:
            return sorted(self._slots)

    def repository(self, learner_id: str) -> CardRepository:
        with self._locked(learner_id) as slot:
            return slot.repository

    # =========================================================================
    # Selection
    # =========================================================================

    def select(
        self,
        learner_id: str,
        mode: StudyMode = StudyMode.DUE,
        topic: str | None = None,
    ) -> list[str]:
        """List candidate card ids for a study mode."""
        with self._locked(learner_id) as slot:
            card_filter = CardFilter(mode=mode, topic=topic, as_of=self.clock.now())
            return slot.repository.list_cards(card_filter)

    def due_count(self, learner_id: str) -> int:
        """Number of cards due now. This is what a daily reminder would forward."""
        with self._locked(learner_id) as slot:
            return slot.repository.count_cards(
                CardFilter(mode=StudyMode.DUE, as_of=self.clock.now())
            )

    # =========================================================================
    # Session Operations
    # =========================================================================

    def start(
        self,
        learner_id: str,
        mode: StudyMode = StudyMode.DUE,
        topic: str | None = None,
        shuffle: bool = True,
    ) -> StudySession:
        """
        Start a session from the cards matching a study mode.

        Raises:
            EmptySelection: if nothing matches
        """
        with self._locked(learner_id) as slot:
            card_filter = CardFilter(mode=mode, topic=topic, as_of=self.clock.now())
            candidates = slot.repository.list_cards(card_filter)
            session = slot.manager.start_session(candidates, shuffle=shuffle, mode=mode.value)
            self._save(learner_id, slot.manager)
            return session

    def resume(self, learner_id: str) -> StudySession | None:
        """Resume the learner's saved session, if there is one."""
        if self.session_store is None:
            return None
        with self._locked(learner_id) as slot:
            saved = self.session_store.load(learner_id)
            if saved is None:
                return None
            if saved.is_exhausted:
                self.session_store.clear(learner_id)
                return None
            return slot.manager.resume(saved)

    def current(self, learner_id: str) -> Card:
        """
        Resolve the card to present now.

        Cards deleted since the session started are skipped.

        Raises:
            SessionExhausted: when the queue is consumed
        """
        with self._locked(learner_id) as slot:
            try:
                return slot.manager.current()
            finally:
                self._save(learner_id, slot.manager)

    def grade(
        self,
        learner_id: str,
        card_id: str,
        quality: int,
        *,
        reschedule: bool | None = None,
        requeue: bool | None = None,
    ) -> GradeOutcome:
        """Grade the current card of the learner's session."""
        with self._locked(learner_id) as slot:
            try:
                return slot.manager.grade(
                    card_id, quality, reschedule=reschedule, requeue=requeue
                )
            finally:
                self._save(learner_id, slot.manager)

    def abandon(self, learner_id: str) -> None:
        """Discard the learner's running session."""
        with self._locked(learner_id) as slot:
            slot.manager.abandon()
            if self.session_store is not None:
                self.session_store.clear(learner_id)

    def _save(self, learner_id: str, manager: SessionManager) -> None:
        if self.session_store is None:
            return
        session = manager.session
        if session is None or session.is_exhausted:
            self.session_store.clear(learner_id)
            return
        self.session_store.save(learner_id, session)
        logger.debug(f"Saved session {session.session_id} for learner {learner_id}")
