"""
Integration Tests for the Study Flow.

Tests the learner path end to end:
1. Cards stored in SQLite
2. StudyService selects and queues them
3. Grades reschedule or requeue
4. Running sessions are saved and resumed
"""

import random
import threading
from datetime import timedelta

import pytest

from kioku.core.errors import EmptySelection, SessionDesync, SessionExhausted
from kioku.db.database import create_db_engine
from kioku.db.repository import StudyMode
from kioku.db.session_store import SessionStore
from kioku.db.sql_repository import SqlCardRepository
from kioku.study.service import StudyService

pytestmark = pytest.mark.integration


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'kioku.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "sessions")


@pytest.fixture
def make_service(engine, store, clock, scheduler):
    def _make(session_store=store):
        return StudyService(
            repository_factory=lambda learner_id: SqlCardRepository(engine, learner_id),
            clock=clock,
            scheduler=scheduler,
            session_store=session_store,
            rng=random.Random(1),
        )

    return _make


@pytest.fixture
def service(make_service, sample_cards):
    service = make_service()
    for card in sample_cards:
        service.repository("alice").add_card(card)
    return service


def _drain(service, learner_id, grades):
    """Answer every card with the next grade queued for it."""
    seen = []
    while True:
        try:
            card = service.current(learner_id)
        except SessionExhausted:
            return seen
        seen.append(card.id)
        service.grade(learner_id, card.id, grades[card.id].pop(0))


class TestStudyRun:
    def test_due_session_reschedules_everything(self, service, clock):
        service.start("alice", mode=StudyMode.DUE, shuffle=False)

        seen = _drain(service, "alice", {"c1": [5], "c2": [4], "c3": [0, 4]})

        assert seen == ["c1", "c2", "c3", "c3"]
        assert service.due_count("alice") == 0
        clock.advance(days=1)
        assert service.due_count("alice") == 3

    def test_topic_session(self, service):
        session = service.start("alice", mode=StudyMode.TOPIC, topic="nature", shuffle=False)
        assert session.queue == ["c1", "c2"]

    def test_nothing_due(self, service):
        service.start("alice", mode=StudyMode.DUE, shuffle=False)
        _drain(service, "alice", {"c1": [5], "c2": [5], "c3": [5]})

        with pytest.raises(EmptySelection):
            service.start("alice", mode=StudyMode.DUE)

    def test_new_learner_has_nothing(self, service):
        with pytest.raises(EmptySelection):
            service.start("bob", mode=StudyMode.ALL)

    def test_desync_clears_saved_session(self, service, store):
        service.start("alice", mode=StudyMode.ALL, shuffle=False)
        service.current("alice")

        with pytest.raises(SessionDesync):
            service.grade("alice", "c3", 5)

        assert store.load("alice") is None

    def test_card_deleted_mid_session(self, service):
        service.start("alice", mode=StudyMode.ALL, shuffle=False)
        service.repository("alice").delete_card("c2")

        seen = _drain(service, "alice", {"c1": [5], "c3": [5]})

        assert seen == ["c1", "c3"]


class TestResume:
    def test_resume_after_restart(self, service, make_service, store):
        service.start("alice", mode=StudyMode.ALL, shuffle=False)
        service.grade("alice", service.current("alice").id, 2)

        saved = store.load("alice")
        assert saved.queue == ["c1", "c2", "c3", "c1"]
        assert saved.cursor == 1

        restarted = make_service()
        session = restarted.resume("alice")

        assert session is not None
        assert restarted.current("alice").id == "c2"

    def test_finished_session_is_cleared(self, service, store):
        service.start("alice", mode=StudyMode.TOPIC, topic="verbs")
        _drain(service, "alice", {"c3": [5]})

        assert store.load("alice") is None
        assert service.resume("alice") is None

    def test_abandon_clears(self, service, store):
        service.start("alice", mode=StudyMode.ALL)
        service.abandon("alice")

        assert store.load("alice") is None

    def test_resume_without_store(self, make_service):
        assert make_service(session_store=None).resume("alice") is None


class TestConcurrentLearners:
    def test_learners_study_in_parallel(self, make_service, make_card, start_time):
        service = make_service()
        learners = [f"learner{i}" for i in range(6)]
        for learner_id in learners:
            repo = service.repository(learner_id)
            for n in range(5):
                repo.add_card(make_card(f"{learner_id}-{n}"))

        errors = []

        def run(learner_id):
            try:
                service.start(learner_id, mode=StudyMode.DUE)
                while True:
                    try:
                        card = service.current(learner_id)
                    except SessionExhausted:
                        break
                    service.grade(learner_id, card.id, 5)
            except Exception as exc:  # collected for the assertion below
                errors.append(exc)

        threads = [threading.Thread(target=run, args=(lid,)) for lid in learners]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        for learner_id in learners:
            cards = service.repository(learner_id).all_cards()
            assert [c.repetitions for c in cards] == [1] * 5
            assert all(c.next_review_at == start_time + timedelta(days=1) for c in cards)
