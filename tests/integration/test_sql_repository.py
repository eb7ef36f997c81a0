"""
Integration tests for SqlCardRepository against an on-disk SQLite database.
"""

from datetime import timedelta, timezone

import pytest

from kioku.core.errors import CardNotFound
from kioku.db.database import create_db_engine
from kioku.db.repository import CardFilter, StudyMode
from kioku.db.sql_repository import SqlCardRepository

pytestmark = pytest.mark.integration


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'data' / 'kioku.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def sql_repo(engine, sample_cards):
    repo = SqlCardRepository(engine, "alice")
    for card in sample_cards:
        repo.add_card(card)
    return repo


class TestSqlRepository:
    def test_round_trip_preserves_fields(self, sql_repo, sample_cards):
        stored = sql_repo.get_card("c1")

        assert stored == sample_cards[0]
        assert stored.next_review_at.tzinfo is not None
        assert stored.reading == "みず"

    def test_missing_card(self, sql_repo):
        assert sql_repo.get_card("nope") is None

    def test_update_writes_scheduling_state(self, sql_repo, scheduler):
        updated = scheduler.update_card(sql_repo.get_card("c2"), 5)

        sql_repo.update_card(updated)

        stored = sql_repo.get_card("c2")
        assert stored.repetitions == 1
        assert stored.interval_days == 1
        assert stored.easiness_factor == pytest.approx(2.6)
        assert stored.next_review_at == updated.next_review_at

    def test_update_unknown_card(self, sql_repo, make_card):
        with pytest.raises(CardNotFound):
            sql_repo.update_card(make_card("ghost"))

    def test_due_filter_and_order(self, sql_repo, scheduler, start_time):
        sql_repo.update_card(scheduler.update_card(sql_repo.get_card("c1"), 5))

        due = sql_repo.list_cards(CardFilter(mode=StudyMode.DUE, as_of=start_time))

        assert due == ["c2", "c3"]
        assert sql_repo.count_cards(CardFilter(mode=StudyMode.DUE, as_of=start_time)) == 2
        tomorrow = start_time + timedelta(days=1)
        assert sql_repo.count_cards(CardFilter(mode=StudyMode.DUE, as_of=tomorrow)) == 3

    def test_due_filter_with_other_offset(self, sql_repo, start_time):
        as_of = start_time.astimezone(timezone(timedelta(hours=9)))

        assert sql_repo.count_cards(CardFilter(mode=StudyMode.DUE, as_of=as_of)) == 3

    def test_topic_filter(self, sql_repo):
        assert sql_repo.list_cards(CardFilter(mode=StudyMode.TOPIC, topic="verbs")) == ["c3"]

    def test_topics(self, sql_repo):
        assert sql_repo.list_topics() == {"nature": 2, "verbs": 1}

    def test_delete(self, sql_repo):
        sql_repo.delete_card("c3")

        assert sql_repo.get_card("c3") is None
        with pytest.raises(CardNotFound):
            sql_repo.delete_card("c3")

    def test_learners_are_isolated(self, engine, sql_repo, make_card):
        bob = SqlCardRepository(engine, "bob")
        bob.add_card(make_card("c1", "月", "луна"))

        assert bob.list_cards(CardFilter()) == ["c1"]
        assert bob.get_card("c1").front == "月"
        assert sql_repo.get_card("c1").front == "水"
        assert len(sql_repo.all_cards()) == 3

    def test_survives_new_engine(self, tmp_path, sql_repo):
        fresh = create_db_engine(f"sqlite:///{tmp_path / 'data' / 'kioku.db'}")
        try:
            assert len(SqlCardRepository(fresh, "alice").all_cards()) == 3
        finally:
            fresh.dispose()


def test_in_memory_engine_shares_one_database(make_card):
    engine = create_db_engine("sqlite://")
    repo = SqlCardRepository(engine, "alice")

    repo.add_card(make_card("m1"))

    assert SqlCardRepository(engine, "alice").get_card("m1") is not None
