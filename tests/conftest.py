"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from kioku.core.card import Card  # noqa: E402
from kioku.core.clock import FixedClock  # noqa: E402
from kioku.core.scheduler import SM2Scheduler  # noqa: E402
from kioku.db.repository import InMemoryCardRepository  # noqa: E402
from kioku.study.session import SessionManager  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite on disk)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture
def start_time():
    """A fixed, timezone-aware starting moment."""
    return datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(start_time):
    """Provide a clock that only moves when told to."""
    return FixedClock(start_time)


@pytest.fixture
def scheduler(clock):
    """SM-2 scheduler bound to the fixed clock."""
    return SM2Scheduler(clock=clock)


@pytest.fixture
def make_card(clock):
    """Factory for fresh cards with predictable ids."""

    def _make(card_id: str, front: str | None = None, back: str | None = None, **kwargs):
        card = Card.new(
            front or f"front-{card_id}",
            back or f"back-{card_id}",
            clock=clock,
            card_id=card_id,
            reading=kwargs.pop("reading", None),
            topic=kwargs.pop("topic", None),
        )
        for name, value in kwargs.items():
            setattr(card, name, value)
        return card

    return _make


@pytest.fixture
def sample_cards(make_card):
    """A small Japanese-Russian deck."""
    return [
        make_card("c1", "水", "вода", reading="みず", topic="nature"),
        make_card("c2", "火", "огонь", reading="ひ", topic="nature"),
        make_card("c3", "食べる", "есть", reading="たべる", topic="verbs"),
    ]


@pytest.fixture
def repository(sample_cards):
    """In-memory repository seeded with the sample deck."""
    return InMemoryCardRepository(sample_cards)


@pytest.fixture
def manager(repository, scheduler):
    """SessionManager with a seeded random source."""
    return SessionManager(repository, scheduler=scheduler, rng=random.Random(42))
