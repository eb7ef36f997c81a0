"""
Storage adapters.

Components:
- CardRepository: Protocol the study core depends on
- InMemoryCardRepository: Dict-backed reference implementation
- SqlCardRepository: SQLAlchemy-backed, one learner per instance
- SessionStore: JSON save/resume of running sessions
"""

from .database import create_db_engine, init_db, session_scope
from .repository import CardFilter, CardRepository, InMemoryCardRepository, StudyMode
from .session_store import SessionStore
from .sql_repository import SqlCardRepository

__all__ = [
    "CardFilter",
    "CardRepository",
    "InMemoryCardRepository",
    "StudyMode",
    "SqlCardRepository",
    "SessionStore",
    "create_db_engine",
    "init_db",
    "session_scope",
]
