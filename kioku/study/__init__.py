"""
Study sessions.

Components:
- ReviewPolicy / ReviewDecision: grade -> reschedule / requeue
- StudySession: Serializable queue + cursor
- SessionManager: Queue state machine for one learner
- StudyService: Per-learner locking facade
"""

from .policy import ReviewDecision, ReviewPolicy
from .session import GradeOutcome, SessionManager, SessionState, StudySession
from .service import StudyService

__all__ = [
    "ReviewDecision",
    "ReviewPolicy",
    "GradeOutcome",
    "SessionManager",
    "SessionState",
    "StudySession",
    "StudyService",
]
