"""
Kioku core: card model and review scheduling.

Components:
- Card: Study material plus SM-2 state
- SM2Scheduler: Pure (card, grade) -> card update
- classify_status: Repetition count -> display status
- Clock: Injectable time source
"""

from .card import UNASSIGNED_TOPIC, Card
from .clock import Clock, FixedClock, SystemClock, add_calendar_days, to_utc
from .errors import (
    CardNotFound,
    EmptySelection,
    InvalidGrade,
    KiokuError,
    SessionDesync,
    SessionExhausted,
    StaleCardReference,
    StudyError,
)
from .scheduler import SM2Config, SM2Scheduler, validate_grade
from .status import CardStatus, classify_status

__all__ = [
    # Model
    "Card",
    "UNASSIGNED_TOPIC",
    "CardStatus",
    "classify_status",
    # Scheduling
    "SM2Config",
    "SM2Scheduler",
    "validate_grade",
    # Time
    "Clock",
    "SystemClock",
    "FixedClock",
    "add_calendar_days",
    "to_utc",
    # Errors
    "KiokuError",
    "InvalidGrade",
    "CardNotFound",
    "StudyError",
    "EmptySelection",
    "SessionExhausted",
    "SessionDesync",
    "StaleCardReference",
]
