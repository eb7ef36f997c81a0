"""
Error taxonomy for Kioku.

All errors are scoped to one card or one study session; none is fatal
to the process. Session signals share the StudyError base so callers can
handle "stop presenting cards" uniformly.
"""

from __future__ import annotations


class KiokuError(Exception):
    """Base class for all Kioku errors."""


class InvalidGrade(KiokuError, ValueError):
    """Raised when a quality grade falls outside the 0-5 scale."""

    def __init__(self, quality: object):
        super().__init__(f"Quality grade must be an integer in 0..5, got {quality!r}")
        self.quality = quality


class CardNotFound(KiokuError, KeyError):
    """Raised when a repository is asked to change a card it does not hold."""

    def __init__(self, card_id: str):
        super().__init__(card_id)
        self.card_id = card_id

    def __str__(self) -> str:
        return f"Card not found: {self.card_id}"


# =============================================================================
# Study Session Signals
# =============================================================================


class StudyError(KiokuError):
    """Base class for study session signals."""


class EmptySelection(StudyError):
    """No candidate cards to study. Recoverable: re-prompt the learner."""

    def __init__(self, message: str = "Nothing to study"):
        super().__init__(message)


class SessionExhausted(StudyError):
    """The session queue has been fully consumed. Normal termination."""

    def __init__(self, message: str = "Session exhausted"):
        super().__init__(message)


class SessionDesync(StudyError):
    """A grade referenced a card other than the one at the cursor."""

    def __init__(self, expected: str | None, received: str):
        super().__init__(
            f"Graded card {received!r} but the current slot holds {expected!r}"
        )
        self.expected = expected
        self.received = received


class StaleCardReference(StudyError):
    """A queued card id no longer resolves to a live card."""

    def __init__(self, card_id: str):
        super().__init__(f"Card {card_id!r} no longer exists")
        self.card_id = card_id
