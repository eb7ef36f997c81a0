"""
Session state persistence for Kioku study sessions.

Enables save/resume so a learner can interrupt a study run and continue it.
Sessions are stored as JSON files in ~/.kioku/sessions/, one per learner.
"""

from __future__ import annotations

import hashlib
import json
import re
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from kioku.study.session import StudySession

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class SessionStore:
    """
    Manages session persistence.

    Sessions are stored as JSON files named {sanitized_id}-{digest}.json
    Only the learner's latest session is kept.
    """

    def __init__(self, session_dir: Path):
        self.session_dir = Path(session_dir)
        self.session_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, learner_id: str) -> Path:
        # The digest keeps distinct ids in distinct files after sanitizing
        digest = hashlib.sha256(learner_id.encode("utf-8")).hexdigest()[:16]
        return self.session_dir / f"{_UNSAFE_CHARS.sub('_', learner_id)[:40]}-{digest}.json"

    def save(self, learner_id: str, session: StudySession) -> Path:
        """Save session state to disk."""
        filepath = self._path(learner_id)
        tmp = filepath.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(session.to_dict(), f, indent=2)
        tmp.replace(filepath)
        return filepath

    def load(self, learner_id: str) -> StudySession | None:
        """Load the learner's saved session, or None if missing or unreadable."""
        from kioku.study.session import StudySession

        filepath = self._path(learner_id)
        if not filepath.exists():
            return None

        try:
            with open(filepath, encoding="utf-8") as f:
                data = json.load(f)
            return StudySession.from_dict(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {filepath}: {e}")
            return None

    def clear(self, learner_id: str) -> bool:
        """Delete the learner's session file."""
        filepath = self._path(learner_id)
        if filepath.exists():
            filepath.unlink()
            return True
        return False
