"""
Per-user counseling state: rate-limit counters, profile and recent history.

Two backends share one interface. The in-memory store serves a single
process; the database store keeps state in `chat_profiles` so several
workers see the same counters.
"""

import os
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from assessment.logic.contracts import CategoryScores
from db import get_db
from models.models import ChatProfile

load_dotenv()

logger = logging.getLogger(__name__)

CHAT_STATE_BACKEND = os.getenv("CHAT_STATE_BACKEND", "database").lower()

STAGES = ("greeting", "exploring", "recommending", "follow_up")


class CounselingProfile(BaseModel):
    """What the assistant knows about one student."""
    scores: Optional[CategoryScores] = None
    interests: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    history: List[Dict[str, str]] = Field(default_factory=list)
    stage: str = "greeting"
    current_focus: Optional[str] = None


class ConversationStore:
    """Interface for assistant state. Profile writes are last-write-wins."""

    def check_rate_limit(self, user_id: str, limit: int, window: timedelta) -> bool:
        """
        Count one message against the user's quota.

        The first message, or the first after the window expired, starts a new
        window with a count of 1.

        Returns:
            False when the quota for the current window is already used up
        """
        raise NotImplementedError

    def get_profile(self, user_id: str) -> CounselingProfile:
        raise NotImplementedError

    def save_profile(self, user_id: str, profile: CounselingProfile) -> None:
        raise NotImplementedError


# =============================================================================
# IN-MEMORY
# =============================================================================

class InMemoryConversationStore(ConversationStore):

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[str, Tuple[int, datetime]] = {}
        self._profiles: Dict[str, CounselingProfile] = {}

    def check_rate_limit(self, user_id: str, limit: int, window: timedelta) -> bool:
        now = datetime.utcnow()
        with self._lock:
            record = self._counters.get(user_id)
            if record is None or now > record[1]:
                self._counters[user_id] = (1, now + window)
                return True
            count, reset_at = record
            if count >= limit:
                return False
            self._counters[user_id] = (count + 1, reset_at)
            return True

    def get_profile(self, user_id: str) -> CounselingProfile:
        with self._lock:
            profile = self._profiles.get(user_id)
            # hand out a copy so callers mutate outside the lock
            return profile.model_copy(deep=True) if profile else CounselingProfile()

    def save_profile(self, user_id: str, profile: CounselingProfile) -> None:
        with self._lock:
            self._profiles[user_id] = profile.model_copy(deep=True)


# =============================================================================
# DATABASE
# =============================================================================

class DatabaseConversationStore(ConversationStore):
    """
    State in the `chat_profiles` table.

    Args:
        session_scope: context-manager factory yielding a Session that
            commits on exit (db.get_db by default)
    """

    def __init__(self, session_scope: Callable = get_db):
        self.session_scope = session_scope

    def check_rate_limit(self, user_id: str, limit: int, window: timedelta) -> bool:
        now = datetime.utcnow()
        try:
            with self.session_scope() as db:
                return self._consume(db, user_id, limit, window, now)
        except IntegrityError:
            # another request created the row first
            with self.session_scope() as db:
                return self._consume(db, user_id, limit, window, now)

    def _consume(self, db: Session, user_id: str, limit: int, window: timedelta, now: datetime) -> bool:
        # expired window: restart at 1
        result = db.execute(
            update(ChatProfile)
            .where(ChatProfile.user_id == user_id, ChatProfile.window_reset_at < now)
            .values(message_count=1, window_reset_at=now + window)
        )
        if result.rowcount == 1:
            return True

        # conditional increment, atomic in the database
        result = db.execute(
            update(ChatProfile)
            .where(ChatProfile.user_id == user_id, ChatProfile.message_count < limit)
            .values(message_count=ChatProfile.message_count + 1)
        )
        if result.rowcount == 1:
            return True

        if db.get(ChatProfile, user_id) is not None:
            return False

        db.add(ChatProfile(user_id=user_id, profile={}, message_count=1, window_reset_at=now + window))
        db.flush()
        return True

    def get_profile(self, user_id: str) -> CounselingProfile:
        with self.session_scope() as db:
            row = db.get(ChatProfile, user_id)
            if row is None or not row.profile:
                return CounselingProfile()
            return CounselingProfile.model_validate(row.profile)

    def save_profile(self, user_id: str, profile: CounselingProfile) -> None:
        data = profile.model_dump(mode="json")
        with self.session_scope() as db:
            row = db.get(ChatProfile, user_id)
            if row is None:
                db.add(ChatProfile(
                    user_id=user_id,
                    profile=data,
                    message_count=0,
                    window_reset_at=datetime.utcnow(),
                ))
            else:
                row.profile = data


def build_store(backend: str = CHAT_STATE_BACKEND) -> ConversationStore:
    if backend == "memory":
        return InMemoryConversationStore()
    if backend != "database":
        logger.warning(f"Unknown CHAT_STATE_BACKEND '{backend}', using database")
    return DatabaseConversationStore()
