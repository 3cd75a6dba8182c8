# File: app/repositories/sessions.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.core.ids import new_id
from app.repositories.base import Repository
from app.schemas.auth import Session

DEFAULT_TTL = 24 * 60 * 60


class SessionRepository(Repository[Session]):
    collection = "sessions"
    id_field = "session_id"
    model = Session

    def create(self, user_id: str, ttl: float = DEFAULT_TTL) -> Session:
        """``ttl`` in seconds; also passed to the store as an expiry hint."""
        now = datetime.now(timezone.utc)
        session = Session(
            session_id=new_id(),
            user_id=user_id,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl),
        )
        self._put(session, expire_in=ttl)
        return session

    def get_by_id(self, session_id: str) -> Optional[Session]:
        session = super().get_by_id(session_id)
        if session is None:
            return None
        if session.expires_at <= datetime.now(timezone.utc):
            self.delete(session_id)
            return None
        return session

    def delete(self, session_id: str) -> None:
        self.kv.delete(self._key(session_id))

    def delete_for_user(self, user_id: str) -> int:
        stale = [s.session_id for s in self._scan() if s.user_id == user_id]
        with self.kv.atomic():
            for session_id in stale:
                self.delete(session_id)
        return len(stale)
