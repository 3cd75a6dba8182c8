# File: app/services/auth.py
import logging
from dataclasses import dataclass
from typing import Optional

from app.core.config import settings
from app.core.errors import AuthError, ConflictError, StorageError
from app.core.security import hash_password, split_password_hash, verify_password
from app.db.kv import KVStore
from app.repositories.sessions import SessionRepository
from app.repositories.users import UserRepository
from app.schemas.user import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
DUPLICATE_EMAIL = "User already exists with this email"


@dataclass
class LoginResult:
    user: User
    session_id: str


class AuthService:
    def __init__(self, kv: KVStore, session_ttl: Optional[int] = None):
        self.users = UserRepository(kv)
        self.sessions = SessionRepository(kv)
        self.session_ttl = settings.session_ttl_seconds if session_ttl is None else session_ttl

    def register(self, email: str, password: str, name: str, phone: Optional[str] = None,
                 is_admin: bool = False) -> User:
        # read-then-write: two concurrent registrations of one email can both pass
        if self.users.get_by_email(email):
            raise ConflictError(DUPLICATE_EMAIL)
        hashed, salt = hash_password(password)
        return self.users.create({
            "email": email,
            "password_hash": f"{hashed}:{salt}",
            "name": name,
            "phone": phone,
            "is_admin": is_admin,
        })

    def login(self, email: str, password: str) -> LoginResult:
        user = self.users.get_by_email(email)
        if not user:
            raise AuthError(INVALID_CREDENTIALS)
        hashed, salt = split_password_hash(user.password_hash)
        if not verify_password(password, hashed, salt):
            raise AuthError(INVALID_CREDENTIALS)
        session = self.sessions.create(user.user_id, ttl=self.session_ttl)
        logger.info(f"User {user.user_id} logged in")
        return LoginResult(user=user, session_id=session.session_id)

    def logout(self, session_id: str) -> bool:
        try:
            self.sessions.delete(session_id)
        except StorageError:
            return False
        return True

    def get_user_from_session(self, session_id: str) -> Optional[User]:
        session = self.sessions.get_by_id(session_id)
        if not session:
            return None
        return self.users.get_by_id(session.user_id)
