# app/core/security.py
import base64, hashlib, hmac, logging, os, re
from dataclasses import dataclass
from typing import Optional, Tuple

from fastapi import Depends, Request

from app.core.errors import AuthError, ForbiddenError
from app.db.kv import KVStore
from app.db.session import get_kv
from app.schemas.user import User

logger = logging.getLogger(__name__)

SESSION_COOKIE = "sessionId"
COOKIE_MAX_AGE = 24 * 60 * 60
SALT_BYTES = 16
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

def hash_password(raw: str, salt: Optional[bytes] = None) -> Tuple[str, str]:
    """SHA-256 over password bytes + salt bytes. Returns (hash, salt), both base64."""
    if salt is None:
        salt = os.urandom(SALT_BYTES)
    digest = hashlib.sha256(raw.encode("utf-8") + salt).digest()
    return base64.b64encode(digest).decode("ascii"), base64.b64encode(salt).decode("ascii")

def verify_password(raw: str, hashed: str, salt: str) -> bool:
    try:
        salt_bytes = base64.b64decode(salt, validate=True)
        new_hash, _ = hash_password(raw, salt_bytes)
        return hmac.compare_digest(new_hash, hashed)
    except (ValueError, TypeError) as e:
        logger.warning(f"Password verification error: {e}")
        return False

def split_password_hash(password_hash: str) -> Tuple[str, str]:
    hashed, _, salt = password_hash.partition(":")
    return hashed, salt

def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))

@dataclass
class PasswordCheck:
    valid: bool
    error: Optional[str] = None

def validate_password(password: str) -> PasswordCheck:
    if len(password) < 8:
        return PasswordCheck(False, "Password must be at least 8 characters long")
    if not re.search(r"[a-z]", password):
        return PasswordCheck(False, "Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        return PasswordCheck(False, "Password must contain at least one uppercase letter")
    if not re.search(r"\d", password):
        return PasswordCheck(False, "Password must contain at least one number")
    return PasswordCheck(True)

def get_session_from_cookies(cookie_header: Optional[str]) -> Optional[str]:
    if not cookie_header:
        return None
    for part in cookie_header.split(";"):
        name, sep, value = part.strip().partition("=")
        if sep and name == SESSION_COOKIE:
            return value or None
    return None

def create_session_cookie(session_id: str) -> str:
    return f"{SESSION_COOKIE}={session_id}; HttpOnly; SameSite=Strict; Max-Age={COOKIE_MAX_AGE}; Path=/"

def clear_session_cookie() -> str:
    return f"{SESSION_COOKIE}=; HttpOnly; SameSite=Strict; Max-Age=0; Path=/"

def get_optional_user(request: Request, kv: KVStore = Depends(get_kv)) -> Optional[User]:
    from app.services.auth import AuthService
    session_id = get_session_from_cookies(request.headers.get("cookie"))
    if not session_id:
        return None
    return AuthService(kv).get_user_from_session(session_id)

def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthError()
    return user

def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise ForbiddenError()
    return user
