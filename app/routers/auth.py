# File: app/routers/auth.py

from fastapi import APIRouter, Depends, Request, Response
from app.core.errors import AuthError, ValidationError
from app.core.security import (
    clear_session_cookie,
    create_session_cookie,
    get_session_from_cookies,
    is_valid_email,
    validate_password,
)
from app.db.kv import KVStore
from app.db.session import get_kv
from app.schemas.auth import LoginIn, RegisterIn
from app.schemas.user import User
from app.services.auth import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])

def _public_user(user: User) -> dict:
    return {
        "user_id": user.user_id,
        "email": user.email,
        "name": user.name,
        "is_admin": user.is_admin,
    }

@router.post("/register", status_code=201)
def register(body: RegisterIn, response: Response, kv: KVStore = Depends(get_kv)):
    email = body.email.strip()
    name = body.name.strip()
    if not email or not body.password or not name:
        raise ValidationError("Email, password, and name are required")
    if not is_valid_email(email):
        raise ValidationError("Invalid email format")
    check = validate_password(body.password)
    if not check.valid:
        raise ValidationError(check.error)

    auth = AuthService(kv)
    user = auth.register(email, body.password, name, (body.phone or "").strip() or None)

    # Sign-in immediately
    result = auth.login(email, body.password)
    response.headers["Set-Cookie"] = create_session_cookie(result.session_id)
    return {"success": True, "message": "Registration successful", "user": _public_user(user)}

@router.post("/login")
def login(body: LoginIn, response: Response, kv: KVStore = Depends(get_kv)):
    result = AuthService(kv).login(body.email.strip(), body.password)
    response.headers["Set-Cookie"] = create_session_cookie(result.session_id)
    return {"success": True, "message": "Login successful", "user": _public_user(result.user)}

@router.post("/logout")
def logout(request: Request, response: Response, kv: KVStore = Depends(get_kv)):
    session_id = get_session_from_cookies(request.headers.get("cookie"))
    if session_id:
        AuthService(kv).logout(session_id)
    response.headers["Set-Cookie"] = clear_session_cookie()
    return {"success": True, "message": "Logout successful"}

@router.get("/me")
def me(request: Request, kv: KVStore = Depends(get_kv)):
    session_id = get_session_from_cookies(request.headers.get("cookie"))
    if not session_id:
        raise AuthError("No session found")
    user = AuthService(kv).get_user_from_session(session_id)
    if not user:
        raise AuthError("Invalid session")
    return {
        "success": True,
        "user": {
            **_public_user(user),
            "phone": user.phone,
            "created_at": user.created_at,
        },
    }
