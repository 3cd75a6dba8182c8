# File: app/routers/admin_users.py
import logging
from fastapi import APIRouter, Depends, Query

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.security import is_valid_email, require_admin
from app.db.kv import KVStore
from app.db.session import get_kv
from app.repositories.sessions import SessionRepository
from app.repositories.users import UserRepository
from app.schemas.user import User, UserAdminUpdate, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/users", tags=["admin-users"])

@router.get("")
def list_users(kv: KVStore = Depends(get_kv), _=Depends(require_admin)):
    users = UserRepository(kv).get_all()
    return {"success": True, "users": [UserOut.model_validate(u.model_dump()) for u in users]}

@router.put("")
def update_user(body: UserAdminUpdate, kv: KVStore = Depends(get_kv), me: User = Depends(require_admin)):
    repo = UserRepository(kv)
    existing = repo.get_by_id(body.user_id)
    if not existing:
        raise NotFoundError("User not found")
    if body.user_id == me.user_id and body.is_admin is False:
        raise ValidationError("Cannot remove your own admin privileges")

    updates = {}
    if body.is_admin is not None:
        updates["is_admin"] = body.is_admin
    if body.name and body.name.strip():
        updates["name"] = body.name.strip()
    if body.phone is not None:
        updates["phone"] = body.phone.strip() or None
    if body.email and body.email.strip() != existing.email:
        email = body.email.strip()
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")
        if repo.get_by_email(email):
            raise ConflictError("User already exists with this email")
        updates["email"] = email

    updated = repo.update(body.user_id, updates)
    if not updated:
        raise NotFoundError("User not found")
    logger.info(f"User {body.user_id} updated by {me.user_id}: {sorted(updates)}")
    return {"success": True, "user": UserOut.model_validate(updated.model_dump())}

@router.delete("")
def delete_user(user_id: str = Query(..., min_length=1), kv: KVStore = Depends(get_kv),
                me: User = Depends(require_admin)):
    if user_id == me.user_id:
        raise ValidationError("Cannot delete your own account")
    if not UserRepository(kv).delete(user_id):
        raise NotFoundError("User not found")
    # reports keep their user_id back-reference
    SessionRepository(kv).delete_for_user(user_id)
    logger.info(f"User {user_id} deleted by {me.user_id}")
    return {"success": True, "message": "User deleted successfully"}
