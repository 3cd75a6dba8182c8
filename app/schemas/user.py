#app/schemas/user.py
from pydantic import BaseModel, ConfigDict
from typing import Optional


class User(BaseModel):
    user_id: str
    email: str
    password_hash: str
    name: str
    phone: Optional[str] = None
    is_admin: bool = False
    created_at: str
    updated_at: str


class UserOut(BaseModel):
    """User without the password hash."""
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    email: str
    name: str
    phone: Optional[str] = None
    is_admin: bool
    created_at: str
    updated_at: str


class UserAdminUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: str
    is_admin: Optional[bool] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
