# File: app/schemas/auth.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

class RegisterIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=512)
    name: str = Field(min_length=1, max_length=120)
    phone: str | None = Field(default=None, max_length=30)

class LoginIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=512)

class Session(BaseModel):
    session_id: str
    user_id: str
    created_at: datetime
    expires_at: datetime
