# File: app/models/kv_entry.py
from __future__ import annotations
from datetime import datetime
from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base

class KVEntry(Base):
    __tablename__ = "kv_entries"

    # encoded key tuple, see app.db.kv.encode_key; byte order == key order
    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[object] = mapped_column(JSON, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
