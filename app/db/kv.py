# File: app/db/kv.py
"""Ordered key-value store on top of a single SQL table.

Keys are tuples of ``str`` / ``int`` parts, e.g. ``("reports", report_id)`` or
``("reports_by_sector", 2, report_id)``. Each tuple is encoded into one sortable
string so prefix scans become ``LIKE 'prefix%'`` queries. Values are JSON.

The store wraps one SQLAlchemy ``Session``. Single writes commit immediately;
writes made inside ``atomic()`` commit together, which is what repositories use
to keep a primary record and its index entries in step.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Iterator, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StorageError
from app.models.kv_entry import KVEntry

logger = logging.getLogger(__name__)

SEP = "\x1f"
INT_OFFSET = 10 ** 18

KeyPart = str | int
Key = Sequence[KeyPart]


def encode_key(key: Key) -> str:
    parts = []
    for part in key:
        if isinstance(part, bool):
            raise TypeError("bool is not a valid key part")
        if isinstance(part, int):
            # offset + zero padding keeps negative and positive ints ordered
            parts.append("i%019d" % (part + INT_OFFSET))
        elif isinstance(part, str):
            if SEP in part:
                raise ValueError("key part contains the reserved separator")
            parts.append("s" + part)
        else:
            raise TypeError(f"unsupported key part type: {type(part).__name__}")
    return SEP.join(parts)


def decode_key(raw: str) -> tuple[KeyPart, ...]:
    out: list[KeyPart] = []
    for part in raw.split(SEP):
        if part.startswith("i"):
            out.append(int(part[1:]) - INT_OFFSET)
        else:
            out.append(part[1:])
    return tuple(out)


def _lookup_key(key: Key) -> Optional[str]:
    """Encoded key for reads and deletes; None when no stored key can match
    (e.g. a user-supplied id containing the separator)."""
    try:
        return encode_key(key)
    except ValueError:
        return None


def _utc(dt: Optional[datetime]) -> Optional[datetime]:
    # sqlite hands back naive datetimes; everything is stored as UTC
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class KVItem:
    key: tuple[KeyPart, ...]
    value: Any


def _guard(fn):
    @wraps(fn)
    def wrapper(self: "KVStore", *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"Key-value store error in {fn.__name__}: {e}", exc_info=True)
            self.db.rollback()
            raise StorageError() from e
    return wrapper


class KVStore:
    def __init__(self, db: Session):
        self.db = db
        self._in_tx = False

    @contextmanager
    def atomic(self) -> Iterator["KVStore"]:
        """Group writes into one commit. Nested calls join the outer block."""
        if self._in_tx:
            yield self
            return
        self._in_tx = True
        try:
            yield self
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Key-value transaction failed: {e}", exc_info=True)
            raise StorageError() from e
        except Exception:
            self.db.rollback()
            raise
        finally:
            self._in_tx = False

    def _commit(self):
        if self._in_tx:
            self.db.flush()
        else:
            self.db.commit()

    @_guard
    def get(self, key: Key) -> Any:
        raw = _lookup_key(key)
        if raw is None:
            return None
        row = self.db.get(KVEntry, raw, populate_existing=True)
        if row is None:
            return None
        expires_at = _utc(row.expires_at)
        if expires_at is not None and expires_at <= datetime.now(timezone.utc):
            self.db.delete(row)
            self._commit()
            return None
        return row.value

    @_guard
    def set(self, key: Key, value: Any, expire_in: Optional[float] = None) -> None:
        """Write ``value`` under ``key``. ``expire_in`` (seconds) is an expiry hint:
        the entry reads as absent once it passes."""
        expires_at = None
        if expire_in is not None:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=expire_in)
        self.db.merge(KVEntry(key=encode_key(key), value=value, expires_at=expires_at))
        self._commit()

    @_guard
    def delete(self, key: Key) -> None:
        raw = _lookup_key(key)
        if raw is None:
            return
        self.db.execute(delete(KVEntry).where(KVEntry.key == raw))
        self._commit()

    @_guard
    def list(self, prefix: Key, limit: Optional[int] = None, reverse: bool = False) -> list[KVItem]:
        """Entries whose key starts with ``prefix``, in key order."""
        raw = _lookup_key(prefix)
        if raw is None:
            return []
        raw_prefix = raw + SEP
        stmt = select(KVEntry).where(KVEntry.key.startswith(raw_prefix, autoescape=True))
        stmt = stmt.order_by(KVEntry.key.desc() if reverse else KVEntry.key.asc())
        stmt = stmt.execution_options(populate_existing=True)
        now = datetime.now(timezone.utc)
        items = []
        for row in self.db.scalars(stmt):
            # LIKE is case-insensitive on sqlite
            if not row.key.startswith(raw_prefix):
                continue
            expires_at = _utc(row.expires_at)
            if expires_at is not None and expires_at <= now:
                continue
            items.append(KVItem(key=decode_key(row.key), value=row.value))
            if limit is not None and len(items) >= limit:
                break
        return items

    @_guard
    def purge_expired(self) -> int:
        result = self.db.execute(
            delete(KVEntry).where(KVEntry.expires_at.is_not(None), KVEntry.expires_at <= datetime.now(timezone.utc))
        )
        self._commit()
        return result.rowcount or 0
