# File: app/repositories/base.py
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from app.db.kv import KVStore

M = TypeVar("M", bound=BaseModel)

def now_iso() -> str:
    """UTC now as ISO-8601 with millisecond precision and a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Repository(Generic[M]):
    """Stateless access to one collection of the key-value store.

    Primary records live under ``(collection, id)``. Subclasses add their index
    maintenance in ``_on_update``; index entries hold ids only.
    """
    collection: str
    id_field: str
    model: type[M]

    def __init__(self, kv: KVStore):
        self.kv = kv

    def _key(self, entity_id: str) -> tuple:
        return (self.collection, entity_id)

    def _load(self, raw: Any) -> Optional[M]:
        return self.model.model_validate(raw) if raw is not None else None

    def _put(self, entity: M, expire_in: Optional[float] = None) -> None:
        self.kv.set(self._key(getattr(entity, self.id_field)), entity.model_dump(mode="json"), expire_in=expire_in)

    def _scan(self) -> list[M]:
        return [self.model.model_validate(item.value) for item in self.kv.list((self.collection,))]

    def get_by_id(self, entity_id: str) -> Optional[M]:
        return self._load(self.kv.get(self._key(entity_id)))

    def update(self, entity_id: str, updates: dict) -> Optional[M]:
        """Merge ``updates`` into the stored record and bump ``updated_at``.

        Returns None when the id is unknown. The id and ``created_at`` are
        never overwritten.
        """
        existing = self.get_by_id(entity_id)
        if existing is None:
            return None
        data = existing.model_dump()
        data.update({k: v for k, v in updates.items() if k not in (self.id_field, "created_at")})
        data["updated_at"] = now_iso()
        updated = self.model.model_validate(data)
        with self.kv.atomic():
            self._put(updated)
            self._on_update(existing, updated)
        return updated

    def _on_update(self, before: M, after: M) -> None:
        pass
