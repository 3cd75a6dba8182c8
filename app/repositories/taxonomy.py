# File: app/repositories/taxonomy.py
from typing import TypeVar

from app.core.ids import new_id
from app.repositories.base import Repository, now_iso
from app.schemas.taxonomy import PollutionType, Sector

T = TypeVar("T", PollutionType, Sector)


class _TaxonomyRepository(Repository[T]):
    def create(self, fields: dict) -> T:
        now = now_iso()
        entity = self.model.model_validate({
            "is_active": True,
            **fields,
            self.id_field: new_id(),
            "created_at": now,
            "updated_at": now,
        })
        self._put(entity)
        return entity

    def get_all(self) -> list[T]:
        return sorted(self._scan(), key=lambda e: e.name.casefold())

    def get_active(self) -> list[T]:
        return [e for e in self.get_all() if e.is_active]

    def delete(self, entity_id: str) -> bool:
        if self.get_by_id(entity_id) is None:
            return False
        self.kv.delete(self._key(entity_id))
        return True


class PollutionTypeRepository(_TaxonomyRepository[PollutionType]):
    collection = "pollution_types"
    id_field = "type_id"
    model = PollutionType


class SectorRepository(_TaxonomyRepository[Sector]):
    collection = "sectors"
    id_field = "sector_id"
    model = Sector
