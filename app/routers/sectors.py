# File: app/routers/sectors.py

from fastapi import APIRouter, Depends, Query
from app.core.errors import NotFoundError, ValidationError
from app.core.security import require_admin
from app.db.kv import KVStore
from app.db.session import get_kv
from app.repositories.taxonomy import SectorRepository
from app.schemas.taxonomy import SectorUpdateIn, TaxonomyCreateIn

router = APIRouter(prefix="/api/admin/sectors", tags=["sectors"], dependencies=[Depends(require_admin)])

@router.get("")
def list_sectors(kv: KVStore = Depends(get_kv)):
    return {"success": True, "data": SectorRepository(kv).get_all()}

@router.post("", status_code=201)
def create_sector(body: TaxonomyCreateIn, kv: KVStore = Depends(get_kv)):
    name = body.name.strip()
    if not name:
        raise ValidationError("Name is required")
    s = SectorRepository(kv).create({
        "name": name,
        "description": (body.description or "").strip() or None,
        "is_active": body.is_active,
    })
    return {"success": True, "data": s}

@router.put("")
def update_sector(body: SectorUpdateIn, kv: KVStore = Depends(get_kv)):
    updates = body.model_dump(exclude_unset=True, exclude={"sector_id"})
    if "name" in updates:
        name = (updates["name"] or "").strip()
        if not name:
            raise ValidationError("Name must be a non-empty string")
        updates["name"] = name
    if "description" in updates:
        updates["description"] = (updates["description"] or "").strip() or None
    if updates.get("is_active") is None:
        updates.pop("is_active", None)

    s = SectorRepository(kv).update(body.sector_id, updates)
    if not s:
        raise NotFoundError("Sector not found")
    return {"success": True, "data": s}

@router.delete("")
def delete_sector(sector_id: str = Query(..., min_length=1), kv: KVStore = Depends(get_kv)):
    if not SectorRepository(kv).delete(sector_id):
        raise NotFoundError("Sector not found")
    return {"success": True, "message": "Sector deleted successfully"}
