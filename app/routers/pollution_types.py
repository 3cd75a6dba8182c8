# File: app/routers/pollution_types.py

from fastapi import APIRouter, Depends, Query
from app.core.errors import NotFoundError, ValidationError
from app.core.security import require_admin
from app.db.kv import KVStore
from app.db.session import get_kv
from app.repositories.taxonomy import PollutionTypeRepository
from app.schemas.taxonomy import PollutionTypeUpdateIn, TaxonomyCreateIn

router = APIRouter(prefix="/api/admin/pollution-types", tags=["pollution-types"],
                   dependencies=[Depends(require_admin)])

@router.get("")
def list_types(kv: KVStore = Depends(get_kv)):
    return {"success": True, "data": PollutionTypeRepository(kv).get_all()}

@router.post("", status_code=201)
def create_type(body: TaxonomyCreateIn, kv: KVStore = Depends(get_kv)):
    name = body.name.strip()
    if not name:
        raise ValidationError("Name is required")
    t = PollutionTypeRepository(kv).create({
        "name": name,
        "description": (body.description or "").strip() or None,
        "is_active": body.is_active,
    })
    return {"success": True, "data": t}

@router.put("")
def update_type(body: PollutionTypeUpdateIn, kv: KVStore = Depends(get_kv)):
    updates = body.model_dump(exclude_unset=True, exclude={"type_id"})
    if "name" in updates:
        name = (updates["name"] or "").strip()
        if not name:
            raise ValidationError("Name must be a non-empty string")
        updates["name"] = name
    if "description" in updates:
        updates["description"] = (updates["description"] or "").strip() or None
    if updates.get("is_active") is None:
        updates.pop("is_active", None)

    t = PollutionTypeRepository(kv).update(body.type_id, updates)
    if not t:
        raise NotFoundError("Pollution type not found")
    return {"success": True, "data": t}

@router.delete("")
def delete_type(type_id: str = Query(..., min_length=1), kv: KVStore = Depends(get_kv)):
    if not PollutionTypeRepository(kv).delete(type_id):
        raise NotFoundError("Pollution type not found")
    return {"success": True, "message": "Pollution type deleted successfully"}
