# app/routers/public.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from app.core.errors import ValidationError
from app.db.kv import KVStore
from app.db.session import get_kv
from app.repositories.taxonomy import PollutionTypeRepository, SectorRepository
from app.services.dashboard import build_dashboard

router = APIRouter(prefix="/api", tags=["public"])

@router.get("/form-data")
def form_data(kv: KVStore = Depends(get_kv)):
    # active choices only, ordered by name; sector values are 1-based positions in this list
    return {
        "success": True,
        "data": {
            "pollution_types": PollutionTypeRepository(kv).get_active(),
            "sectors": SectorRepository(kv).get_active(),
        },
    }

@router.get("/dashboard")
def dashboard(
    kv: KVStore = Depends(get_kv),
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    day: Optional[int] = Query(default=None, ge=1, le=31),
):
    try:
        data = build_dashboard(kv, year=year, month=month, day=day)
    except ValueError:
        raise ValidationError("Invalid date")
    return {"success": True, "data": data}
