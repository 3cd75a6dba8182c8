# File: app/routers/admin_reports.py
from fastapi import APIRouter, Depends, Query

from app.core.security import require_admin
from app.db.kv import KVStore
from app.db.session import get_kv
from app.schemas.report import ReportStatusPatch
from app.services.forwarding import ReportForwarder, pending_items
from app.services.reports import ReportService
from app.services.sispaa import SispaaClient

router = APIRouter(prefix="/api/admin", tags=["admin-reports"], dependencies=[Depends(require_admin)])

@router.put("/reports")
def update_report_status(body: ReportStatusPatch, kv: KVStore = Depends(get_kv)):
    report = ReportService(kv).update_report_status(body.report_id, body.status)
    return {"success": True, "report": report}

@router.delete("/reports")
def delete_report(report_id: str = Query(..., min_length=1), kv: KVStore = Depends(get_kv)):
    ReportService(kv).delete_report(report_id)
    return {"success": True, "message": "Report deleted successfully"}

@router.get("/reports/outbox")
def list_outbox(kv: KVStore = Depends(get_kv)):
    items = pending_items(kv)
    return {"success": True, "items": items, "count": len(items)}

@router.post("/reports/retry")
def retry_forwarding(kv: KVStore = Depends(get_kv)):
    counts = ReportForwarder(kv).process_outbox()
    return {"success": True, **counts}

@router.get("/sispaa/health")
def sispaa_health():
    return SispaaClient().test_connection()
