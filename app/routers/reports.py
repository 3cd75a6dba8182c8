# File: app/routers/reports.py
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request

from app.core.config import settings
from app.core.ratelimit import limiter
from app.core.security import get_current_user, require_admin
from app.db.kv import KVStore
from app.db.session import get_kv
from app.schemas.report import ReportCreateIn, ReportList, ReportSubmitted
from app.schemas.user import User
from app.services.forwarding import forward_report_safe
from app.services.reports import ReportService

router = APIRouter(prefix="/api/reports", tags=["reports"])

@router.post("", response_model=ReportSubmitted, status_code=201)
@limiter.limit(settings.report_rate_limit)
def submit_report(
    request: Request,
    body: ReportCreateIn,
    background_tasks: BackgroundTasks,
    kv: KVStore = Depends(get_kv),
):
    report = ReportService(kv).submit(body, request.headers)
    # runs after the response is sent; the outbox entry covers a crash in between
    background_tasks.add_task(forward_report_safe, report.report_id)
    return ReportSubmitted(report_id=report.report_id)

@router.get("", response_model=ReportList, dependencies=[Depends(require_admin)])
def list_reports(
    kv: KVStore = Depends(get_kv),
    sector: Optional[int] = Query(default=None),
    user_id: Optional[str] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=10000),
    offset: int = Query(default=0, ge=0),
):
    reports = ReportService(kv).list_reports(sector=sector, user_id=user_id, limit=limit, offset=offset)
    return ReportList(reports=reports, count=len(reports))

@router.get("/mine", response_model=ReportList)
def my_reports(
    kv: KVStore = Depends(get_kv),
    user: User = Depends(get_current_user),
    limit: int = Query(default=100, ge=1, le=1000),
):
    reports = ReportService(kv).list_reports(user_id=user.user_id, limit=limit)
    return ReportList(reports=reports, count=len(reports))
