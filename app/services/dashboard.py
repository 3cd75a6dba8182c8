#app/services/dashboard.py
import calendar
import logging
from datetime import date, datetime, timezone
from typing import Optional

from app.core.legacy import OTHER_TYPE_NAME, sector_display_name, type_display_name
from app.db.kv import KVStore
from app.repositories.reports import ReportRepository
from app.repositories.taxonomy import PollutionTypeRepository, SectorRepository

logger = logging.getLogger(__name__)


def _parse_ts(ts: str) -> datetime:
    return datetime.fromisoformat(ts.replace("Z", "+00:00"))


def build_dashboard(kv: KVStore, year: Optional[int] = None, month: Optional[int] = None,
                    day: Optional[int] = None, today: Optional[date] = None) -> dict:
    """Aggregates for the public dashboard. All dates are UTC."""
    today = today or datetime.now(timezone.utc).date()
    year = year or today.year
    month = month or today.month
    if not day:
        # today's day-of-month may not exist in the requested month
        day = min(today.day, calendar.monthrange(year, month)[1])
    selected = date(year, month, day)

    reports = list(ReportRepository(kv).iter_all())
    type_names = [t.name for t in PollutionTypeRepository(kv).get_active()]
    sector_names = [s.name for s in SectorRepository(kv).get_active()]

    monthly = {}
    for m in range(1, 13):
        for d in range(1, calendar.monthrange(year, m)[1] + 1):
            monthly[f"{year}-{m:02d}-{d:02d}"] = 0
    hourly = {f"{h:02d}": 0 for h in range(24)}
    types = {name: 0 for name in type_names}
    sectors = {name: 0 for name in sector_names}
    pending = 0

    for report in reports:
        ts = _parse_ts(report.timestamp)
        if ts.year == year:
            monthly[ts.date().isoformat()] += 1
        if ts.date() == selected:
            hourly[f"{ts.hour:02d}"] += 1
        if report.status == "pending":
            pending += 1

        type_name = type_display_name(report.pollution_type or "other", type_names)
        if type_name in types:
            types[type_name] += 1
        elif OTHER_TYPE_NAME in types:
            types[OTHER_TYPE_NAME] += 1

        sector_name = sector_display_name(report.sector or 1, sector_names)
        if sector_name in sectors:
            sectors[sector_name] += 1
        elif sector_names:
            sectors[sector_names[0]] += 1

    this_month = f"{today.year}-{today.month:02d}"
    if today.year == year:
        today_count = monthly.get(today.isoformat(), 0)
        month_count = sum(v for k, v in monthly.items() if k.startswith(this_month))
    else:
        today_count = sum(1 for r in reports if _parse_ts(r.timestamp).date() == today)
        month_count = sum(1 for r in reports if r.timestamp.startswith(this_month))

    logger.debug(f"Dashboard: {len(reports)} reports, types={types}, sectors={sectors}")
    return {
        "summary": {
            "total": len(reports),
            "today": today_count,
            "thisMonth": month_count,
            "pending": pending,
        },
        "monthly": monthly,
        "daily": {"date": selected.isoformat(), "hourly": hourly},
        "types": types,
        "sectors": sectors,
        "selectedDate": selected.isoformat(),
    }
