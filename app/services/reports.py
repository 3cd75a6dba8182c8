#app/services/reports.py
import logging
from typing import Mapping, Optional, Union

from app.core.errors import NotFoundError, ValidationError
from app.core.legacy import accepted_type_codes
from app.core.security import get_session_from_cookies
from app.db.kv import KVStore
from app.repositories.reports import ReportRepository
from app.repositories.taxonomy import PollutionTypeRepository, SectorRepository
from app.schemas.report import Report, ReportCreateIn, STATUSES
from app.services import device
from app.services.auth import AuthService
from app.services.forwarding import enqueue
from app.services.location import LocationResolver, client_ip

logger = logging.getLogger(__name__)


class ReportService:
    """Submission pipeline plus the admin-side report operations."""

    def __init__(self, kv: KVStore, locator: Optional[LocationResolver] = None):
        self.kv = kv
        self.reports = ReportRepository(kv)
        self.types = PollutionTypeRepository(kv)
        self.sectors = SectorRepository(kv)
        self.locator = locator or LocationResolver()

    def validate_pollution_type(self, code: str) -> str:
        code = (code or "").strip()
        names = [t.name for t in self.types.get_active()]
        if not code or code not in accepted_type_codes(names):
            raise ValidationError("Invalid pollution type")
        return code

    def validate_sector(self, value: Union[int, str]) -> int:
        """1-based position among active sectors (ordered by name). An active
        sector's id is accepted too and converted to its position."""
        active = self.sectors.get_active()
        if isinstance(value, bool):
            raise ValidationError("Invalid sector")
        if isinstance(value, str):
            raw = value.strip()
            for pos, sector in enumerate(active, start=1):
                if sector.sector_id == raw:
                    return pos
            try:
                value = int(raw)
            except ValueError:
                raise ValidationError("Invalid sector")
        if not 1 <= value <= len(active):
            raise ValidationError(f"Invalid sector (must be 1-{len(active)})" if active else "Invalid sector")
        return value

    def submit(self, body: ReportCreateIn, headers: Mapping[str, str]) -> Report:
        """Validate, enrich and persist a report with status ``pending``.

        The report and its SISPAA work item are written together; forwarding
        itself is the caller's job (see ``forward_report_safe``).
        """
        pollution_type = self.validate_pollution_type(body.pollution_type)
        sector = self.validate_sector(body.sector)

        ip_address = client_ip(headers)
        location = self.locator.resolve(ip_address)
        device_id = device.combine(device.fingerprint(headers), body.client_device_id)

        user_id = None
        session_id = get_session_from_cookies(headers.get("cookie"))
        if session_id:
            user = AuthService(self.kv).get_user_from_session(session_id)
            if user:
                user_id = user.user_id

        with self.kv.atomic():
            report = self.reports.create({
                "ip_address": ip_address,
                "location": location.model_dump() if location else None,
                "device_id": device_id,
                "pollution_type": pollution_type,
                "sector": sector,
                "user_id": user_id,
                "status": "pending",
                "description": (body.description or "").strip() or None,
            })
            enqueue(self.kv, report.report_id)
        logger.info(f"Report {report.report_id} created (type={pollution_type}, sector={sector})")
        return report

    def list_reports(self, sector: Optional[int] = None, user_id: Optional[str] = None,
                     limit: int = 100, offset: int = 0) -> list[Report]:
        if sector is not None:
            return self.reports.get_by_sector(sector, limit)
        if user_id:
            return self.reports.get_by_user(user_id, limit)
        return self.reports.get_all(limit, offset)

    def update_report_status(self, report_id: str, status: str) -> Report:
        if status not in STATUSES:
            raise ValidationError("Valid status is required (pending, submitted, failed, resolved)")
        updated = self.reports.update(report_id, {"status": status})
        if updated is None:
            raise NotFoundError("Report not found")
        logger.info(f"Report {report_id} status set to {status}")
        return updated

    def delete_report(self, report_id: str) -> None:
        if not self.reports.delete(report_id):
            raise NotFoundError("Report not found")
        logger.info(f"Report {report_id} deleted")
