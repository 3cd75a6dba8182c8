# File: app/repositories/reports.py
import logging
from collections import Counter
from typing import Iterator

from app.core.ids import new_id
from app.repositories.base import Repository, now_iso
from app.schemas.report import Report

logger = logging.getLogger(__name__)

BY_TIMESTAMP = "reports_by_timestamp"
BY_SECTOR = "reports_by_sector"
BY_USER = "reports_by_user"


class ReportRepository(Repository[Report]):
    collection = "reports"
    id_field = "report_id"
    model = Report

    def create(self, fields: dict) -> Report:
        now = now_iso()
        report = Report.model_validate({
            "timestamp": now,
            "status": "pending",
            **fields,
            "report_id": new_id(),
            "created_at": now,
            "updated_at": now,
        })
        rid = report.report_id
        with self.kv.atomic():
            self._put(report)
            self.kv.set((BY_TIMESTAMP, report.timestamp, rid), rid)
            self.kv.set((BY_SECTOR, report.sector, rid), rid)
            if report.user_id:
                self.kv.set((BY_USER, report.user_id, rid), rid)
        return report

    def _resolve(self, prefix: tuple, limit: int, offset: int = 0) -> list[Report]:
        # dangling index entries (deleted reports) are skipped, not errors
        out: list[Report] = []
        skipped = 0
        for item in self.kv.list(prefix, reverse=True):
            report = self.get_by_id(item.value)
            if report is None:
                continue
            if skipped < offset:
                skipped += 1
                continue
            out.append(report)
            if len(out) >= limit:
                break
        return out

    def get_all(self, limit: int = 100, offset: int = 0) -> list[Report]:
        """Newest first by submission timestamp."""
        return self._resolve((BY_TIMESTAMP,), limit, offset)

    def get_by_sector(self, sector: int, limit: int = 100) -> list[Report]:
        return self._resolve((BY_SECTOR, sector), limit)

    def get_by_user(self, user_id: str, limit: int = 100) -> list[Report]:
        return self._resolve((BY_USER, user_id), limit)

    def iter_all(self) -> Iterator[Report]:
        for item in self.kv.list((self.collection,)):
            yield Report.model_validate(item.value)

    def count_by_status(self) -> dict[str, int]:
        return dict(Counter(r.status for r in self.iter_all()))

    def delete(self, report_id: str) -> bool:
        """Remove the primary record only. Index entries stay behind until
        ``reconcile_indices`` sweeps them."""
        if self.get_by_id(report_id) is None:
            return False
        self.kv.delete(self._key(report_id))
        return True

    def reconcile_indices(self) -> int:
        """Drop index entries whose report no longer exists; returns how many."""
        removed = 0
        for index in (BY_TIMESTAMP, BY_SECTOR, BY_USER):
            for item in self.kv.list((index,)):
                if self.kv.get(self._key(item.value)) is None:
                    self.kv.delete(item.key)
                    removed += 1
        if removed:
            logger.info(f"Removed {removed} dangling report index entries")
        return removed
