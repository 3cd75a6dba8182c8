#app/services/forwarding.py
"""Durable forwarding of reports to SISPAA.

A work item is written to ``sispaa_outbox`` in the same transaction as the
report. After the HTTP response the request's background task tries once; the
retry job drains whatever is left (failures, or items stranded by a crash).
Forwarding an already submitted/resolved report only clears its work item, so
every step can be repeated safely.
"""
import logging
from typing import Optional

from app.core.config import settings
from app.db import session as db_session
from app.db.kv import KVStore
from app.repositories.base import now_iso
from app.repositories.reports import ReportRepository
from app.services.sispaa import SispaaClient, SispaaResult

logger = logging.getLogger(__name__)

OUTBOX = "sispaa_outbox"
FINAL_STATUSES = ("submitted", "resolved")


def enqueue(kv: KVStore, report_id: str) -> None:
    kv.set((OUTBOX, report_id), {
        "report_id": report_id,
        "attempts": 0,
        "enqueued_at": now_iso(),
        "last_attempt_at": None,
        "last_error": None,
    })


def pending_items(kv: KVStore) -> list[dict]:
    return [item.value for item in kv.list((OUTBOX,))]


class ReportForwarder:
    def __init__(self, kv: KVStore, client: Optional[SispaaClient] = None,
                 max_attempts: Optional[int] = None):
        self.kv = kv
        self.reports = ReportRepository(kv)
        self.client = client or SispaaClient()
        self.max_attempts = max_attempts if max_attempts is not None else settings.sispaa_max_attempts

    def forward(self, report_id: str) -> Optional[str]:
        """Submit one report and record the outcome. Returns the resulting status
        (None when the report no longer exists)."""
        key = (OUTBOX, report_id)
        report = self.reports.get_by_id(report_id)
        if report is None:
            self.kv.delete(key)
            return None
        if report.status in FINAL_STATUSES:
            self.kv.delete(key)
            return report.status

        try:
            result: SispaaResult = self.client.submit_report(report)
        except Exception as e:
            logger.error(f"Unexpected error submitting report {report_id} to SISPAA: {e}", exc_info=True)
            result = SispaaResult(success=False, error=f"Unexpected error: {type(e).__name__}")

        # an admin may have changed the report while the call was in flight
        current = self.reports.get_by_id(report_id)
        if current is None or current.status in FINAL_STATUSES:
            self.kv.delete(key)
            return current.status if current else None

        if result.success:
            with self.kv.atomic():
                self.reports.update(report_id, {
                    "status": "submitted",
                    "sispaa_reference_id": result.reference_id,
                })
                self.kv.delete(key)
            logger.info(f"Report {report_id} submitted to SISPAA successfully")
            return "submitted"

        item = self.kv.get(key) or {"report_id": report_id, "attempts": 0, "enqueued_at": now_iso()}
        item["attempts"] = int(item.get("attempts") or 0) + 1
        item["last_attempt_at"] = now_iso()
        item["last_error"] = result.error
        with self.kv.atomic():
            self.reports.update(report_id, {"status": "failed"})
            if item["attempts"] >= self.max_attempts:
                logger.warning(f"Giving up on report {report_id} after {item['attempts']} SISPAA attempts")
                self.kv.delete(key)
            else:
                self.kv.set(key, item)
        logger.info(f"Report {report_id} failed to submit to SISPAA: {result.error}")
        return "failed"

    def process_outbox(self, limit: Optional[int] = None) -> dict:
        counts = {"submitted": 0, "failed": 0, "skipped": 0}
        for item in pending_items(self.kv)[:limit]:
            status = self.forward(item["report_id"])
            if status == "submitted":
                counts["submitted"] += 1
            elif status == "failed":
                counts["failed"] += 1
            else:
                counts["skipped"] += 1
        return counts


def forward_report_safe(report_id: str):
    """Background task body: own DB session, never raises into the server."""
    db = db_session.SessionLocal()
    try:
        ReportForwarder(KVStore(db)).forward(report_id)
    except Exception as e:
        logger.error(f"Error forwarding report {report_id} to SISPAA: {e}", exc_info=True)
    finally:
        db.close()


def retry_pending_forwards_safe():
    """Periodic job: drain the outbox, sweep dangling report indices and expired entries."""
    db = db_session.SessionLocal()
    try:
        kv = KVStore(db)
        logger.info("Checking for failed SISPAA submissions to retry...")
        counts = ReportForwarder(kv).process_outbox()
        logger.info(f"SISPAA retry pass finished: {counts}")
        ReportRepository(kv).reconcile_indices()
        purged = kv.purge_expired()
        if purged:
            logger.info(f"Purged {purged} expired store entries")
    except Exception as e:
        logger.error(f"Error processing failed SISPAA submissions: {e}", exc_info=True)
    finally:
        db.close()
