#app/services/scheduler.py
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.services.forwarding import retry_pending_forwards_safe

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(timezone="UTC")

RETRY_JOB_ID = "sispaa_retry"

def start_retry_service():
    if not settings.sispaa_retry_enabled:
        logger.info("SISPAA retry service disabled")
        return
    if scheduler.running:
        return
    scheduler.add_job(
        retry_pending_forwards_safe,
        trigger=IntervalTrigger(seconds=settings.sispaa_retry_interval_seconds),
        id=RETRY_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"Starting SISPAA retry service (every {settings.sispaa_retry_interval_seconds}s)")

def stop_retry_service():
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("SISPAA retry service stopped")
