"""
Daily expiry job.

One AsyncIOScheduler job runs the alert-threshold check and then the expiry
sweep. The job is registered with max_instances=1 and coalesce=True, so at
most one sweep runs at a time and missed runs collapse into one.
"""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from rentroll.core.config import settings
from rentroll.database import get_session_factory
from rentroll.services.alert_service import AlertService
from rentroll.services.contract_service import ContractService

logger = logging.getLogger(__name__)

EXPIRY_JOB_ID = "contract-expiry-check"

_scheduler: Optional[AsyncIOScheduler] = None


async def run_expiry_check(alerts: Optional[AlertService] = None):
    if alerts is None:
        session_factory = get_session_factory()
        alerts = AlertService(session_factory, ContractService(session_factory))
    result = await alerts.check_expiring_contracts()
    logger.info(
        f"[SCHEDULER] Expiry check done: {result.alerts_created} alert(s), "
        f"{result.contracts_expired} expired"
    )
    return result


def build_scheduler() -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        run_expiry_check,
        trigger=CronTrigger(
            hour=settings.EXPIRY_CHECK_HOUR,
            minute=settings.EXPIRY_CHECK_MINUTE,
            timezone="UTC",
        ),
        id=EXPIRY_JOB_ID,
        name="contract expiry check",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
        misfire_grace_time=600,
    )
    return scheduler


def start_scheduler() -> AsyncIOScheduler:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        logger.warning("[SCHEDULER] Already running; skipping duplicate start")
        return _scheduler

    _scheduler = build_scheduler()
    _scheduler.start()
    for job in _scheduler.get_jobs():
        logger.info(f"[SCHEDULER] Registered {job.name}, next run at {job.next_run_time}")
    return _scheduler


def stop_scheduler() -> None:
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("[SCHEDULER] Stopped")
    _scheduler = None
