"""
Reminder Scheduler

Background job that periodically promotes overdue bills and runs a reminder
pass. Each run opens its own database session.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.services.billing_service import business_date, refresh_overdue_bills
from app.services.reminder_service import ReminderPassResult, run_reminder_pass

logger = logging.getLogger(__name__)

JOB_ID = "bill_reminders"

_scheduler: Optional[BackgroundScheduler] = None


def run_scheduled_pass(now: Optional[datetime] = None) -> ReminderPassResult:
    """One scheduled run: overdue refresh + reminder pass in a fresh session."""
    from app.database import SessionLocal

    now = now or datetime.now(timezone.utc)
    db = SessionLocal()
    try:
        config = settings.reminder_config()
        if not config.enabled and config.auto_update_status:
            # Reminders off, statuses still kept current
            refresh_overdue_bills(db, business_date(now))
        return run_reminder_pass(db, config, now)
    except Exception as exc:
        db.rollback()
        logger.error(f"[SCHEDULER] Reminder job failed: {exc}")
        raise
    finally:
        db.close()


def start_scheduler(poll_minutes: Optional[int] = None) -> BackgroundScheduler:
    """Start the background scheduler (idempotent)."""
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        logger.warning("[SCHEDULER] Scheduler is already running")
        return _scheduler

    minutes = poll_minutes or settings.REMINDER_POLL_MINUTES
    _scheduler = BackgroundScheduler(
        jobstores={"default": MemoryJobStore()},
        executors={"default": ThreadPoolExecutor(max_workers=1)},
        job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 300},
        timezone="UTC",
    )
    _scheduler.add_job(
        func=run_scheduled_pass,
        trigger=IntervalTrigger(minutes=minutes),
        id=JOB_ID,
        name="Bill status refresh and payment reminders",
        replace_existing=True,
    )
    _scheduler.start()
    logger.info(f"[SCHEDULER] Started - reminders every {minutes} min")
    return _scheduler


def stop_scheduler(wait: bool = False) -> None:
    global _scheduler

    if _scheduler is None:
        return
    if _scheduler.running:
        _scheduler.shutdown(wait=wait)
        logger.info("[SCHEDULER] Stopped")
    _scheduler = None


def scheduler_running() -> bool:
    return _scheduler is not None and _scheduler.running
