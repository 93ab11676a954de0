"""Tick scheduler - the once-a-second job that drives the reminder engine."""

import logging

from telegram.ext import ContextTypes, Job, JobQueue

from beetbell.engine.reminder_engine import ReminderEngine

logger = logging.getLogger(__name__)

JOB_NAME = "tick"


async def tick_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Job callback for the tick."""
    engine: ReminderEngine = context.bot_data["engine"]

    try:
        result = await engine.tick()
        if result.just_expired:
            logger.info(f"Tick: {len(result.just_expired)} reminders fired")
    except Exception as e:
        logger.error(f"Tick error: {e}")


class TickScheduler:
    """Owns the repeating tick job so it can be removed on shutdown."""

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self._job: Job | None = None

    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self, job_queue: JobQueue) -> Job:
        """Register the repeating tick job."""
        if self._job is not None:
            logger.warning("Tick job already scheduled")
            return self._job

        self._job = job_queue.run_repeating(
            tick_job,
            interval=self.interval,
            first=self.interval,
            name=JOB_NAME,
        )
        logger.info(f"Tick job scheduled (interval: {self.interval}s)")
        return self._job

    def stop(self) -> None:
        """Unregister the tick job. Safe to call more than once."""
        if self._job is None:
            return
        self._job.schedule_removal()
        self._job = None
        logger.info("Tick job removed")
