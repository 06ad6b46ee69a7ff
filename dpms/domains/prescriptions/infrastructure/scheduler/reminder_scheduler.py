"""Medication Reminder Scheduler.

APScheduler-based async scheduler that runs one reminder bucket per timing
slot: morning at 08:00, afternoon at 14:00 and night at 20:00. Trigger hours
are wall-clock time in the configured zone, or the host local zone (the
APScheduler default) when none is set.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from pytz import timezone

from dpms.domains.prescriptions.application.dto import ReminderRunResult
from dpms.domains.prescriptions.domain.value_objects import TimingSlot

logger = logging.getLogger(__name__)

BucketRunner = Callable[[TimingSlot], Awaitable[ReminderRunResult]]

MISFIRE_GRACE_SECONDS = 300


class MedicationReminderScheduler:
    """Scheduler for timed medication reminders.

    Each job hands its slot to ``run_bucket``. Runs are wrapped in tasks
    shielded from the executor, so ``stop()`` can shut the timers down and
    still let a run that already started finish on its own.
    """

    def __init__(
        self,
        run_bucket: BucketRunner,
        timezone_name: str | None = None,
        enabled: bool = True,
    ):
        """Initialize scheduler.

        Args:
            run_bucket: Coroutine function processing one timing slot.
            timezone_name: Timezone of the trigger hours; host local zone when None.
            enabled: Whether the scheduler starts at all.
        """
        self._run_bucket = run_bucket
        self.tz = timezone(timezone_name) if timezone_name else None
        self.enabled = enabled

        self._scheduler: AsyncIOScheduler | None = None
        self._is_running = False
        self._in_flight: set[asyncio.Task] = set()

    async def start(self) -> None:
        """Register the three daily jobs and start the timers."""
        if not self.enabled:
            logger.info("MedicationReminderScheduler is disabled, skipping start")
            return

        if self._is_running:
            logger.warning("MedicationReminderScheduler already running")
            return

        scheduler = AsyncIOScheduler(timezone=self.tz) if self.tz else AsyncIOScheduler()
        for slot in TimingSlot:
            scheduler.add_job(
                self._scheduled_run,
                CronTrigger(hour=slot.hour, minute=0, timezone=scheduler.timezone),
                args=[slot],
                id=f"{slot.bucket}_reminders",
                name=f"{slot.name.title()} Medication Reminders",
                replace_existing=True,
                coalesce=True,
                misfire_grace_time=MISFIRE_GRACE_SECONDS,
            )

        scheduler.start()
        self._scheduler = scheduler
        self._is_running = True
        hours = ", ".join(f"{slot.bucket}={slot.hour:02d}:00" for slot in TimingSlot)
        logger.info(f"MedicationReminderScheduler started with timezone {scheduler.timezone} ({hours})")

    async def stop(self) -> None:
        """Stop the timers, then wait for runs already in progress."""
        if self._scheduler and self._is_running:
            self._scheduler.shutdown(wait=False)
            self._is_running = False
            logger.info("MedicationReminderScheduler timers stopped")

        if self._in_flight:
            logger.info(f"Waiting for {len(self._in_flight)} reminder run(s) to finish")
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    async def run_now(self, slot: TimingSlot) -> ReminderRunResult:
        """Run one bucket immediately (admin trigger); errors propagate."""
        logger.info(f"Manual {slot.bucket} reminder run requested")
        return await self._track(slot)

    async def _scheduled_run(self, slot: TimingSlot) -> None:
        logger.info(f"Starting {slot.bucket} reminder job")
        try:
            result = await self._track(slot)
        except asyncio.CancelledError:
            logger.info(f"{slot.bucket.title()} reminder job detached from executor, run continues")
            raise
        except Exception as e:
            logger.error(f"Error running {slot.bucket} reminders: {e}", exc_info=True)
            return
        logger.info(
            f"{slot.bucket.title()} reminders finished: {result.sent} sent, "
            f"{result.skipped} skipped, {result.failed} failed"
        )

    async def _track(self, slot: TimingSlot) -> ReminderRunResult:
        task = asyncio.create_task(self._run_bucket(slot), name=f"reminders-{slot.bucket}")
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return await asyncio.shield(task)

    @property
    def timezone(self):
        """Zone the triggers fire in, resolved once the scheduler has started."""
        return self._scheduler.timezone if self._scheduler else self.tz

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def get_jobs_info(self) -> list[dict[str, Any]]:
        """Get information about scheduled jobs."""
        if not self._scheduler:
            return []

        jobs = []
        for job in self._scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                }
            )
        return jobs
