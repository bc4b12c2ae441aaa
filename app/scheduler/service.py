"""Scheduler service for the periodic pending-item sweep."""

import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.logging import get_logger

logger = get_logger(__name__, component="scheduler")

SWEEP_JOB_ID = "pending-item-sweep"


class SchedulerService:
    """
    Wraps APScheduler to run the pending-item sweep at a fixed interval.

    Uses BackgroundScheduler so the sweep runs in a worker thread while the
    main thread waits for signals and coordinates shutdown.
    """

    def __init__(
        self,
        sweep_callable: Callable[[], Any],
        interval_seconds: int,
        shutdown_event: Optional[threading.Event] = None,
        run_immediately: bool = True,
    ):
        """
        Initialize the scheduler service.

        Args:
            sweep_callable: Function to call on each run (e.g., sweeper.run_once)
            interval_seconds: Interval between runs in seconds
            shutdown_event: Optional event to set on shutdown for coordination
            run_immediately: Whether the first run happens right after start()
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.sweep_callable = sweep_callable
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event
        self.run_immediately = run_immediately

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """Register the sweep job and start the scheduler thread."""
        trigger = IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc)

        job_kwargs = {}
        if self.run_immediately:
            job_kwargs["next_run_time"] = datetime.now(timezone.utc)

        self.scheduler.add_job(
            func=self._run_sweep,
            trigger=trigger,
            id=SWEEP_JOB_ID,
            name="Pending item sweep",
            replace_existing=True,
            **job_kwargs,
        )
        self.scheduler.start()

        next_run = self.get_next_run_time()
        logger.info(
            f"Scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "next_run_time": next_run.isoformat() if next_run else None,
            },
        )

    def _run_sweep(self) -> None:
        # A failed sweep must not unschedule the job
        try:
            self.sweep_callable()
        except Exception as e:
            logger.error(
                f"Scheduled sweep failed: {e}",
                extra={"event": "scheduler.sweep.failed", "error_type": type(e).__name__},
                exc_info=True,
            )

    def shutdown(self, wait: bool = False) -> None:
        """
        Shutdown the scheduler gracefully.

        Args:
            wait: If True, wait for a running sweep to complete before returning
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self) -> Any:
        """Run the sweep synchronously in the current thread and return its result."""
        logger.info("Triggering immediate sweep", extra={"event": "scheduler.trigger_now"})
        return self.sweep_callable()

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        job = self.scheduler.get_job(SWEEP_JOB_ID)
        return job.next_run_time if job else None
