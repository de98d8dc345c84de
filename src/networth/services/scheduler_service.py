"""Background thread running the daily snapshot job at a fixed local time."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

import pytz

from networth.core.timezone import UTC, ensure_utc, now_utc

logger = logging.getLogger(__name__)


def next_run_after(now: datetime, hour: int, minute: int, tz_name: str) -> datetime:
    """
    Next occurrence of ``hour:minute`` local time strictly after ``now``.

    Returned in UTC. Local times are localized with pytz so DST transitions
    shift the UTC instant, not the wall-clock time.
    """
    tz = pytz.timezone(tz_name)
    local_now = ensure_utc(now).astimezone(tz)

    candidate_day = local_now.date()
    while True:
        naive = datetime(candidate_day.year, candidate_day.month, candidate_day.day, hour, minute)
        candidate = tz.localize(naive).astimezone(UTC)
        if candidate > ensure_utc(now):
            return candidate
        candidate_day += timedelta(days=1)


class SchedulerService:
    """
    Runs ``job`` once a day at ``hour:minute`` in ``tz_name``.

    One daemon thread sleeps until the next run time; ``stop()`` wakes it.
    ``startup_job``, when given, runs once when the thread starts.
    """

    def __init__(
        self,
        job: Callable[[], Any],
        hour: int = 23,
        minute: int = 59,
        tz_name: str = "Europe/Dublin",
        startup_job: Optional[Callable[[], Any]] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._job = job
        self._hour = hour
        self._minute = minute
        self._tz_name = tz_name
        self._startup_job = startup_job
        self._clock = clock

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._next_run: Optional[datetime] = None
        self._last_run: Optional[datetime] = None
        self._last_result: Any = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def next_run_time(self) -> datetime:
        return next_run_after(self._clock(), self._hour, self._minute, self._tz_name)

    def start(self) -> None:
        """Start the scheduler thread (no-op if already running)."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="snapshot-scheduler", daemon=True)
        self._thread.start()
        logger.info(
            "Snapshot scheduler started: daily at %02d:%02d %s",
            self._hour, self._minute, self._tz_name,
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the thread to exit and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("Snapshot scheduler stopped")

    def run_once(self) -> Any:
        """Run the job now; exceptions are logged and swallowed."""
        try:
            self._last_result = self._job()
        except Exception:
            logger.exception("Scheduled snapshot job failed")
            self._last_result = None
        self._last_run = self._clock()
        return self._last_result

    def status(self) -> dict:
        return {
            "running": self.is_running,
            "schedule": f"{self._hour:02d}:{self._minute:02d}",
            "timezone": self._tz_name,
            "next_run": self._next_run.isoformat() if self._next_run else None,
            "last_run": self._last_run.isoformat() if self._last_run else None,
            "last_result": self._last_result,
        }

    def _loop(self) -> None:
        if self._startup_job is not None:
            try:
                self._startup_job()
            except Exception:
                logger.exception("Startup snapshot job failed")

        while not self._stop_event.is_set():
            self._next_run = self.next_run_time()
            delay = (self._next_run - self._clock()).total_seconds()
            logger.debug("Next snapshot run at %s (in %.0fs)", self._next_run.isoformat(), delay)
            if self._stop_event.wait(timeout=max(delay, 0)):
                break
            self.run_once()
