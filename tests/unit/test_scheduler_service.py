"""
Unit tests for SchedulerService.

Tests cover:
- Next run time in the configured timezone (including DST)
- run_once error isolation
- Thread start/stop and the startup job
"""

import threading

import pytz

from networth.services import SchedulerService, next_run_after

from tests.conftest import FakeClock, utc_datetime


DUBLIN = pytz.timezone("Europe/Dublin")


class TestNextRunAfter:
    """Tests for computing the next scheduled instant."""

    def test_later_today_in_winter(self):
        """
        GIVEN 10:00 UTC on a January day (Dublin = UTC)
        WHEN the schedule is 23:59 Europe/Dublin
        THEN the next run is 23:59 UTC the same day
        """
        nxt = next_run_after(utc_datetime(2024, 1, 10, 10), 23, 59, "Europe/Dublin")

        assert nxt == utc_datetime(2024, 1, 10, 23, 59)

    def test_summer_time_shifts_utc_instant(self):
        """
        GIVEN a July day (Dublin = UTC+1)
        WHEN the schedule is 23:59 local
        THEN the run happens at 22:59 UTC
        """
        nxt = next_run_after(utc_datetime(2024, 7, 10, 10), 23, 59, "Europe/Dublin")

        assert nxt == utc_datetime(2024, 7, 10, 22, 59)
        assert nxt.astimezone(DUBLIN).strftime("%H:%M") == "23:59"

    def test_after_todays_slot_rolls_to_tomorrow(self):
        nxt = next_run_after(utc_datetime(2024, 1, 10, 23, 59, 30), 23, 59, "Europe/Dublin")

        assert nxt == utc_datetime(2024, 1, 11, 23, 59)

    def test_exact_slot_is_not_repeated(self):
        now = utc_datetime(2024, 1, 10, 23, 59)

        assert next_run_after(now, 23, 59, "Europe/Dublin") > now


class TestRunOnce:
    def test_run_once_returns_job_result(self):
        scheduler = SchedulerService(job=lambda: {"computed": 2, "failed": 0})

        assert scheduler.run_once() == {"computed": 2, "failed": 0}
        assert scheduler.status()["last_result"] == {"computed": 2, "failed": 0}

    def test_run_once_swallows_job_errors(self):
        def boom():
            raise RuntimeError("database locked")

        scheduler = SchedulerService(job=boom)

        assert scheduler.run_once() is None
        assert scheduler.status()["last_run"] is not None


class TestSchedulerThread:
    def test_start_runs_startup_job_and_stop_exits(self):
        """
        GIVEN a scheduler with a startup job and a far-away schedule
        WHEN started and then stopped
        THEN the startup job ran once and the thread exits promptly
        """
        started = threading.Event()
        scheduler = SchedulerService(
            job=lambda: None,
            hour=3,
            minute=0,
            startup_job=started.set,
            clock=FakeClock(utc_datetime(2024, 1, 10, 4)),
        )

        scheduler.start()
        assert started.wait(timeout=2.0)
        assert scheduler.is_running

        scheduler.stop(timeout=2.0)

        assert not scheduler.is_running

    def test_status_reports_schedule(self):
        scheduler = SchedulerService(job=lambda: None, hour=23, minute=59, tz_name="Europe/Dublin")

        status = scheduler.status()

        assert status["schedule"] == "23:59"
        assert status["timezone"] == "Europe/Dublin"
        assert status["running"] is False
