"""
Hourly driver for the weekly LIRF digest.

Each tick checks whether today is the digest weekday and whether the digest
already fired today; the per-day marker is what makes the hourly timer fire
at most once a day. A failed digest leaves the marker unset, so the next
hourly tick retries until the weekday passes.

States: Idle, Dispatching. Ticks arriving while Dispatching are dropped.
"""

import threading
from datetime import datetime
from typing import Any, Callable
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler

from config.notification_settings import (
    CLUB_TIMEZONE,
    DIGEST_CHECK_INTERVAL_HOURS,
    DIGEST_WEEKDAY,
)
from models.run import DigestResult
from notifications.digest_markers import DigestMarkerStore
from notifications.error_logger import log_notification_error
from notifications.lirf_digest import send_weekly_lirf_digest
from shared.utils import club_today

DIGEST_JOB_ID = "lirf_digest_check"


class DigestScheduler:
    """Runs the LIRF digest at most once per calendar day on the digest weekday."""

    def __init__(
        self,
        markers: DigestMarkerStore | None = None,
        send_digest: Callable[[], DigestResult] = send_weekly_lirf_digest,
        weekday: int = DIGEST_WEEKDAY,
        interval_hours: int = DIGEST_CHECK_INTERVAL_HOURS,
    ):
        self.markers = markers or DigestMarkerStore()
        self.weekday = weekday
        self.interval_hours = interval_hours
        self._send_digest = send_digest
        self._dispatching = False
        self._state_lock = threading.Lock()
        self._scheduler: BackgroundScheduler | None = None

    @property
    def is_dispatching(self) -> bool:
        return self._dispatching

    def _enter_dispatching(self) -> bool:
        with self._state_lock:
            if self._dispatching:
                return False
            self._dispatching = True
            return True

    def _leave_dispatching(self) -> None:
        with self._state_lock:
            self._dispatching = False

    def tick(self) -> DigestResult | None:
        """
        One scheduled check. Returns the digest result if a digest ran.

        Never raises: it runs on the scheduler thread.
        """
        if not self._enter_dispatching():
            print("⏳ LIRF digest already running, skipping tick")
            return None

        try:
            today = club_today()
            if today.weekday() != self.weekday:
                return None

            if self.markers.has_fired(today):
                return None

            print("🚀 Triggering weekly LIRF digest...")
            result = self._send_digest()

            if result.success:
                self.markers.mark_fired(today)
                print(
                    f"✓ LIRF digest sent to {result.recipient_count} recipients "
                    f"({result.runs_requiring_lirf} runs requiring LIRF)"
                )
            else:
                error_file = log_notification_error(
                    error_type="digest",
                    error_message="LIRF digest failed; will retry on next check",
                    context={"date": today.isoformat(), "errors": result.errors},
                )
                print(f"✗ LIRF digest failed, will retry. Details logged to: {error_file}")

            self.markers.cleanup(today)
            return result

        except Exception as e:
            error_file = log_notification_error(
                error_type="digest",
                error_message=str(e),
                context={"stage": "scheduler tick"},
            )
            print(f"✗ LIRF digest scheduler error. Details logged to: {error_file}")
            return None

        finally:
            self._leave_dispatching()

    def force_trigger(self) -> DigestResult:
        """
        Run the digest now, ignoring weekday and marker.

        The marker is still set afterwards so the next scheduled tick today
        does not send a second copy.

        Raises:
            RuntimeError: A digest is already in progress
        """
        if not self._enter_dispatching():
            raise RuntimeError("LIRF digest already in progress")

        try:
            print("🔧 Force triggering LIRF digest...")
            result = self._send_digest()
            self.markers.mark_fired(club_today())
            return result
        finally:
            self._leave_dispatching()

    def start(self) -> None:
        """Check immediately, then every interval_hours, on a background thread."""
        if self._scheduler is not None:
            return

        scheduler = BackgroundScheduler(timezone=CLUB_TIMEZONE)
        scheduler.add_job(
            self.tick,
            "interval",
            hours=self.interval_hours,
            id=DIGEST_JOB_ID,
            next_run_time=datetime.now(ZoneInfo(CLUB_TIMEZONE)),
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        print(f"✓ LIRF digest scheduler started (checking every {self.interval_hours}h)")

    def stop(self) -> None:
        """Stop future ticks. A digest already in flight runs to completion."""
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        print("🛑 LIRF digest scheduler stopped")

    def get_status(self) -> dict[str, Any]:
        next_check = None
        if self._scheduler is not None:
            job = self._scheduler.get_job(DIGEST_JOB_ID)
            if job is not None and job.next_run_time is not None:
                next_check = job.next_run_time.isoformat()

        return {
            "is_running": self._dispatching,
            "is_active": self._scheduler is not None,
            "next_check_time": next_check,
            "has_sent_today": self.markers.has_fired(club_today()),
        }
