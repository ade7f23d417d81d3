"""
Integration tests for the notification flow: create -> fan out -> background
email -> recipient list -> read/dismiss, plus the digest scheduler end to end.

Only the database (in-memory fake) and the Resend API are faked.
"""

import os
import tempfile
import unittest
from datetime import date
from unittest.mock import patch

from models.notification import NotificationCreate
from notifications import create_notification, dismiss, list_for_recipient, mark_as_read
from notifications import notification_service
from notifications.digest_markers import DigestMarkerStore
from notifications.digest_scheduler import DigestScheduler
from notifications.email_dispatcher import shutdown_email_dispatcher
from tests.fixtures.member_factory import create_test_booking, create_test_member, create_test_run
from tests.fixtures.mock_helpers import FakeSupabase, patch_supabase


class TestRunSpecificNotificationFlow(unittest.TestCase):
    """A run leader notifies the runners booked on their run."""

    def setUp(self):
        self.fake = FakeSupabase(
            {
                "members": [
                    create_test_member(member_id="lirf", full_name="Lena Leader", access_level="lirf"),
                    create_test_member(member_id="r1", full_name="Raj", email="raj@example.com"),
                    create_test_member(member_id="r2", full_name="Rosa", email="rosa@example.com"),
                    create_test_member(member_id="r3", full_name="Ravi", email="ravi@example.com"),
                ],
                "scheduled_runs": [create_test_run(run_id="run-1", run_title="Thursday Trail")],
                "run_bookings": [
                    create_test_booking("run-1", "r1"),
                    create_test_booking("run-1", "r2"),
                    create_test_booking("run-1", "r3", cancelled_at="2026-10-18T08:00:00+00:00"),
                ],
                "email_logs": [],
            }
        )
        self.futures = []
        real_submit = notification_service.submit_email_dispatch

        def capture_submit(notification, recipient_ids):
            future = real_submit(notification, recipient_ids)
            self.futures.append(future)
            return future

        submit_patcher = patch(
            "notifications.notification_service.submit_email_dispatch", side_effect=capture_submit
        )
        submit_patcher.start()
        self.addCleanup(submit_patcher.stop)

        sleep_patcher = patch("notifications.email_dispatcher.time.sleep")
        sleep_patcher.start()
        self.addCleanup(sleep_patcher.stop)

    def tearDown(self):
        shutdown_email_dispatcher()

    @patch("notifications.email_sender.resend.Emails.send", return_value={"id": "email-1"})
    def test_end_to_end(self, mock_send):
        """Two active bookings get a record and an email; the cancelled one gets nothing."""
        data = NotificationCreate(
            title="Trail is muddy",
            message="Bring trail shoes tonight.",
            type="run_specific",
            run_id="run-1",
        )

        with patch_supabase(self.fake):
            notification = create_notification(data, "lirf")
            self.assertEqual(len(self.futures), 1)
            result = self.futures[0].result(timeout=10)

            self.assertEqual((result.sent, result.skipped, result.failed), (2, 0, 0))

            deliveries = self.fake.rows("notification_recipients")
            self.assertCountEqual([d["member_id"] for d in deliveries], ["r1", "r2"])
            self.assertEqual(len(self.fake.rows("email_logs")), 2)

            sent_to = sorted(c[0][0]["to"] for c in mock_send.call_args_list)
            self.assertEqual(sent_to, ["raj@example.com", "rosa@example.com"])
            payload = mock_send.call_args_list[0][0][0]
            self.assertIn("Thursday Trail", payload["text"])
            self.assertIn("List-Unsubscribe", payload["headers"])

            # Recipient view
            items = list_for_recipient("r1")
            self.assertEqual([i.id for i in items], [notification.id])
            self.assertEqual(items[0].sender_name, "Lena Leader")
            self.assertEqual(items[0].run_title, "Thursday Trail")
            self.assertIsNone(items[0].read_at)

            mark_as_read(notification.id, "r1")
            self.assertIsNotNone(list_for_recipient("r1")[0].read_at)

            dismiss(notification.id, "r1")
            self.assertEqual(list_for_recipient("r1"), [])
            # Other recipients are unaffected
            self.assertEqual(len(list_for_recipient("r2")), 1)
            self.assertEqual(list_for_recipient("r3"), [])

    @patch("notifications.email_sender.resend.Emails.send", return_value={"id": "email-1"})
    def test_opted_out_member_still_sees_notification(self, mock_send):
        """Opting out of email never removes the in-app notification."""
        self.fake.tables["members"][2]["email_notifications_enabled"] = False
        data = NotificationCreate(title="t", message="m", type="run_specific", run_id="run-1")

        with patch_supabase(self.fake):
            notification = create_notification(data, "lirf")
            result = self.futures[0].result(timeout=10)

            self.assertEqual(result.sent, 1)
            self.assertEqual([i.id for i in list_for_recipient("r2")], [notification.id])


@patch("notifications.lirf_digest.time.sleep")
@patch("notifications.email_sender.resend.Emails.send", return_value={"id": "email-1"})
class TestDigestSchedulerFlow(unittest.TestCase):
    """The hourly scheduler sends the real digest once on the digest weekday."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.fake = FakeSupabase(
            {
                "members": [
                    create_test_member(member_id="l1", full_name="Lee", access_level="lirf"),
                    create_test_member(member_id="a1", full_name="Ada", access_level="admin"),
                ],
                "scheduled_runs": [
                    create_test_run(run_id="gap", run_date="2026-10-25", lirfs_required=2),
                ],
            }
        )
        for target in ("notifications.digest_scheduler.club_today", "notifications.lirf_digest.club_today"):
            patcher = patch(target, return_value=date(2026, 10, 23))
            patcher.start()
            self.addCleanup(patcher.stop)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_hourly_ticks_send_once(self, mock_send, mock_sleep):
        markers = DigestMarkerStore(os.path.join(self.tmpdir.name, "markers.json"))
        scheduler = DigestScheduler(markers=markers, weekday=4)

        with patch_supabase(self.fake):
            for _ in range(3):
                scheduler.tick()

        self.assertEqual(mock_send.call_count, 2)
        subjects = {c[0][0]["subject"] for c in mock_send.call_args_list}
        self.assertEqual(subjects, {"🏃 LIRF Reminder: 1 run need assignment"})
        self.assertTrue(markers.has_fired(date(2026, 10, 23)))


if __name__ == "__main__":
    unittest.main()
