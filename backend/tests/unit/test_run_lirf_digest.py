"""Unit tests for the LIRF digest CLI."""

import unittest
from unittest.mock import patch

from models.run import DigestResult
from notifications import run_lirf_digest


class TestMain(unittest.TestCase):
    """Tests for run_lirf_digest.main()."""

    @patch("notifications.run_lirf_digest.send_weekly_lirf_digest")
    def test_dry_run(self, mock_digest):
        with patch("sys.argv", ["run_lirf_digest", "--dry-run"]):
            run_lirf_digest.main()

        mock_digest.assert_called_once_with(dry_run=True)

    @patch("notifications.run_lirf_digest.DigestScheduler")
    def test_force(self, mock_scheduler_cls):
        mock_scheduler_cls.return_value.force_trigger.return_value = DigestResult(
            success=True, recipient_count=4, runs_requiring_lirf=2
        )

        with patch("sys.argv", ["run_lirf_digest", "--force"]):
            run_lirf_digest.main()

        mock_scheduler_cls.return_value.force_trigger.assert_called_once()

    @patch("notifications.run_lirf_digest.DigestScheduler")
    def test_status(self, mock_scheduler_cls):
        mock_scheduler_cls.return_value.get_status.return_value = {
            "is_active": False,
            "is_running": False,
            "next_check_time": None,
            "has_sent_today": True,
        }

        with patch("sys.argv", ["run_lirf_digest", "--status"]), patch("builtins.print") as mock_print:
            run_lirf_digest.main()

        printed = " ".join(str(c[0][0]) for c in mock_print.call_args_list)
        self.assertIn("Sent today:      True", printed)

    def test_mode_required(self):
        with patch("sys.argv", ["run_lirf_digest"]):
            with self.assertRaises(SystemExit):
                run_lirf_digest.main()


if __name__ == "__main__":
    unittest.main()
