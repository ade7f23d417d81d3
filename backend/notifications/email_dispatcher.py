"""
Email dispatch for notifications.

send_notification_emails() sends one batch sequentially under the daily
quota. dispatch_notification_emails() is the fire-and-forget job body run on
a background worker after a notification is created: its outcome is only
visible in the printed output and error reports, never to the creator.
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from config.notification_settings import EMAIL_SEND_DELAY_SECONDS
from models.member import EmailRecipient
from models.notification import EmailDispatchResult, Notification
from models.run import RunDetails
from models.types import MemberID
from notifications.email_sender import send_email
from notifications.email_templates import render_notification_email
from notifications.error_logger import log_notification_error
from notifications.quota import can_send_emails, log_email_sent
from notifications.recipient_resolver import get_members_with_email_enabled
from shared.db import get_supabase_client
from shared.utils import print_summary

# One worker: batches from this process run one after another
_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=1,
                thread_name_prefix="email_dispatch",
            )
        return _executor


def send_notification_emails(
    notification: Notification,
    run_details: RunDetails | None,
    recipients: list[EmailRecipient],
) -> EmailDispatchResult:
    """
    Send a notification email to each recipient, one at a time.

    The quota is read once up front and the batch truncated to the remaining
    allowance; the excess is counted as skipped. A failed send is recorded and
    the loop moves on to the next recipient.

    Args:
        notification: The notification being announced
        run_details: Run to embed (run_specific notifications only)
        recipients: Opt-in filtered recipients

    Returns:
        EmailDispatchResult with sent/skipped/failed counts and error messages
    """
    result = EmailDispatchResult()

    quota = can_send_emails()
    if quota.remaining <= 0:
        result.errors.append("Daily email limit reached. Emails will not be sent.")
        result.skipped = len(recipients)
        print(f"  ⚠️  Daily email limit reached, skipping {len(recipients)} email(s)")
        return result

    to_process = recipients[: quota.remaining]
    if len(recipients) > quota.remaining:
        skipped = len(recipients) - quota.remaining
        result.errors.append(
            f"Limited to {quota.remaining} emails due to daily limit. {skipped} emails skipped."
        )
        result.skipped = skipped
        print(f"  ⚠️  {len(recipients)} recipients but only {quota.remaining} emails remaining today")

    for i, recipient in enumerate(to_process):
        if i > 0:
            # Rate limiting: keep the provider's per-second burst rate down
            time.sleep(EMAIL_SEND_DELAY_SECONDS)

        content = render_notification_email(recipient, notification, run_details)
        response = send_email(
            recipient.email,
            content["subject"],
            content["html"],
            content["text"],
            headers={"List-Unsubscribe": f"<{content['unsubscribe_url']}>"},
        )

        if response["success"]:
            result.sent += 1
            log_email_sent(recipient.id, content["subject"])
            print(f"  ✓ Email sent to {recipient.full_name or recipient.id}")
        else:
            error_msg = response.get("error", "Unknown error")
            result.failed += 1
            result.errors.append(
                f"Failed to send to {recipient.full_name or recipient.id}: {error_msg}"
            )
            print(f"  ✗ Failed to send to {recipient.email}: {error_msg}")

    return result


def get_run_details(run_id: str) -> RunDetails | None:
    """Look up the run fields embedded in run-specific emails. None if missing."""
    try:
        response = (
            get_supabase_client()
            .table("scheduled_runs")
            .select("run_title, run_date, run_time, meeting_point, approximate_distance")
            .eq("id", run_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        print(f"  ⚠️  Could not load run {run_id} for email: {e}")
        return None

    if not response.data:
        return None
    row: dict[str, Any] = response.data[0]
    return RunDetails(
        run_title=row.get("run_title") or "",
        run_date=row.get("run_date") or "",
        run_time=row.get("run_time") or "",
        meeting_point=row.get("meeting_point") or "",
        approximate_distance=row.get("approximate_distance"),
    )


def dispatch_notification_emails(
    notification: Notification, recipient_ids: list[MemberID]
) -> EmailDispatchResult | None:
    """
    Background job: email every opted-in recipient of a notification.

    Never raises. Returns the batch result, or None if the job failed before
    a batch could start.
    """
    print(f"\n→ Email dispatch for notification {notification.id} ({len(recipient_ids)} recipients)")

    try:
        recipients = get_members_with_email_enabled(recipient_ids)
        if not recipients:
            print("  No recipients have email notifications enabled")
            return EmailDispatchResult()

        print(f"  Found {len(recipients)} recipients with email enabled")

        run_details = None
        if notification.type == "run_specific" and notification.run_id:
            run_details = get_run_details(notification.run_id)

        result = send_notification_emails(notification, run_details, recipients)

    except Exception as e:
        error_file = log_notification_error(
            error_type="dispatch",
            error_message=str(e),
            context={
                "notification_id": notification.id,
                "recipient_count": len(recipient_ids),
            },
        )
        print(f"  ✗ Email dispatch failed. Details logged to: {error_file}")
        return None

    print_summary(
        f"Email dispatch complete: {notification.title}",
        result.sent,
        result.skipped,
        result.failed,
    )

    if result.failed:
        log_notification_error(
            error_type="sending",
            error_message=f"{result.failed} notification email(s) failed",
            context={"notification_id": notification.id, "errors": result.errors},
        )

    return result


def submit_email_dispatch(
    notification: Notification, recipient_ids: list[MemberID]
) -> Future:
    """
    Queue dispatch_notification_emails on the background worker.

    Returns immediately. The Future is only for shutdown/test hooks; the
    request that created the notification never waits on it.
    """
    return _get_executor().submit(
        dispatch_notification_emails, notification, list(recipient_ids)
    )


def shutdown_email_dispatcher(wait: bool = True) -> None:
    """Stop the background worker, by default letting queued batches finish."""
    global _executor
    with _executor_lock:
        executor, _executor = _executor, None
    if executor is not None:
        executor.shutdown(wait=wait)
