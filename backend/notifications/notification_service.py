"""
Notification creation: persist, fan out, then hand email off to the background.

The creator gets the notification back as soon as its delivery records are
written. Email dispatch runs on the background worker and its outcome is
never reported back to the creator.
"""

from models.notification import Notification, NotificationCreate, QuotaStatus
from notifications.email_dispatcher import submit_email_dispatch
from notifications.error_logger import log_notification_error
from notifications.notification_store import insert_delivery_records, insert_notification
from notifications.quota import can_send_emails
from notifications.recipient_resolver import resolve_recipients


def create_notification(data: NotificationCreate, actor_id: str | None) -> Notification:
    """
    Create a notification and deliver it to its audience.

    Permission to address the chosen type (run leader for run_specific,
    elevated role for general/urgent) is checked by the caller.

    Args:
        data: Validated notification input
        actor_id: Id of the member creating the notification

    Returns:
        The stored notification

    Raises:
        ValueError: No actor, or run_specific without a run_id
        Exception: The notification row itself could not be written
    """
    if not actor_id:
        raise ValueError("User must be authenticated")
    if data.type == "run_specific" and not data.run_id:
        raise ValueError("run_specific notifications require a run_id")

    print(f"→ Creating {data.type} notification: {data.title}")

    notification = insert_notification(data, actor_id)
    print(f"  ✓ Notification created: {notification.id}")

    if data.recipient_ids is not None:
        recipient_ids = list(dict.fromkeys(data.recipient_ids))
    else:
        try:
            recipient_ids = resolve_recipients(data.type, data.run_id, data.affiliated_only)
        except Exception as e:
            # The notification already exists; a failed lookup leaves it with no audience
            error_file = log_notification_error(
                error_type="fanout",
                error_message=f"Recipient resolution failed: {e}",
                context={"notification_id": notification.id, "type": data.type, "run_id": data.run_id},
            )
            print(f"  ✗ Could not resolve recipients. Details logged to: {error_file}")
            recipient_ids = []

    if not recipient_ids:
        print("  ⚠️  No recipients found for notification")
        return notification

    insert_delivery_records(notification.id, recipient_ids)

    if data.send_email:
        submit_email_dispatch(notification, recipient_ids)
        print("  → Email notifications queued (background)")
    else:
        print("  Email notifications skipped (send_email = false)")

    return notification


def get_email_sending_status() -> QuotaStatus:
    """Current daily email allowance, for UI feedback before sending."""
    return can_send_emails()
