"""
Durable notification records and per-recipient delivery state.

Tables:
    notifications            - one row per notification
    notification_recipients  - one row per (notification, member) with
                               delivered_at / read_at / dismissed_at
"""

from typing import Any, cast

from models.notification import (
    DeliveryRecord,
    Notification,
    NotificationCreate,
    NotificationListItem,
)
from models.types import MemberID, NotificationID
from notifications.error_logger import log_notification_error
from shared.db import get_supabase_client
from shared.utils import club_today, is_expired, utc_now_iso


def insert_notification(data: NotificationCreate, actor_id: str) -> Notification:
    """
    Insert the notification row.

    Raises:
        Exception: Any store failure (nothing has been written yet, so the
            caller should surface it)
    """
    supabase = get_supabase_client()
    response = (
        supabase.table("notifications")
        .insert(
            {
                "title": data.title,
                "message": data.message,
                "type": data.type,
                "priority": data.priority,
                "run_id": data.run_id,
                "sent_by": actor_id,
                "scheduled_for": data.scheduled_for,
                "expires_at": data.expires_at,
            }
        )
        .execute()
    )
    if not response.data:
        raise RuntimeError("Failed to create notification: no row returned")

    return Notification.model_validate(response.data[0])


def insert_delivery_records(
    notification_id: NotificationID, member_ids: list[MemberID]
) -> int:
    """
    Create one delivery record per recipient.

    Tries a single bulk insert first. If that fails, falls back to inserting
    row by row so one bad member id does not cost everybody their
    notification. Failures are logged, never raised: the notification itself
    already exists and stays "sent" even with incomplete fan-out.

    Returns:
        Number of delivery records written
    """
    unique_ids = list(dict.fromkeys(member_ids))
    if not unique_ids:
        return 0

    delivered_at = utc_now_iso()
    rows = [
        {
            "notification_id": notification_id,
            "member_id": member_id,
            "delivered_at": delivered_at,
        }
        for member_id in unique_ids
    ]

    try:
        supabase = get_supabase_client()
    except Exception as e:
        log_notification_error(
            error_type="fanout",
            error_message=str(e),
            context={"notification_id": notification_id, "recipient_count": len(rows)},
        )
        print(f"  ✗ Could not connect to create recipient records: {e}")
        return 0

    try:
        supabase.table("notification_recipients").insert(
            rows, returning="minimal"
        ).execute()
        print(f"  ✓ Created {len(rows)} recipient records")
        return len(rows)
    except Exception as e:
        print(f"  ⚠️  Bulk recipient insert failed, retrying individually: {e}")

    written = 0
    failures = []
    for row in rows:
        try:
            supabase.table("notification_recipients").insert(
                row, returning="minimal"
            ).execute()
            written += 1
        except Exception as e:
            failures.append({"member_id": row["member_id"], "error": str(e)})
            print(f"  ⚠ Could not create recipient record for member {row['member_id']}: {e}")

    if failures:
        error_file = log_notification_error(
            error_type="fanout",
            error_message=f"Failed to create {len(failures)} of {len(rows)} recipient record(s)",
            context={"notification_id": notification_id, "failures": failures},
        )
        print(f"  ⚠️  Partial fan-out ({written}/{len(rows)}). Details logged to: {error_file}")

    return written


def list_for_recipient(member_id: MemberID, limit: int = 10) -> list[NotificationListItem]:
    """
    Get a member's active notifications, newest delivery first.

    Dismissed notifications and notifications whose expires_at has passed are
    excluded. Expired rows are filtered before the limit is applied, so an
    old expired notification never pushes a live one off the list.
    """
    supabase = get_supabase_client()

    deliveries = cast(
        list[dict[str, Any]],
        (
            supabase.table("notification_recipients")
            .select("notification_id, delivered_at, read_at, dismissed_at")
            .eq("member_id", member_id)
            .is_("dismissed_at", "null")
            .order("delivered_at", desc=True)
            .execute()
        ).data
        or [],
    )
    if not deliveries:
        return []

    notification_ids = [d["notification_id"] for d in deliveries]
    notifications = {
        n["id"]: n
        for n in (
            supabase.table("notifications")
            .select("*")
            .in_("id", notification_ids)
            .execute()
        ).data
        or []
    }

    items = []
    for delivery in deliveries:
        notification = notifications.get(delivery["notification_id"])
        if not notification or is_expired(notification.get("expires_at")):
            continue
        items.append(
            NotificationListItem.model_validate(
                {
                    **notification,
                    "delivered_at": delivery.get("delivered_at"),
                    "read_at": delivery.get("read_at"),
                    "dismissed_at": delivery.get("dismissed_at"),
                }
            )
        )
        if len(items) >= limit:
            break

    _attach_sender_names(items)
    _attach_run_details(items)
    return items


def _attach_sender_names(items: list[NotificationListItem]) -> None:
    sender_ids = list({item.sent_by for item in items})
    if not sender_ids:
        return

    senders = (
        get_supabase_client()
        .table("members")
        .select("id, full_name")
        .in_("id", sender_ids)
        .execute()
    ).data or []
    names = {s["id"]: s.get("full_name") for s in senders}
    for item in items:
        item.sender_name = names.get(item.sent_by)


def _attach_run_details(items: list[NotificationListItem]) -> None:
    run_ids = list({item.run_id for item in items if item.type == "run_specific" and item.run_id})
    if not run_ids:
        return

    runs = (
        get_supabase_client()
        .table("scheduled_runs")
        .select("id, run_title, run_date, run_time")
        .in_("id", run_ids)
        .execute()
    ).data or []
    by_id = {r["id"]: r for r in runs}
    for item in items:
        run = by_id.get(item.run_id) if item.type == "run_specific" else None
        if run:
            item.run_title = run.get("run_title")
            item.run_date = run.get("run_date")
            item.run_time = run.get("run_time")


def mark_as_read(notification_id: NotificationID, member_id: MemberID) -> None:
    """Set read_at for one recipient. No-op if already read."""
    (
        get_supabase_client()
        .table("notification_recipients")
        .update({"read_at": utc_now_iso()})
        .eq("notification_id", notification_id)
        .eq("member_id", member_id)
        .is_("read_at", "null")
        .execute()
    )


def dismiss(notification_id: NotificationID, member_id: MemberID) -> None:
    """Dismiss a notification for one recipient; dismissing also marks it read."""
    now = utc_now_iso()
    response = (
        get_supabase_client()
        .table("notification_recipients")
        .update({"dismissed_at": now, "read_at": now})
        .eq("notification_id", notification_id)
        .eq("member_id", member_id)
        .execute()
    )
    if not response.data:
        print(f"  ⚠️  No delivery record for notification {notification_id} / member {member_id}")


def get_all_notifications() -> list[NotificationListItem]:
    """Get every notification, newest first (admin/LIRF management view)."""
    rows = (
        get_supabase_client()
        .table("notifications")
        .select("*")
        .order("sent_at", desc=True)
        .execute()
    ).data or []

    items = [NotificationListItem.model_validate(row) for row in rows]
    _attach_run_details(items)
    return items


def get_notification_recipients(notification_id: NotificationID) -> list[DeliveryRecord]:
    """Get delivery state for every recipient of a notification, with member names."""
    supabase = get_supabase_client()
    rows = (
        supabase.table("notification_recipients")
        .select("*")
        .eq("notification_id", notification_id)
        .order("delivered_at", desc=True)
        .execute()
    ).data or []
    if not rows:
        return []

    members = (
        supabase.table("members")
        .select("id, full_name, email")
        .in_("id", [r["member_id"] for r in rows])
        .execute()
    ).data or []
    by_id = {m["id"]: m for m in members}

    records = []
    for row in rows:
        member = by_id.get(row["member_id"], {})
        records.append(
            DeliveryRecord.model_validate(
                {
                    **row,
                    "member_name": member.get("full_name"),
                    "member_email": member.get("email"),
                }
            )
        )
    return records


def get_unread_count(member_id: MemberID) -> int:
    """Count notifications a member has neither read nor dismissed."""
    try:
        response = (
            get_supabase_client()
            .table("notification_recipients")
            .select("id", count="exact", head=True)
            .eq("member_id", member_id)
            .is_("read_at", "null")
            .is_("dismissed_at", "null")
            .execute()
        )
        return response.count or 0
    except Exception as e:
        print(f"  ⚠️  Could not count unread notifications: {e}")
        return 0


def get_assigned_runs(actor_id: MemberID) -> list[dict[str, Any]]:
    """Upcoming runs where the actor is one of the assigned LIRFs."""
    lirf_filter = ",".join(
        f"assigned_lirf_{slot}.eq.{actor_id}" for slot in (1, 2, 3)
    )
    response = (
        get_supabase_client()
        .table("scheduled_runs")
        .select("*")
        .or_(lirf_filter)
        .gte("run_date", club_today().isoformat())
        .order("run_date")
        .execute()
    )
    return cast(list[dict[str, Any]], response.data or [])
