"""
Recipient resolution for notifications and the LIRF digest.

Turns an event (notification type + optional run) into the set of member ids
that should receive it. Read-only: nothing here writes to the database.
"""

from typing import Any, cast

from pydantic import ValidationError

from config.notification_settings import DIGEST_ACCESS_LEVELS
from models.member import EmailRecipient
from models.types import MemberID
from shared.db import get_supabase_client


def _unique(ids: list[Any]) -> list[MemberID]:
    """De-duplicate ids, keeping first-seen order."""
    return list(dict.fromkeys(MemberID(str(i)) for i in ids if i))


def resolve_recipients(
    notification_type: str,
    run_id: str | None = None,
    affiliated_only: bool = False,
) -> list[MemberID]:
    """
    Determine who should receive a notification.

    Args:
        notification_type: 'general', 'urgent' or 'run_specific'
        run_id: Run whose active bookings form the audience (run_specific only)
        affiliated_only: Restrict general/urgent audiences to paid (affiliated) members

    Returns:
        Member ids, de-duplicated. Empty when nobody matches.

    Raises:
        ValueError: run_specific without a run_id, or an unknown type
    """
    supabase = get_supabase_client()

    if notification_type in ("general", "urgent"):
        query = (
            supabase.table("members").select("id").eq("membership_status", "active")
        )
        if affiliated_only:
            query = query.eq("is_paid_member", True)

        members = query.execute().data or []
        audience = "affiliated" if affiliated_only else "active"
        print(f"  → Found {len(members)} {audience} members for {notification_type} notification")
        return _unique([m["id"] for m in members])

    if notification_type == "run_specific":
        if not run_id:
            raise ValueError("run_specific notifications require a run_id")

        bookings = (
            supabase.table("run_bookings")
            .select("member_id")
            .eq("run_id", run_id)
            .is_("cancelled_at", "null")
            .execute()
        ).data or []
        print(f"  → Found {len(bookings)} active bookings for run {run_id}")
        return _unique([b["member_id"] for b in bookings])

    raise ValueError(f"Unknown notification type: {notification_type!r}")


def _to_recipients(rows: list[dict[str, Any]]) -> list[EmailRecipient]:
    recipients = []
    for row in rows:
        if not row.get("email"):
            print(f"  ⚠️  Member {row.get('id')} has no email address, skipping")
            continue
        try:
            recipient = EmailRecipient(
                id=row["id"],
                email=row["email"],
                full_name=row.get("full_name") or "",
            )
        except ValidationError:
            print(f"  ⚠️  Member {row.get('id')} has an invalid email address, skipping")
            continue
        recipients.append(recipient)
    return recipients


def get_members_with_email_enabled(member_ids: list[MemberID]) -> list[EmailRecipient]:
    """
    Filter members down to those reachable by email.

    Only active members with email_notifications_enabled are returned. Members
    filtered out here still keep their in-app delivery record.
    """
    if not member_ids:
        return []

    supabase = get_supabase_client()
    response = (
        supabase.table("members")
        .select("id, email, full_name")
        .in_("id", list(member_ids))
        .eq("email_notifications_enabled", True)
        .eq("membership_status", "active")
        .execute()
    )
    return _to_recipients(cast(list[dict[str, Any]], response.data or []))


def get_digest_recipients() -> list[EmailRecipient]:
    """
    Get all active LIRF and admin members for the coverage digest.

    The email opt-out flag is not applied to the digest.
    """
    supabase = get_supabase_client()
    response = (
        supabase.table("members")
        .select("id, email, full_name")
        .in_("access_level", DIGEST_ACCESS_LEVELS)
        .eq("membership_status", "active")
        .order("full_name")
        .execute()
    )
    return _to_recipients(cast(list[dict[str, Any]], response.data or []))


def get_active_members_count() -> int:
    """Count active members (audience preview for general notifications)."""
    try:
        response = (
            get_supabase_client()
            .table("members")
            .select("id", count="exact", head=True)
            .eq("membership_status", "active")
            .execute()
        )
        return response.count or 0
    except Exception as e:
        print(f"  ⚠️  Could not count active members: {e}")
        return 0


def get_affiliated_members_count() -> int:
    """Count active paid (affiliated) members."""
    try:
        response = (
            get_supabase_client()
            .table("members")
            .select("id", count="exact", head=True)
            .eq("membership_status", "active")
            .eq("is_paid_member", True)
            .execute()
        )
        return response.count or 0
    except Exception as e:
        print(f"  ⚠️  Could not count affiliated members: {e}")
        return 0
