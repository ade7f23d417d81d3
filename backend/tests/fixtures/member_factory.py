"""Factory functions for creating test member, run and notification rows."""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def create_test_member(
    member_id: Optional[str] = None,
    email: Optional[str] = None,
    full_name: str = "Test Runner",
    membership_status: str = "active",
    access_level: str = "member",
    is_paid_member: bool = False,
    email_notifications_enabled: bool = True,
    **overrides,
) -> Dict[str, Any]:
    """Factory for creating a members row."""
    member_id = member_id or str(uuid.uuid4())
    member = {
        "id": member_id,
        "email": email or f"{member_id[:8]}@example.com",
        "full_name": full_name,
        "membership_status": membership_status,
        "access_level": access_level,
        "is_paid_member": is_paid_member,
        "email_notifications_enabled": email_notifications_enabled,
    }
    member.update(overrides)
    return member


def create_test_run(
    run_id: Optional[str] = None,
    run_title: str = "Tuesday 5k",
    run_date: str = "2026-10-20",
    run_time: str = "18:30",
    meeting_point: str = "Alcester Leisure Centre",
    approximate_distance: Optional[str] = "5km",
    lirfs_required: int = 2,
    assigned_lirfs: tuple = (),
    run_status: str = "scheduled",
    **overrides,
) -> Dict[str, Any]:
    """Factory for creating a scheduled_runs row. assigned_lirfs fills slots 1..3 in order."""
    slots = list(assigned_lirfs) + [None] * (3 - len(assigned_lirfs))
    run = {
        "id": run_id or str(uuid.uuid4()),
        "run_title": run_title,
        "run_date": run_date,
        "run_time": run_time,
        "meeting_point": meeting_point,
        "approximate_distance": approximate_distance,
        "lirfs_required": lirfs_required,
        "assigned_lirf_1": slots[0],
        "assigned_lirf_2": slots[1],
        "assigned_lirf_3": slots[2],
        "run_status": run_status,
    }
    run.update(overrides)
    return run


def create_test_booking(
    run_id: str,
    member_id: str,
    cancelled_at: Optional[str] = None,
    **overrides,
) -> Dict[str, Any]:
    """Factory for creating a run_bookings row."""
    booking = {
        "id": str(uuid.uuid4()),
        "run_id": run_id,
        "member_id": member_id,
        "cancelled_at": cancelled_at,
    }
    booking.update(overrides)
    return booking


def create_test_notification(
    notification_id: Optional[str] = None,
    title: str = "Route change",
    message: str = "We're starting from the church tonight.",
    type: str = "general",
    priority: str = "normal",
    run_id: Optional[str] = None,
    sent_by: Optional[str] = None,
    expires_at: Optional[str] = None,
    **overrides,
) -> Dict[str, Any]:
    """Factory for creating a notifications row."""
    now = datetime.now(timezone.utc).isoformat()
    notification = {
        "id": notification_id or str(uuid.uuid4()),
        "title": title,
        "message": message,
        "type": type,
        "priority": priority,
        "run_id": run_id,
        "sent_by": sent_by or str(uuid.uuid4()),
        "sent_at": now,
        "scheduled_for": None,
        "expires_at": expires_at,
        "created_at": now,
        "updated_at": now,
    }
    notification.update(overrides)
    return notification


def create_test_delivery(
    notification_id: str,
    member_id: str,
    delivered_at: Optional[str] = None,
    read_at: Optional[str] = None,
    dismissed_at: Optional[str] = None,
    **overrides,
) -> Dict[str, Any]:
    """Factory for creating a notification_recipients row."""
    delivery = {
        "id": str(uuid.uuid4()),
        "notification_id": notification_id,
        "member_id": member_id,
        "delivered_at": delivered_at or datetime.now(timezone.utc).isoformat(),
        "read_at": read_at,
        "dismissed_at": dismissed_at,
    }
    delivery.update(overrides)
    return delivery
