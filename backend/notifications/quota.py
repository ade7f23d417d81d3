"""
Daily email quota, derived from the append-only email_logs table.

This is a read-mostly gate, not a reservation system: the allowance is read
once before a dispatch batch and each successful send appends a log row.
Check and append are not one transaction, so two batches started together
can both see the same remaining allowance.
"""

from config.notification_settings import DAILY_EMAIL_LIMIT
from models.notification import EmailLogEntry, QuotaStatus
from models.types import MemberID
from shared.db import get_supabase_client
from shared.utils import club_day_bounds_utc, club_today, utc_now


def get_daily_sent_count() -> int:
    """Count emails logged during the current club-local calendar day."""
    start, end = club_day_bounds_utc(club_today())

    try:
        response = (
            get_supabase_client()
            .table("email_logs")
            .select("id", count="exact", head=True)
            .gte("sent_at", start)
            .lt("sent_at", end)
            .execute()
        )
        return response.count or 0
    except Exception as e:
        print(f"  ⚠️  Error getting daily email count: {e}")
        return 0


def can_send_emails() -> QuotaStatus:
    """Report how many emails may still be sent today."""
    remaining = max(0, DAILY_EMAIL_LIMIT - get_daily_sent_count())
    return QuotaStatus(
        can_send=remaining > 0,
        remaining=remaining,
        total=DAILY_EMAIL_LIMIT,
    )


def log_email_sent(recipient_id: MemberID, subject: str) -> None:
    """Append an email log entry. Failures are reported, not raised."""
    try:
        entry = EmailLogEntry(recipient_id=recipient_id, subject=subject, sent_at=utc_now())
        row = entry.model_dump()
        row["sent_at"] = entry.sent_at.isoformat()
        get_supabase_client().table("email_logs").insert(row, returning="minimal").execute()
    except Exception as e:
        print(f"  ⚠️  Failed to log email to {recipient_id}: {e}")
