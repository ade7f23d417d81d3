"""
Weekly LIRF coverage digest.

Finds scheduled runs in the coming week that still need run leaders and
emails every active LIRF/admin about them. The digest goes straight to the
transport: it is not a notification, writes no delivery records and does not
count against the daily notification quota.
"""

import time
from datetime import date, timedelta
from typing import Any, cast

from config.notification_settings import DIGEST_LOOKAHEAD_DAYS, EMAIL_SEND_DELAY_SECONDS
from models.member import EmailRecipient
from models.run import DigestResult, RunRequiringLirf
from notifications.email_sender import send_email
from notifications.email_templates import render_digest_email
from notifications.recipient_resolver import get_digest_recipients
from shared.db import get_supabase_client
from shared.utils import club_today, print_summary


def get_runs_requiring_lirf(today: date | None = None) -> list[RunRequiringLirf]:
    """
    Scheduled runs from today through the lookahead window with LIRF vacancies.

    Raises:
        Exception: Store failures propagate so the digest is retried later
    """
    today = today or club_today()
    until = today + timedelta(days=DIGEST_LOOKAHEAD_DAYS)

    response = (
        get_supabase_client()
        .table("scheduled_runs")
        .select("*")
        .gte("run_date", today.isoformat())
        .lte("run_date", until.isoformat())
        .eq("run_status", "scheduled")
        .order("run_date")
        .order("run_time")
        .execute()
    )

    runs = [
        RunRequiringLirf.from_row(row)
        for row in cast(list[dict[str, Any]], response.data or [])
    ]
    return [run for run in runs if run.lirf_vacancies > 0]


def send_weekly_lirf_digest(dry_run: bool = False) -> DigestResult:
    """
    Compute coverage gaps and email every LIRF/admin recipient.

    Args:
        dry_run: If True, print what would be sent without sending

    Returns:
        DigestResult. success is False when the lookups failed or every send
        failed; a partial failure still counts as success.
    """
    print("→ Starting weekly LIRF digest...")
    today = club_today()

    try:
        runs = get_runs_requiring_lirf(today)
        recipients = get_digest_recipients()
    except Exception as e:
        print(f"  ✗ LIRF digest lookup failed: {e}")
        return DigestResult(success=False, errors=[f"System error: {e}"])

    print(f"  Found {len(runs)} runs requiring LIRF assignment")
    print(f"  Found {len(recipients)} LIRF/Admin recipients")

    if not recipients:
        print("  ⚠️  No LIRF/Admin recipients found")
        return DigestResult(
            success=True,
            runs_requiring_lirf=len(runs),
            errors=["No LIRF/Admin recipients found"],
        )

    sent = 0
    errors: list[str] = []
    for i, recipient in enumerate(recipients):
        if i > 0 and not dry_run:
            time.sleep(EMAIL_SEND_DELAY_SECONDS)

        error = _send_digest_to(recipient, runs, today, dry_run)
        if error:
            errors.append(f"Failed to send to {recipient.full_name or recipient.id}: {error}")
            print(f"  ✗ {errors[-1]}")
        else:
            sent += 1

    print_summary("LIRF digest complete", sent, 0, len(errors))

    return DigestResult(
        success=sent > 0,
        recipient_count=sent,
        runs_requiring_lirf=len(runs),
        errors=errors,
    )


def _send_digest_to(
    recipient: EmailRecipient,
    runs: list[RunRequiringLirf],
    today: date,
    dry_run: bool,
) -> str | None:
    """Send one digest email. Returns an error message, or None on success."""
    content = render_digest_email(recipient, runs, today)

    if dry_run:
        print(f"  [DRY RUN] Would send '{content['subject']}' to {recipient.email}")
        return None

    response = send_email(recipient.email, content["subject"], content["html"], content["text"])
    if not response["success"]:
        return response.get("error", "Unknown error")

    print(f"  ✓ LIRF digest sent to {recipient.full_name} ({recipient.email})")
    return None
