from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

from config.notification_settings import CLUB_TIMEZONE


def parse_date_string(date_str: str) -> str | None:
    """Parse various date formats into ISO format."""
    if not date_str:
        return None
    try:
        dt = date_parser.parse(date_str, fuzzy=True)
        return str(dt.isoformat())  # Explicit cast to satisfy mypy
    except (ValueError, OverflowError, TypeError):
        return None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def club_today() -> date:
    """Current calendar date in the club's timezone."""
    return datetime.now(ZoneInfo(CLUB_TIMEZONE)).date()


def club_day_bounds_utc(day: date) -> tuple[str, str]:
    """
    Return the [start, end) UTC ISO timestamps of a club-local calendar day.

    The end bound is the start of the following day, so a send at 23:59:59.999
    local time still counts toward the day it happened on.
    """
    tz = ZoneInfo(CLUB_TIMEZONE)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return (
        start.astimezone(timezone.utc).isoformat(),
        end.astimezone(timezone.utc).isoformat(),
    )


def is_expired(expires_at: str | datetime | None, now: datetime | None = None) -> bool:
    """True when an expiry timestamp is set and not in the future."""
    if not expires_at:
        return False
    if isinstance(expires_at, str):
        expires_at = date_parser.isoparse(expires_at)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= (now or utc_now())


def print_summary(title: str, sent: int, skipped: int, failed: int) -> None:
    """Print an email batch summary."""
    print(f"\n{'=' * 60}")
    print(f"[{datetime.now()}] {title}")
    print(f"{'=' * 60}")
    print(f"✓ Sent:    {sent}")
    print(f"⊘ Skipped: {skipped}")
    print(f"✗ Failed:  {failed}")
    print(f"{'=' * 60}\n")
