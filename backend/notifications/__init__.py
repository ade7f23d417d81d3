"""
Notification system for the run club portal.

This module handles:
- Resolving the member audience for club, urgent and run-specific notifications
- Recording per-member delivery/read/dismiss state
- Emailing opted-in members under a daily send quota (background dispatch)
- The weekly LIRF coverage digest and its once-a-day scheduler
"""

from .notification_service import create_notification, get_email_sending_status
from .notification_store import dismiss, list_for_recipient, mark_as_read
from .digest_scheduler import DigestScheduler

__all__ = [
    'create_notification',
    'get_email_sending_status',
    'list_for_recipient',
    'mark_as_read',
    'dismiss',
    'DigestScheduler',
]
