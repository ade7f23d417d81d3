"""
Error reporting for notification fan-out and email delivery.

Failures that are deliberately not propagated (partial fan-out, background
email dispatch, digest runs) are written to timestamped report files so an
admin can follow up after the triggering request has long returned.
"""

import os
from datetime import datetime
from typing import Any

LOG_DIR = os.path.join(os.path.dirname(__file__), "logs")


def log_notification_error(
    error_type: str, error_message: str, context: dict[str, Any] | None = None
) -> str:
    """
    Write a notification error report to a timestamped file.

    Args:
        error_type: Failure stage ('fanout', 'dispatch', 'sending', 'digest')
        error_message: The error message
        context: Optional dictionary with identifiers (notification_id, member_id, ...)

    Returns:
        Path to the report file created
    """
    os.makedirs(LOG_DIR, exist_ok=True)

    # Microseconds keep reports from the same second apart
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    filename = os.path.join(LOG_DIR, f"{error_type}_error_{timestamp}.txt")

    with open(filename, "w", encoding="utf-8") as f:
        f.write(f"Notification Error Report - {datetime.now()}\n")
        f.write("=" * 60 + "\n\n")
        f.write(f"Error Type: {error_type}\n")
        f.write(f"Error Message: {error_message}\n\n")

        if context:
            f.write("Context:\n")
            f.write("-" * 60 + "\n")
            for key, value in context.items():
                if isinstance(value, (list, tuple)):
                    f.write(f"{key}:\n")
                    for item in value:
                        f.write(f"  - {item}\n")
                else:
                    f.write(f"{key}: {value}\n")

    return filename
