"""
Outbound email transport via the Resend API.

Both notification emails and the LIRF digest go through send_email(). It
never raises: callers get a result dict and decide how a failure is counted.
"""

import os
from typing import Any

import resend

from config.notification_settings import NOTIFICATION_FROM_EMAIL, NOTIFICATION_FROM_NAME

# Initialize Resend with API key from environment
resend.api_key = os.getenv("RESEND_API_KEY")


def send_email(
    to: str,
    subject: str,
    html: str,
    text: str,
    headers: dict[str, str] | None = None,
) -> dict[str, Any]:
    """
    Send one email.

    Args:
        to: Recipient email address
        subject: Subject line (already prefixed)
        html: HTML body
        text: Plain text body
        headers: Extra headers (e.g. List-Unsubscribe)

    Returns:
        Dictionary with 'success' (bool), 'email_id' (str if success), 'error' (str if failed)
    """
    if not to:
        return {"success": False, "error": "Missing recipient address"}

    params: dict[str, Any] = {
        "from": f"{NOTIFICATION_FROM_NAME} <{NOTIFICATION_FROM_EMAIL}>",
        "to": to,
        "subject": subject,
        "html": html,
        "text": text,
    }
    if headers:
        params["headers"] = headers

    try:
        response = resend.Emails.send(params)  # type: ignore[arg-type]

        return {"success": True, "email_id": response.get("id")}

    except Exception as e:
        return {"success": False, "error": str(e)}
