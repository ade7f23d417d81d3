"""
Signed one-click unsubscribe links for notification emails.

Tokens are stateless (no database storage needed) and carry only the member
id. Following a valid link turns off email_notifications_enabled for that
member; in-app notifications are unaffected.
"""

import os
import hashlib
from typing import Optional

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from config.notification_settings import FRONTEND_BASE_URL
from shared.db import get_supabase_client

UNSUBSCRIBE_SALT = "member-email-unsubscribe"
TOKEN_MAX_AGE_DAYS = 90


def unsubscribe_configured() -> bool:
    return bool(os.getenv("UNSUBSCRIBE_SECRET_KEY"))


def _get_serializer() -> URLSafeTimedSerializer:
    """
    Raises:
        ValueError: If UNSUBSCRIBE_SECRET_KEY environment variable not set
    """
    secret_key = os.getenv("UNSUBSCRIBE_SECRET_KEY")
    if not secret_key:
        raise ValueError("UNSUBSCRIBE_SECRET_KEY environment variable must be set.")

    return URLSafeTimedSerializer(
        secret_key,
        salt=UNSUBSCRIBE_SALT,
        signer_kwargs={"digest_method": hashlib.sha256},
    )


def generate_unsubscribe_token(member_id: str) -> str:
    """Generate a URL-safe signed token for a member."""
    return _get_serializer().dumps(member_id)


def validate_unsubscribe_token(
    token: str, max_age_days: int = TOKEN_MAX_AGE_DAYS
) -> Optional[str]:
    """
    Validate a token and extract the member id.

    Never raises - returns None for a bad signature, an expired token or a
    missing secret.

    Examples:
        >>> token = generate_unsubscribe_token("member-123")
        >>> validate_unsubscribe_token(token)
        'member-123'
        >>> validate_unsubscribe_token("invalid-token") is None
        True
    """
    try:
        serializer = _get_serializer()
        return serializer.loads(token, max_age=max_age_days * 24 * 60 * 60)
    except (BadSignature, SignatureExpired, ValueError, TypeError):
        return None


def build_unsubscribe_url(member_id: str) -> str:
    """
    One-click unsubscribe link for a member.

    Without a configured secret this degrades to the portal's generic
    unsubscribe page, which asks the member to sign in first.
    """
    if not unsubscribe_configured():
        return f"{FRONTEND_BASE_URL}?unsubscribe=true"
    return f"{FRONTEND_BASE_URL}/unsubscribe?token={generate_unsubscribe_token(member_id)}"


def unsubscribe_member(token: str) -> Optional[str]:
    """
    Turn off email notifications for the member a token was issued to.

    Returns:
        The member id if the token was valid and the member exists, else None
    """
    member_id = validate_unsubscribe_token(token)
    if not member_id:
        return None

    response = (
        get_supabase_client()
        .table("members")
        .update({"email_notifications_enabled": False})
        .eq("id", member_id)
        .execute()
    )
    if not response.data:
        print(f"  ⚠️  Unsubscribe token for unknown member {member_id}")
        return None

    print(f"  ✓ Email notifications disabled for member {member_id}")
    return member_id
