"""Pydantic models for data validation and type checking."""

from models.member import EmailRecipient
from models.notification import (
    DeliveryRecord,
    EmailDispatchResult,
    EmailLogEntry,
    Notification,
    NotificationCreate,
    NotificationListItem,
    QuotaStatus,
)
from models.run import DigestResult, RunDetails, RunRequiringLirf

__all__ = [
    "Notification",
    "NotificationCreate",
    "NotificationListItem",
    "DeliveryRecord",
    "EmailLogEntry",
    "QuotaStatus",
    "EmailDispatchResult",
    "EmailRecipient",
    "RunDetails",
    "RunRequiringLirf",
    "DigestResult",
]
