"""Pydantic models for notifications, delivery state and email dispatch."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.types import (
    DateString,
    MemberID,
    NotificationID,
    NotificationPriority,
    NotificationType,
    RunID,
)
from shared.utils import parse_date_string


class NotificationCreate(BaseModel):
    """Input for creating a notification."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: NotificationType
    priority: NotificationPriority = "normal"
    run_id: RunID | None = None
    # Explicit audience; when omitted the audience is resolved from type/run_id
    recipient_ids: list[MemberID] | None = None
    scheduled_for: DateString | None = None
    expires_at: DateString | None = None
    send_email: bool = True
    affiliated_only: bool = False

    @field_validator("scheduled_for", "expires_at", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value.isoformat()
        parsed = parse_date_string(str(value))
        if parsed is None:
            raise ValueError(f"Unrecognised date: {value!r}")
        return parsed

    @model_validator(mode="after")
    def _run_specific_needs_run(self):
        if self.type == "run_specific" and not self.run_id:
            raise ValueError("run_specific notifications require a run_id")
        return self


class Notification(BaseModel):
    """Notification record from database."""

    id: NotificationID
    title: str
    message: str
    type: NotificationType
    priority: NotificationPriority = "normal"
    run_id: RunID | None = None
    sent_by: MemberID
    sent_at: datetime | None = None
    scheduled_for: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class NotificationListItem(Notification):
    """Notification as seen by one recipient, joined with sender and run."""

    sender_name: str | None = None
    run_title: str | None = None
    run_date: str | None = None
    run_time: str | None = None
    delivered_at: datetime | None = None
    read_at: datetime | None = None
    dismissed_at: datetime | None = None


class DeliveryRecord(BaseModel):
    """Per-recipient delivery state for a notification."""

    notification_id: NotificationID
    member_id: MemberID
    delivered_at: datetime
    read_at: datetime | None = None
    dismissed_at: datetime | None = None

    # Joined data (admin recipient view)
    member_name: str | None = None
    member_email: str | None = None


class EmailLogEntry(BaseModel):
    """Append-only record of one sent email, used for the daily quota."""

    recipient_id: MemberID
    subject: str
    sent_at: datetime


class QuotaStatus(BaseModel):
    """Daily email allowance as of now."""

    can_send: bool
    remaining: int = Field(..., ge=0)
    total: int = Field(..., ge=0)


class EmailDispatchResult(BaseModel):
    """Outcome of one email dispatch batch."""

    sent: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)
