"""Pydantic model for club member data consumed by notifications."""

from pydantic import BaseModel, Field

from models.types import MemberID


class EmailRecipient(BaseModel):
    """Member reachable by email (opt-in already applied where relevant)."""

    id: MemberID
    email: str = Field(..., pattern=r"^[^@]+@[^@]+\.[^@]+$")
    full_name: str = ""
