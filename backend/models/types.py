"""Shared type definitions for type checking.

Uses NewType for IDs to provide compile-time type safety - prevents mixing
different ID types (e.g., passing MemberID where NotificationID expected).

Uses Literal aliases for the closed vocabularies stored in the database.
"""

from typing import Literal, NewType, TypeAlias

# ID types using NewType for type safety
NotificationID = NewType("NotificationID", str)
MemberID = NewType("MemberID", str)
RunID = NewType("RunID", str)

# Closed vocabularies (mirrors database CHECK constraints)
NotificationType: TypeAlias = Literal["run_specific", "general", "urgent"]
NotificationPriority: TypeAlias = Literal["low", "normal", "high", "urgent"]

# Structural aliases
DateString: TypeAlias = str  # ISO 8601 format
