"""Shared notification types."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Channel(str, Enum):
    """Notification channel."""
    CUSTOMER_EMAIL = "customer_email"
    ADMIN_EMAIL = "admin_email"
    WHATSAPP = "whatsapp"


class Outcome(str, Enum):
    """Result of one channel attempt."""
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"
    TIMEOUT = "timeout"


class NotificationError(Exception):
    """A channel could not deliver its message."""


@dataclass(frozen=True)
class ChannelResult:
    channel: Channel
    outcome: Outcome
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.SENT, Outcome.SKIPPED)


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    mime_type: str = "application/pdf"
