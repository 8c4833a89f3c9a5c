"""Data models and exceptions for the notification service."""

from dataclasses import dataclass
from typing import Optional, Protocol


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when template rendering fails due to configuration or missing variables."""

    pass


class EmailDeliveryError(NotificationError):
    """Raised when an email provider rejects or fails to deliver a message."""

    pass


@dataclass
class OutgoingEmail:
    """A fully rendered email ready for a provider.

    Attributes:
        sender: From header (e.g. "TalentHub <no-reply@talenthub.com>")
        to: Single recipient address
        subject: Subject line
        html: HTML body
        text: Plain-text alternative
    """

    sender: str
    to: str
    subject: str
    html: str
    text: str = ""


class EmailSender(Protocol):
    """Anything that can deliver an OutgoingEmail.

    Implementations raise EmailDeliveryError on failure.
    """

    def send(self, email: OutgoingEmail) -> None: ...


@dataclass
class NotificationResult:
    """Result of attempting to send one digest.

    Attributes:
        alert_id: Alert the digest was for
        status: Outcome status (sent, skipped, failed)
        attempts: Number of send attempts made
        match_count: Number of postings in the digest
        recipient: Address the digest went (or would have gone) to
        error: Optional error message if delivery failed
    """

    alert_id: str
    status: str  # "sent", "skipped", "failed"
    attempts: int = 0
    match_count: int = 0
    recipient: Optional[str] = None
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == "sent"
