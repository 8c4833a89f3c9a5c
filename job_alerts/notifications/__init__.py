"""Digest emails for job alerts.

This module provides the complete notification pipeline:
- NotificationService: renders and sends one digest per alert
- TemplateRenderer: Jinja2-based email template rendering
- ResendClient / SMTPClient: email providers
- build_digest_context: template context builder
"""

from .models import (
    EmailDeliveryError,
    EmailSender,
    NotificationError,
    NotificationResult,
    NotificationTemplateError,
    OutgoingEmail,
)
from .payloads import build_digest_context, format_salary_range
from .resend_client import ResendClient
from .service import NotificationService, create_email_sender
from .smtp_client import SMTPClient, build_message
from .templates import TemplateRenderer

__all__ = [
    # Main service
    "NotificationService",
    "create_email_sender",
    # Models and results
    "NotificationResult",
    "OutgoingEmail",
    "EmailSender",
    # Exceptions
    "NotificationError",
    "NotificationTemplateError",
    "EmailDeliveryError",
    # Components
    "TemplateRenderer",
    "ResendClient",
    "SMTPClient",
    # Utilities
    "build_digest_context",
    "format_salary_range",
    "build_message",
]
