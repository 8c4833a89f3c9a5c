"""Notification service for sending alert digests.

Orchestrates the digest flow for one alert: recipient validation, template
context, rendering and delivery through the configured email provider with
optional retry/backoff.
"""

import logging
import time
from typing import Callable, Optional, Sequence

from email_validator import EmailNotValidError, validate_email

from job_alerts.config.environment import EnvironmentConfig
from job_alerts.config.exceptions import ConfigurationError
from job_alerts.config.models import AppConfig, EmailConfig, EmailProvider, LinksConfig
from job_alerts.domain.models import JobAlert, JobPosting
from job_alerts.logging import get_logger

from .models import (
    EmailDeliveryError,
    EmailSender,
    NotificationResult,
    NotificationTemplateError,
    OutgoingEmail,
)
from .payloads import build_digest_context
from .resend_client import ResendClient
from .smtp_client import SMTPClient
from .templates import TemplateRenderer

logger = get_logger(__name__, component="notification")

MAX_RETRY_DELAY = 60.0


def create_email_sender(app_config: AppConfig, env_config: EnvironmentConfig) -> EmailSender:
    """Build the sender for the configured provider.

    Raises:
        ConfigurationError: If the provider's credentials are missing
    """
    provider = app_config.email.provider

    if provider == EmailProvider.RESEND.value:
        if not env_config.resend_api_key:
            raise ConfigurationError(
                "Email provider 'resend' requires RESEND_API_KEY",
                suggestions=["Set RESEND_API_KEY in your environment or .env file"],
            )
        return ResendClient(env_config.resend_api_key, timeout=app_config.email.request_timeout)

    if provider == EmailProvider.SMTP.value:
        if not env_config.smtp_host or not env_config.smtp_port:
            raise ConfigurationError(
                "Email provider 'smtp' requires SMTP_HOST and SMTP_PORT",
                suggestions=["Set SMTP_HOST and SMTP_PORT in your environment or .env file"],
            )
        return SMTPClient(env_config, use_tls=app_config.email.use_tls)

    raise ConfigurationError(f"Unsupported email provider: '{provider}'")


class NotificationService:
    """Sends one digest email per alert.

    The service never raises for delivery problems: every outcome is
    reported through NotificationResult so the caller can decide whether to
    advance the alert's schedule.
    """

    def __init__(
        self,
        sender: EmailSender,
        links: LinksConfig,
        email_config: Optional[EmailConfig] = None,
        template_renderer: Optional[TemplateRenderer] = None,
        sleep: Callable[[float], None] = time.sleep,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """
        Args:
            sender: Email provider client (ResendClient, SMTPClient, ...)
            links: URL settings for links inside the digest
            email_config: Sender address and retry settings
            template_renderer: Template renderer (creates default if None)
            sleep: Sleep function used between retries (injectable for tests)
            logger_instance: Logger instance (uses module logger if None)
        """
        self.sender = sender
        self.links = links
        self.email_config = email_config or EmailConfig()
        self.template_renderer = template_renderer or TemplateRenderer()
        self.sleep = sleep
        self.logger = logger_instance or logger

    def send_digest(self, alert: JobAlert, postings: Sequence[JobPosting]) -> NotificationResult:
        """Render and send the digest for ``alert``.

        Args:
            alert: Alert with joined user_email / user_name
            postings: Matched postings (newest first)

        Returns:
            NotificationResult with status:
            - skipped: no postings, or the alert has no email address
            - sent: the provider accepted the message
            - failed: invalid recipient, template error or delivery failure
        """
        match_count = len(postings)

        if match_count == 0:
            return NotificationResult(alert_id=alert.id, status="skipped")

        if not alert.user_email:
            self.logger.info(
                f"Skipping digest for alert {alert.id} - no email address",
                extra={"event": "digest.skip", "reason": "no_email"},
            )
            return NotificationResult(
                alert_id=alert.id, status="skipped", match_count=match_count
            )

        try:
            recipient = validate_email(alert.user_email, check_deliverability=False).normalized
        except EmailNotValidError as e:
            error_msg = f"Invalid recipient address '{alert.user_email}': {e}"
            self.logger.error(
                error_msg,
                extra={"event": "digest.send.failure", "error_type": "EmailNotValidError"},
            )
            return NotificationResult(
                alert_id=alert.id,
                status="failed",
                match_count=match_count,
                recipient=alert.user_email,
                error=error_msg,
            )

        try:
            context = build_digest_context(alert, postings, self.links)
            rendered = self.template_renderer.render(context)
        except NotificationTemplateError as e:
            return NotificationResult(
                alert_id=alert.id,
                status="failed",
                match_count=match_count,
                recipient=recipient,
                error=str(e),
            )

        email = OutgoingEmail(
            sender=self.email_config.sender,
            to=recipient,
            subject=rendered["subject"],
            html=rendered["html_body"],
            text=rendered["text_body"],
        )

        return self._deliver(alert, email, match_count)

    def _deliver(self, alert: JobAlert, email: OutgoingEmail, match_count: int) -> NotificationResult:
        max_attempts = self.email_config.max_retries + 1
        last_error = None

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                delay = self.email_config.retry_initial_delay * (
                    self.email_config.retry_backoff_multiplier ** (attempt - 2)
                )
                delay = min(delay, MAX_RETRY_DELAY)
                self.logger.warning(
                    f"Retrying digest for alert {alert.id} "
                    f"(attempt {attempt}/{max_attempts}) after {delay:.1f}s delay",
                    extra={"event": "digest.send.attempt", "attempt": attempt},
                )
                self.sleep(delay)

            try:
                self.sender.send(email)
            except EmailDeliveryError as e:
                last_error = str(e)
                retry_remaining = attempt < max_attempts
                self.logger.log(
                    logging.WARNING if retry_remaining else logging.ERROR,
                    f"Digest delivery failed for alert {alert.id} "
                    f"(attempt {attempt}/{max_attempts}): {e}",
                    extra={
                        "event": "digest.send.failure",
                        "attempt": attempt,
                        "error_type": type(e).__name__,
                        "retry_remaining": retry_remaining,
                    },
                )
                continue
            except Exception as e:
                error_msg = f"Unexpected error from email sender: {e}"
                self.logger.error(
                    f"Digest delivery failed for alert {alert.id}: {error_msg}",
                    extra={
                        "event": "digest.send.failure",
                        "attempt": attempt,
                        "error_type": type(e).__name__,
                        "retry_remaining": False,
                    },
                    exc_info=True,
                )
                return NotificationResult(
                    alert_id=alert.id,
                    status="failed",
                    attempts=attempt,
                    match_count=match_count,
                    recipient=email.to,
                    error=error_msg,
                )

            self.logger.info(
                f"Digest sent for alert {alert.id} with {match_count} job(s) "
                f"(attempts: {attempt})",
                extra={
                    "event": "digest.send.success",
                    "attempt": attempt,
                    "match_count": match_count,
                },
            )
            return NotificationResult(
                alert_id=alert.id,
                status="sent",
                attempts=attempt,
                match_count=match_count,
                recipient=email.to,
            )

        return NotificationResult(
            alert_id=alert.id,
            status="failed",
            attempts=max_attempts,
            match_count=match_count,
            recipient=email.to,
            error=last_error,
        )
