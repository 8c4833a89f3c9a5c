"""SMTP client wrapper for email delivery.

A thin wrapper around smtplib with support for STARTTLS, implicit TLS,
optional authentication and proper connection lifecycle management.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, Optional

from job_alerts.config.environment import EnvironmentConfig

from .models import EmailDeliveryError, OutgoingEmail

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


def build_message(email: OutgoingEmail) -> EmailMessage:
    """Build a multipart/alternative message (plain text + HTML)."""
    message = EmailMessage()
    message["Subject"] = email.subject
    message["From"] = email.sender
    message["To"] = email.to
    message.set_content(email.text or email.subject)
    message.add_alternative(email.html, subtype="html")
    return message


class SMTPClient:
    """Sends emails over SMTP. Designed to be easily mockable for testing."""

    def __init__(
        self,
        env_config: EnvironmentConfig,
        use_tls: bool = True,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        """
        Args:
            env_config: Environment configuration with SMTP settings
            use_tls: Upgrade plain connections with STARTTLS
            smtp_factory: Factory for SMTP instances (for mocking)
            smtp_ssl_factory: Factory for SMTP_SSL instances (for mocking)
        """
        self.env_config = env_config
        self.use_tls = use_tls
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(self, email: OutgoingEmail) -> None:
        """Send one email via SMTP.

        Port 465 uses implicit TLS; any other port starts in plain text and
        upgrades with STARTTLS when use_tls is set.

        Raises:
            EmailDeliveryError: If message delivery fails
        """
        host = self.env_config.smtp_host
        port = self.env_config.smtp_port

        smtp = None
        try:
            if port == IMPLICIT_TLS_PORT:
                logger.debug(f"Connecting to {host}:{port} with implicit TLS")
                smtp = self.smtp_ssl_factory(host, port, context=ssl.create_default_context())
            else:
                logger.debug(f"Connecting to {host}:{port}")
                smtp = self.smtp_factory(host, port)

                if self.use_tls:
                    logger.debug("Upgrading connection with STARTTLS")
                    smtp.starttls(context=ssl.create_default_context())

            if self.env_config.smtp_user and self.env_config.smtp_pass:
                logger.debug(f"Authenticating as {self.env_config.smtp_user}")
                smtp.login(self.env_config.smtp_user, self.env_config.smtp_pass)

            smtp.send_message(build_message(email))
            logger.debug(f"Message sent successfully to {email.to}")

        except smtplib.SMTPException as e:
            error_msg = f"SMTP error during message delivery: {e}"
            logger.error(error_msg)
            raise EmailDeliveryError(error_msg) from e
        except OSError as e:
            error_msg = f"Network error during SMTP connection: {e}"
            logger.error(error_msg)
            raise EmailDeliveryError(error_msg) from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError) as e:
                    logger.warning(f"Error closing SMTP connection: {e}")
