"""Resend HTTP API client for email delivery."""

import logging
from typing import Optional

import requests

from job_alerts.logging import get_logger

from .models import EmailDeliveryError, OutgoingEmail

logger = get_logger(__name__, component="notification")

RESEND_API_URL = "https://api.resend.com/emails"


class ResendClient:
    """Sends emails through the Resend REST API.

    Attributes:
        api_key: Resend API key, sent as a bearer token
        timeout: HTTP request timeout in seconds
    """

    def __init__(
        self,
        api_key: str,
        timeout: int = 30,
        api_url: str = RESEND_API_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Args:
            api_key: Resend API key
            timeout: HTTP request timeout in seconds
            api_url: Endpoint URL (overridable for tests)
            session: Optional requests session (for mocking)

        Raises:
            ValueError: If api_key is empty
        """
        if not api_key or not api_key.strip():
            raise ValueError("Resend API key cannot be empty")

        self.api_key = api_key.strip()
        self.timeout = timeout
        self.api_url = api_url
        self._session = session or requests.Session()

    def send(self, email: OutgoingEmail) -> None:
        """POST one email to Resend.

        Raises:
            EmailDeliveryError: On timeout, connection failure or HTTP >= 400
        """
        payload = {
            "from": email.sender,
            "to": [email.to],
            "subject": email.subject,
            "html": email.html,
        }
        if email.text:
            payload["text"] = email.text

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = self._session.post(
                self.api_url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Resend request timed out after {self.timeout} seconds",
                extra={"event": "notification.provider.timeout", "provider": "resend"},
            )
            raise EmailDeliveryError(
                f"Resend request timed out after {self.timeout} seconds"
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(
                f"Resend request failed: {e}",
                extra={
                    "event": "notification.provider.error",
                    "provider": "resend",
                    "error_type": type(e).__name__,
                },
            )
            raise EmailDeliveryError(f"Resend request failed: {e}") from e

        if response.status_code >= 400:
            is_retryable = response.status_code >= 500 or response.status_code == 429
            logger.log(
                logging.WARNING if is_retryable else logging.ERROR,
                f"Resend returned HTTP {response.status_code}",
                extra={
                    "event": "notification.provider.error",
                    "provider": "resend",
                    "status_code": response.status_code,
                },
            )
            raise EmailDeliveryError(
                f"Resend returned HTTP {response.status_code}: {_error_detail(response)}"
            )

        logger.debug(
            f"Resend accepted message to {email.to}",
            extra={"event": "notification.provider.accepted", "provider": "resend"},
        )


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason or ""
    if isinstance(body, dict):
        return str(body.get("message") or body.get("name") or body)
    return str(body)
