"""Rate-limited password reset requests.

Each email address may request a reset a limited number of times. The
counter is forgotten once a full window has passed since the last attempt.
State lives in an in-memory store, so limits apply per process.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional, Protocol

from job_alerts.config.models import PasswordResetConfig
from job_alerts.logging import get_logger
from job_alerts.utils.timestamps import ensure_utc, utc_now

logger = get_logger(__name__, component="auth")

RATE_LIMIT_MESSAGE = "Too many password reset attempts. Please try again later."


class PasswordResetError(Exception):
    """Raised when a reset request cannot be fulfilled."""

    pass


class PasswordResetRateLimited(PasswordResetError):
    """Raised when an email address exceeded its reset attempts."""

    def __init__(self, message: str = RATE_LIMIT_MESSAGE):
        super().__init__(message)


class IdentityProvider(Protocol):
    """Auth backend that actually sends the reset email."""

    def reset_password_for_email(self, email: str, redirect_to: str) -> None: ...


@dataclass
class ResetAttempt:
    """Attempts made by one email address.

    Attributes:
        count: Attempts made in the current window
        last_attempt: Time of the most recent attempt (UTC)
    """

    count: int
    last_attempt: datetime


class ResetAttemptStore:
    """Thread-safe in-memory map of email -> ResetAttempt."""

    def __init__(self):
        self._attempts: Dict[str, ResetAttempt] = {}
        self._lock = threading.Lock()

    def get(self, email: str) -> Optional[ResetAttempt]:
        with self._lock:
            return self._attempts.get(email)

    def register(
        self, email: str, now: datetime, window: timedelta, max_attempts: int
    ) -> ResetAttempt:
        """Count one attempt for ``email`` and return the updated record.

        Records whose last attempt is more than one window old are dropped
        first, for every address, so the store only holds live counters.

        Raises:
            PasswordResetRateLimited: If the address already used max_attempts
                within the window (the attempt is not counted)
        """
        with self._lock:
            expired = [
                key
                for key, record in self._attempts.items()
                if now - record.last_attempt > window
            ]
            for key in expired:
                del self._attempts[key]

            attempt = self._attempts.get(email)
            if attempt is not None and attempt.count >= max_attempts:
                raise PasswordResetRateLimited()

            updated = ResetAttempt(
                count=attempt.count + 1 if attempt is not None else 1,
                last_attempt=now,
            )
            self._attempts[email] = updated
            return updated

    def clear(self, email: Optional[str] = None) -> None:
        """Forget one address, or every address when email is None."""
        with self._lock:
            if email is None:
                self._attempts.clear()
            else:
                self._attempts.pop(email, None)


class PasswordResetService:
    """Applies the per-email rate limit in front of the identity provider."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        store: Optional[ResetAttemptStore] = None,
        max_attempts: int = 5,
        window_seconds: int = 3600,
    ):
        self.identity_provider = identity_provider
        self.store = store or ResetAttemptStore()
        self.max_attempts = max_attempts
        self.window = timedelta(seconds=window_seconds)

    @classmethod
    def from_config(
        cls,
        identity_provider: IdentityProvider,
        config: PasswordResetConfig,
        store: Optional[ResetAttemptStore] = None,
    ) -> "PasswordResetService":
        return cls(
            identity_provider,
            store=store,
            max_attempts=config.max_attempts,
            window_seconds=config.window_seconds,
        )

    def remaining_attempts(self, email: str, now: Optional[datetime] = None) -> int:
        """Attempts still allowed for ``email`` at ``now``."""
        key = normalize_email(email)
        now = ensure_utc(now) if now else utc_now()
        attempt = self.store.get(key)
        if attempt is None or now - attempt.last_attempt > self.window:
            return self.max_attempts
        return max(self.max_attempts - attempt.count, 0)

    def request_reset(
        self, email: str, redirect_to: str, now: Optional[datetime] = None
    ) -> None:
        """
        Ask the identity provider to send a reset email.

        Args:
            email: Address to reset (case and surrounding spaces ignored)
            redirect_to: URL the reset link should lead to
            now: Time of the request (defaults to the current UTC time)

        Raises:
            PasswordResetRateLimited: If the address used up its attempts
            PasswordResetError: If the email is blank or the provider fails
        """
        key = normalize_email(email)
        if not key:
            raise PasswordResetError("Email address is required")

        now = ensure_utc(now) if now else utc_now()

        try:
            attempt = self.store.register(key, now, self.window, self.max_attempts)
        except PasswordResetRateLimited:
            logger.warning(
                "Password reset rate limit reached",
                extra={"event": "auth.reset.rate_limited"},
            )
            raise

        try:
            self.identity_provider.reset_password_for_email(key, redirect_to)
        except PasswordResetError:
            raise
        except Exception as e:
            logger.error(
                f"Identity provider rejected password reset: {e}",
                extra={"event": "auth.reset.failed", "error_type": type(e).__name__},
            )
            raise PasswordResetError(f"Failed to send password reset email: {e}") from e

        logger.info(
            "Password reset email requested",
            extra={"event": "auth.reset.requested", "attempt": attempt.count},
        )


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()
