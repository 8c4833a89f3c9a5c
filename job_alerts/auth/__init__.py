"""Account helpers: rate-limited password reset requests."""

from .password_reset import (
    RATE_LIMIT_MESSAGE,
    IdentityProvider,
    PasswordResetError,
    PasswordResetRateLimited,
    PasswordResetService,
    ResetAttempt,
    ResetAttemptStore,
)

__all__ = [
    "PasswordResetService",
    "ResetAttemptStore",
    "ResetAttempt",
    "IdentityProvider",
    "PasswordResetError",
    "PasswordResetRateLimited",
    "RATE_LIMIT_MESSAGE",
]
