"""Outbound email and verification-code delivery."""

from .notifier import (
    EmailVerificationNotifier,
    LoggingVerificationNotifier,
    VerificationNotifier,
)
from .service import EmailService


__all__ = [
    "EmailService",
    "EmailVerificationNotifier",
    "LoggingVerificationNotifier",
    "VerificationNotifier",
]
