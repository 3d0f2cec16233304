"""Verification code delivery.

The student sign-up flow only depends on the VerificationNotifier protocol;
production wires the Gmail-backed notifier, development and tests the
logging one.
"""

from typing import Protocol

from creatly.core.logging import get_logger

from .service import EmailService


logger = get_logger(__name__)


class VerificationNotifier(Protocol):
    """Delivers a freshly issued verification code to a student."""

    async def send_verification_code(self, *, name: str, email: str, code: str) -> None: ...


class EmailVerificationNotifier:
    """Sends verification codes by email."""

    def __init__(self, email_service: EmailService):
        self.email_service = email_service

    async def send_verification_code(self, *, name: str, email: str, code: str) -> None:
        result = await self.email_service.send_verification_code(
            to=email, name=name, code=code
        )
        if not result.success:
            logger.warning(
                "verification_email_not_delivered", email=email, error=result.error
            )


class LoggingVerificationNotifier:
    """Writes verification codes to the log instead of sending them."""

    async def send_verification_code(self, *, name: str, email: str, code: str) -> None:
        # plain_code is not a masked key
        logger.info(
            "verification_code_issued", email=email, name=name, plain_code=code
        )
