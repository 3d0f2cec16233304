"""Student sign-up, email verification and sign-in.

Security Features:
- Argon2id password hashes, transparently upgraded on sign-in
- Verification codes drawn from ``secrets``; only their SHA-256 is stored
- Single-use codes (conditional clear-and-verify write)
- Sign-in does not reveal whether the email or the password was wrong
"""

import hashlib
import secrets
import string
from dataclasses import dataclass
from datetime import timedelta
from uuid import UUID

from creatly.auth.permissions import UserRole
from creatly.auth.security import create_access_token, hash_password, verify_password
from creatly.core.dates import utcnow
from creatly.core.errors import DomainError, ErrorCode
from creatly.core.logging import get_logger
from creatly.email.notifier import VerificationNotifier

from .models import Student, Verification
from .repository import StudentRepository


logger = get_logger(__name__)


CODE_ALPHABET = string.ascii_uppercase + string.digits


# =============================================================================
# Exceptions
# =============================================================================


class UserAlreadyExistsError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.USER_ALREADY_EXISTS, message)


class UserNotFoundError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.USER_NOT_FOUND, message)


class VerificationCodeInvalidError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.VERIFICATION_CODE_INVALID, message)


class StudentNotVerifiedError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.STUDENT_NOT_VERIFIED, message)


def hash_code(code: str) -> str:
    return hashlib.sha256(code.strip().upper().encode()).hexdigest()


@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_in: int


class StudentService:
    def __init__(
        self,
        repo: StudentRepository,
        notifier: VerificationNotifier,
        code_length: int = 8,
        token_ttl_minutes: int = 120,
    ):
        self.repo = repo
        self.notifier = notifier
        self.code_length = code_length
        self.token_ttl_minutes = token_ttl_minutes

    def _generate_code(self) -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(self.code_length))

    async def sign_up(
        self, school_id: UUID, name: str, email: str, password: str
    ) -> Student:
        """Register a student and send the verification code.

        Raises:
            UserAlreadyExistsError: The school already has this email; the
                existing record is left untouched
        """
        if await self.repo.get_by_email(school_id, email):
            raise UserAlreadyExistsError

        code = self._generate_code()
        student = Student(
            school_id=school_id,
            name=name,
            email=email,
            password_hash=hash_password(password),
            verification=Verification(code_hash=hash_code(code)),
        )

        # The lookup above can race with a concurrent sign-up
        if not await self.repo.create(student):
            raise UserAlreadyExistsError

        logger.info(
            "student_signed_up",
            student_id=str(student.id),
            school_id=str(school_id),
        )
        await self.notifier.send_verification_code(
            name=student.name, email=student.email, code=code
        )
        return student

    async def verify(self, code: str) -> Student:
        """Consume a verification code.

        Raises:
            VerificationCodeInvalidError: Unknown or already used code
        """
        code_hash = hash_code(code)

        student = await self.repo.get_by_verification_code(code_hash)
        if student is None or student.verification.verified:
            raise VerificationCodeInvalidError

        if not await self.repo.mark_verified(student.id, code_hash):
            raise VerificationCodeInvalidError

        student.verification = Verification(code_hash="", verified=True)
        logger.info("student_verified", student_id=str(student.id))
        return student

    async def sign_in(self, school_id: UUID, email: str, password: str) -> AccessToken:
        """Check credentials and issue an access token.

        Raises:
            UserNotFoundError: Unknown email or wrong password
            StudentNotVerifiedError: Correct credentials, email not verified
        """
        student = await self.repo.get_by_email(school_id, email)
        if student is None:
            raise UserNotFoundError

        is_valid, new_hash = verify_password(password, student.password_hash)
        if not is_valid:
            logger.info("student_sign_in_failed", student_id=str(student.id))
            raise UserNotFoundError

        if not student.verification.verified:
            raise StudentNotVerifiedError

        await self.repo.record_sign_in(student.id, utcnow(), new_hash)

        token = create_access_token(
            {
                "sub": str(student.id),
                "email": student.email,
                "role": UserRole.STUDENT.value,
                "school_id": str(student.school_id),
            },
            expires_delta=timedelta(minutes=self.token_ttl_minutes),
        )
        logger.info("student_signed_in", student_id=str(student.id))
        return AccessToken(token=token, expires_in=self.token_ttl_minutes * 60)
