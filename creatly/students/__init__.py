"""Students module: sign-up with email verification, sign-in, content access."""

from .models import Student, Verification
from .repository import CassandraStudentRepository, StudentRepository
from .router import router
from .service import (
    AccessToken,
    StudentNotVerifiedError,
    StudentService,
    UserAlreadyExistsError,
    UserNotFoundError,
    VerificationCodeInvalidError,
)


__all__ = [
    "AccessToken",
    "CassandraStudentRepository",
    "Student",
    "StudentNotVerifiedError",
    "StudentRepository",
    "StudentService",
    "UserAlreadyExistsError",
    "UserNotFoundError",
    "Verification",
    "VerificationCodeInvalidError",
    "router",
]
