"""Domain error taxonomy.

Every failure raised by the entitlement and order core is a DomainError
carrying one ErrorCode. Each code belongs to exactly one ErrorKind, which
the HTTP boundary maps to a transport status. Persistence and connectivity
failures are never DomainErrors; they propagate as-is and surface as 5xx.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Broad category of a domain failure."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"


class ErrorCode(str, Enum):
    """Closed set of domain failures."""

    USER_NOT_FOUND = "user_not_found"
    USER_ALREADY_EXISTS = "user_already_exists"
    VERIFICATION_CODE_INVALID = "verification_code_invalid"
    STUDENT_NOT_VERIFIED = "student_not_verified"
    OFFER_NOT_FOUND = "offer_not_found"
    OFFER_INVALID = "offer_invalid"
    PROMO_NOT_FOUND = "promo_not_found"
    PROMO_ALREADY_EXISTS = "promo_already_exists"
    PROMO_INVALID = "promo_invalid"
    PROMOCODE_EXPIRED = "promocode_expired"
    COURSE_NOT_FOUND = "course_not_found"
    MODULE_NOT_FOUND = "module_not_found"
    MODULE_IS_NOT_AVAILABLE = "module_is_not_available"
    TRANSACTION_INVALID = "transaction_invalid"
    UNKNOWN_CALLBACK_TYPE = "unknown_callback_type"


# code -> (kind, default message)
_ERRORS: dict[ErrorCode, tuple[ErrorKind, str]] = {
    ErrorCode.USER_NOT_FOUND: (ErrorKind.NOT_FOUND, "user doesn't exist"),
    ErrorCode.USER_ALREADY_EXISTS: (
        ErrorKind.CONFLICT,
        "user with such email already exists",
    ),
    ErrorCode.VERIFICATION_CODE_INVALID: (
        ErrorKind.VALIDATION,
        "verification code is invalid",
    ),
    ErrorCode.STUDENT_NOT_VERIFIED: (ErrorKind.VALIDATION, "account is not verified"),
    ErrorCode.OFFER_NOT_FOUND: (ErrorKind.NOT_FOUND, "offer doesn't exist"),
    ErrorCode.OFFER_INVALID: (ErrorKind.VALIDATION, "offer is invalid"),
    ErrorCode.PROMO_NOT_FOUND: (ErrorKind.NOT_FOUND, "promocode doesn't exist"),
    ErrorCode.PROMO_ALREADY_EXISTS: (
        ErrorKind.CONFLICT,
        "promocode with such code already exists",
    ),
    ErrorCode.PROMO_INVALID: (ErrorKind.VALIDATION, "promocode discount is invalid"),
    ErrorCode.PROMOCODE_EXPIRED: (ErrorKind.VALIDATION, "promocode has expired"),
    ErrorCode.COURSE_NOT_FOUND: (ErrorKind.NOT_FOUND, "course not found"),
    ErrorCode.MODULE_NOT_FOUND: (ErrorKind.NOT_FOUND, "module not found"),
    ErrorCode.MODULE_IS_NOT_AVAILABLE: (
        ErrorKind.VALIDATION,
        "module's content is not available",
    ),
    ErrorCode.TRANSACTION_INVALID: (ErrorKind.VALIDATION, "transaction is invalid"),
    ErrorCode.UNKNOWN_CALLBACK_TYPE: (ErrorKind.VALIDATION, "unknown callback type"),
}


def kind_of(code: ErrorCode) -> ErrorKind:
    """Return the kind an error code belongs to."""
    return _ERRORS[code][0]


class DomainError(Exception):
    """Base class for all domain failures."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.kind = kind_of(code)
        self.message = message or _ERRORS[code][1]
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r})"
