"""Authentication: password hashing, access tokens and role checks."""

from .dependencies import (
    CurrentPrincipal,
    CurrentStudent,
    SchoolAdmin,
    get_current_principal,
    require_role,
)
from .permissions import UserRole
from .schemas import Principal, TokenResponse
from .security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


__all__ = [
    "CurrentPrincipal",
    "CurrentStudent",
    "Principal",
    "SchoolAdmin",
    "TokenResponse",
    "UserRole",
    "create_access_token",
    "decode_access_token",
    "get_current_principal",
    "hash_password",
    "require_role",
    "verify_password",
]
