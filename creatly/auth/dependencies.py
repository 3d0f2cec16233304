"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Principal extraction from the bearer JWT
- Role checks (student, school admin)
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from creatly.core.context import set_school_id, set_student_id

from .permissions import UserRole
from .schemas import Principal
from .security import decode_access_token


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Returns:
        Token string or None if not present
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_principal(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Principal:
    """Get the authenticated principal from the JWT access token.

    Raises:
        HTTPException(401): If token is missing, invalid, expired or lacks
            the identity claims
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="access token is missing",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
        principal = Principal(
            id=payload["sub"],
            email=payload.get("email", ""),
            role=payload["role"],
            school_id=payload["school_id"],
        )
    except (JWTError, KeyError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="access token is invalid or expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    # Token claims win over the X-School-ID header for logging
    set_school_id(principal.school_id)
    if principal.role == UserRole.STUDENT:
        set_student_id(principal.id)

    return principal


def require_role(*allowed_roles: UserRole):
    """Create dependency requiring specific role(s).

    Example:
        @router.get("/admin-only")
        async def admin_endpoint(
            principal: Annotated[Principal, Depends(require_role(UserRole.ADMIN))]
        ):
            ...
    """

    async def role_checker(
        principal: Annotated[Principal, Depends(get_current_principal)],
    ) -> Principal:
        if principal.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="insufficient permissions",
            )
        return principal

    return role_checker


# ==============================================================================
# Type Aliases for Cleaner Code
# ==============================================================================

CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]

# Lessons and orders belong to students only
CurrentStudent = Annotated[Principal, Depends(require_role(UserRole.STUDENT))]

SchoolAdmin = Annotated[Principal, Depends(require_role(UserRole.ADMIN))]
