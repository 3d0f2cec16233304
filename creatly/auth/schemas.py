"""Pydantic schemas for bearer-token authentication."""

from uuid import UUID

from pydantic import BaseModel, Field

from creatly.core.schemas import ApiModel

from .permissions import UserRole


class Principal(BaseModel):
    """Identity extracted from a validated access token."""

    id: UUID
    email: str
    role: UserRole
    school_id: UUID


class TokenResponse(ApiModel):
    access_token: str
    token_type: str = Field(default="bearer")
    expires_in: int = Field(..., description="Token lifetime in seconds")
