"""Dependency injection for the storefront catalog."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request

from creatly.config import get_settings


def get_request_school_id(request: Request) -> UUID:
    """School the storefront request acts for.

    RequestContextMiddleware resolves it from X-School-ID; requests that
    bypass the middleware get the default school.
    """
    school_id = getattr(request.state, "school_id", None)
    return school_id or get_settings().default_school_id


RequestSchoolId = Annotated[UUID, Depends(get_request_school_id)]
