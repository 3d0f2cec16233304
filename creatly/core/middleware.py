"""Request middleware for context management and logging."""

import time
from collections.abc import Awaitable, Callable
from uuid import UUID

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from creatly.core.context import clear_context, set_request_id, set_school_id


logger = structlog.get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Sets up request context for logging and tenant resolution.

    For every request this middleware:
    1. Takes the request ID from X-Request-ID or generates one
    2. Resolves the school from X-School-ID, falling back to the default school
    3. Logs request start/finish with timing
    4. Clears context afterwards
    """

    REQUEST_ID_HEADER = "X-Request-ID"
    SCHOOL_ID_HEADER = "X-School-ID"

    def __init__(
        self,
        app: ASGIApp,
        default_school_id: UUID,
        log_requests: bool = True,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.default_school_id = default_school_id
        self.log_requests = log_requests
        self.exclude_paths = exclude_paths or ["/health"]

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request and set up context."""
        start_time = time.perf_counter()

        request_id = set_request_id(request.headers.get(self.REQUEST_ID_HEADER))
        request.state.request_id = request_id

        school_id = self._resolve_school(request.headers.get(self.SCHOOL_ID_HEADER))
        request.state.school_id = school_id
        set_school_id(school_id)

        should_log = self.log_requests and not self._should_exclude(request.url.path)
        if should_log:
            logger.info(
                "request_started",
                method=request.method,
                path=request.url.path,
                client_ip=self._get_client_ip(request),
            )

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000

            if should_log:
                log_method = (
                    logger.warning if response.status_code >= 400 else logger.info
                )
                log_method(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 2),
                )

            response.headers[self.REQUEST_ID_HEADER] = request_id
            return response

        except Exception as e:
            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise

        finally:
            clear_context()

    def _resolve_school(self, header_value: str | None) -> UUID:
        """Parse the school header; malformed or absent values use the default."""
        if header_value:
            try:
                return UUID(header_value)
            except ValueError:
                logger.warning("invalid_school_header", value=header_value)
        return self.default_school_id

    def _should_exclude(self, path: str) -> bool:
        return any(path.startswith(excluded) for excluded in self.exclude_paths)

    def _get_client_ip(self, request: Request) -> str | None:
        """Get the client IP address, handling proxies."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        return request.client.host if request.client else None
