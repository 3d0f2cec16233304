# Core infrastructure
from creatly.core.context import (
    clear_context,
    get_context,
    get_request_id,
    get_school_id,
    get_student_id,
    set_request_id,
    set_school_id,
    set_student_id,
)
from creatly.core.errors import DomainError, ErrorCode, ErrorKind
from creatly.core.logging import configure_structlog, get_logger
from creatly.core.middleware import RequestContextMiddleware


__all__ = [
    "DomainError",
    "ErrorCode",
    "ErrorKind",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_school_id",
    "get_student_id",
    "set_request_id",
    "set_school_id",
    "set_student_id",
]
