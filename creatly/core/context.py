"""Request-scoped context kept in contextvars.

Values set here are picked up by the logging pipeline, so every log line
emitted while serving a request carries the request id and, once known,
the student and school the request acts for.
"""

from contextvars import ContextVar
from typing import Any
from uuid import UUID, uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
student_id_var: ContextVar[str | None] = ContextVar("student_id", default=None)
school_id_var: ContextVar[str | None] = ContextVar("school_id", default=None)


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid4())


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context, generating one if absent."""
    rid = request_id or generate_request_id()
    request_id_var.set(rid)
    return rid


def get_student_id() -> str | None:
    return student_id_var.get()


def set_student_id(student_id: str | UUID | None) -> None:
    student_id_var.set(str(student_id) if student_id is not None else None)


def get_school_id() -> str | None:
    return school_id_var.get()


def set_school_id(school_id: str | UUID | None) -> None:
    school_id_var.set(str(school_id) if school_id is not None else None)


def get_context() -> dict[str, Any]:
    """Get all non-empty context variables as a dictionary."""
    context: dict[str, Any] = {}

    request_id = get_request_id()
    if request_id:
        context["request_id"] = request_id

    student_id = get_student_id()
    if student_id:
        context["student_id"] = student_id

    school_id = get_school_id()
    if school_id:
        context["school_id"] = school_id

    return context


def clear_context() -> None:
    """Reset all context variables.

    Called at the end of each request so values never leak into the next one.
    """
    request_id_var.set("")
    student_id_var.set(None)
    school_id_var.set(None)
