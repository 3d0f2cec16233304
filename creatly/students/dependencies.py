"""Dependency injection for students module."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends

from .service import StudentService


# Module-level reference to be overridden by main.py
_student_service_getter: Callable[[], StudentService] | None = None


def set_student_service_getter(getter: Callable[[], StudentService]) -> None:
    """Set the student service getter function.

    Called by main.py during app initialization.
    """
    global _student_service_getter  # noqa: PLW0603 - Required for DI pattern
    _student_service_getter = getter


def get_student_service() -> StudentService:
    if _student_service_getter is None:
        raise RuntimeError(
            "StudentService not configured - call set_student_service_getter first"
        )
    return _student_service_getter()


StudentServiceDep = Annotated[StudentService, Depends(get_student_service)]
