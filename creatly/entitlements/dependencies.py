"""Dependency injection for entitlements module."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends

from .service import LessonService


# Module-level reference to be overridden by main.py
_lesson_service_getter: Callable[[], LessonService] | None = None


def set_lesson_service_getter(getter: Callable[[], LessonService]) -> None:
    """Set the lesson service getter function.

    Called by main.py during app initialization.
    """
    global _lesson_service_getter  # noqa: PLW0603 - Required for DI pattern
    _lesson_service_getter = getter


def get_lesson_service() -> LessonService:
    if _lesson_service_getter is None:
        raise RuntimeError(
            "LessonService not configured - call set_lesson_service_getter first"
        )
    return _lesson_service_getter()


LessonServiceDep = Annotated[LessonService, Depends(get_lesson_service)]
