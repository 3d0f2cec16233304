"""Entitlements: who may open which module, derived from succeeded orders."""

from .service import EntitlementChecker, LessonService, ModuleIsNotAvailableError


__all__ = [
    "EntitlementChecker",
    "LessonService",
    "ModuleIsNotAvailableError",
]
