"""Catalog module.

Read-only view of courses, packages, modules and lessons plus the Catalog
Resolver mapping them to the offers that grant access.
"""

from .models import Course, Lesson, Module, Package
from .repository import (
    CassandraCourseRepository,
    CassandraLessonRepository,
    CassandraModuleRepository,
    CassandraPackageRepository,
    CourseRepository,
    LessonRepository,
    ModuleRepository,
    PackageRepository,
)
from .resolver import CatalogResolver, CourseModuleNotFoundError, CourseNotFoundError
from .router import router


__all__ = [
    "CassandraCourseRepository",
    "CassandraLessonRepository",
    "CassandraModuleRepository",
    "CassandraPackageRepository",
    "CatalogResolver",
    "Course",
    "CourseModuleNotFoundError",
    "CourseNotFoundError",
    "CourseRepository",
    "Lesson",
    "LessonRepository",
    "Module",
    "ModuleRepository",
    "Package",
    "PackageRepository",
    "router",
]
