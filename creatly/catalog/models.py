"""Catalog models: courses, packages, modules and lessons.

A Course has many Packages; a Package owns an ordered set of Modules; a
Module carries its Lessons. Offers reference packages by id only (see
creatly.offers), so one package can be sold through several offers.

The catalog is read-only from the point of view of this service; content
editing happens elsewhere.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from creatly.core.dates import ensure_utc_aware, utcnow


if TYPE_CHECKING:
    from cassandra.cluster import Row


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    id UUID PRIMARY KEY,
    school_id UUID,
    name TEXT,
    description TEXT,
    published BOOLEAN,
    created_at TIMESTAMP
)
"""

PACKAGE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.packages (
    id UUID PRIMARY KEY,
    course_id UUID,
    name TEXT,
    position INT,
    created_at TIMESTAMP
)
"""

PACKAGES_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.packages_by_course (
    course_id UUID,
    position INT,
    package_id UUID,
    name TEXT,
    created_at TIMESTAMP,
    PRIMARY KEY ((course_id), position, package_id)
) WITH CLUSTERING ORDER BY (position ASC, package_id ASC)
"""

MODULE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.modules (
    id UUID PRIMARY KEY,
    package_id UUID,
    course_id UUID,
    name TEXT,
    position INT,
    is_free BOOLEAN,
    published BOOLEAN,
    created_at TIMESTAMP
)
"""

LESSONS_BY_MODULE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lessons_by_module (
    module_id UUID,
    position INT,
    lesson_id UUID,
    name TEXT,
    content TEXT,
    PRIMARY KEY ((module_id), position, lesson_id)
) WITH CLUSTERING ORDER BY (position ASC, lesson_id ASC)
"""

CATALOG_TABLES_CQL = [
    COURSE_TABLE_CQL,
    PACKAGE_TABLE_CQL,
    PACKAGES_BY_COURSE_TABLE_CQL,
    MODULE_TABLE_CQL,
    LESSONS_BY_MODULE_TABLE_CQL,
]


# ==============================================================================
# Entities
# ==============================================================================


@dataclass
class Course:
    """A course published by a school."""

    school_id: UUID
    name: str
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    published: bool = True
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_row(cls, row: "Row") -> "Course":
        return cls(
            id=row.id,
            school_id=row.school_id,
            name=row.name,
            description=row.description,
            published=bool(row.published),
            created_at=ensure_utc_aware(row.created_at) or utcnow(),
        )


@dataclass
class Package:
    """A saleable bundle of modules within one course."""

    course_id: UUID
    name: str
    id: UUID = field(default_factory=uuid4)
    position: int = 0
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_row(cls, row: "Row") -> "Package":
        # Rows may come from packages or packages_by_course
        return cls(
            id=getattr(row, "package_id", None) or row.id,
            course_id=row.course_id,
            name=row.name,
            position=row.position or 0,
            created_at=ensure_utc_aware(row.created_at) or utcnow(),
        )


@dataclass
class Module:
    """A unit of course content.

    Free modules are open to everyone; gated ones require a succeeded
    purchase of an offer granting the module's package. Unpublished
    modules serve no content to anyone.
    """

    package_id: UUID
    course_id: UUID
    name: str
    id: UUID = field(default_factory=uuid4)
    position: int = 0
    is_free: bool = False
    published: bool = True
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_row(cls, row: "Row") -> "Module":
        return cls(
            id=row.id,
            package_id=row.package_id,
            course_id=row.course_id,
            name=row.name,
            position=row.position or 0,
            is_free=bool(row.is_free),
            published=bool(row.published),
            created_at=ensure_utc_aware(row.created_at) or utcnow(),
        )


@dataclass
class Lesson:
    module_id: UUID
    name: str
    id: UUID = field(default_factory=uuid4)
    position: int = 0
    content: str | None = None

    @classmethod
    def from_row(cls, row: "Row") -> "Lesson":
        return cls(
            id=row.lesson_id,
            module_id=row.module_id,
            name=row.name,
            position=row.position or 0,
            content=row.content,
        )
