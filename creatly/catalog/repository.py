# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Catalog lookup contracts and their Cassandra implementations."""

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from .models import Course, Lesson, Module, Package


if TYPE_CHECKING:
    from cassandra.cluster import Session


# ==============================================================================
# Contracts
# ==============================================================================


class CourseRepository(Protocol):
    async def get_by_id(self, course_id: UUID) -> Course | None: ...


class PackageRepository(Protocol):
    async def get_by_course(self, course_id: UUID) -> list[Package]: ...


class ModuleRepository(Protocol):
    async def get_by_id(self, module_id: UUID) -> Module | None: ...


class LessonRepository(Protocol):
    async def get_by_module(self, module_id: UUID) -> list[Lesson]: ...


# ==============================================================================
# Cassandra
# ==============================================================================


class CassandraCourseRepository:
    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._get_by_id = session.prepare(
            f"SELECT * FROM {keyspace}.courses WHERE id = ?"
        )

    async def get_by_id(self, course_id: UUID) -> Course | None:
        result = await self.session.aexecute(self._get_by_id, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None


class CassandraPackageRepository:
    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._get_by_course = session.prepare(
            f"SELECT * FROM {keyspace}.packages_by_course WHERE course_id = ?"
        )

    async def get_by_course(self, course_id: UUID) -> list[Package]:
        """Packages of a course, ordered by position."""
        rows = await self.session.aexecute(self._get_by_course, [course_id])
        return [Package.from_row(row) for row in rows]


class CassandraModuleRepository:
    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._get_by_id = session.prepare(
            f"SELECT * FROM {keyspace}.modules WHERE id = ?"
        )

    async def get_by_id(self, module_id: UUID) -> Module | None:
        result = await self.session.aexecute(self._get_by_id, [module_id])
        row = result.one()
        return Module.from_row(row) if row else None


class CassandraLessonRepository:
    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._get_by_module = session.prepare(
            f"SELECT * FROM {keyspace}.lessons_by_module WHERE module_id = ?"
        )

    async def get_by_module(self, module_id: UUID) -> list[Lesson]:
        rows = await self.session.aexecute(self._get_by_module, [module_id])
        return [Lesson.from_row(row) for row in rows]
