# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Student storage contract and Cassandra implementation."""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from .models import Student, normalize_email


if TYPE_CHECKING:
    from cassandra.cluster import Session


class StudentRepository(Protocol):
    async def create(self, student: Student) -> bool:
        """Store a new student; False when the school already has the email."""
        ...

    async def get_by_id(self, student_id: UUID) -> Student | None: ...

    async def get_by_email(self, school_id: UUID, email: str) -> Student | None: ...

    async def get_by_verification_code(self, code_hash: str) -> Student | None: ...

    async def mark_verified(self, student_id: UUID, code_hash: str) -> bool:
        """Set verified and clear the code, only if the code is still current."""
        ...

    async def record_sign_in(
        self, student_id: UUID, at: datetime, password_hash: str | None = None
    ) -> None:
        """Stamp the last visit; replace the password hash when given."""
        ...


class CassandraStudentRepository:
    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._claim_email = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.students_by_email
            (school_id, email, student_id)
            VALUES (?, ?, ?)
            IF NOT EXISTS
        """)
        self._insert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.students
            (id, school_id, name, email, password_hash, verification_code,
             verified, registered_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._insert_code = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.students_by_verification_code
            (code_hash, student_id)
            VALUES (?, ?)
        """)
        self._get_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.students WHERE id = ?"
        )
        self._get_id_by_email = self.session.prepare(f"""
            SELECT student_id FROM {self.keyspace}.students_by_email
            WHERE school_id = ? AND email = ?
        """)
        self._get_id_by_code = self.session.prepare(f"""
            SELECT student_id FROM {self.keyspace}.students_by_verification_code
            WHERE code_hash = ?
        """)
        self._mark_verified = self.session.prepare(f"""
            UPDATE {self.keyspace}.students
            SET verified = true, verification_code = ''
            WHERE id = ?
            IF verification_code = ?
        """)
        self._delete_code = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.students_by_verification_code
            WHERE code_hash = ?
        """)
        self._update_last_visit = self.session.prepare(
            f"UPDATE {self.keyspace}.students SET last_visit_at = ? WHERE id = ?"
        )
        self._update_password_hash = self.session.prepare(f"""
            UPDATE {self.keyspace}.students
            SET password_hash = ?, last_visit_at = ?
            WHERE id = ?
        """)

    async def create(self, student: Student) -> bool:
        claim = await self.session.aexecute(
            self._claim_email, [student.school_id, student.email, student.id]
        )
        if not claim.was_applied:
            return False

        await self.session.aexecute(
            self._insert,
            [
                student.id,
                student.school_id,
                student.name,
                student.email,
                student.password_hash,
                student.verification.code_hash,
                student.verification.verified,
                student.registered_at,
            ],
        )
        if student.verification.code_hash:
            await self.session.aexecute(
                self._insert_code, [student.verification.code_hash, student.id]
            )
        return True

    async def get_by_id(self, student_id: UUID) -> Student | None:
        result = await self.session.aexecute(self._get_by_id, [student_id])
        row = result.one()
        return Student.from_row(row) if row else None

    async def get_by_email(self, school_id: UUID, email: str) -> Student | None:
        result = await self.session.aexecute(
            self._get_id_by_email, [school_id, normalize_email(email)]
        )
        row = result.one()
        return await self.get_by_id(row.student_id) if row else None

    async def get_by_verification_code(self, code_hash: str) -> Student | None:
        result = await self.session.aexecute(self._get_id_by_code, [code_hash])
        row = result.one()
        return await self.get_by_id(row.student_id) if row else None

    async def mark_verified(self, student_id: UUID, code_hash: str) -> bool:
        result = await self.session.aexecute(
            self._mark_verified, [student_id, code_hash]
        )
        if not result.was_applied:
            return False

        await self.session.aexecute(self._delete_code, [code_hash])
        return True

    async def record_sign_in(
        self, student_id: UUID, at: datetime, password_hash: str | None = None
    ) -> None:
        if password_hash:
            await self.session.aexecute(
                self._update_password_hash, [password_hash, at, student_id]
            )
        else:
            await self.session.aexecute(self._update_last_visit, [at, student_id])
