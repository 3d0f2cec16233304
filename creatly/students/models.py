"""Student models and Cassandra schema.

Students register per school. Until verified, a student carries the
SHA-256 digest of the code mailed at sign-up; verifying clears the digest
and sets the verified flag in one conditional write, which makes the code
single-use.
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

STUDENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.students (
    id UUID PRIMARY KEY,
    school_id UUID,
    name TEXT,
    email TEXT,
    password_hash TEXT,
    verification_code TEXT,
    verified BOOLEAN,
    registered_at TIMESTAMP,
    last_visit_at TIMESTAMP
)
"""

# Email uniqueness per school, claimed with IF NOT EXISTS
STUDENTS_BY_EMAIL_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.students_by_email (
    school_id UUID,
    email TEXT,
    student_id UUID,
    PRIMARY KEY ((school_id, email))
)
"""

STUDENTS_BY_VERIFICATION_CODE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.students_by_verification_code (
    code_hash TEXT PRIMARY KEY,
    student_id UUID
)
"""

STUDENTS_TABLES_CQL = [
    STUDENT_TABLE_CQL,
    STUDENTS_BY_EMAIL_TABLE_CQL,
    STUDENTS_BY_VERIFICATION_CODE_TABLE_CQL,
]


# ==============================================================================
# Entities
# ==============================================================================


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass
class Verification:
    code_hash: str = ""
    verified: bool = False


@dataclass
class Student:
    school_id: UUID
    name: str
    email: str
    password_hash: str
    id: UUID = field(default_factory=uuid4)
    verification: Verification = field(default_factory=Verification)
    registered_at: datetime = field(default_factory=utcnow)
    last_visit_at: datetime | None = None

    def __post_init__(self) -> None:
        self.email = normalize_email(self.email)

    @classmethod
    def from_row(cls, row: "Row") -> "Student":
        return cls(
            id=row.id,
            school_id=row.school_id,
            name=row.name,
            email=row.email,
            password_hash=row.password_hash,
            verification=Verification(
                code_hash=row.verification_code or "",
                verified=bool(row.verified),
            ),
            registered_at=ensure_utc_aware(row.registered_at) or utcnow(),
            last_visit_at=ensure_utc_aware(row.last_visit_at),
        )
