"""Order/transaction models and Cassandra schema.

A transaction records one purchase attempt: who bought which offer, with
which promocode, the amount due and the provider-facing reference. Its
status only moves forward: pending -> succeeded or pending -> failed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from creatly.core.dates import ensure_utc_aware, utcnow
from creatly.offers.models import Price


if TYPE_CHECKING:
    from cassandra.cluster import Row


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

TRANSACTION_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.transactions (
    id UUID PRIMARY KEY,
    school_id UUID,
    student_id UUID,
    offer_id UUID,
    promocode_id UUID,
    amount BIGINT,
    currency TEXT,
    reference TEXT,
    status TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# Student's purchase history, newest first
TRANSACTIONS_BY_STUDENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.transactions_by_student (
    student_id UUID,
    created_at TIMESTAMP,
    transaction_id UUID,
    PRIMARY KEY ((student_id), created_at, transaction_id)
) WITH CLUSTERING ORDER BY (created_at DESC, transaction_id ASC)
"""

ORDERS_TABLES_CQL = [
    TRANSACTION_TABLE_CQL,
    TRANSACTIONS_BY_STUDENT_TABLE_CQL,
]


# ==============================================================================
# Enums
# ==============================================================================


class TransactionStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# ==============================================================================
# References
# ==============================================================================


def make_reference(prefix: str, transaction_id: UUID) -> str:
    """Provider-facing reference, e.g. ``creatly-3f2a...``."""
    return f"{prefix}-{transaction_id.hex}"


def parse_reference(reference: str) -> UUID | None:
    """Recover the transaction id from a reference; None if malformed.

    The prefix is ignored so references survive a prefix change.
    """
    _, sep, tail = reference.strip().rpartition("-")
    if not sep:
        return None
    try:
        return UUID(hex=tail)
    except ValueError:
        return None


# ==============================================================================
# Entities
# ==============================================================================


@dataclass
class Transaction:
    school_id: UUID
    student_id: UUID
    offer_id: UUID
    amount: Price
    reference: str
    id: UUID = field(default_factory=uuid4)
    promocode_id: UUID | None = None
    status: TransactionStatus = TransactionStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_row(cls, row: "Row") -> "Transaction":
        return cls(
            id=row.id,
            school_id=row.school_id,
            student_id=row.student_id,
            offer_id=row.offer_id,
            promocode_id=row.promocode_id,
            amount=Price(value=row.amount or 0, currency=row.currency or ""),
            reference=row.reference,
            status=TransactionStatus(row.status),
            created_at=ensure_utc_aware(row.created_at) or utcnow(),
            updated_at=ensure_utc_aware(row.updated_at) or utcnow(),
        )
