# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Transaction storage contract and Cassandra implementation."""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from .models import Transaction, TransactionStatus


if TYPE_CHECKING:
    from cassandra.cluster import Session


class TransactionRepository(Protocol):
    async def create(self, transaction: Transaction) -> bool:
        """Insert a new transaction; False if the id is already taken."""
        ...

    async def get_by_id(self, transaction_id: UUID) -> Transaction | None: ...

    async def get_by_student(self, student_id: UUID) -> list[Transaction]:
        """The student's transactions, newest first."""
        ...

    async def transition_status(
        self,
        transaction_id: UUID,
        expected: TransactionStatus,
        new: TransactionStatus,
        updated_at: datetime,
    ) -> bool:
        """Set ``new`` only if the stored status is still ``expected``.

        Returns whether this call performed the transition.
        """
        ...


class CassandraTransactionRepository:
    """Transactions with compare-and-set status updates (Cassandra LWT)."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._insert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.transactions
            (id, school_id, student_id, offer_id, promocode_id, amount,
             currency, reference, status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)
        self._insert_by_student = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.transactions_by_student
            (student_id, created_at, transaction_id)
            VALUES (?, ?, ?)
        """)
        self._get_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.transactions WHERE id = ?"
        )
        self._get_ids_by_student = self.session.prepare(f"""
            SELECT transaction_id FROM {self.keyspace}.transactions_by_student
            WHERE student_id = ?
        """)
        self._transition = self.session.prepare(f"""
            UPDATE {self.keyspace}.transactions
            SET status = ?, updated_at = ?
            WHERE id = ?
            IF status = ?
        """)

    async def create(self, transaction: Transaction) -> bool:
        result = await self.session.aexecute(
            self._insert,
            [
                transaction.id,
                transaction.school_id,
                transaction.student_id,
                transaction.offer_id,
                transaction.promocode_id,
                transaction.amount.value,
                transaction.amount.currency,
                transaction.reference,
                transaction.status.value,
                transaction.created_at,
                transaction.updated_at,
            ],
        )
        if not result.was_applied:
            return False

        await self.session.aexecute(
            self._insert_by_student,
            [transaction.student_id, transaction.created_at, transaction.id],
        )
        return True

    async def get_by_id(self, transaction_id: UUID) -> Transaction | None:
        result = await self.session.aexecute(self._get_by_id, [transaction_id])
        row = result.one()
        return Transaction.from_row(row) if row else None

    async def get_by_student(self, student_id: UUID) -> list[Transaction]:
        rows = await self.session.aexecute(self._get_ids_by_student, [student_id])

        transactions = []
        for row in rows:
            transaction = await self.get_by_id(row.transaction_id)
            if transaction:
                transactions.append(transaction)
        return transactions

    async def transition_status(
        self,
        transaction_id: UUID,
        expected: TransactionStatus,
        new: TransactionStatus,
        updated_at: datetime,
    ) -> bool:
        result = await self.session.aexecute(
            self._transition,
            [new.value, updated_at, transaction_id, expected.value],
        )
        return bool(result.was_applied)
