# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Promocode storage contract and Cassandra implementation."""

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from .models import Promocode, normalize_code


if TYPE_CHECKING:
    from cassandra.cluster import Session


class PromocodeRepository(Protocol):
    async def create(self, promocode: Promocode) -> bool:
        """Store a promocode; False when the school already uses the code."""
        ...

    async def get_by_id(self, promocode_id: UUID) -> Promocode | None: ...

    async def get_by_code(self, school_id: UUID, code: str) -> Promocode | None: ...

    async def get_by_school(self, school_id: UUID) -> list[Promocode]: ...

    async def update(self, promocode: Promocode) -> None: ...

    async def delete(self, promocode: Promocode) -> None: ...


class CassandraPromocodeRepository:
    """Promocodes plus a (school, code) lookup table claimed with an LWT."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._claim_code = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.promocodes_by_code
            (school_id, code, promocode_id)
            VALUES (?, ?, ?)
            IF NOT EXISTS
        """)
        self._insert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.promocodes
            (id, school_id, code, discount_type, discount_value, expires_at,
             offer_ids, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._get_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.promocodes WHERE id = ?"
        )
        self._get_id_by_code = self.session.prepare(f"""
            SELECT promocode_id FROM {self.keyspace}.promocodes_by_code
            WHERE school_id = ? AND code = ?
        """)
        self._get_by_school = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.promocodes WHERE school_id = ?"
        )
        self._update = self.session.prepare(f"""
            UPDATE {self.keyspace}.promocodes
            SET discount_type = ?, discount_value = ?, expires_at = ?,
                offer_ids = ?, updated_at = ?
            WHERE id = ?
        """)
        self._delete = self.session.prepare(
            f"DELETE FROM {self.keyspace}.promocodes WHERE id = ?"
        )
        self._release_code = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.promocodes_by_code
            WHERE school_id = ? AND code = ?
        """)

    async def create(self, promocode: Promocode) -> bool:
        claim = await self.session.aexecute(
            self._claim_code,
            [promocode.school_id, promocode.code, promocode.id],
        )
        if not claim.was_applied:
            return False

        await self.session.aexecute(
            self._insert,
            [
                promocode.id,
                promocode.school_id,
                promocode.code,
                promocode.discount_type.value,
                promocode.discount_value,
                promocode.expires_at,
                promocode.offer_ids,
                promocode.created_at,
                promocode.updated_at,
            ],
        )
        return True

    async def get_by_id(self, promocode_id: UUID) -> Promocode | None:
        result = await self.session.aexecute(self._get_by_id, [promocode_id])
        row = result.one()
        return Promocode.from_row(row) if row else None

    async def get_by_code(self, school_id: UUID, code: str) -> Promocode | None:
        result = await self.session.aexecute(
            self._get_id_by_code, [school_id, normalize_code(code)]
        )
        row = result.one()
        if not row:
            return None
        return await self.get_by_id(row.promocode_id)

    async def get_by_school(self, school_id: UUID) -> list[Promocode]:
        rows = await self.session.aexecute(self._get_by_school, [school_id])
        return [Promocode.from_row(row) for row in rows]

    async def update(self, promocode: Promocode) -> None:
        await self.session.aexecute(
            self._update,
            [
                promocode.discount_type.value,
                promocode.discount_value,
                promocode.expires_at,
                promocode.offer_ids,
                promocode.updated_at,
                promocode.id,
            ],
        )

    async def delete(self, promocode: Promocode) -> None:
        await self.session.aexecute(self._delete, [promocode.id])
        await self.session.aexecute(
            self._release_code, [promocode.school_id, promocode.code]
        )
