"""Tests for CassandraTransactionRepository against a mocked session."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
from cassandra.cluster import Session

from creatly.offers.models import Price
from creatly.orders.models import Transaction, TransactionStatus
from creatly.orders.repository import CassandraTransactionRepository


@pytest.fixture
def mock_session():
    session = Mock(spec=Session)
    session.prepare = Mock(return_value=Mock())
    session.aexecute = AsyncMock(return_value=Mock(was_applied=True))
    return session


@pytest.fixture
def repo(mock_session) -> CassandraTransactionRepository:
    return CassandraTransactionRepository(mock_session, "test_keyspace")


def make_transaction() -> Transaction:
    return Transaction(
        school_id=uuid4(),
        student_id=uuid4(),
        offer_id=uuid4(),
        amount=Price(1000, "USD"),
        reference="creatly-abc",
    )


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_writes_student_index(self, repo, mock_session):
        transaction = make_transaction()

        assert await repo.create(transaction) is True

        assert mock_session.aexecute.await_count == 2
        index_args = mock_session.aexecute.await_args_list[1].args[1]
        assert index_args == [
            transaction.student_id,
            transaction.created_at,
            transaction.id,
        ]

    @pytest.mark.asyncio
    async def test_existing_id_is_not_overwritten(self, repo, mock_session):
        mock_session.aexecute.return_value = Mock(was_applied=False)

        assert await repo.create(make_transaction()) is False

        assert mock_session.aexecute.await_count == 1


class TestTransitionStatus:
    @pytest.mark.asyncio
    async def test_binds_expected_status_as_condition(self, repo, mock_session):
        transaction_id = uuid4()
        at = datetime(2024, 1, 1, tzinfo=UTC)

        applied = await repo.transition_status(
            transaction_id,
            expected=TransactionStatus.PENDING,
            new=TransactionStatus.SUCCEEDED,
            updated_at=at,
        )

        assert applied is True
        args = mock_session.aexecute.await_args.args[1]
        assert args == ["succeeded", at, transaction_id, "pending"]

    @pytest.mark.asyncio
    async def test_lost_race(self, repo, mock_session):
        mock_session.aexecute.return_value = Mock(was_applied=False)

        applied = await repo.transition_status(
            uuid4(),
            expected=TransactionStatus.PENDING,
            new=TransactionStatus.FAILED,
            updated_at=datetime.now(UTC),
        )

        assert applied is False
