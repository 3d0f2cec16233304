"""Tests for PaymentCallbackProcessor.

Provider delivery is at-least-once and unordered; these tests pin down
how repeated and out-of-order notifications settle.
"""

from uuid import uuid4

import pytest

from creatly.offers.models import Price
from creatly.orders.callbacks import (
    CallbackOutcome,
    PaymentCallbackProcessor,
    sign_payload,
    verify_signature,
)
from creatly.orders.models import Transaction, TransactionStatus, make_reference
from creatly.orders.service import TransactionInvalidError, UnknownCallbackTypeError
from tests.fakes import FakeTransactionRepository


def make_transaction(status=TransactionStatus.PENDING) -> Transaction:
    transaction = Transaction(
        school_id=uuid4(),
        student_id=uuid4(),
        offer_id=uuid4(),
        amount=Price(1500, "USD"),
        reference="",
        status=status,
    )
    transaction.reference = make_reference("creatly", transaction.id)
    return transaction


def payload(transaction: Transaction, status: str, **overrides) -> dict:
    body = {
        "transactionReference": transaction.reference,
        "status": status,
        "amount": transaction.amount.value,
        "currency": transaction.amount.currency,
    }
    body.update(overrides)
    return body


@pytest.fixture
def transaction() -> Transaction:
    return make_transaction()


@pytest.fixture
def repo(transaction) -> FakeTransactionRepository:
    return FakeTransactionRepository(transaction)


@pytest.fixture
def processor(repo) -> PaymentCallbackProcessor:
    return PaymentCallbackProcessor(repo)


class TestSuccess:
    @pytest.mark.asyncio
    async def test_pending_to_succeeded(self, processor, repo, transaction):
        outcome = await processor.process(payload(transaction, "success"))

        assert outcome == CallbackOutcome.APPLIED
        assert repo.transactions[transaction.id].status == TransactionStatus.SUCCEEDED

    @pytest.mark.asyncio
    async def test_duplicate_success_applies_once(self, processor, repo, transaction):
        first = await processor.process(payload(transaction, "success"))
        second = await processor.process(payload(transaction, "SUCCEEDED"))

        assert first == CallbackOutcome.APPLIED
        assert second == CallbackOutcome.DUPLICATE
        assert repo.transitions == [(transaction.id, TransactionStatus.SUCCEEDED)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides", [{"amount": None, "currency": None}, {"amount": 1}]
    )
    async def test_redelivered_success_without_matching_amount_is_duplicate(
        self, processor, repo, transaction, overrides
    ):
        await processor.process(payload(transaction, "success"))

        outcome = await processor.process(
            payload(transaction, "success", **overrides)
        )

        assert outcome == CallbackOutcome.DUPLICATE
        assert repo.transitions == [(transaction.id, TransactionStatus.SUCCEEDED)]

    @pytest.mark.asyncio
    async def test_currency_is_case_insensitive(self, processor, transaction):
        outcome = await processor.process(
            payload(transaction, "approved", currency="usd")
        )

        assert outcome == CallbackOutcome.APPLIED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [{"amount": 1499}, {"currency": "EUR"}, {"amount": None}],
    )
    async def test_amount_mismatch(self, processor, repo, transaction, overrides):
        with pytest.raises(TransactionInvalidError):
            await processor.process(payload(transaction, "success", **overrides))

        assert repo.transactions[transaction.id].status == TransactionStatus.PENDING


class TestFailure:
    @pytest.mark.asyncio
    async def test_pending_to_failed_ignores_amount(self, processor, repo, transaction):
        outcome = await processor.process(
            payload(transaction, "declined", amount=None, currency=None)
        )

        assert outcome == CallbackOutcome.APPLIED
        assert repo.transactions[transaction.id].status == TransactionStatus.FAILED

    @pytest.mark.asyncio
    async def test_failure_after_success_is_rejected(self, processor, repo, transaction):
        await processor.process(payload(transaction, "success"))

        with pytest.raises(TransactionInvalidError):
            await processor.process(payload(transaction, "failed"))

        assert repo.transactions[transaction.id].status == TransactionStatus.SUCCEEDED
        assert len(repo.transitions) == 1

    @pytest.mark.asyncio
    async def test_success_after_failure_is_ignored(self, processor, repo, transaction):
        await processor.process(payload(transaction, "failure"))

        outcome = await processor.process(payload(transaction, "success"))

        assert outcome == CallbackOutcome.IGNORED
        assert repo.transactions[transaction.id].status == TransactionStatus.FAILED

    @pytest.mark.asyncio
    async def test_success_with_wrong_amount_after_failure_is_ignored(
        self, processor, repo, transaction
    ):
        await processor.process(payload(transaction, "failure"))

        outcome = await processor.process(payload(transaction, "success", amount=1))

        assert outcome == CallbackOutcome.IGNORED
        assert repo.transactions[transaction.id].status == TransactionStatus.FAILED


class TestRejectedNotifications:
    @pytest.mark.asyncio
    async def test_in_progress_status_changes_nothing(
        self, processor, repo, transaction
    ):
        outcome = await processor.process(payload(transaction, "processing"))

        assert outcome == CallbackOutcome.IGNORED
        assert repo.transitions == []

    @pytest.mark.asyncio
    async def test_unknown_status(self, processor, transaction):
        with pytest.raises(UnknownCallbackTypeError):
            await processor.process(payload(transaction, "refunded"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[], "text", {"status": "success"}, None])
    async def test_malformed_payload(self, processor, body):
        with pytest.raises(UnknownCallbackTypeError):
            await processor.process(body)

    @pytest.mark.asyncio
    async def test_unknown_reference(self, processor, transaction):
        other = make_transaction()

        with pytest.raises(TransactionInvalidError):
            await processor.process(payload(other, "success"))

    @pytest.mark.asyncio
    async def test_garbage_reference(self, processor, transaction):
        with pytest.raises(TransactionInvalidError):
            await processor.process(
                payload(transaction, "success", transactionReference="order-42")
            )

    @pytest.mark.asyncio
    async def test_reference_with_other_prefix(self, processor, transaction):
        reference = make_reference("elsewhere", transaction.id)

        with pytest.raises(TransactionInvalidError):
            await processor.process(
                payload(transaction, "success", transactionReference=reference)
            )


class RacingTransactionRepository(FakeTransactionRepository):
    """Another worker settles the transaction right before our write."""

    def __init__(self, transaction: Transaction, winner: TransactionStatus):
        super().__init__(transaction)
        self.winner = winner
        self.attempts = 0

    async def transition_status(self, transaction_id, expected, new, updated_at):
        self.attempts += 1
        if self.attempts == 1:
            self.transactions[transaction_id].status = self.winner
            return False
        return await super().transition_status(
            transaction_id, expected, new, updated_at
        )


class TestConcurrentDelivery:
    @pytest.mark.asyncio
    async def test_lost_race_to_same_status_is_duplicate(self, transaction):
        repo = RacingTransactionRepository(transaction, TransactionStatus.SUCCEEDED)

        outcome = await PaymentCallbackProcessor(repo).process(
            payload(transaction, "success")
        )

        assert outcome == CallbackOutcome.DUPLICATE
        assert repo.attempts == 1

    @pytest.mark.asyncio
    async def test_failure_losing_to_success_is_rejected(self, transaction):
        repo = RacingTransactionRepository(transaction, TransactionStatus.SUCCEEDED)

        with pytest.raises(TransactionInvalidError):
            await PaymentCallbackProcessor(repo).process(
                payload(transaction, "failed")
            )

        assert repo.transactions[transaction.id].status == TransactionStatus.SUCCEEDED


class TestSignature:
    def test_valid_signature(self):
        body = b'{"status":"success"}'

        assert verify_signature("secret", body, sign_payload("secret", body))

    def test_signature_hex_case_is_ignored(self):
        body = b"{}"

        assert verify_signature("secret", body, sign_payload("secret", body).upper())

    @pytest.mark.parametrize("signature", [None, "", "deadbeef"])
    def test_invalid_signature(self, signature):
        assert not verify_signature("secret", b"{}", signature)

    def test_empty_secret_never_verifies(self):
        assert not verify_signature("", b"{}", sign_payload("", b"{}"))
