"""Tests for StudentService."""

from uuid import uuid4

import pytest

from creatly.auth.security import decode_access_token
from creatly.students.service import (
    CODE_ALPHABET,
    StudentNotVerifiedError,
    StudentService,
    UserAlreadyExistsError,
    UserNotFoundError,
    VerificationCodeInvalidError,
    hash_code,
)
from tests.fakes import FakeStudentRepository, RecordingNotifier


PASSWORD = "correct-horse-battery"


@pytest.fixture
def repo() -> FakeStudentRepository:
    return FakeStudentRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(repo, notifier) -> StudentService:
    return StudentService(repo, notifier, code_length=8, token_ttl_minutes=30)


@pytest.fixture
def school_id():
    return uuid4()


class TestSignUp:
    @pytest.mark.asyncio
    async def test_sends_code_and_stores_only_its_hash(
        self, service, repo, notifier, school_id
    ):
        student = await service.sign_up(school_id, "Ann", "Ann@Mail.com", PASSWORD)

        assert len(notifier.sent) == 1
        code = notifier.last_code
        assert len(code) == 8
        assert set(code) <= set(CODE_ALPHABET)
        stored = repo.students[student.id]
        assert stored.email == "ann@mail.com"
        assert stored.verification.code_hash == hash_code(code)
        assert code not in stored.verification.code_hash
        assert stored.password_hash != PASSWORD

    @pytest.mark.asyncio
    async def test_duplicate_email_leaves_existing_student(
        self, service, repo, notifier, school_id
    ):
        first = await service.sign_up(school_id, "Ann", "ann@mail.com", PASSWORD)
        original = repo.students[first.id].verification.code_hash

        with pytest.raises(UserAlreadyExistsError):
            await service.sign_up(school_id, "Impostor", "ANN@mail.com", "x" * 10)

        assert len(repo.students) == 1
        assert repo.students[first.id].verification.code_hash == original
        assert repo.students[first.id].name == "Ann"
        assert len(notifier.sent) == 1

    @pytest.mark.asyncio
    async def test_same_email_in_other_school(self, service, repo, school_id):
        await service.sign_up(school_id, "Ann", "ann@mail.com", PASSWORD)
        await service.sign_up(uuid4(), "Ann", "ann@mail.com", PASSWORD)

        assert len(repo.students) == 2


class TestVerify:
    @pytest.mark.asyncio
    async def test_code_is_single_use(self, service, repo, notifier, school_id):
        student = await service.sign_up(school_id, "Ann", "ann@mail.com", PASSWORD)

        verified = await service.verify(notifier.last_code.lower())

        assert verified.verification.verified is True
        assert repo.students[student.id].verification.verified is True
        with pytest.raises(VerificationCodeInvalidError):
            await service.verify(notifier.last_code)

    @pytest.mark.asyncio
    async def test_unknown_code(self, service):
        with pytest.raises(VerificationCodeInvalidError):
            await service.verify("NOPE1234")


class TestSignIn:
    @pytest.mark.asyncio
    async def test_unverified_student(self, service, school_id):
        await service.sign_up(school_id, "Ann", "ann@mail.com", PASSWORD)

        with pytest.raises(StudentNotVerifiedError):
            await service.sign_in(school_id, "ann@mail.com", PASSWORD)

    @pytest.mark.asyncio
    async def test_wrong_password_looks_like_unknown_user(
        self, service, notifier, school_id
    ):
        await service.sign_up(school_id, "Ann", "ann@mail.com", PASSWORD)
        await service.verify(notifier.last_code)

        with pytest.raises(UserNotFoundError):
            await service.sign_in(school_id, "ann@mail.com", "wrong-password")
        with pytest.raises(UserNotFoundError):
            await service.sign_in(school_id, "bob@mail.com", PASSWORD)

    @pytest.mark.asyncio
    async def test_token_carries_identity(self, service, repo, notifier, school_id):
        student = await service.sign_up(school_id, "Ann", "ann@mail.com", PASSWORD)
        await service.verify(notifier.last_code)

        token = await service.sign_in(school_id, " ANN@mail.com", PASSWORD)

        claims = decode_access_token(token.token)
        assert claims["sub"] == str(student.id)
        assert claims["role"] == "student"
        assert claims["school_id"] == str(school_id)
        assert token.expires_in == 30 * 60
        assert repo.students[student.id].last_visit_at is not None

    @pytest.mark.asyncio
    async def test_student_of_other_school(self, service, notifier, school_id):
        await service.sign_up(school_id, "Ann", "ann@mail.com", PASSWORD)
        await service.verify(notifier.last_code)

        with pytest.raises(UserNotFoundError):
            await service.sign_in(uuid4(), "ann@mail.com", PASSWORD)
