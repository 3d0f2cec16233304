"""Shared test fixtures."""

import os
import tempfile
from collections.abc import Callable
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "creatly-tests"))
os.environ.setdefault("PAYMENT_CALLBACK_SECRET", "test-callback-secret")


from creatly.auth.permissions import UserRole  # noqa: E402
from creatly.auth.security import create_access_token  # noqa: E402
from creatly.config import get_settings  # noqa: E402


@pytest.fixture
def school_id() -> UUID:
    """The default school every request without X-School-ID acts for."""
    return get_settings().default_school_id


@pytest.fixture
def client() -> TestClient:
    """Test client without lifespan (no Cassandra or Redis)."""
    from creatly.main import app

    return TestClient(app)


@pytest.fixture
def token_factory(school_id: UUID) -> Callable[..., str]:
    """Create bearer tokens for arbitrary principals."""

    def _create(
        role: UserRole = UserRole.STUDENT,
        subject: UUID | None = None,
        school: UUID | None = None,
    ) -> str:
        return create_access_token(
            {
                "sub": str(subject or uuid4()),
                "email": f"{role.value}@test.com",
                "role": role.value,
                "school_id": str(school or school_id),
            }
        )

    return _create


@pytest.fixture
def admin_headers(token_factory) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_factory(UserRole.ADMIN)}"}
