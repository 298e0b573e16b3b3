"""
Shared fixtures.

The application runs against an in-memory SQLite database with Redis and
Kafka disabled. The server clock is pinned through the ``get_now``
dependency so that attendance and meeting rules are deterministic.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["KAFKA_ENABLED"] = "false"
os.environ["DEBUG"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

import app.models  # noqa: E402, F401
from app.core.clock import get_now  # noqa: E402
from app.core.database import get_session  # noqa: E402
from app.core.diagnostics import RingBufferDiagnostics  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import Role, User  # noqa: E402

# Tuesday morning before work starts
DEFAULT_NOW = datetime(2026, 3, 10, 8, 30)


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def set(self, *args: int) -> datetime:
        self.now = datetime(*args)
        return self.now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock():
    return FrozenClock(DEFAULT_NOW)


@pytest.fixture
def diagnostics():
    return RingBufferDiagnostics(capacity=20)


@pytest.fixture
def client(session, clock, diagnostics):
    """Test client sharing the test's session and clock."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_now] = clock
    previous_diagnostics = app.state.diagnostics
    app.state.diagnostics = diagnostics

    # The 500 handler replies and then re-raises; keep the response instead
    yield TestClient(app, raise_server_exceptions=False)

    app.state.diagnostics = previous_diagnostics
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make_user(
        name: str,
        role: Role = Role.EMPLOYEE,
        department: str | None = "Engineering",
        email: str | None = None,
    ) -> User:
        user = User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            role=role,
            department=department,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def ceo(make_user):
    return make_user("Carol", Role.CEO, department="Executive")


@pytest.fixture
def admin(make_user):
    return make_user("Adam", Role.ADMIN, department="IT")


@pytest.fixture
def director(make_user):
    return make_user("Diana", Role.DIRECTOR, department="Engineering")


@pytest.fixture
def employee(make_user):
    return make_user("Evan", Role.EMPLOYEE, department="Engineering")


@pytest.fixture
def sales_employee(make_user):
    return make_user("Sam", Role.EMPLOYEE, department="Sales")


def token_for(user: User, include_department: bool = True) -> str:
    return create_access_token(
        user_id=user.id,
        role=user.role,
        department=user.department if include_department else None,
        email=user.email,
        name=user.name,
    )


def auth_headers(user: User, include_department: bool = True) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(user, include_department)}"}


@pytest.fixture
def headers_for():
    return auth_headers
