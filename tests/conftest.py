"""
Test Configuration

API tests run against an in-memory SQLite database that replaces the
get_db dependency. Service tests use the same database directly.
"""

import os
import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment before importing the app
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "DEBUG"

from issue_tracker.database import Base, get_db
from issue_tracker.main import app
from issue_tracker.core.tenant import TenantContext, UserRole

ORG_A = "org-a"
ORG_B = "org-b"


def tenant_headers(organization_id: str = ORG_A, role: str = "ADMIN", user_id: str = "user-1") -> dict:
    return {
        "X-User-Id": user_id,
        "X-Organization-Id": organization_id,
        "X-User-Role": role,
    }


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def admin_ctx() -> TenantContext:
    return TenantContext(user_id="admin-1", organization_id=ORG_A, role=UserRole.ADMIN)


@pytest.fixture
def member_ctx() -> TenantContext:
    return TenantContext(user_id="member-1", organization_id=ORG_A, role=UserRole.MEMBER)


@pytest.fixture
def other_org_ctx() -> TenantContext:
    return TenantContext(user_id="admin-2", organization_id=ORG_B, role=UserRole.ADMIN)


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async test client bound to the test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def sample_issue_data():
    return {
        "title": "Login button misaligned",
        "description": "The login button overlaps the footer on mobile",
        "assigneeId": "u1",
    }
