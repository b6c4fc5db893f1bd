"""Pytest configuration for unit tests."""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from roledesk.domain.entities import Permission, Role
from roledesk.domain.services import RoleStore
from roledesk.infrastructure.persistence import models  # noqa: F401
from roledesk.infrastructure.persistence.database import Base


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def permissions() -> list[Permission]:
    """A small clinical permission catalog."""
    return [
        Permission(1, "viewPatients", "patients", "View patient data"),
        Permission(2, "editPatients", "patients", "Edit patient data"),
        Permission(3, "createPatients", "patients", "Create new patient profiles"),
        Permission(4, "viewVisits", "visits", "View visit records"),
        Permission(5, "createVisit", "visits", "Create patient visits"),
        Permission(6, "viewLabResults", "lab", "View lab results"),
        Permission(7, "createLabOrder", "lab", "Create lab orders"),
        Permission(8, "manageMedications", "medications", "Manage and dispense medications"),
        Permission(9, "viewMedications", "medications", "View prescribed medications"),
        Permission(10, "manageUsers", "users", "Manage staff and user roles"),
    ]


@pytest.fixture
def roles() -> list[Role]:
    return [
        Role(1, "Doctor", "Clinical access", frozenset({1, 2, 6})),
        Role(2, "Nurse", "", frozenset({4})),
        Role(3, "Auditor", "", frozenset()),
    ]


@pytest.fixture
def mock_store(permissions, roles):
    """Mock role store returning the test catalog and roles."""
    store = AsyncMock(spec=RoleStore)
    store.list_permissions.return_value = permissions
    store.list_roles.return_value = roles
    store.seed_permissions.return_value = 0

    async def replace_role_permissions(role_id, permission_ids):
        role = next(r for r in roles if r.id == role_id)
        return role.with_permissions(permission_ids)

    store.replace_role_permissions.side_effect = replace_role_permissions
    return store
