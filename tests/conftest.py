"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a session that rolls back
after each test, so tests do not affect each other. Engine tests use the
shipped module registry and small user snapshots built with ``make_user``.
"""
from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from erp_nav.errors import Diagnostics
from erp_nav.navigation.composer import NavigationComposer
from erp_nav.registry.loader import load_module_registry
from erp_nav.user import User


TEST_DB_URL = "sqlite:///:memory:"
REGISTRY_PATH = Path(__file__).resolve().parents[1] / "config" / "module_registry.yaml"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from erp_nav.db.base import Base
    from erp_nav.models import security  # noqa: F401  (register tables)

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="session")
def registry():
    """The shipped module registry (validated once per test run)."""
    return load_module_registry(REGISTRY_PATH)


@pytest.fixture
def diagnostics():
    return Diagnostics()


@pytest.fixture
def composer(registry, diagnostics):
    return NavigationComposer(registry, diagnostics=diagnostics)


@pytest.fixture
def make_user():
    """Factory for user snapshots: ``make_user(700, "Human Resources", modules=["HR"])``."""

    def _make(
        role_level: int = 300,
        department: str | None = None,
        *,
        permissions=(),
        modules=(),
        user_id: int | str | None = 1,
    ) -> User:
        return User(
            role_level=role_level,
            department=department,
            permissions=frozenset(permissions),
            module_access=frozenset(modules),
            user_id=user_id,
        )

    return _make
