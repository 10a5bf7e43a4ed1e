"""Shared fixtures: in-memory database, seed users and vendors, API client."""
import os

# Settings are cached on first import
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base, User, UserRole, Vendor, get_db, init_db
from integrations.document_store import LocalDocumentStore
from services import ContainerLifecycleManager, Principal


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test (foreign keys on)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def _add_user(db_session, username, role=UserRole.USER, is_active=True):
    user = User(username=username, name=username.title(), role=role, is_active=is_active)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def manager_user(db_session):
    return _add_user(db_session, "manager", UserRole.MANAGER)


@pytest.fixture
def alice_user(db_session):
    return _add_user(db_session, "alice")


@pytest.fixture
def bob_user(db_session):
    return _add_user(db_session, "bob")


@pytest.fixture
def inactive_user(db_session):
    return _add_user(db_session, "carol", is_active=False)


@pytest.fixture
def manager(manager_user):
    return Principal.from_user(manager_user)


@pytest.fixture
def alice(alice_user):
    return Principal.from_user(alice_user)


@pytest.fixture
def bob(bob_user):
    return Principal.from_user(bob_user)


def _add_vendor(db_session, owner, company_name):
    vendor = Vendor(
        company_name=company_name,
        representative_name="Rep",
        email=f"{company_name.lower().replace(' ', '')}@example.com",
        phone="+1-555-0100",
        user_id=owner.id,
    )
    db_session.add(vendor)
    db_session.commit()
    return vendor


@pytest.fixture
def vendor(db_session, alice_user):
    """Vendor registered by alice."""
    return _add_vendor(db_session, alice_user, "Parts Co")


@pytest.fixture
def bob_vendor(db_session, bob_user):
    return _add_vendor(db_session, bob_user, "Bob Salvage")


@pytest.fixture
def store(tmp_path):
    return LocalDocumentStore(root=str(tmp_path), max_bytes=1024)


@pytest.fixture
def lifecycle(db_session, store):
    return ContainerLifecycleManager(db_session, document_store=store)


SAMPLE_CONTENTS = [
    {"number": 1, "item": "Engine", "price": 100, "recovery": 10, "cutting": 5},
    {"number": 2, "item": "Door", "price": 200, "recovery": 0, "cutting": 0},
]


@pytest.fixture
def container(lifecycle, alice, vendor):
    """Alice's container: two lines plus rent 50, grand total 365."""
    return lifecycle.create(
        alice,
        vendor_id=vendor.id,
        container_code="CONT-001",
        city="Houston",
        purchase_date="2025-01-15",
        rent=50,
        contents=SAMPLE_CONTENTS,
    )


@pytest.fixture
def client(db_session, store):
    """API client bound to the test session and a temporary document store."""
    from api.main import app
    from api.dependencies import get_document_store

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
