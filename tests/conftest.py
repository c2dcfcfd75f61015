"""Pytest fixtures for testing"""

from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from demo_bank.api.main import create_app
from demo_bank.domain.models import AccountProfile
from demo_bank.infrastructure.database.models import Base
from demo_bank.infrastructure.database.session import get_db
from demo_bank.services.accounts import AccountService
from demo_bank.services.ledger import LedgerEngine
from demo_bank.services.sessions import SessionAuthenticator

SEED_CENTS = 100_000  # $1000
TEST_SECRET = "test-secret"


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Isolated in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Create test database session"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def accounts(db: Session) -> AccountService:
    return AccountService(db, seed_balance_cents=SEED_CENTS)


@pytest.fixture
def ledger(db: Session) -> LedgerEngine:
    return LedgerEngine(db)


@pytest.fixture
def authenticator(db: Session) -> SessionAuthenticator:
    return SessionAuthenticator(db, secret=TEST_SECRET)


@pytest.fixture
def alice(accounts: AccountService) -> AccountProfile:
    return accounts.register("alice@example.com", "alice-password", "Alice Doe")


@pytest.fixture
def bob(accounts: AccountService) -> AccountProfile:
    return accounts.register("bob@example.com", "bob-password", "Bob Roe")


@pytest.fixture
def client(session_factory: sessionmaker) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def register_and_login(client: TestClient) -> Callable[..., dict]:
    """Register an account over HTTP and leave its session cookie on the client"""

    def _register_and_login(email: str, password: str = "secret-pw", full_name: str = "Test User") -> dict:
        response = client.post(
            "/api/register",
            json={"email": email, "password": password, "fullName": full_name},
        )
        assert response.status_code == 201
        response = client.post("/api/login", json={"email": email, "password": password})
        assert response.status_code == 200
        return response.json()

    return _register_and_login
