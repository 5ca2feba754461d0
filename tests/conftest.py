"""Pytest fixtures for testing"""

import os

# Settings are read at import time; keep tests off the production database
os.environ.setdefault("DATABASE_URL", "sqlite:///./pounds_test.db")

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from pounds_ledger.api.main import create_app
from pounds_ledger.domain.models import BankAccount
from pounds_ledger.infrastructure.database.models import Base
from pounds_ledger.infrastructure.database.session import get_db
from pounds_ledger.services.accounts import AccountService
from pounds_ledger.services.balance import BalanceService
from pounds_ledger.services.bank_registry import BankRegistry

USER_ID = "user_ada"
PIN = "1234"
STARTING_FUNDS_KOBO = 1_000_000  # ₦10,000


@pytest.fixture
def session_factory(tmp_path) -> Generator[sessionmaker, None, None]:
    """Fresh SQLite database per test"""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def balance_service(db: Session) -> BalanceService:
    return BalanceService(db, backoff_base=0)


@pytest.fixture
def bank_registry(db: Session) -> BankRegistry:
    return BankRegistry(db, backoff_base=0)


@pytest.fixture
def account_service(db: Session) -> AccountService:
    return AccountService(db, backoff_base=0)


@pytest.fixture
def gtbank() -> BankAccount:
    return BankAccount(
        id="bank-gtb-1",
        bank_name="GTBank",
        bank_code="058",
        account_number="0123456789",
        account_name="ADAEZE OKONKWO",
    )


@pytest.fixture
def funded_user(
    account_service: AccountService,
    balance_service: BalanceService,
    bank_registry: BankRegistry,
    gtbank: BankAccount,
) -> str:
    """Account with ₦10,000 available, PIN 1234 and one saved GTBank account"""
    account_service.open_account(USER_ID)
    account_service.set_transaction_pin(USER_ID, PIN)
    balance_service.fund(USER_ID, STARTING_FUNDS_KOBO, "PB-seed", transaction_id="FLW-seed")
    bank_registry.add_account(USER_ID, gtbank)
    return USER_ID
