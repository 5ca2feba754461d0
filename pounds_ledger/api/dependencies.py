"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from pounds_ledger.infrastructure.clients.bank_resolver import BankResolverClient
from pounds_ledger.infrastructure.clients.payments import PaymentClient
from pounds_ledger.infrastructure.database.session import get_db
from pounds_ledger.services.accounts import AccountService
from pounds_ledger.services.balance import BalanceService
from pounds_ledger.services.bank_registry import BankRegistry


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_payment_client() -> PaymentClient:
    """Provide payment verification client instance"""
    return PaymentClient()


def get_bank_resolver_client() -> BankResolverClient:
    """Provide bank name resolution client instance"""
    return BankResolverClient()


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)


def get_balance_service(db: Session = Depends(get_db)) -> BalanceService:
    return BalanceService(db)


def get_bank_registry(db: Session = Depends(get_db)) -> BankRegistry:
    return BankRegistry(db)
