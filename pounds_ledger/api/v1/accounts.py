"""Account endpoints: open, summary, transaction history, PIN setup"""

from fastapi import APIRouter, Depends, Query, Request

from pounds_ledger.api.dependencies import get_account_service, get_request_id
from pounds_ledger.api.errors import to_http_exception
from pounds_ledger.api.v1.schemas import (
    AccountResponse,
    OpenAccountRequest,
    SetPinRequest,
    TransactionSchema,
    TransactionsResponse,
)
from pounds_ledger.domain.exceptions import DomainException
from pounds_ledger.services.accounts import AccountService

router = APIRouter()


@router.post("/accounts", response_model=AccountResponse, status_code=201)
def open_account(
    request_body: OpenAccountRequest,
    request: Request,
    service: AccountService = Depends(get_account_service),
):
    """Create an empty ledger record for a user"""
    try:
        account = service.open_account(request_body.user_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return AccountResponse.from_domain(account)


@router.get("/accounts/{user_id}", response_model=AccountResponse)
def get_account(
    user_id: str,
    request: Request,
    service: AccountService = Depends(get_account_service),
):
    """
    Balance summary with Naira display strings.

    Returns:
        Available, total, pending, bonus and funded amounts plus saved bank accounts
    """
    try:
        account = service.get_account(user_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return AccountResponse.from_domain(account)


@router.get("/accounts/{user_id}/transactions", response_model=TransactionsResponse)
def list_transactions(
    user_id: str,
    request: Request,
    limit: int = Query(50, ge=1, le=200),
    service: AccountService = Depends(get_account_service),
):
    """Transaction log, newest first"""
    try:
        transactions = service.list_transactions(user_id, limit=limit)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return TransactionsResponse(
        user_id=user_id,
        transactions=[TransactionSchema.from_domain(t) for t in transactions],
    )


@router.put("/accounts/{user_id}/pin", response_model=AccountResponse)
def set_transaction_pin(
    user_id: str,
    request_body: SetPinRequest,
    request: Request,
    service: AccountService = Depends(get_account_service),
):
    """Set the transaction PIN, or change it by supplying the current one"""
    try:
        account = service.set_transaction_pin(user_id, request_body.pin, request_body.current_pin)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return AccountResponse.from_domain(account)
