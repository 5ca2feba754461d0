"""Bank account registry endpoints"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool

from pounds_ledger.api.dependencies import get_bank_registry, get_bank_resolver_client, get_request_id
from pounds_ledger.api.errors import to_http_exception
from pounds_ledger.api.v1.schemas import AddBankAccountRequest, BankAccountSchema, BankAccountsResponse
from pounds_ledger.domain.exceptions import DomainException
from pounds_ledger.infrastructure.clients.bank_resolver import BankResolverClient
from pounds_ledger.services.bank_registry import BankRegistry, candidate_from_resolution

router = APIRouter()


@router.get("/accounts/{user_id}/bank-accounts", response_model=BankAccountsResponse)
def list_bank_accounts(
    user_id: str,
    request: Request,
    registry: BankRegistry = Depends(get_bank_registry),
):
    try:
        banks = registry.list_accounts(user_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return BankAccountsResponse(user_id=user_id, bank_accounts=[BankAccountSchema.from_domain(b) for b in banks])


@router.post("/accounts/{user_id}/bank-accounts", response_model=BankAccountSchema, status_code=201)
async def add_bank_account(
    user_id: str,
    request_body: AddBankAccountRequest,
    request: Request,
    registry: BankRegistry = Depends(get_bank_registry),
    resolver: BankResolverClient = Depends(get_bank_resolver_client),
):
    """
    Resolve the account holder name, then save the account.

    Nothing is saved when resolution fails or returns an empty name.
    """
    try:
        resolved = await resolver.resolve(request_body.account_number, request_body.bank_code)
        candidate = candidate_from_resolution(resolved, request_body.bank_name)
        bank = await run_in_threadpool(registry.add_account, user_id, candidate)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return BankAccountSchema.from_domain(bank)


@router.delete("/accounts/{user_id}/bank-accounts/{bank_account_id}", status_code=204)
def delete_bank_account(
    user_id: str,
    bank_account_id: str,
    request: Request,
    registry: BankRegistry = Depends(get_bank_registry),
):
    try:
        registry.remove_account(user_id, bank_account_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return Response(status_code=204)
