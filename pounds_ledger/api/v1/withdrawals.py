"""Withdrawal endpoints: pre-PIN check and PIN-authorized request"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from pounds_ledger.api.dependencies import get_balance_service, get_request_id
from pounds_ledger.api.errors import to_http_exception
from pounds_ledger.api.v1.schemas import (
    AccountResponse,
    WithdrawalPrecheckRequest,
    WithdrawalPrecheckResponse,
    WithdrawalRequest,
    WithdrawalResponse,
)
from pounds_ledger.domain.exceptions import (
    AuthorizationError,
    DomainException,
    NotFoundError,
    PinNotSetError,
    RemoteFailure,
)
from pounds_ledger.domain.money import format_naira
from pounds_ledger.infrastructure.observability.logging import log_withdrawal
from pounds_ledger.infrastructure.observability.metrics import record_withdrawal
from pounds_ledger.services.balance import BalanceService

router = APIRouter()


@router.post("/accounts/{user_id}/withdrawals/precheck", response_model=WithdrawalPrecheckResponse)
def precheck_withdrawal(
    user_id: str,
    request_body: WithdrawalPrecheckRequest,
    request: Request,
    service: BalanceService = Depends(get_balance_service),
):
    """
    Validate a withdrawal before asking for the PIN.

    Runs the same amount, balance, minimum and PIN-setup checks as the request
    itself, plus the bank account lookup. Nothing is written.
    """
    try:
        service.precheck_withdrawal(user_id, request_body.amount_kobo, request_body.bank_account_id)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
    return WithdrawalPrecheckResponse(amount_display=format_naira(request_body.amount_kobo))


@router.post("/accounts/{user_id}/withdrawals", response_model=WithdrawalResponse, status_code=202)
def request_withdrawal(
    user_id: str,
    request_body: WithdrawalRequest,
    request: Request,
    service: BalanceService = Depends(get_balance_service),
):
    """
    Submit a withdrawal for admin approval.

    The amount leaves the available balance immediately; the payout itself
    happens when an admin approves the queued request.

    Errors:
        409 when no transaction PIN is set (set one via PUT /pin first)
        403 on a wrong PIN
        422 on amount or balance problems
    """
    start_time = time.time()
    request_id = get_request_id(request)
    outcome = "failed"

    try:
        account = service.request_withdrawal(
            user_id,
            request_body.amount_kobo,
            request_body.bank_account_id,
            request_body.pin,
        )
        outcome = "accepted"
        return WithdrawalResponse(account=AccountResponse.from_domain(account))

    except PinNotSetError as e:
        outcome = "pin_required"
        raise to_http_exception(e, request_id)

    except AuthorizationError as e:
        outcome = "pin_rejected"
        raise to_http_exception(e, request_id)

    except NotFoundError as e:
        outcome = "not_found"
        raise to_http_exception(e, request_id)

    except RemoteFailure as e:
        raise to_http_exception(e, request_id)

    except DomainException as e:
        outcome = "invalid"
        raise to_http_exception(e, request_id)

    except Exception as e:
        service.db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    finally:
        duration_ms = (time.time() - start_time) * 1000
        record_withdrawal(outcome)
        log_withdrawal(request_id, user_id, request_body.amount_kobo, outcome, duration_ms)
