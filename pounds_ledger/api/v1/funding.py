"""Funding endpoints: payment reference issue and verified credit"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from pounds_ledger.api.dependencies import get_balance_service, get_payment_client, get_request_id
from pounds_ledger.api.errors import to_http_exception
from pounds_ledger.api.v1.schemas import (
    AccountResponse,
    FundingReferenceRequest,
    FundingReferenceResponse,
    FundRequest,
    FundResponse,
)
from pounds_ledger.config import settings
from pounds_ledger.domain.balance import generate_funding_reference
from pounds_ledger.domain.exceptions import (
    DomainException,
    PaymentNotVerifiedError,
    RemoteFailure,
)
from pounds_ledger.domain.money import format_naira
from pounds_ledger.infrastructure.clients.payments import PaymentClient
from pounds_ledger.infrastructure.observability.logging import log_funding
from pounds_ledger.infrastructure.observability.metrics import record_funding
from pounds_ledger.services.balance import BalanceService

router = APIRouter()


@router.post("/accounts/{user_id}/funding/reference", response_model=FundingReferenceResponse)
def create_funding_reference(
    user_id: str,
    request_body: FundingReferenceRequest,
    request: Request,
    service: BalanceService = Depends(get_balance_service),
):
    """Validate the amount and issue a unique reference for the payment widget"""
    try:
        amount = service.check_funding(user_id, request_body.amount_kobo)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return FundingReferenceResponse(
        tx_ref=generate_funding_reference(settings.funding_reference_prefix),
        amount_kobo=amount,
    )


@router.post("/accounts/{user_id}/funding", response_model=FundResponse)
async def fund_account(
    user_id: str,
    request_body: FundRequest,
    request: Request,
    service: BalanceService = Depends(get_balance_service),
    payment_client: PaymentClient = Depends(get_payment_client),
):
    """
    Credit an account after the payment widget reports success.

    Flow:
    1. Validate amount and account before calling out
    2. Confirm the reference with the payment verification gateway
    3. Credit available balance, earnings and total funded; log a completed deposit
    4. Return the freshly read account

    Store work runs in the threadpool so a stale-write backoff never blocks the event loop.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    outcome = "failed"

    try:
        await run_in_threadpool(service.check_funding, user_id, request_body.amount_kobo)

        verification = await payment_client.verify_payment(request_body.tx_ref, user_id)
        if not verification.success:
            raise PaymentNotVerifiedError("Payment verification failed. Please contact support.")

        account = await run_in_threadpool(
            service.fund,
            user_id,
            request_body.amount_kobo,
            request_body.tx_ref,
            transaction_id=verification.transaction_id,
        )
        outcome = "credited"

        return FundResponse(
            message=f"Your account has been funded with {format_naira(request_body.amount_kobo)}.",
            account=AccountResponse.from_domain(account),
        )

    except PaymentNotVerifiedError as e:
        outcome = "unverified"
        raise to_http_exception(e, request_id)

    except RemoteFailure as e:
        raise to_http_exception(e, request_id)

    except DomainException as e:
        outcome = "rejected"
        raise to_http_exception(e, request_id)

    except Exception as e:
        service.db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    finally:
        duration_ms = (time.time() - start_time) * 1000
        record_funding(outcome, request_body.amount_kobo)
        log_funding(request_id, user_id, request_body.tx_ref, request_body.amount_kobo, outcome, duration_ms)
